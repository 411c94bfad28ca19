"""WSGI entrypoint used by Gunicorn."""
import os

from pokewar.app import create_app
from pokewar.config import _env, _flag
from pokewar.errors import RosterUnavailable
from pokewar.services.roster import fetch_pokemons

config_name = os.environ.get('FLASK_ENV', 'production')
app = create_app(config_name)

if _env('AUTO_WARM_ROSTER', False, _flag):
    with app.app_context():
        try:
            roster = fetch_pokemons(limit=app.config.get('ROSTER_DEFAULT_LIMIT', 1000))
            print(f'Cached {len(roster)} roster entries')
        except RosterUnavailable as exc:
            print(f'Skipped roster warmup: {exc}')

"""Pokemon roster pulled from PokeAPI and cached in the key-value store."""
import re

import requests
from flask import current_app
from pokewar.errors import RosterUnavailable
from pokewar.services import storage

ROSTER_CACHE_KEY = 'pokewar_roster_v1'
_ARTWORK_URL = (
    'https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/'
    'pokemon/other/official-artwork/{pokemon_id}.png'
)
_POKEMON_ID_RE = re.compile(r'/(\d+)/?$')


def pokemon_image_url(pokemon_id):
    return _ARTWORK_URL.format(pokemon_id=pokemon_id)


def pokemon_id_from_url(url):
    match = _POKEMON_ID_RE.search(str(url or '').strip())
    return match.group(1) if match else None


def _cache_key(limit, offset):
    return f'{ROSTER_CACHE_KEY}:{limit}:{offset}'


def _request_roster(limit, offset):
    base_url = str(current_app.config.get('POKEAPI_BASE_URL') or '').rstrip('/')
    timeout = current_app.config.get('POKEAPI_TIMEOUT_SECONDS', 5.0)
    try:
        response = requests.get(
            f'{base_url}/pokemon',
            params={'limit': limit, 'offset': offset},
            timeout=timeout,
        )
    except requests.RequestException as exc:
        current_app.logger.warning('PokeAPI request failed: %s', exc)
        return None

    if response.status_code != 200:
        current_app.logger.warning('PokeAPI answered %s', response.status_code)
        return None
    try:
        payload = response.json()
    except ValueError:
        current_app.logger.warning('PokeAPI returned invalid JSON')
        return None

    results = payload.get('results') if isinstance(payload, dict) else None
    if not isinstance(results, list):
        return None
    return [
        {'name': str(item.get('name') or ''), 'url': str(item.get('url') or '')}
        for item in results
        if isinstance(item, dict) and item.get('name')
    ]


def fetch_pokemons(limit=1000, offset=0, refresh=False):
    """Return ``[{name, url}, ...]`` for one page of the roster."""
    limit = max(1, int(limit))
    offset = max(0, int(offset))
    key = _cache_key(limit, offset)

    cached = storage.read(key, None)
    if cached is not None and not refresh:
        return cached

    results = _request_roster(limit, offset)
    if results is None:
        if cached is not None:
            return cached
        raise RosterUnavailable()

    storage.write(key, results)
    return results


def roster_entries(results):
    """Decorate roster rows with their numeric id and artwork URL."""
    entries = []
    for item in results:
        pokemon_id = pokemon_id_from_url(item.get('url'))
        entries.append({
            'id': pokemon_id,
            'name': item.get('name'),
            'url': item.get('url'),
            'image': pokemon_image_url(pokemon_id) if pokemon_id else None,
        })
    return entries

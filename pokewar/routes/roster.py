from flask import Blueprint, request, jsonify, current_app
from pokewar.services.roster import fetch_pokemons, roster_entries

roster_bp = Blueprint('roster', __name__)

_MAX_LIMIT = 2000


@roster_bp.route('', methods=['GET'])
def list_pokemon():
    """One page of the roster with ids and artwork URLs."""
    default_limit = current_app.config.get('ROSTER_DEFAULT_LIMIT', 1000)
    limit = request.args.get('limit', default_limit, type=int)
    offset = request.args.get('offset', 0, type=int)
    if limit is None or limit < 1 or limit > _MAX_LIMIT:
        return jsonify({'error': f'limit must be between 1 and {_MAX_LIMIT}'}), 400
    if offset is None or offset < 0:
        return jsonify({'error': 'offset must be zero or positive'}), 400

    q = request.args.get('q', '').strip().lower()
    results = roster_entries(fetch_pokemons(limit=limit, offset=offset))
    if q:
        results = [entry for entry in results if q in entry['name']]
    return jsonify({'pokemon': results})

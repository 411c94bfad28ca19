"""Private server (room) routes: membership, invites, picks and matches."""
from flask import Blueprint, request, jsonify
from pokewar.auth_utils import login_required
from pokewar.errors import Forbidden, NotFound
from pokewar.services.identity import get_user
from pokewar.services.matches import (
    create_match_from_selections, get_match_history_for_server,
    get_matches_for_user, get_selections_for_server, set_server_selection,
)
from pokewar.services.servers import (
    create_server, get_opponent_id, get_server, get_server_invites_for_user,
    get_servers_for_user, invite_to_server, respond_to_server_invite,
)

servers_bp = Blueprint('servers', __name__)
matches_bp = Blueprint('matches', __name__)


def _json_payload():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _member_server_or_raise(server_id):
    server = get_server(server_id)
    if not server:
        raise NotFound('Server not found.')
    if not server.has_member(request.current_user.id):
        raise Forbidden('You are not a member of this server.')
    return server


def _server_detail(server):
    user_id = request.current_user.id
    data = server.to_dict()
    opponent_id = get_opponent_id(server, user_id)
    opponent = get_user(opponent_id) if opponent_id else None
    data['members'] = [
        member.to_dict()
        for member in (get_user(member_id) for member_id in server.member_ids)
        if member
    ]
    data['opponent'] = opponent.to_dict() if opponent else None
    data['selections'] = [s.to_dict() for s in get_selections_for_server(server.id)]
    data['matches'] = [m.to_dict() for m in get_match_history_for_server(server.id)]
    return data


@servers_bp.route('', methods=['GET'])
@login_required
def list_servers():
    servers = get_servers_for_user(request.current_user.id)
    return jsonify({'servers': [server.to_dict() for server in servers]})


@servers_bp.route('', methods=['POST'])
@login_required
def new_server():
    data = _json_payload()
    server = create_server(data.get('name'), request.current_user.id)
    return jsonify({'server': server.to_dict()}), 201


@servers_bp.route('/<string:server_id>', methods=['GET'])
@login_required
def server_detail(server_id):
    server = _member_server_or_raise(server_id)
    return jsonify({'server': _server_detail(server)})


@servers_bp.route('/<string:server_id>/invites', methods=['POST'])
@login_required
def invite(server_id):
    data = _json_payload()
    to_id = str(data.get('user_id') or '').strip()
    if not to_id:
        return jsonify({'error': 'user_id is required'}), 400
    server_invite = invite_to_server(server_id, request.current_user.id, to_id)
    return jsonify({'invite': server_invite.to_dict()}), 201


@servers_bp.route('/invites', methods=['GET'])
@login_required
def my_invites():
    invites = get_server_invites_for_user(request.current_user.id)
    pending_only = request.args.get('pending', 'false') == 'true'
    if pending_only:
        invites = [i for i in invites if i.status == 'pending']
    results = []
    for server_invite in invites:
        invite_dict = server_invite.to_dict()
        server = get_server(server_invite.server_id)
        sender = get_user(server_invite.from_id)
        invite_dict['server'] = server.to_dict() if server else None
        invite_dict['from'] = sender.to_dict() if sender else None
        results.append(invite_dict)
    return jsonify({'invites': results})


@servers_bp.route('/invites/<string:invite_id>/respond', methods=['POST'])
@login_required
def respond_invite(invite_id):
    data = _json_payload()
    server_invite = respond_to_server_invite(
        invite_id, data.get('status'), responder_id=request.current_user.id,
    )
    return jsonify({'invite': server_invite.to_dict()})


@servers_bp.route('/<string:server_id>/selection', methods=['POST'])
@login_required
def select_pokemon(server_id):
    server = _member_server_or_raise(server_id)
    data = _json_payload()
    selection = set_server_selection(
        server.id, request.current_user.id,
        data.get('pokemon_id'), data.get('pokemon_name'),
    )
    return jsonify({'selection': selection.to_dict()})


@servers_bp.route('/<string:server_id>/matches', methods=['POST'])
@login_required
def start_match(server_id):
    server = _member_server_or_raise(server_id)
    match = create_match_from_selections(server.id)
    return jsonify({'match': match.to_dict()}), 201


@servers_bp.route('/<string:server_id>/matches', methods=['GET'])
@login_required
def server_matches(server_id):
    server = _member_server_or_raise(server_id)
    history = get_match_history_for_server(server.id)
    return jsonify({'matches': [m.to_dict() for m in history]})


@matches_bp.route('', methods=['GET'])
@login_required
def my_matches():
    history = get_matches_for_user(request.current_user.id)
    return jsonify({'matches': [m.to_dict() for m in history]})

from flask import Blueprint, request, jsonify
from pokewar.auth_utils import login_required
from pokewar.services.social import (
    get_friend_requests_for_user, get_friends_for_user,
    respond_to_friend_request, send_friend_request,
)

friends_bp = Blueprint('friends', __name__)


@friends_bp.route('', methods=['GET'])
@login_required
def get_friends():
    friends = get_friends_for_user(request.current_user.id)
    return jsonify({'friends': [friend.to_dict() for friend in friends]})


@friends_bp.route('/requests', methods=['GET'])
@login_required
def get_requests():
    user_id = request.current_user.id
    requests_list = get_friend_requests_for_user(user_id)
    return jsonify({
        'incoming': [r.to_dict() for r in requests_list if r.to_id == user_id],
        'outgoing': [r.to_dict() for r in requests_list if r.from_id == user_id],
    })


@friends_bp.route('/requests', methods=['POST'])
@login_required
def create_request():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Invalid JSON payload'}), 400
    email = str(data.get('email') or '').strip()
    if not email:
        return jsonify({'error': 'Email is required.'}), 400

    friend_request = send_friend_request(request.current_user.id, email)
    return jsonify({'request': friend_request.to_dict()}), 201


@friends_bp.route('/requests/<string:request_id>/respond', methods=['POST'])
@login_required
def respond_request(request_id):
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Invalid JSON payload'}), 400
    friend_request = respond_to_friend_request(
        request_id, data.get('status'), responder_id=request.current_user.id,
    )
    return jsonify({'request': friend_request.to_dict()})

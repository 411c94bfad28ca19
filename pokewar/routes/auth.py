import time

import requests
from flask import Blueprint, request, jsonify, current_app
from pokewar.auth_utils import generate_token, login_required
from pokewar.services.identity import (
    authenticate_with_email, create_user_with_email, list_users,
    login_with_google, sign_out,
)

auth_bp = Blueprint('auth', __name__)

_GOOGLE_TOKEN_INFO_URL = 'https://oauth2.googleapis.com/tokeninfo'
_ALLOWED_GOOGLE_ISSUERS = {'accounts.google.com', 'https://accounts.google.com'}


def _json_payload():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _session_response(user, session, status=200):
    return jsonify({'token': generate_token(session), 'user': user.to_dict()}), status


def _verify_google_id_token(id_token):
    client_id = str(current_app.config.get('GOOGLE_CLIENT_ID') or '').strip()
    if not client_id:
        return None, ('Google login is not configured', 503)

    try:
        response = requests.get(
            _GOOGLE_TOKEN_INFO_URL,
            params={'id_token': id_token},
            timeout=5,
        )
    except requests.RequestException:
        return None, ('Unable to verify Google token', 502)

    if response.status_code != 200:
        return None, ('Invalid Google token', 401)

    try:
        token_info = response.json()
    except ValueError:
        return None, ('Invalid Google verification response', 502)

    aud = str(token_info.get('aud') or '').strip()
    if aud != client_id:
        return None, ('Invalid Google token audience', 401)

    iss = str(token_info.get('iss') or '').strip()
    if iss not in _ALLOWED_GOOGLE_ISSUERS:
        return None, ('Invalid Google token issuer', 401)

    try:
        exp_ts = int(token_info.get('exp'))
    except (TypeError, ValueError):
        return None, ('Invalid Google token expiration', 401)
    if exp_ts <= int(time.time()):
        return None, ('Google token expired', 401)

    email_verified = str(token_info.get('email_verified') or '').strip().lower()
    if email_verified not in {'true', '1'}:
        return None, ('Google account email is not verified', 401)

    if not token_info.get('email'):
        return None, ('Google token missing required fields', 401)

    return token_info, None


@auth_bp.route('/signup', methods=['POST'])
def signup():
    data = _json_payload()
    user, session = create_user_with_email(
        name=data.get('name'),
        email=data.get('email'),
        password=data.get('password'),
    )
    return _session_response(user, session, 201)


@auth_bp.route('/login', methods=['POST'])
def login():
    data = _json_payload()
    user, session = authenticate_with_email(
        email=data.get('email'),
        password=data.get('password'),
    )
    return _session_response(user, session)


@auth_bp.route('/google/config', methods=['GET'])
def google_config():
    client_id = str(current_app.config.get('GOOGLE_CLIENT_ID') or '').strip()
    return jsonify({
        'enabled': bool(client_id),
        'client_id': client_id if client_id else None,
        'dev_login': bool(current_app.config.get('GOOGLE_DEV_LOGIN')),
    })


@auth_bp.route('/google', methods=['POST'])
def google_login():
    data = _json_payload()
    id_token = str(data.get('id_token') or '').strip()
    if not id_token:
        return jsonify({'error': 'Google ID token is required'}), 400

    token_info, token_error = _verify_google_id_token(id_token)
    if token_error:
        message, status = token_error
        return jsonify({'error': message}), status

    user, session = login_with_google(
        email=token_info.get('email'),
        name=token_info.get('name'),
    )
    return _session_response(user, session)


@auth_bp.route('/google/dev', methods=['POST'])
def google_dev_login():
    """Google-style sign-in from a bare email, for local play without OAuth."""
    if not current_app.config.get('GOOGLE_DEV_LOGIN'):
        return jsonify({'error': 'Not found'}), 404
    data = _json_payload()
    user, session = login_with_google(email=data.get('email'), name=data.get('name'))
    return _session_response(user, session)


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    sign_out(request.trainer_session)
    return jsonify({'message': 'Signed out'})


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify({'user': request.current_user.to_dict()})


@auth_bp.route('/users', methods=['GET'])
@login_required
def users():
    return jsonify({'users': [user.to_dict() for user in list_users()]})

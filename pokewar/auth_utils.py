from datetime import datetime, timedelta, timezone
from functools import wraps
from flask import request, jsonify, current_app
import jwt
from pokewar.services.identity import load_session, get_current_user


def generate_token(session):
    """Generate a JWT naming a trainer session."""
    payload = {
        'sid': session.id,
        'exp': datetime.now(timezone.utc) + timedelta(
            hours=current_app.config.get('JWT_EXPIRATION_HOURS', 24)
        ),
    }
    return jwt.encode(payload, current_app.config['SECRET_KEY'], algorithm='HS256')


def _normalize_bearer_token(raw_token):
    token = str(raw_token or '').strip()
    if token.startswith('Bearer '):
        token = token.split(' ', 1)[1].strip()
    return token


def _decode_session_from_token(token):
    normalized = _normalize_bearer_token(token)
    if not normalized:
        return None, None, 'Authentication required'
    try:
        payload = jwt.decode(
            normalized, current_app.config['SECRET_KEY'], algorithms=['HS256']
        )
    except jwt.ExpiredSignatureError:
        return None, None, 'Token expired'
    except jwt.InvalidTokenError:
        return None, None, 'Invalid token'

    session = load_session(payload.get('sid'))
    if not session:
        return None, None, 'Session ended'
    user = get_current_user(session)
    if not user:
        return None, None, 'User not found'
    return session, user, None


def login_required(f):
    """Decorator to require a live trainer session on a route."""
    @wraps(f)
    def decorated(*args, **kwargs):
        auth_header = request.headers.get('Authorization', '')
        session, user, error = _decode_session_from_token(auth_header)
        if error:
            return jsonify({'error': error}), 401
        request.trainer_session = session
        request.current_user = user
        return f(*args, **kwargs)
    return decorated

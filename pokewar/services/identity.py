"""Trainer accounts and sign-in sessions.

A session is an explicit ``TrainerSession`` handed back by every sign-in call.
Its pointer (session id -> user id, expiry) lives in the key-value store, so
signing out only has to drop that pointer. Pointers past their expiry read as
absent and are swept on later sign-ins.
"""
import re
import time
from datetime import datetime, timedelta

from flask import current_app
from werkzeug.security import generate_password_hash, check_password_hash
from pokewar.app import db
from pokewar.errors import DuplicateEmail, InvalidCredential, NotFound, ValidationFailed
from pokewar.models import User
from pokewar.services import storage
from pokewar.services.validation import validate_email, validate_signup
from pokewar.time_utils import utcnow_naive

SESSION_KEY = 'pokewar_auth_session_v1'
DEFAULT_TRAINER_NAME = 'Trainer'
_SESSION_PRUNE_INTERVAL_SECONDS = 300
_last_session_prune_ts = 0.0


class TrainerSession:
    def __init__(self, session_id, user_id=None):
        self.id = session_id
        self.user_id = user_id

    @property
    def storage_key(self):
        return f'{SESSION_KEY}:{self.id}'

    @property
    def is_active(self):
        return bool(self.user_id)

    def __repr__(self):
        return f'<TrainerSession {self.id} user={self.user_id}>'


def normalize_email(email):
    return str(email or '').strip().lower()


def derive_name_from_email(email):
    handle = normalize_email(email).split('@', 1)[0]
    safe = re.sub(r'[._-]+', ' ', handle).strip()
    if not safe:
        return DEFAULT_TRAINER_NAME
    return ' '.join(part[:1].upper() + part[1:] for part in safe.split())


def list_users():
    return User.query.order_by(User.seq.asc()).all()


def get_user(user_id):
    if not user_id:
        return None
    return User.query.filter_by(id=str(user_id)).first()


def find_user_by_email(email):
    normalized = normalize_email(email)
    if not normalized:
        return None
    return User.query.filter(db.func.lower(User.email) == normalized).first()


def _session_expiry():
    hours = current_app.config.get('JWT_EXPIRATION_HOURS', 24)
    return utcnow_naive() + timedelta(hours=hours)


def _pointer_expired(pointer, now=None):
    try:
        expires_at = datetime.fromisoformat(str(pointer.get('expiresAt')))
    except (TypeError, ValueError):
        return True
    return expires_at <= (now or utcnow_naive())


def prune_expired_sessions(force=False):
    """Drop session pointers whose tokens can no longer be used."""
    global _last_session_prune_ts
    now = utcnow_naive()
    now_ts = time.time()
    if not force and now_ts - _last_session_prune_ts < _SESSION_PRUNE_INTERVAL_SECONDS:
        return 0
    _last_session_prune_ts = now_ts

    removed = 0
    for key in storage.keys(f'{SESSION_KEY}:'):
        pointer = storage.read(key, None)
        if not isinstance(pointer, dict) or _pointer_expired(pointer, now):
            storage.remove(key)
            removed += 1
    return removed


def start_session(user):
    prune_expired_sessions()
    session = TrainerSession(storage.create_id(), user.id)
    storage.write(session.storage_key, {
        'userId': user.id,
        'expiresAt': _session_expiry().isoformat(),
    })
    return session


def load_session(session_id):
    """Resolve a session id to its pointer, or None once signed out or expired."""
    if not session_id:
        return None
    session = TrainerSession(str(session_id))
    pointer = storage.read(session.storage_key, None)
    if not isinstance(pointer, dict) or not pointer.get('userId'):
        return None
    if _pointer_expired(pointer):
        storage.remove(session.storage_key)
        return None
    session.user_id = pointer['userId']
    return session


def get_current_user(session):
    if session is None or not session.is_active:
        return None
    return get_user(session.user_id)


def sign_out(session):
    if session is None:
        return
    storage.remove(session.storage_key)
    session.user_id = None


def create_user_with_email(name, email, password):
    validate_signup(name, email, password)
    normalized = normalize_email(email)
    if find_user_by_email(normalized):
        raise DuplicateEmail()

    user = User(
        name=str(name).strip(),
        email=normalized,
        provider='email',
        password_hash=generate_password_hash(password),
    )
    db.session.add(user)
    db.session.commit()
    return user, start_session(user)


def authenticate_with_email(email, password):
    email_error = validate_email(email)
    if email_error:
        raise ValidationFailed(email_error)
    if not password:
        raise ValidationFailed('Password is required.')

    user = find_user_by_email(email)
    if not user or user.provider != 'email':
        raise NotFound('No email account was found for that address.')
    if not user.password_hash or not check_password_hash(user.password_hash, password):
        raise InvalidCredential()
    return user, start_session(user)


def login_with_google(email, name=None):
    """Sign in the trainer with this email, creating a Google account if new."""
    email_error = validate_email(email)
    if email_error:
        raise ValidationFailed(email_error)

    normalized = normalize_email(email)
    existing = find_user_by_email(normalized)
    if existing:
        return existing, start_session(existing)

    user = User(
        name=str(name or '').strip() or derive_name_from_email(normalized),
        email=normalized,
        provider='google',
    )
    db.session.add(user)
    db.session.commit()
    return user, start_session(user)

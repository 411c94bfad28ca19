"""Key-value store for JSON documents.

Reads fall back to the caller's default and writes become no-ops whenever the
backing table cannot be reached, so callers never have to handle storage
failures themselves. Failures are logged through the Flask app logger.
"""
import json
import secrets
import time
import uuid

from flask import current_app, has_app_context
from sqlalchemy.exc import SQLAlchemyError
from pokewar.app import db


def create_id():
    """Return a new opaque identifier. Unique in practice, not guaranteed."""
    try:
        return str(uuid.uuid4())
    except (NotImplementedError, OSError):
        return f'id_{int(time.time() * 1000)}_{secrets.token_hex(6)}'


def read(key, fallback=None):
    if not has_app_context():
        return fallback
    from pokewar.models import StorageEntry

    try:
        entry = db.session.get(StorageEntry, key)
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.warning('Failed to read %s from storage: %s', key, exc)
        return fallback

    if entry is None or not entry.value:
        return fallback
    try:
        return json.loads(entry.value)
    except (TypeError, ValueError) as exc:
        current_app.logger.warning('Failed to read %s from storage: %s', key, exc)
        return fallback


def write(key, value):
    if not has_app_context():
        return
    from pokewar.models import StorageEntry

    try:
        payload = json.dumps(value)
    except (TypeError, ValueError) as exc:
        current_app.logger.warning('Failed to write %s to storage: %s', key, exc)
        return

    try:
        entry = db.session.get(StorageEntry, key)
        if entry is None:
            db.session.add(StorageEntry(key=key, value=payload))
        else:
            entry.value = payload
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.warning('Failed to write %s to storage: %s', key, exc)


def remove(key):
    if not has_app_context():
        return
    from pokewar.models import StorageEntry

    try:
        StorageEntry.query.filter_by(key=key).delete(synchronize_session=False)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.warning('Failed to remove %s from storage: %s', key, exc)


def keys(prefix=''):
    """Stored keys starting with ``prefix``, oldest update first."""
    if not has_app_context():
        return []
    from pokewar.models import StorageEntry

    try:
        entries = StorageEntry.query.filter(
            StorageEntry.key.startswith(prefix, autoescape=True),
        ).order_by(StorageEntry.updated_at.asc()).all()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.warning('Failed to list %s* in storage: %s', prefix, exc)
        return []
    return [entry.key for entry in entries]

import os

_DEV_DATABASE = os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'pokewar_dev.db')


def _flag(raw):
    return str(raw).strip().lower() in {'1', 'true', 'yes', 'on'}


def _env(name, default, cast=str):
    """Environment override for a setting; malformed values keep the default."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError):
        return default


def _database_url(default=None):
    url = os.environ.get('DATABASE_URL', default)
    # Heroku-style URLs still say postgres://, which SQLAlchemy 2 rejects.
    if url and url.startswith('postgres://'):
        url = 'postgresql://' + url[len('postgres://'):]
    return url


class BaseConfig:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-prod')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_EXPIRATION_HOURS = _env('JWT_EXPIRATION_HOURS', 24, int)
    GOOGLE_CLIENT_ID = os.environ.get('GOOGLE_CLIENT_ID', '')
    # Accept {email, name} Google logins without an ID token (local demos only).
    GOOGLE_DEV_LOGIN = _env('GOOGLE_DEV_LOGIN', False, _flag)
    POKEAPI_BASE_URL = os.environ.get('POKEAPI_BASE_URL', 'https://pokeapi.co/api/v2')
    POKEAPI_TIMEOUT_SECONDS = _env('POKEAPI_TIMEOUT_SECONDS', 5.0, float)
    ROSTER_DEFAULT_LIMIT = _env('ROSTER_DEFAULT_LIMIT', 1000, int)
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    GOOGLE_DEV_LOGIN = _env('GOOGLE_DEV_LOGIN', True, _flag)
    SQLALCHEMY_DATABASE_URI = _database_url('sqlite:///' + _DEV_DATABASE)


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'


class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = _database_url()


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}

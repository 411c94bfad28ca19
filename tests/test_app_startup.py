"""Tests for app factory helpers and production guards."""
import pytest

from pokewar.app import _parse_allowed_origins, create_app
from pokewar.config import _database_url, _env, _flag


def test_parse_allowed_origins():
    assert _parse_allowed_origins('') == '*'
    assert _parse_allowed_origins(' * ') == '*'
    assert _parse_allowed_origins('https://a.example, https://b.example,') == [
        'https://a.example', 'https://b.example',
    ]
    assert _parse_allowed_origins(['https://a.example', '']) == ['https://a.example']


def test_production_requires_real_secret_key():
    with pytest.raises(RuntimeError):
        create_app('production')


def test_health_endpoint(client):
    res = client.get('/api/health')
    assert res.status_code == 200
    assert res.get_json() == {'status': 'ok'}


def test_env_overrides_fall_back_on_bad_values(monkeypatch):
    monkeypatch.setenv('JWT_EXPIRATION_HOURS', 'soon')
    monkeypatch.setenv('POKEAPI_TIMEOUT_SECONDS', '2.5')
    monkeypatch.setenv('GOOGLE_DEV_LOGIN', ' Yes ')
    monkeypatch.delenv('ROSTER_DEFAULT_LIMIT', raising=False)
    assert _env('JWT_EXPIRATION_HOURS', 24, int) == 24
    assert _env('POKEAPI_TIMEOUT_SECONDS', 5.0, float) == 2.5
    assert _env('GOOGLE_DEV_LOGIN', False, _flag) is True
    assert _env('ROSTER_DEFAULT_LIMIT', 1000, int) == 1000


def test_database_url_accepts_heroku_scheme(monkeypatch):
    monkeypatch.setenv('DATABASE_URL', 'postgres://u:p@db/pokewar')
    assert _database_url() == 'postgresql://u:p@db/pokewar'
    monkeypatch.delenv('DATABASE_URL')
    assert _database_url('sqlite:///dev.db') == 'sqlite:///dev.db'
    assert _database_url() is None

"""Tests for authentication routes."""
import json


class _FakeGoogleResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


def _signup(client, name='Ash Ketchum', email='ash@test.com', password='Password123'):
    return client.post('/api/auth/signup', json={
        'name': name, 'email': email, 'password': password,
    })


def _bearer(res):
    return {'Authorization': f'Bearer {json.loads(res.data)["token"]}'}


def test_signup(client):
    res = _signup(client)
    assert res.status_code == 201
    data = json.loads(res.data)
    assert 'token' in data
    assert data['user']['email'] == 'ash@test.com'
    assert data['user']['provider'] == 'email'
    assert 'password_hash' not in data['user']


def test_signup_rejects_invalid_fields(client):
    res = client.post('/api/auth/signup', json={'name': 'A', 'email': 'x', 'password': 'abc'})
    assert res.status_code == 400
    payload = json.loads(res.data)
    assert payload['error'] == 'Name must be at least 2 characters.'
    assert len(payload['details']) == 3


def test_signup_duplicate_email(client):
    _signup(client)
    res = _signup(client, name='Other', email=' ASH@test.com ')
    assert res.status_code == 409
    assert 'already has an account' in json.loads(res.data)['error']


def test_login(client):
    _signup(client)
    res = client.post('/api/auth/login', json={
        'email': 'ash@test.com', 'password': 'Password123',
    })
    assert res.status_code == 200
    assert 'token' in json.loads(res.data)


def test_login_bad_password(client):
    _signup(client)
    res = client.post('/api/auth/login', json={
        'email': 'ash@test.com', 'password': 'WrongPass1',
    })
    assert res.status_code == 401


def test_login_unknown_email(client):
    res = client.post('/api/auth/login', json={
        'email': 'nobody@test.com', 'password': 'Password123',
    })
    assert res.status_code == 404


def test_me_and_logout(client):
    headers = _bearer(_signup(client))
    res = client.get('/api/auth/me', headers=headers)
    assert res.status_code == 200
    assert json.loads(res.data)['user']['name'] == 'Ash Ketchum'

    res = client.post('/api/auth/logout', json={}, headers=headers)
    assert res.status_code == 200

    res = client.get('/api/auth/me', headers=headers)
    assert res.status_code == 401
    assert json.loads(res.data)['error'] == 'Session ended'


def test_me_requires_token(client):
    assert client.get('/api/auth/me').status_code == 401
    res = client.get('/api/auth/me', headers={'Authorization': 'Bearer garbage'})
    assert res.status_code == 401
    assert json.loads(res.data)['error'] == 'Invalid token'


def test_list_users(client):
    headers = _bearer(_signup(client))
    _signup(client, name='Misty', email='misty@test.com')
    res = client.get('/api/auth/users', headers=headers)
    assert res.status_code == 200
    emails = [u['email'] for u in json.loads(res.data)['users']]
    assert emails == ['ash@test.com', 'misty@test.com']


def test_google_config_endpoint(client):
    client.application.config['GOOGLE_CLIENT_ID'] = ''
    disabled = client.get('/api/auth/google/config')
    assert disabled.status_code == 200
    assert json.loads(disabled.data)['enabled'] is False

    client.application.config['GOOGLE_CLIENT_ID'] = 'google-client-id.apps.googleusercontent.com'
    enabled = client.get('/api/auth/google/config')
    payload = json.loads(enabled.data)
    assert payload['enabled'] is True
    assert payload['client_id'] == 'google-client-id.apps.googleusercontent.com'


def test_google_login_creates_user(client, monkeypatch):
    client.application.config['GOOGLE_CLIENT_ID'] = 'google-client-id.apps.googleusercontent.com'
    google_payload = {
        'aud': 'google-client-id.apps.googleusercontent.com',
        'iss': 'https://accounts.google.com',
        'exp': '9999999999',
        'email_verified': 'true',
        'sub': 'google-sub-123',
        'email': 'GoogleUser@test.com',
    }

    def fake_google_verify(url, params=None, timeout=0):
        assert params['id_token'] == 'valid-google-token'
        return _FakeGoogleResponse(200, google_payload)

    monkeypatch.setattr('pokewar.routes.auth.requests.get', fake_google_verify)

    res = client.post('/api/auth/google', json={'id_token': 'valid-google-token'})
    assert res.status_code == 200
    data = json.loads(res.data)
    assert 'token' in data
    assert data['user']['email'] == 'googleuser@test.com'
    assert data['user']['provider'] == 'google'
    assert data['user']['name'] == 'Googleuser'


def test_google_login_rejects_invalid_token(client, monkeypatch):
    client.application.config['GOOGLE_CLIENT_ID'] = 'google-client-id.apps.googleusercontent.com'

    def fake_google_verify(url, params=None, timeout=0):
        return _FakeGoogleResponse(401, {'error': 'invalid_token'})

    monkeypatch.setattr('pokewar.routes.auth.requests.get', fake_google_verify)

    res = client.post('/api/auth/google', json={'id_token': 'bad-token'})
    assert res.status_code == 401


def test_google_login_unconfigured(client):
    client.application.config['GOOGLE_CLIENT_ID'] = ''
    res = client.post('/api/auth/google', json={'id_token': 'any'})
    assert res.status_code == 503


def test_google_dev_login_requires_flag(client):
    client.application.config['GOOGLE_DEV_LOGIN'] = False
    res = client.post('/api/auth/google/dev', json={'email': 'red@test.com'})
    assert res.status_code == 404

    client.application.config['GOOGLE_DEV_LOGIN'] = True
    first = client.post('/api/auth/google/dev', json={'email': 'red.trainer@test.com'})
    assert first.status_code == 200
    assert json.loads(first.data)['user']['name'] == 'Red Trainer'
    second = client.post('/api/auth/google/dev', json={'email': 'RED.trainer@test.com'})
    assert json.loads(second.data)['user']['id'] == json.loads(first.data)['user']['id']


def test_google_account_cannot_use_password_login(client):
    client.application.config['GOOGLE_DEV_LOGIN'] = True
    client.post('/api/auth/google/dev', json={'email': 'blue@test.com', 'name': 'Blue'})
    res = client.post('/api/auth/login', json={
        'email': 'blue@test.com', 'password': 'Password123',
    })
    assert res.status_code == 404


def test_mutating_api_rejects_disallowed_origin(client):
    client.application.config['CORS_ALLOWED_ORIGINS'] = 'https://allowed.example'
    res = client.post('/api/auth/signup', json={
        'name': 'Origin Blocked', 'email': 'blocked@test.com', 'password': 'Password123',
    }, headers={'Origin': 'https://evil.example'})
    assert res.status_code == 403

    allowed = client.post('/api/auth/signup', json={
        'name': 'Origin Allowed', 'email': 'allowed@test.com', 'password': 'Password123',
    }, headers={'Origin': 'https://allowed.example'})
    assert allowed.status_code == 201

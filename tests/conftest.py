import pytest
from pokewar.app import create_app, db


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(client):
    """Sign up a trainer and return auth headers."""
    res = client.post('/api/auth/signup', json={
        'name': 'Test Trainer', 'email': 'test@example.com',
        'password': 'Password123',
    })
    token = res.get_json()['token']
    return {'Authorization': f'Bearer {token}', 'Content-Type': 'application/json'}


@pytest.fixture
def trainers(app):
    """Two email trainers created through the identity directory."""
    from pokewar.services.identity import create_user_with_email
    ash, _ = create_user_with_email('Ash', 'a@x.com', 'Password123')
    misty, _ = create_user_with_email('Misty', 'b@x.com', 'Password123')
    return ash, misty

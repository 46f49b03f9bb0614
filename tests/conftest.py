import pytest

from app import create_app
from inventory import Inventory
from models import db


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'SECRET_KEY': 'test-secret',
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def inventory(app):
    with app.app_context():
        yield Inventory(db.session)


def register(client, email, password='password123', role=None):
    payload = {'email': email, 'password': password}
    if role:
        payload['role'] = role
    return client.post('/api/auth/register', json=payload)


@pytest.fixture
def admin_token(client):
    return register(client, 'admin@example.com', role='ADMIN').get_json()['token']


@pytest.fixture
def user_token(client):
    return register(client, 'user@example.com').get_json()['token']


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def make_sweet(client, admin_token):
    def make(**fields):
        payload = {'name': 'Choc', 'category': 'Chocolate', 'price': 2.99, 'stock': 2}
        payload.update(fields)
        resp = client.post('/api/sweets', json=payload, headers=bearer(admin_token))
        assert resp.status_code == 201
        return resp.get_json()
    return make

"""
Pytest fixtures for medsupply backend tests.

Provides a fresh app (in-memory SQLite, temporary blob directory) per test,
the service console, a test client and an authenticated staff account.
"""

import pytest

from medsupply import create_app
from medsupply.console import get_console
from medsupply.extensions import db


STAFF_EMAIL = "staff@cmjmedservice.com"
STAFF_PASSWORD = "secret1"


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BLOB_STORAGE_DIR': str(tmp_path / "blobs"),
    })

    with app.app_context():
        db.create_all()
        yield app
        get_console().close()
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def console(app):
    return get_console()


@pytest.fixture(scope='function')
def alice(console):
    """Client record for Alice."""
    new_id = console.clients.add({
        "name": "Alice",
        "phone": "555-0100",
        "email": "alice@example.com",
        "address": "1 Main St",
    })
    return console.clients.find(new_id)


@pytest.fixture(scope='function')
def gauze(console):
    """Gauze: 50 on hand at $2.50."""
    new_id = console.inventory.add({
        "code": "GZ-001",
        "name": "Gauze",
        "description": "Sterile gauze pads",
        "price_cents": 250,
        "quantity": 50,
    })
    return console.inventory.find(new_id)


@pytest.fixture(scope='function')
def token(client):
    """Register the staff account and return its bearer token."""
    response = client.post('/api/auth/register', json={
        'email': STAFF_EMAIL,
        'password': STAFF_PASSWORD,
    })
    assert response.status_code == 201
    return response.json['token']


@pytest.fixture(scope='function')
def headers(token):
    return auth_headers(token)


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}

# tests/conftest.py
"""
Shared fixtures for the pytest test suite.

Every test that needs the database gets a fresh Flask app bound to an
in-memory SQLite database. Redis is replaced by fakeredis so the thread
cache, identity cache and in-flight tracker run their real code paths.
"""
import os

import fakeredis
import pytest

from app import create_app
from extensions import db

os.environ.setdefault('FLASK_ENV', 'testing')


@pytest.fixture
def redis_client():
    """In-process redis with the same decoding as the production client."""
    client = fakeredis.FakeRedis(decode_responses=True)
    yield client
    client.flushall()


@pytest.fixture
def app(redis_client):
    """Flask app with the message cache enabled (fakeredis) and empty tables."""
    app = create_app(config_name='testing', redis_client=redis_client)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def uncached_app():
    """Flask app with no cache backend configured."""
    app = create_app(config_name='testing', redis_client=None)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def db_session(app):
    """The scoped session of the current app context."""
    return db.session


@pytest.fixture
def message_cache(app):
    """Fully wired MessageCacheService from the app's service registry."""
    return app.services.get('message_cache')


@pytest.fixture
def thread_store(app):
    return app.services.get('thread_store')


@pytest.fixture
def active_contact_row(app):
    """A started campaign with one assigned contact waiting for a first message."""
    from tests.fixtures.factories import CampaignContactFactory

    return CampaignContactFactory(
        cell='+15551234567',
        messageservice_sid='MG123',
        message_status='needsMessage',
    )

import os
import sys

import fakeredis
import pytest

# Ensure the backend root (containing app.py, util/, routes/) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from app import create_app
from util.store import UserStore


class TestConfig:
    TESTING = True
    REDIS_URI = None
    FRONTEND_ORIGIN = 'http://localhost:5173'
    ATOMIC_WRITES = True
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def store(redis_client):
    return UserStore(redis_client, atomic=True)


@pytest.fixture()
def flask_app(store):
    application = create_app(TestConfig, store=store)
    yield application
    store.close()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def signed_up(client):
    res = client.post('/users/signup', json={'email': 'alice@example.com', 'password': 'hunter2'})
    assert res.status_code == 201
    return 'alice@example.com'

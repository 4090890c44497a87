import pytest

from bank_app import create_app
from bank_store import seed_store

# Cheap key derivation so the suites do not spend their time in PBKDF2
FAST_ITERATIONS = 1000

TEST_CONFIG = {
    "TESTING": True,
    "PBKDF2_ITERATIONS": FAST_ITERATIONS,
}


def make_app(strategy, **overrides):
    config = dict(TEST_CONFIG, CSRF_STRATEGY=strategy)
    config.update(overrides)
    return create_app(config)


@pytest.fixture
def store():
    return seed_store(iterations=FAST_ITERATIONS)


@pytest.fixture
def app():
    return make_app("double-submit")


@pytest.fixture
def samesite_app():
    return make_app("samesite")


@pytest.fixture
def vulnerable_app():
    return make_app("none")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login():
    def _login(client, username="alice", password="alice"):
        return client.post("/login", data={"username": username, "password": password})
    return _login


@pytest.fixture
def balances():
    def _balances(app):
        store = app.extensions["bank"]["store"]
        return {name: store.get(name).balance for name in store.usernames()}
    return _balances


@pytest.fixture
def app_factory():
    return make_app

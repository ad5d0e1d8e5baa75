"""
Pytest fixtures for the dealership access-control tests.

Every test gets its own durable SQLite file under tmp_path and bcrypt at
its minimum cost so hashing stays fast.
"""

import pytest

from dealership import create_app
from dealership.access import AccessController
from dealership.services import auth_service


TEST_BCRYPT_ROUNDS = 4
ADMIN_PASSWORD = "adminpass"
BOB_PASSWORD = "bobpass1"


def config_for(db_path) -> dict:
    return {
        "DATABASE_PATH": str(db_path),
        "BCRYPT_ROUNDS": TEST_BCRYPT_ROUNDS,
        "MAX_FAILED_ATTEMPTS": 3,
        "MIN_PASSWORD_LENGTH": 6,
    }


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "dealership.sqlite3"


@pytest.fixture
def access(db_path):
    """AccessController over a fresh durable store."""
    controller = AccessController.from_config(config_for(db_path))
    yield controller
    controller.close()


@pytest.fixture
def admin(access):
    """Logged-in admin principal (username 'Admin')."""
    access.bootstrap_admin(
        username="Admin",
        password=ADMIN_PASSWORD,
        name="Site Admin",
        email="admin@dealership.local",
        phone="555-100-0000",
    )
    return access.login("Admin", ADMIN_PASSWORD)


def make_user(access, admin, role, username, password, *, temporary=False):
    """Create an account through the admin path; optionally clear its temporary flag."""
    user = access.create_user(
        admin, role, username, password,
        f"{username.title()} Tester", f"{username}@dealership.local", "555-200-0000",
    )
    if not temporary:
        with access.store.session() as session:
            stored = auth_service.get_user(session, user.id)
            stored.is_temp_password = False
    return user


@pytest.fixture
def bob(access, admin):
    """Active Salesperson 'bob' with a permanent password."""
    return make_user(access, admin, "Salesperson", "bob", BOB_PASSWORD)


def user_row(access, username) -> dict:
    rows = access.store.query(
        "SELECT * FROM users WHERE username_key = :key",
        {"key": auth_service.username_key(username)},
    )
    assert rows, f"no user {username}"
    return dict(rows[0])


@pytest.fixture
def app(db_path):
    app = create_app(config_for(db_path))
    app.config.update({"TESTING": True})
    yield app
    app.extensions["access"].close()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()

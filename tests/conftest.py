import os, sys
import json
import pytest

# Ensure project root in path (menuphotos + tools/)
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from menuphotos import create_app
from menuphotos.extensions import db

JWT_TEST_KEY = "test-jwt-secret-key-with-enough-bytes-0123456789"

SMALL_POOL = {
    "version": "test-1",
    "identifiers": ["100", "200", "300", "400", "500", "600"],
    "buckets": {
        "pizza": ["100", "200"],
        "chicken": [{"slice": [2, 4]}],
    },
    "rules": [
        {"bucket": "pizza", "keywords": ["pizza"]},
        {"bucket": "chicken", "keywords": ["chicken"], "exclude": ["fried rice"]},
    ],
}


@pytest.fixture()
def pool_file(tmp_path):
    path = tmp_path / "pool.json"
    path.write_text(json.dumps(SMALL_POOL), encoding="utf-8")
    return str(path)


@pytest.fixture()
def test_app(tmp_path, pool_file):
    # isolated SQLite files per test
    app = create_app(config={
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'menu.db'}",
        "SQLALCHEMY_BINDS": {"auth": f"sqlite:///{tmp_path / 'auth.db'}"},
        "JWT_SECRET_KEY": JWT_TEST_KEY,
        "PHOTO_POOL_CONFIG": pool_file,
        "LOG_DIR": str(tmp_path / "logs"),
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


def _make_user(app, email, password, role):
    from menuphotos.models_user import User
    with app.app_context():
        u = User(email=email, role=role)
        u.set_password(password)
        db.session.add(u)
        db.session.commit()


def _login(client, email, password):
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["access_token"]


@pytest.fixture()
def admin_headers(test_app, client):
    _make_user(test_app, "admin@test.com", "admin123", "admin")
    token = _login(client, "admin@test.com", "admin123")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def staff_headers(test_app, client):
    _make_user(test_app, "staff@test.com", "staff123", "staff")
    token = _login(client, "staff@test.com", "staff123")
    return {"Authorization": f"Bearer {token}"}

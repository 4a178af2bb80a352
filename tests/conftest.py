import pytest

from totp_backend import create_app
from totp_database import db_manager

RFC_SECRET_B32 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"  # b"12345678901234567890"


@pytest.fixture()
def db_path(tmp_path):
    return str(tmp_path / "secrets.db")


@pytest.fixture()
def stored(db_path):
    return db_manager.add_secret("alice@example.com", "MyDemoApp", RFC_SECRET_B32, db_path)


@pytest.fixture()
def app(db_path):
    app = create_app(db_path=db_path, issuer="MyDemoApp")
    app.config.update(TESTING=True)
    yield app


@pytest.fixture()
def client(app):
    return app.test_client()

import sqlite3

import pytest

from totp_core.exceptions import SecretExistsError, TOTPError
from totp_database import db_manager
from totp_database.db_manager import StoredSecret


def test_empty_store(db_path):
    assert db_manager.load_secrets(db_path) == []
    assert db_manager.find_secret("nobody", db_path) is None


def test_add_and_find(db_path):
    created = db_manager.add_secret("alice@example.com", "MyDemoApp", "JBSWY3DPEHPK3PXP", db_path)
    assert created == StoredSecret("alice@example.com", "MyDemoApp", "JBSWY3DPEHPK3PXP")
    assert db_manager.find_secret("alice@example.com", db_path) == created


def test_load_keeps_insertion_order(db_path):
    for account in ("carol", "alice", "bob"):
        db_manager.add_secret(account, "Acme", "JBSWY3DPEHPK3PXP", db_path)
    assert [s.account for s in db_manager.load_secrets(db_path)] == ["carol", "alice", "bob"]


def test_duplicate_account_is_rejected(db_path, stored):
    with pytest.raises(SecretExistsError) as exc_info:
        db_manager.add_secret(stored.account, "Other", "GEZDGNBV", db_path)
    assert isinstance(exc_info.value, TOTPError)
    assert exc_info.value.account == stored.account
    assert str(exc_info.value) == f"Account {stored.account} already exists"
    assert db_manager.find_secret(stored.account, db_path).issuer == "MyDemoApp"


def test_remove(db_path, stored):
    assert db_manager.remove_secret(stored.account, db_path) is True
    assert db_manager.find_secret(stored.account, db_path) is None
    assert db_manager.remove_secret(stored.account, db_path) is False


def test_remove_only_touches_one_account(db_path, stored):
    db_manager.add_secret("bob", "Acme", "JBSWY3DPEHPK3PXP", db_path)
    db_manager.remove_secret("bob", db_path)
    assert db_manager.load_secrets(db_path) == [stored]


def test_default_path_from_environment(monkeypatch, tmp_path):
    path = str(tmp_path / "nested" / "env.db")
    monkeypatch.setenv("TOTP_DB_PATH", path)
    assert db_manager.default_db_path() == path
    db_manager.add_secret("dave", "Acme", "JBSWY3DPEHPK3PXP")
    conn = sqlite3.connect(path)
    try:
        assert conn.execute("SELECT account FROM secrets").fetchall() == [("dave",)]
    finally:
        conn.close()

"""
Secret store for enrolled accounts, backed by SQLite.

One row per account: (account, issuer, Base32 secret). The OTP core never
touches this module; the CLI and the Flask backend look secrets up here and
hand them to the core as plain data.
"""
import logging
import os
import sqlite3
from dataclasses import dataclass
from typing import List, Optional

from totp_core.exceptions import SecretExistsError

from .setup_database import setup_database

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_FILE = "totp-secrets.db"


@dataclass(frozen=True)
class StoredSecret:
    account: str
    issuer: str
    secret: str


def default_db_path() -> str:
    return os.getenv("TOTP_DB_PATH", DEFAULT_DATABASE_FILE)


def get_db_connection(path: Optional[str] = None) -> sqlite3.Connection:
    """Connect to the store, creating the table on first use."""
    path = path or default_db_path()
    setup_database(path)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    return conn


def _to_entity(row: sqlite3.Row) -> StoredSecret:
    return StoredSecret(account=row["account"], issuer=row["issuer"], secret=row["secret"])


def load_secrets(path: Optional[str] = None) -> List[StoredSecret]:
    conn = get_db_connection(path)
    try:
        rows = conn.execute(
            "SELECT account, issuer, secret FROM secrets ORDER BY id"
        ).fetchall()
    finally:
        conn.close()
    return [_to_entity(row) for row in rows]


def add_secret(account: str, issuer: str, secret: str, path: Optional[str] = None) -> StoredSecret:
    """
    Store a new secret.

    Raises:
        SecretExistsError: the account is already enrolled
    """
    conn = get_db_connection(path)
    try:
        conn.execute(
            "INSERT INTO secrets (account, issuer, secret) VALUES (?, ?, ?)",
            (account, issuer, secret),
        )
        conn.commit()
    except sqlite3.IntegrityError as exc:
        raise SecretExistsError(account) from exc
    finally:
        conn.close()
    logger.info("Stored secret for account '%s' (%s)", account, issuer)
    return StoredSecret(account=account, issuer=issuer, secret=secret)


def remove_secret(account: str, path: Optional[str] = None) -> bool:
    """Delete an account; returns False when it was not stored."""
    conn = get_db_connection(path)
    try:
        cursor = conn.execute("DELETE FROM secrets WHERE account = ?", (account,))
        conn.commit()
        removed = cursor.rowcount > 0
    finally:
        conn.close()
    if removed:
        logger.info("Removed secret for account '%s'", account)
    return removed


def find_secret(account: str, path: Optional[str] = None) -> Optional[StoredSecret]:
    conn = get_db_connection(path)
    try:
        row = conn.execute(
            "SELECT account, issuer, secret FROM secrets WHERE account = ?", (account,)
        ).fetchone()
    finally:
        conn.close()
    if row is None:
        logger.debug("Account '%s' not found", account)
        return None
    return _to_entity(row)

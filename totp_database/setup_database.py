import logging
import os
import sqlite3

logger = logging.getLogger(__name__)


def setup_database(path: str) -> None:
    """Create the secrets table (and its directory) if missing."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    conn = sqlite3.connect(path)
    try:
        conn.execute('''
        CREATE TABLE IF NOT EXISTS secrets (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            account TEXT NOT NULL UNIQUE,
            issuer TEXT NOT NULL,
            secret TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        ''')
        conn.commit()
    finally:
        conn.close()
    logger.debug("Database ready at %s", path)


if __name__ == "__main__":
    from .db_manager import default_db_path

    logging.basicConfig(level=logging.DEBUG)
    setup_database(default_db_path())

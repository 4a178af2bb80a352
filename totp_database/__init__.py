from .db_manager import (
    StoredSecret,
    add_secret,
    default_db_path,
    find_secret,
    load_secrets,
    remove_secret,
)

__all__ = [
    "StoredSecret",
    "add_secret",
    "default_db_path",
    "find_secret",
    "load_secrets",
    "remove_secret",
]

"""Core application components."""

from .config import Settings, settings
from .database import (
    AsyncSessionLocal,
    create_engine_for_url,
    drop_db,
    enable_sqlite_foreign_keys,
    engine,
    get_db,
    init_db,
)

__all__ = [
    "settings",
    "Settings",
    "engine",
    "AsyncSessionLocal",
    "create_engine_for_url",
    "enable_sqlite_foreign_keys",
    "get_db",
    "init_db",
    "drop_db",
]

"""Data storage layer."""

from monitor.storage.database import Database, get_database, init_database
from monitor.storage.state_repo import StateRepository
from monitor.storage import cache
from monitor.storage import pending_input_cache

__all__ = [
    "Database",
    "get_database",
    "init_database",
    "StateRepository",
    "cache",
    "pending_input_cache",
]

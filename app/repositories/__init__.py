"""Repository package — expose all concrete stores from one import."""
from .base import BaseStore, POPULAR_GAMES_LIMIT
from .memory_store import MemoryStore
from .file_store import FileStore

__all__ = [
    'BaseStore',
    'POPULAR_GAMES_LIMIT',
    'MemoryStore',
    'FileStore',
]

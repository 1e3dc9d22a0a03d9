from __future__ import annotations
from typing import Optional

from .base import NodeStore
from .memory import InMemoryNodeStore
from .sql import SQLNodeStore


def get_store(url: Optional[str] = None) -> NodeStore:
    """Pick a store from a database URL; no URL (or ``"memory"``) gives an in-memory store."""
    if not url or url.lower() == 'memory':
        return InMemoryNodeStore()
    return SQLNodeStore(url)


__all__ = [
    'NodeStore',
    'InMemoryNodeStore',
    'SQLNodeStore',
    'get_store',
]

"""
The store module provides the persistence boundary for resources.

- Uses Reference as the key for all resources.
- Stores the serialized document of a resource, and decodes it on read as the
  type the caller asks for.
- Any Resource may be written; the store keeps no registry of kinds.

This abstract interface allows for various implementations (in-memory, persistent, etc.).
"""

from .store import Store
from .in_memory import InMemoryStore

__all__ = [
    "Store",
    "InMemoryStore",
]

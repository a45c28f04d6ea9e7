"""
Application state core: slice reducers, the central Store and the
session persistence that seeds it.
"""

from store.store import Store
from store.persistence import KeyValueStorage, MemoryStorage, JsonFileStorage, SessionPersistence, load_initial_state

"""
Session persistence — the small key-value cache outside the state core.

Layout (one string value per key):

    token   session credential
    user    JSON-serialized session User
    theme   "light" | "dark"

The Store reads these once, at construction, via ``load_initial_state``.
``SessionPersistence`` writes them back as a side effect of the events
that change them (login, register, profile update, logout, theme set),
keeping the reducers themselves free of I/O.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

from store.events import Category, Succeeded, Logout, UpdateUserProfile, SetTheme
from store.models import User, to_dict, from_dict
from store.slices import AuthSlice, SliceStatus, ThemeSlice, THEME_MODES

log = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"
THEME_KEY = "theme"


class KeyValueStorage(ABC):
    """String key-value storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; missing keys are ignored."""


class MemoryStorage(KeyValueStorage):
    """Process-local storage, used by tests and when no file is configured."""

    def __init__(self, initial=None):
        self._data = dict(initial or {})

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        self._data[key] = value

    def remove(self, key):
        self._data.pop(key, None)

    def __contains__(self, key):
        return key in self._data


class JsonFileStorage(KeyValueStorage):
    """
    Storage backed by a single JSON object on disk.

    The whole file is rewritten on every change; it holds three keys.
    """

    def __init__(self, path):
        self.path = path

    def _load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError:
                log.warning("Ignoring unreadable storage file %s", self.path)
                return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, self.path)

    def get(self, key):
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key, value):
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key):
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


# ── Reading (Store construction) ─────────────────────────────────────────────

def _load_user(storage) -> Optional[User]:
    raw = storage.get(USER_KEY)
    if not raw:
        return None
    try:
        return from_dict(User, json.loads(raw))
    except (json.JSONDecodeError, TypeError):
        log.warning("Discarding malformed persisted user record")
        return None


def load_initial_state(storage: KeyValueStorage, prefers_dark: bool = False) -> dict:
    """
    Slice overrides seeded from storage: the auth session and the theme.

    The theme falls back to the ``prefers_dark`` hint, then to light.
    """
    user = _load_user(storage)
    # a token without a readable user is not a session
    token = storage.get(TOKEN_KEY) if user is not None else None
    auth = AuthSlice(
        data=user,
        token=token,
        status=SliceStatus.SUCCESS if user is not None else SliceStatus.IDLE,
    )

    mode = storage.get(THEME_KEY)
    if mode not in THEME_MODES:
        mode = "dark" if prefers_dark else "light"

    return {"auth": auth, "theme": ThemeSlice(mode=mode)}


# ── Writing (event side effects) ─────────────────────────────────────────────

class SessionPersistence:
    """
    Store listener that mirrors the session and theme into storage.

    Usage:
        persistence = SessionPersistence(storage).attach(store)
        ...
        persistence.detach()
    """

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage
        self._unsubscribe = None

    def attach(self, store) -> "SessionPersistence":
        if self._unsubscribe is None:
            self._unsubscribe = store.subscribe(self.on_event)
        return self

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_event(self, event, state):
        if isinstance(event, Succeeded) and event.category in (Category.LOGIN, Category.REGISTER):
            self.storage.set(TOKEN_KEY, event.payload.token)
            self._write_user(event.payload.user)
        elif isinstance(event, UpdateUserProfile):
            user = state["auth"].user
            if user is not None:
                self._write_user(user)
        elif isinstance(event, Logout):
            self.storage.remove(TOKEN_KEY)
            self.storage.remove(USER_KEY)
            log.debug("cleared persisted session")
        elif isinstance(event, SetTheme) and event.mode in THEME_MODES:
            self.storage.set(THEME_KEY, event.mode)

    def _write_user(self, user):
        self.storage.set(USER_KEY, json.dumps(to_dict(user)))
        log.debug("persisted session user %s", user.id)

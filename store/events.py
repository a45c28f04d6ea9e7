"""
Events dispatched into the Store.

Request lifecycle events come in three variants (Requested, Succeeded,
Failed), each tagged with the Category that names the logical request.
The category is also the Effect Coordinator's cancellation key.

Everything else is a domain-specific mutation with its own class.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Category(str, Enum):
    """Logical request kinds."""
    LOGIN = "auth/login"
    REGISTER = "auth/register"
    FORGOT_PASSWORD = "auth/forgot-password"
    DASHBOARD = "dashboard/fetch"
    USER_PROFILE = "user/fetch-profile"
    SIGNALS = "signals/fetch"
    TRADES = "trades/fetch"
    ACCOUNTS = "accounts/fetch"
    ANALYTICS = "analytics/fetch"
    SETTINGS = "settings/update"
    CONTACT = "contact/submit"


class Event:
    """Marker base class for everything that can be dispatched."""


# ── Request lifecycle ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Requested(Event):
    """A request was initiated. ``params`` are passed to the collaborator unchanged."""
    category: Category
    params: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Succeeded(Event):
    category: Category
    payload: Any = None


@dataclass(frozen=True)
class Failed(Event):
    category: Category
    error: str = ""


# ── Domain mutations ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Logout(Event):
    pass


@dataclass(frozen=True)
class ClearAuthError(Event):
    pass


@dataclass(frozen=True)
class UpdateUserProfile(Event):
    name: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class ToggleBotStatus(Event):
    pass


@dataclass(frozen=True)
class SetTheme(Event):
    mode: str


@dataclass(frozen=True)
class ClearContactStatus(Event):
    pass


# ── Action creators ──────────────────────────────────────────────────────────

def login_request(email, password):
    return Requested(Category.LOGIN, {"email": email, "password": password})


def register_request(name, email, password):
    return Requested(Category.REGISTER, {"name": name, "email": email, "password": password})


def forgot_password_request(email):
    return Requested(Category.FORGOT_PASSWORD, {"email": email})


def fetch_dashboard_request():
    return Requested(Category.DASHBOARD)


def fetch_user_profile_request():
    return Requested(Category.USER_PROFILE)


def fetch_signals_request():
    return Requested(Category.SIGNALS)


def fetch_trades_request():
    return Requested(Category.TRADES)


def fetch_accounts_request():
    return Requested(Category.ACCOUNTS)


def fetch_analytics_request(time_range=None):
    params = {"time_range": time_range} if time_range else {}
    return Requested(Category.ANALYTICS, params)


def update_settings_request(settings):
    return Requested(Category.SETTINGS, {"settings": settings})


def submit_contact_request(form):
    return Requested(Category.CONTACT, {"form": form})

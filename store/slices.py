"""
Slice states — the immutable regions of the Store.

Every slice is a frozen dataclass with a 4-state ``status`` plus a ``data``
payload and the last ``error`` message. Reducers never mutate a slice;
they return ``dataclasses.replace`` copies.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple

from store.models import TradingSettings


class SliceStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILURE = "failure"


THEME_MODES = ("light", "dark")

ANALYTICS_TIME_RANGES = ("7d", "30d", "90d", "1y")


@dataclass(frozen=True)
class Slice:
    """Generic request-backed slice."""
    data: Any = None
    status: SliceStatus = SliceStatus.IDLE
    error: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.status is SliceStatus.LOADING


@dataclass(frozen=True)
class ListSlice(Slice):
    """Slice whose data is a sequence of records (signals, trades, accounts)."""
    data: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class AuthSlice(Slice):
    """
    Session slice. ``data`` is the signed-in User (or None).

    Fed by three categories: login, register and forgot-password.
    """
    token: Optional[str] = None
    registration_success: bool = False
    forgot_password_success: bool = False
    forgot_password_message: Optional[str] = None

    @property
    def user(self):
        return self.data

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None


@dataclass(frozen=True)
class SettingsSlice(Slice):
    data: TradingSettings = field(default_factory=TradingSettings)


@dataclass(frozen=True)
class AnalyticsSlice(Slice):
    time_range: str = "30d"


@dataclass(frozen=True)
class ContactSlice(Slice):
    """``data`` is the ticket id of the last successful submission."""

    @property
    def submitting(self) -> bool:
        return self.loading

    @property
    def submitted(self) -> bool:
        return self.status is SliceStatus.SUCCESS

    @property
    def ticket_id(self) -> Optional[str]:
        return self.data


@dataclass(frozen=True)
class ThemeSlice:
    mode: str = "light"

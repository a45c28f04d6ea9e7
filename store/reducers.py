"""
Pure slice reducers.

    reduce(slice, event) -> slice'

Every reducer is total: an event it does not handle returns the very same
slice object, which lets the Store skip signal writes for untouched slices.

Request lifecycle rules shared by every slice:

  Requested  → status=LOADING, error=None, data kept (no flicker on refresh)
  Succeeded  → status=SUCCESS, error=None, data replaced
  Failed     → status=FAILURE, error=<message>, data kept
"""

from dataclasses import replace
from typing import Callable, Dict, Tuple

from store.events import (
    Category, Requested, Succeeded, Failed,
    Logout, ClearAuthError, UpdateUserProfile, ToggleBotStatus, SetTheme, ClearContactStatus,
)
from store.slices import (
    SliceStatus, Slice, ListSlice, AuthSlice, SettingsSlice, AnalyticsSlice,
    ContactSlice, ThemeSlice, THEME_MODES, ANALYTICS_TIME_RANGES,
)


CONTACT_FALLBACK_ERROR = "Failed to submit contact form"


def reduce_lifecycle(state, event, category, coerce=None):
    """Apply the request/success/failure rules for one category."""
    if getattr(event, "category", None) is not category:
        return state
    if isinstance(event, Requested):
        return replace(state, status=SliceStatus.LOADING, error=None)
    if isinstance(event, Succeeded):
        data = coerce(event.payload) if coerce else event.payload
        return replace(state, status=SliceStatus.SUCCESS, error=None, data=data)
    if isinstance(event, Failed):
        return replace(state, status=SliceStatus.FAILURE, error=event.error)
    return state


def _settled_status(state):
    """Status to fall back to when an error is cleared."""
    if state.status is not SliceStatus.FAILURE:
        return state.status
    return SliceStatus.SUCCESS if state.data is not None else SliceStatus.IDLE


# ── Auth ─────────────────────────────────────────────────────────────────────

def auth_reducer(state: AuthSlice, event) -> AuthSlice:
    if isinstance(event, Logout):
        return AuthSlice()

    if isinstance(event, ClearAuthError):
        return replace(
            state,
            status=_settled_status(state),
            error=None,
            registration_success=False,
            forgot_password_success=False,
        )

    if isinstance(event, UpdateUserProfile):
        if state.data is None:
            return state
        changes = {k: v for k, v in (("name", event.name), ("email", event.email)) if v is not None}
        if not changes:
            return state
        return replace(state, data=replace(state.data, **changes))

    category = getattr(event, "category", None)

    if category is Category.LOGIN:
        if isinstance(event, Requested):
            return replace(state, status=SliceStatus.LOADING, error=None,
                           registration_success=False, forgot_password_success=False)
        if isinstance(event, Succeeded):
            return replace(state, status=SliceStatus.SUCCESS, error=None,
                           data=event.payload.user, token=event.payload.token)
        if isinstance(event, Failed):
            return replace(state, status=SliceStatus.FAILURE, error=event.error)

    if category is Category.REGISTER:
        if isinstance(event, Requested):
            return replace(state, status=SliceStatus.LOADING, error=None,
                           registration_success=False)
        if isinstance(event, Succeeded):
            return replace(state, status=SliceStatus.SUCCESS, error=None,
                           data=event.payload.user, token=event.payload.token,
                           registration_success=True)
        if isinstance(event, Failed):
            return replace(state, status=SliceStatus.FAILURE, error=event.error,
                           registration_success=False)

    if category is Category.FORGOT_PASSWORD:
        if isinstance(event, Requested):
            return replace(state, status=SliceStatus.LOADING, error=None,
                           forgot_password_success=False, forgot_password_message=None)
        if isinstance(event, Succeeded):
            return replace(state, status=SliceStatus.SUCCESS, error=None,
                           forgot_password_success=True,
                           forgot_password_message=event.payload)
        if isinstance(event, Failed):
            return replace(state, status=SliceStatus.FAILURE, error=event.error,
                           forgot_password_success=False)

    return state


# ── Dashboard / user ─────────────────────────────────────────────────────────

def dashboard_reducer(state: Slice, event) -> Slice:
    if isinstance(event, ToggleBotStatus):
        if state.data is None:
            return state
        bot_stats = state.data.bot_stats
        toggled = replace(bot_stats, is_running=not bot_stats.is_running)
        return replace(state, data=replace(state.data, bot_stats=toggled))
    return reduce_lifecycle(state, event, Category.DASHBOARD)


def user_reducer(state: Slice, event) -> Slice:
    return reduce_lifecycle(state, event, Category.USER_PROFILE)


# ── Lists ────────────────────────────────────────────────────────────────────

def signals_reducer(state: ListSlice, event) -> ListSlice:
    return reduce_lifecycle(state, event, Category.SIGNALS, coerce=tuple)


def trades_reducer(state: ListSlice, event) -> ListSlice:
    return reduce_lifecycle(state, event, Category.TRADES, coerce=tuple)


def accounts_reducer(state: ListSlice, event) -> ListSlice:
    return reduce_lifecycle(state, event, Category.ACCOUNTS, coerce=tuple)


# ── Settings / analytics / contact / theme ──────────────────────────────────

def settings_reducer(state: SettingsSlice, event) -> SettingsSlice:
    return reduce_lifecycle(state, event, Category.SETTINGS)


def analytics_reducer(state: AnalyticsSlice, event) -> AnalyticsSlice:
    if isinstance(event, Requested) and event.category is Category.ANALYTICS:
        time_range = event.params.get("time_range")
        if time_range not in ANALYTICS_TIME_RANGES:
            time_range = state.time_range
        return replace(state, status=SliceStatus.LOADING, error=None, time_range=time_range)
    return reduce_lifecycle(state, event, Category.ANALYTICS)


def contact_reducer(state: ContactSlice, event) -> ContactSlice:
    if isinstance(event, ClearContactStatus):
        return ContactSlice()
    if isinstance(event, Failed) and event.category is Category.CONTACT:
        return replace(state, status=SliceStatus.FAILURE,
                       error=event.error or CONTACT_FALLBACK_ERROR)
    return reduce_lifecycle(state, event, Category.CONTACT)


def theme_reducer(state: ThemeSlice, event) -> ThemeSlice:
    if isinstance(event, SetTheme) and event.mode in THEME_MODES and event.mode != state.mode:
        return ThemeSlice(mode=event.mode)
    return state


# ── Registry ─────────────────────────────────────────────────────────────────

# slice name → (initial state factory, reducer)
REDUCERS: Dict[str, Tuple[Callable, Callable]] = {
    "auth": (AuthSlice, auth_reducer),
    "dashboard": (Slice, dashboard_reducer),
    "user": (Slice, user_reducer),
    "signals": (ListSlice, signals_reducer),
    "trades": (ListSlice, trades_reducer),
    "accounts": (ListSlice, accounts_reducer),
    "settings": (SettingsSlice, settings_reducer),
    "analytics": (AnalyticsSlice, analytics_reducer),
    "contact": (ContactSlice, contact_reducer),
    "theme": (ThemeSlice, theme_reducer),
}


def initial_state(overrides=None) -> dict:
    """Fresh slice states, optionally seeded (e.g. from persisted storage)."""
    state = {name: factory() for name, (factory, _) in REDUCERS.items()}
    if overrides:
        unknown = set(overrides) - set(state)
        if unknown:
            raise KeyError(f"Unknown slices: {sorted(unknown)}")
        state.update(overrides)
    return state


def root_reducer(state: dict, event) -> dict:
    """Reduce every slice. Returns the same dict object if nothing changed."""
    next_state = {}
    changed = False
    for name, (_, reducer) in REDUCERS.items():
        before = state[name]
        after = reducer(before, event)
        next_state[name] = after
        changed = changed or after is not before
    return next_state if changed else state

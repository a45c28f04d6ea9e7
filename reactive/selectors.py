"""
Selector layer — read-only projections over the store state.

The ``select_*`` functions are pure: (state mapping) -> view. They never
copy or mutate what they read.

StoreSelectors wraps the same projections in reaktiv Computed values that
read the store's per-slice Signals, so each view is recomputed only when
one of its slices was replaced and otherwise returns the identical object.

    selectors = StoreSelectors(store)
    selectors.pending_signals()      # cached until the signals slice changes
"""

from reaktiv import Computed


# ── Auth ─────────────────────────────────────────────────────────────────────

def select_auth(state):
    return state["auth"]


def select_is_authenticated(state):
    return state["auth"].is_authenticated


def select_current_user(state):
    return state["auth"].user


def select_auth_loading(state):
    return state["auth"].loading


def select_auth_error(state):
    return state["auth"].error


# ── Dashboard / profile ──────────────────────────────────────────────────────

def select_dashboard(state):
    return state["dashboard"]


def select_dashboard_data(state):
    return state["dashboard"].data


def select_dashboard_loading(state):
    return state["dashboard"].loading


def select_dashboard_error(state):
    return state["dashboard"].error


def select_bot_running(state):
    data = state["dashboard"].data
    return bool(data and data.bot_stats.is_running)


def select_user_profile(state):
    return state["user"].data


# ── Signals / trades / accounts ──────────────────────────────────────────────

def select_signals(state):
    return state["signals"].data


def select_pending_signals(state):
    return tuple(s for s in state["signals"].data if s.status == "pending")


def select_trades(state):
    return state["trades"].data


def select_open_trades(state):
    return tuple(t for t in state["trades"].data if t.status == "open")


def select_trades_pnl(state):
    return round(sum(t.pnl for t in state["trades"].data), 2)


def select_accounts(state):
    return state["accounts"].data


def select_default_account(state):
    return next((a for a in state["accounts"].data if a.is_default), None)


def select_accounts_loading_initial(state):
    """True while the first accounts fetch is in flight (nothing to show yet)."""
    accounts = state["accounts"]
    return accounts.loading and not accounts.data


def account_totals(accounts):
    """Balance/equity totals and connected count over any account list."""
    return {
        "balance": round(sum(a.balance for a in accounts), 2),
        "equity": round(sum(a.equity for a in accounts), 2),
        "connected": sum(1 for a in accounts if a.status == "connected"),
    }


# ── Settings / analytics / contact / theme ───────────────────────────────────

def select_settings(state):
    return state["settings"].data


def select_analytics(state):
    return state["analytics"].data


def select_analytics_time_range(state):
    return state["analytics"].time_range


def select_contact(state):
    return state["contact"]


def select_contact_ticket_id(state):
    return state["contact"].ticket_id


def select_theme_mode(state):
    return state["theme"].mode


def select_slice_error(state, name):
    """Latest error of one slice only; other slices' errors never leak in."""
    return state[name].error


# ── Memoized views ───────────────────────────────────────────────────────────

class _SliceView:
    """Mapping-like view whose reads go through the store's Signals."""

    __slots__ = ("_store",)

    def __init__(self, store):
        self._store = store

    def __getitem__(self, name):
        return self._store.signal(name)()


class StoreSelectors:
    """
    Memoized selectors bound to one Store.

    Each attribute is a reaktiv Computed; call it to read the view.
    ``computed(fn)`` builds one for any ``select_*``-style function.
    """

    def __init__(self, store):
        self._store = store
        self._state = _SliceView(store)

        self.auth = self.computed(select_auth)
        self.is_authenticated = self.computed(select_is_authenticated)
        self.current_user = self.computed(select_current_user)
        self.dashboard_data = self.computed(select_dashboard_data)
        self.bot_running = self.computed(select_bot_running)
        self.signals = self.computed(select_signals)
        self.pending_signals = self.computed(select_pending_signals)
        self.trades = self.computed(select_trades)
        self.open_trades = self.computed(select_open_trades)
        self.trades_pnl = self.computed(select_trades_pnl)
        self.accounts = self.computed(select_accounts)
        self.default_account = self.computed(select_default_account)
        self.settings = self.computed(select_settings)
        self.analytics = self.computed(select_analytics)
        self.analytics_time_range = self.computed(select_analytics_time_range)
        self.contact = self.computed(select_contact)
        self.theme_mode = self.computed(select_theme_mode)

    def computed(self, selector) -> Computed:
        state = self._state
        return Computed(lambda: selector(state))

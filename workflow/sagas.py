"""
Per-category workflows.

A saga receives the Requested event and the store state right after the
request was reduced, calls the collaborator with the request's parameters
and returns the payload for the Succeeded event. Failures are raised and
normalized by the EffectCoordinator.
"""

import functools

from store.events import Category


async def login(api, event, state):
    return await api.login(event.params["email"], event.params["password"])


async def register(api, event, state):
    params = event.params
    return await api.register(params["name"], params["email"], params["password"])


async def forgot_password(api, event, state):
    return await api.forgot_password(event.params["email"])


async def fetch_dashboard(api, event, state):
    return await api.fetch_dashboard()


async def fetch_user_profile(api, event, state):
    return await api.fetch_user_profile()


async def fetch_signals(api, event, state):
    return await api.fetch_signals()


async def fetch_trades(api, event, state):
    return await api.fetch_trades()


async def fetch_accounts(api, event, state):
    return await api.fetch_accounts()


async def fetch_analytics(api, event, state):
    # the reducer already resolved a missing range to the current one
    time_range = event.params.get("time_range") or state["analytics"].time_range
    return await api.fetch_analytics(time_range)


async def update_settings(api, event, state):
    return await api.update_settings(event.params["settings"])


async def submit_contact(api, event, state):
    return await api.submit_contact_form(event.params["form"])


# Category → (saga, fallback failure message)
SAGAS = {
    Category.LOGIN: (login, "Login failed"),
    Category.REGISTER: (register, "Registration failed"),
    Category.FORGOT_PASSWORD: (forgot_password, "Failed to send reset instructions"),
    Category.DASHBOARD: (fetch_dashboard, "Failed to fetch dashboard data"),
    Category.USER_PROFILE: (fetch_user_profile, "Failed to fetch user profile"),
    Category.SIGNALS: (fetch_signals, "Failed to fetch signals"),
    Category.TRADES: (fetch_trades, "Failed to fetch trades"),
    Category.ACCOUNTS: (fetch_accounts, "Failed to fetch accounts"),
    Category.ANALYTICS: (fetch_analytics, "Failed to fetch analytics"),
    Category.SETTINGS: (update_settings, "Failed to update settings"),
    Category.CONTACT: (submit_contact, "Failed to submit contact form"),
}

# Seconds to wait before calling the collaborator.
SETTLE_DELAYS = {
    Category.LOGIN: 0.8,
    Category.REGISTER: 1.0,
    Category.FORGOT_PASSWORD: 1.2,
    Category.DASHBOARD: 0.6,
    Category.USER_PROFILE: 0.5,
}
DEFAULT_SETTLE_DELAY = 0.4


def settle_delays(scale=1.0):
    """Settling delay for every category, multiplied by ``scale``."""
    return {
        category: SETTLE_DELAYS.get(category, DEFAULT_SETTLE_DELAY) * scale
        for category in SAGAS
    }


def register_sagas(coordinator, api, sagas=None):
    """Wire every saga to ``api`` on the coordinator (the root saga)."""
    for category, (saga, fallback) in (sagas or SAGAS).items():
        coordinator.take_latest(category, functools.partial(saga, api), fallback=fallback)
    return coordinator

"""
DashboardClient — composition root for one dashboard session.

Builds the Store (seeded from the session cache), attaches persistence,
wires every saga to the data-access collaborator and exposes the UI
intents as methods. Validation runs before dispatch; everything else is
asynchronous and lands in the store.
Request intents must be called from inside a running event loop and
raise RuntimeError otherwise.

    async with DashboardClient(config=AppConfig(latency_scale=0)) as dash:
        dash.login("admin@dashboard.com", "admin123")
        await dash.settle()
        dash.refresh_signals()
        await dash.settle()
        print(len(dash.selectors.signals()))
"""

import asyncio
import logging

from config import AppConfig
from client.forms import (
    ValidationError, validate_login, validate_registration, validate_forgot_password,
    validate_contact_form, validate_settings, validate_email,
)
from reactive.accounts import AccountsViewModel
from reactive.chat import ChatSession
from reactive.selectors import StoreSelectors
from server.mock_api import MockApi
from store import events
from store.persistence import MemoryStorage, JsonFileStorage, SessionPersistence, load_initial_state
from store.slices import ANALYTICS_TIME_RANGES, THEME_MODES
from store.store import Store
from workflow.engine import EffectCoordinator
from workflow.sagas import register_sagas, settle_delays

log = logging.getLogger(__name__)


class DashboardClient:
    """
    One client session: store, workflows, persistence and collaborator.

    Args:
        api: data-access collaborator; a MockApi built from ``config`` by default.
        storage: KeyValueStorage for the session cache; from ``config`` by default.
        config: AppConfig; defaults to AppConfig().
        sleep: coroutine function used for every simulated delay.
    """

    def __init__(self, api=None, storage=None, config=None, sleep=asyncio.sleep):
        self.config = config or AppConfig()
        self._sleep = sleep
        self.api = api or MockApi(
            latency_scale=self.config.latency_scale,
            chat_failure_rate=self.config.chat_failure_rate,
            sleep=sleep,
        )
        if storage is None:
            storage = JsonFileStorage(self.config.storage_path) if self.config.storage_path else MemoryStorage()
        self.storage = storage

        self.store = Store(load_initial_state(storage, prefers_dark=self.config.prefers_dark))
        restore = getattr(self.api, "restore_session", None)
        if restore is not None and self.store.select("auth").user is not None:
            restore(self.store.select("auth").user)

        self.persistence = SessionPersistence(storage)
        self.coordinator = EffectCoordinator(
            self.store, delays=settle_delays(self.config.latency_scale), sleep=sleep,
        )
        register_sagas(self.coordinator, self.api)
        self.selectors = StoreSelectors(self.store)

    # ── Lifecycle ────────────────────────────────────────────────────

    def start(self) -> "DashboardClient":
        self.persistence.attach(self.store)
        self.coordinator.start()
        log.debug("dashboard client started (%d workflows)", len(self.coordinator.categories))
        return self

    def close(self) -> None:
        self.coordinator.stop()
        self.persistence.detach()

    async def settle(self) -> None:
        """Wait until every request in flight has produced its outcome."""
        await self.coordinator.drain()

    async def __aenter__(self):
        return self.start()

    async def __aexit__(self, *args):
        self.close()

    @property
    def state(self):
        return self.store.get_state()

    def _request(self, event):
        """Dispatch a request event; its workflow needs the running event loop."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            raise RuntimeError(
                f"{event.category.value} must be requested from inside a running event loop"
            ) from None
        return self.store.dispatch(event)

    # ── Auth ─────────────────────────────────────────────────────────

    def login(self, email, password):
        email, password = validate_login(email, password)
        return self._request(events.login_request(email, password))

    def register(self, name, email, password, confirm_password):
        name, email, password = validate_registration(name, email, password, confirm_password)
        return self._request(events.register_request(name, email, password))

    def forgot_password(self, email):
        email = validate_forgot_password(email)
        return self._request(events.forgot_password_request(email))

    def logout(self):
        return self.store.dispatch(events.Logout())

    def clear_auth_error(self):
        return self.store.dispatch(events.ClearAuthError())

    def update_profile(self, name=None, email=None):
        if email is not None:
            email = validate_email(email)
        if name is not None and not name.strip():
            raise ValidationError("name", "Please enter your full name")
        return self.store.dispatch(events.UpdateUserProfile(
            name=name.strip() if name is not None else None, email=email,
        ))

    def fetch_user_profile(self):
        return self._request(events.fetch_user_profile_request())

    # ── Data refreshes ───────────────────────────────────────────────

    def refresh_dashboard(self):
        return self._request(events.fetch_dashboard_request())

    def refresh_signals(self):
        return self._request(events.fetch_signals_request())

    def refresh_trades(self):
        return self._request(events.fetch_trades_request())

    def refresh_accounts(self):
        return self._request(events.fetch_accounts_request())

    def load_analytics(self, time_range=None):
        if time_range is not None and time_range not in ANALYTICS_TIME_RANGES:
            raise ValidationError("time_range", f"Time range must be one of {', '.join(ANALYTICS_TIME_RANGES)}")
        return self._request(events.fetch_analytics_request(time_range))

    def refresh_all(self):
        """Kick off every dashboard read at once; categories run independently."""
        return [
            self.refresh_dashboard(),
            self.refresh_signals(),
            self.refresh_trades(),
            self.refresh_accounts(),
            self.load_analytics(),
        ]

    # ── Mutations ────────────────────────────────────────────────────

    def save_settings(self, settings):
        return self._request(events.update_settings_request(validate_settings(settings)))

    def submit_contact(self, name, email, subject, message):
        form = validate_contact_form(name, email, subject, message)
        return self._request(events.submit_contact_request(form))

    def clear_contact_status(self):
        return self.store.dispatch(events.ClearContactStatus())

    def toggle_bot(self):
        return self.store.dispatch(events.ToggleBotStatus())

    def set_theme(self, mode):
        if mode not in THEME_MODES:
            raise ValidationError("mode", f"Theme must be one of {', '.join(THEME_MODES)}")
        return self.store.dispatch(events.SetTheme(mode))

    def toggle_theme(self):
        return self.set_theme("light" if self.store.select("theme").mode == "dark" else "dark")

    # ── Views with local state ───────────────────────────────────────

    def accounts_view(self) -> AccountsViewModel:
        return AccountsViewModel(self.store, delay_scale=self.config.latency_scale, sleep=self._sleep)

    def open_chat(self) -> ChatSession:
        return ChatSession(self.api)

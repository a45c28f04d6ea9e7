"""
MockApi — the simulated backend the dashboard talks to.

Every call sleeps for an artificial latency, then either returns a
well-formed payload or raises ApiError with a human-readable message.
Failures can be injected per call with ``failure_rates``.

    api = MockApi(latency_scale=0.0, rng=random.Random(7))
    session = await api.login("admin@dashboard.com", "admin123")
"""

import asyncio
import logging
import random
import string
import time
from typing import Optional
from urllib.parse import quote_plus

from store.models import User, Session, ContactForm, TradingSettings
from server.generators import (
    generate_signals, generate_trades, generate_accounts, build_dashboard, build_analytics,
)

log = logging.getLogger(__name__)


class ApiError(Exception):
    """A rejected call. ``message`` is safe to show to the user."""

    def __init__(self, message):
        self.message = message
        super().__init__(message)


MOCK_USERS = [
    {
        "id": "1",
        "email": "admin@dashboard.com",
        "password": "admin123",
        "name": "Lilian Trader",
        "role": "Administrator",
    },
    {
        "id": "2",
        "email": "demo@dashboard.com",
        "password": "demo123",
        "name": "John Doe",
        "role": "Trader",
    },
]

AUTO_REPLIES = [
    "Thanks for reaching out! I'm reviewing your message and will get back to you shortly.",
    "Great question! Let me look into that for you.",
    "I understand your concern. Our team is here to help!",
    "That's a common question. Here's what you need to know...",
    "Thanks for your patience! I'm checking our resources for the best answer.",
    "I appreciate you bringing this to our attention. Let me investigate.",
    "Good news! I have some helpful information for you.",
    "I'm here to assist you with that. Let me explain...",
]

# Seconds of simulated latency per call: fixed value or (low, high) range.
LATENCIES = {
    "login": 0.8,
    "register": 1.0,
    "forgot_password": 1.2,
    "fetch_dashboard": 0.8,
    "fetch_user_profile": 0.5,
    "fetch_signals": 0.6,
    "fetch_trades": 0.6,
    "fetch_accounts": 0.4,
    "fetch_analytics": 0.8,
    "update_settings": 0.5,
    "submit_contact_form": 0.0,
    "send_chat_message": (0.8, 1.2),
    "counterparty_reply": (1.5, 3.5),
}

DEFAULT_CHAT_FAILURE_RATE = 0.1

INJECTED_FAILURE_MESSAGE = "Service temporarily unavailable"


def _avatar_url(name):
    return f"https://ui-avatars.com/api/?name={quote_plus(name)}&background=4f46e5&color=fff"


def _base36(n):
    digits = string.digits + string.ascii_uppercase
    out = ""
    while True:
        n, r = divmod(n, 36)
        out = digits[r] + out
        if n == 0:
            return out


class MockApi:
    """
    Simulated data-access collaborator.

    Args:
        latency_scale: multiplier applied to every latency (0 disables delays).
        failure_rates: {call_name: probability} of raising ApiError.
        chat_failure_rate: probability that ``send_chat_message`` fails.
        rng: random.Random used for payloads, jitter and failure draws.
        sleep: coroutine function used to wait (asyncio.sleep by default).
    """

    def __init__(self, latency_scale=1.0, failure_rates=None,
                 chat_failure_rate=DEFAULT_CHAT_FAILURE_RATE, rng=None, sleep=asyncio.sleep):
        self.latency_scale = latency_scale
        self.failure_rates = dict(failure_rates or {})
        self.chat_failure_rate = chat_failure_rate
        self.rng = rng or random.Random()
        self._sleep = sleep
        self._users = [dict(u) for u in MOCK_USERS]
        self._current_user: Optional[User] = None
        self.calls = []

    # ── Internals ────────────────────────────────────────────────────

    async def _latency(self, name):
        self.calls.append(name)
        latency = LATENCIES.get(name, 0.0)
        if isinstance(latency, tuple):
            latency = self.rng.uniform(*latency)
        delay = latency * self.latency_scale
        if delay > 0:
            await self._sleep(delay)

    def _maybe_fail(self, name):
        rate = self.failure_rates.get(name, 0.0)
        if rate and self.rng.random() < rate:
            log.info("injected failure on %s", name)
            raise ApiError(INJECTED_FAILURE_MESSAGE)

    async def _call(self, name):
        await self._latency(name)
        self._maybe_fail(name)

    def _token_for(self, user):
        return f"mock-jwt-token-{user.id}-{int(time.time() * 1000)}"

    # ── Auth ─────────────────────────────────────────────────────────

    async def login(self, email, password) -> Session:
        await self._call("login")
        record = next(
            (u for u in self._users if u["email"] == email and u["password"] == password),
            None,
        )
        if record is None:
            raise ApiError("Invalid email or password")
        user = User(id=record["id"], email=record["email"], name=record["name"],
                    role=record["role"], avatar=_avatar_url(record["name"]))
        self._current_user = user
        return Session(user=user, token=self._token_for(user))

    async def register(self, name, email, password) -> Session:
        await self._call("register")
        if any(u["email"] == email for u in self._users):
            raise ApiError("An account with this email already exists")
        if len(password) < 6:
            raise ApiError("Password must be at least 6 characters")
        user = User(id=f"user-{int(time.time() * 1000)}", email=email, name=name,
                    role="Trader", avatar=_avatar_url(name))
        self._users.append({"id": user.id, "email": email, "password": password,
                            "name": name, "role": user.role})
        self._current_user = user
        return Session(user=user, token=self._token_for(user))

    async def forgot_password(self, email) -> str:
        await self._call("forgot_password")
        if "@" not in email:
            raise ApiError("Please enter a valid email address")
        known = any(u["email"] == email for u in self._users)
        if known:
            return "Password reset instructions sent to your email"
        return "If an account exists, password reset instructions have been sent"

    async def fetch_user_profile(self) -> User:
        await self._call("fetch_user_profile")
        if self._current_user is None:
            raise ApiError("User not found")
        return self._current_user

    def restore_session(self, user: Optional[User]):
        """Make a persisted user the current session user."""
        self._current_user = user

    # ── Dashboard data ───────────────────────────────────────────────

    async def fetch_dashboard(self):
        await self._call("fetch_dashboard")
        return build_dashboard(self.rng)

    async def fetch_signals(self):
        await self._call("fetch_signals")
        return generate_signals(self.rng, 50)

    async def fetch_trades(self):
        await self._call("fetch_trades")
        return generate_trades(self.rng, 100)

    async def fetch_accounts(self):
        await self._call("fetch_accounts")
        return generate_accounts()

    async def fetch_analytics(self, time_range="30d"):
        await self._call("fetch_analytics")
        return build_analytics(time_range)

    async def update_settings(self, settings: TradingSettings) -> TradingSettings:
        await self._call("update_settings")
        return settings

    async def submit_contact_form(self, form: ContactForm) -> str:
        await self._call("submit_contact_form")
        suffix = "".join(self.rng.choice(string.ascii_uppercase + string.digits) for _ in range(4))
        ticket_id = f"TKT-{_base36(int(time.time() * 1000))}-{suffix}"
        log.info("contact form '%s' filed as %s", form.subject, ticket_id)
        return ticket_id

    # ── Support chat ─────────────────────────────────────────────────

    async def send_chat_message(self, content) -> str:
        """Deliver a user message; returns its final id."""
        await self._latency("send_chat_message")
        if self.rng.random() < self.chat_failure_rate:
            raise ApiError("Network error")
        return f"msg-{int(time.time() * 1000)}-{self.rng.randrange(36 ** 4):04x}"

    async def counterparty_reply(self) -> str:
        """Wait while the counterparty types, then return the reply text."""
        await self._latency("counterparty_reply")
        return self.rng.choice(AUTO_REPLIES)

    @staticmethod
    def welcome_messages():
        """(content, seconds ago) pairs opening every conversation."""
        return [
            ("Hi there! Welcome to TradingBot support. How can I help you today?", 60),
            ("I'm John, and I'll be happy to assist you with any questions about trading, "
             "account setup, or platform features.", 55),
        ]

"""
Shared fixtures: a Store, and a collaborator whose calls only complete
when the test resolves them, so completion order is fully scripted.
"""

import asyncio

import pytest

from store.store import Store
from store.models import Account, Session, User
from workflow.engine import EffectCoordinator
from workflow.sagas import register_sagas


# ---------------------------------------------------------------------------
# Scripted collaborator
# ---------------------------------------------------------------------------

class PendingCall:
    """One collaborator call waiting for the test to decide its outcome."""

    def __init__(self, name, args):
        self.name = name
        self.args = args
        self.future = asyncio.get_running_loop().create_future()

    @property
    def cancelled(self):
        return self.future.cancelled()

    def resolve(self, value=None):
        if not self.future.done():
            self.future.set_result(value)

    def reject(self, exc):
        if not self.future.done():
            self.future.set_exception(exc)


class ScriptedApi:
    def __init__(self):
        self.calls = []

    async def _call(self, name, *args):
        call = PendingCall(name, args)
        self.calls.append(call)
        return await call.future

    def pending(self, name):
        return [c for c in self.calls if c.name == name and not c.future.done()]

    def last(self, name):
        return [c for c in self.calls if c.name == name][-1]

    async def login(self, email, password):
        return await self._call("login", email, password)

    async def register(self, name, email, password):
        return await self._call("register", name, email, password)

    async def forgot_password(self, email):
        return await self._call("forgot_password", email)

    async def fetch_user_profile(self):
        return await self._call("fetch_user_profile")

    async def fetch_dashboard(self):
        return await self._call("fetch_dashboard")

    async def fetch_signals(self):
        return await self._call("fetch_signals")

    async def fetch_trades(self):
        return await self._call("fetch_trades")

    async def fetch_accounts(self):
        return await self._call("fetch_accounts")

    async def fetch_analytics(self, time_range):
        return await self._call("fetch_analytics", time_range)

    async def update_settings(self, settings):
        return await self._call("update_settings", settings)

    async def submit_contact_form(self, form):
        return await self._call("submit_contact_form", form)

    async def send_chat_message(self, content):
        return await self._call("send_chat_message", content)

    async def counterparty_reply(self):
        return await self._call("counterparty_reply")


async def spin(times=5):
    """Let scheduled tasks run up to their next await."""
    for _ in range(times):
        await asyncio.sleep(0)


async def no_sleep(seconds):
    await asyncio.sleep(0)


# ---------------------------------------------------------------------------
# Sample records
# ---------------------------------------------------------------------------

ADMIN = User(id="1", email="admin@dashboard.com", name="Lilian Trader", role="Administrator")


def session(user=ADMIN, token="tok-1"):
    return Session(user=user, token=token)


def accounts():
    return (
        Account(id="acc-1", name="Main", broker="Quotex", balance=1000.0, equity=1000.0,
                status="connected"),
        Account(id="acc-2", name="Demo", broker="Quotex", balance=500.0, equity=480.0,
                status="connected", is_default=True),
        Account(id="acc-3", name="Spare", broker="Pocket Option", balance=0.0, equity=0.0,
                status="disconnected"),
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store():
    return Store()


@pytest.fixture
def api():
    return ScriptedApi()


@pytest.fixture
def coordinator(store, api):
    coord = register_sagas(EffectCoordinator(store), api)
    coord.start()
    yield coord
    coord.stop()

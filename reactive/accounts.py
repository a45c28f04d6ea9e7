"""
AccountsViewModel — the accounts page state on top of an optimistic overlay.

Connect, disconnect, sync, add and delete are local speculative changes;
the canonical accounts list only ever changes through a fetch.
"""

import asyncio
import itertools
import logging
import time
from dataclasses import replace
from datetime import datetime, timezone

from reaktiv import Signal, Computed

from reactive.overlay import OptimisticOverlay
from reactive.selectors import account_totals
from store.events import fetch_accounts_request
from store.models import Account

log = logging.getLogger(__name__)

CONNECT_DELAY = 2.0
SYNC_DELAY = 1.5

NEW_ACCOUNT_TEMPLATE = Account(
    id="",
    name="New Account",
    broker="Quotex",
    balance=10000,
    equity=10000,
    status="disconnected",
    account_type="demo",
    currency="USD",
)


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


class AccountsViewModel:
    """
    Accounts as the UI shows them: canonical slice data merged with local edits.

    Args:
        store: the Store holding the ``accounts`` slice.
        delay_scale: multiplier on the simulated connect/sync delays.
        sleep: coroutine function used for those delays.
        clock: zero-arg callable returning an ISO timestamp.
    """

    def __init__(self, store, delay_scale=1.0, sleep=asyncio.sleep, clock=_now_iso):
        self.store = store
        self.overlay = OptimisticOverlay()
        self.delay_scale = delay_scale
        self._sleep = sleep
        self._clock = clock
        self._local_ids = itertools.count(1)
        self.connecting = Signal(None)

        accounts_signal = store.signal("accounts")
        self.accounts = self.overlay.bind(lambda: accounts_signal().data)
        self.totals = Computed(lambda: account_totals(self.accounts()))

    @property
    def show_skeleton(self) -> bool:
        accounts = self.store.select("accounts")
        return accounts.loading and not accounts.data

    def refresh(self):
        """Request a fresh canonical list. Local edits are kept."""
        return self.store.dispatch(fetch_accounts_request())

    async def _wait(self, seconds):
        delay = seconds * self.delay_scale
        if delay > 0:
            await self._sleep(delay)

    async def connect(self, account_id) -> None:
        self.connecting.set(account_id)
        try:
            await self._wait(CONNECT_DELAY)
            self.overlay.apply_modification(
                account_id, {"status": "connected", "last_sync": self._clock()},
            )
        finally:
            if self.connecting() == account_id:
                self.connecting.set(None)
        log.info("account %s connected", account_id)

    def disconnect(self, account_id) -> None:
        self.overlay.apply_modification(account_id, {"status": "disconnected"})

    async def sync(self, account_id) -> None:
        await self._wait(SYNC_DELAY)
        self.overlay.apply_modification(account_id, {"last_sync": self._clock()})

    def add_account(self, **overrides) -> Account:
        now = self._clock()
        account_id = f"local-{int(time.time() * 1000)}-{next(self._local_ids)}"
        account = replace(NEW_ACCOUNT_TEMPLATE, id=account_id, last_sync=now, created_at=now, **overrides)
        self.overlay.add_local(account)
        return account

    def delete(self, account_id) -> None:
        self.overlay.remove(account_id)

    def discard_local_changes(self) -> None:
        self.overlay.clear()

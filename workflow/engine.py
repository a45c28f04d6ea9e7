"""
EffectCoordinator — turns request events into exactly one outcome event.

For every request category at most one workflow is live. A new Requested
event of the same category supersedes the previous workflow synchronously,
inside the dispatch that carried it: the old handle is marked CANCELLED and
its task cancelled, so whatever its collaborator call eventually returns
is never dispatched.

    coordinator = EffectCoordinator(store, delays={Category.SIGNALS: 0.6})
    coordinator.take_latest(Category.SIGNALS, fetch_signals, fallback="Failed to fetch signals")
    coordinator.start()
    store.dispatch(fetch_signals_request())      # must run inside the event loop

Errors raised by a saga are caught at the workflow boundary and turned
into a Failed event carrying a human-readable message.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from store.events import Category, Event, Requested, Succeeded, Failed
from store.state_machine import WorkflowLifecycle

log = logging.getLogger(__name__)

# saga(event, state) -> payload
Saga = Callable[[Requested, Any], Awaitable[Any]]

DEFAULT_FALLBACK_ERROR = "Request failed"


class WorkflowStatus(str, Enum):
    """Possible states of a workflow execution."""
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    CANCELLED = "CANCELLED"


@dataclass(eq=False)
class WorkflowHandle:
    """One workflow instance started for one Requested event."""
    workflow_id: str
    category: Category
    event: Requested
    status: WorkflowStatus = WorkflowStatus.RUNNING
    outcome: Optional[Event] = None
    task: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def running(self) -> bool:
        return self.status is WorkflowStatus.RUNNING

    def transition(self, status: WorkflowStatus) -> None:
        WorkflowLifecycle.validate_transition(self.status.value, status.value)
        self.status = status

    async def wait(self) -> WorkflowStatus:
        """Wait until the task has finished and return the final status."""
        if self.task is not None and not self.task.done():
            await asyncio.wait({self.task})
        return self.status


def describe_error(exc: BaseException, fallback: str = DEFAULT_FALLBACK_ERROR) -> str:
    """Human-readable message for a collaborator failure."""
    message = getattr(exc, "message", None)
    if not isinstance(message, str) or not message.strip():
        message = str(exc)
    return message.strip() or fallback


class EffectCoordinator:
    """
    Latest-wins workflow runner keyed by request category.

    Args:
        store: the Store to watch and dispatch outcomes into.
        delays: {Category: seconds} settling delay before the saga runs.
        sleep: coroutine function used for the settling delay.
    """

    def __init__(self, store, delays=None, sleep=asyncio.sleep):
        self.store = store
        self._delays: Dict[Category, float] = dict(delays or {})
        self._sleep = sleep
        self._sagas: Dict[Category, Saga] = {}
        self._fallbacks: Dict[Category, str] = {}
        self._running: Dict[Category, WorkflowHandle] = {}
        self._ids = itertools.count(1)
        self._unsubscribe = None

    # ── Registration / lifecycle ─────────────────────────────────────

    def take_latest(self, category: Category, saga: Saga, fallback: str = DEFAULT_FALLBACK_ERROR):
        """Run ``saga`` for every Requested event of ``category``, latest wins."""
        self._sagas[category] = saga
        self._fallbacks[category] = fallback

    def start(self) -> "EffectCoordinator":
        if self._unsubscribe is None:
            self._unsubscribe = self.store.on(Requested, self._on_request)
        return self

    def stop(self) -> None:
        """Stop watching the store and discard every in-flight workflow."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for handle in list(self._running.values()):
            self._supersede(handle)
        self._running.clear()

    async def drain(self) -> None:
        """Wait until no workflow is running (including ones started meanwhile)."""
        while self._running:
            tasks = {h.task for h in self._running.values() if h.task is not None}
            if not tasks:
                return
            await asyncio.wait(tasks)

    # ── Introspection ────────────────────────────────────────────────

    def handle(self, category: Category) -> Optional[WorkflowHandle]:
        """The live workflow for ``category``, if any."""
        return self._running.get(category)

    def is_running(self, category: Category) -> bool:
        return category in self._running

    @property
    def categories(self):
        return tuple(self._sagas)

    # ── Internals ────────────────────────────────────────────────────

    def _on_request(self, event: Requested, state) -> None:
        saga = self._sagas.get(event.category)
        if saga is None:
            return

        previous = self._running.pop(event.category, None)
        if previous is not None:
            self._supersede(previous)

        handle = WorkflowHandle(
            workflow_id=f"{event.category.value}#{next(self._ids)}",
            category=event.category,
            event=event,
        )
        self._running[event.category] = handle
        handle.task = asyncio.get_running_loop().create_task(
            self._run(handle, saga, state), name=handle.workflow_id,
        )
        log.debug("started %s", handle.workflow_id)

    def _supersede(self, handle: WorkflowHandle) -> None:
        if not handle.running:
            return
        handle.transition(WorkflowStatus.CANCELLED)
        if handle.task is not None:
            handle.task.cancel()
        log.debug("superseded %s", handle.workflow_id)

    async def _run(self, handle: WorkflowHandle, saga: Saga, state) -> None:
        category = handle.category
        try:
            delay = self._delays.get(category, 0)
            if delay > 0:
                await self._sleep(delay)
            payload = await saga(handle.event, state)
        except asyncio.CancelledError:
            if handle.running:
                handle.transition(WorkflowStatus.CANCELLED)
            raise
        except Exception as exc:
            message = describe_error(exc, self._fallbacks.get(category, DEFAULT_FALLBACK_ERROR))
            log.warning("%s failed: %s", handle.workflow_id, message)
            self._settle(handle, WorkflowStatus.ERROR, Failed(category, message))
        else:
            self._settle(handle, WorkflowStatus.SUCCESS, Succeeded(category, payload))

    def _settle(self, handle: WorkflowHandle, status: WorkflowStatus, outcome: Event) -> None:
        if not handle.running:
            log.debug("discarded outcome of %s", handle.workflow_id)
            return
        handle.transition(status)
        handle.outcome = outcome
        if self._running.get(handle.category) is handle:
            del self._running[handle.category]
        self.store.dispatch(outcome)

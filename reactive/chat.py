"""
ChatSession — retryable outbound messages with optimistic insert.

Each user message is a unit of work identified by a client-generated
``temp_id``. Its status follows MessageLifecycle:

    sending → sent       delivered; gets a final id, temp_id dropped
    sending → failed     content and temp_id kept for a retry
    failed  → sending    retry, in place, same temp_id

A retry is only accepted while the message is ``failed``, so one temp_id
never has two deliveries in flight. A delivered user message triggers one
counterparty reply, appended as a new message once the typing indicator
clears.
"""

import asyncio
import itertools
import logging
import secrets
import time
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Optional

from reaktiv import Signal

from store.models import ChatMessage
from store.state_machine import MessageLifecycle

log = logging.getLogger(__name__)

USER = "user"
COUNTERPARTY = "counterparty"


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def new_temp_id():
    return f"temp-{int(time.time() * 1000)}-{secrets.token_hex(5)}"


class ChatSession:
    """
    One conversation, owned by one chat view.

    Args:
        api: collaborator with ``send_chat_message(content) -> final_id``
            and ``counterparty_reply() -> text`` coroutines.
        initial: starting messages; defaults to the collaborator's welcome
            messages when it provides them.
        temp_ids: zero-arg callable allocating temporary ids.
        clock: zero-arg callable returning an ISO timestamp.
    """

    def __init__(self, api, initial=None, temp_ids=new_temp_id, clock=_now_iso):
        self.api = api
        self._temp_ids = temp_ids
        self._clock = clock
        self._reply_ids = itertools.count(1)
        self._tasks = set()
        self._pending_replies = 0
        if initial is None:
            initial = self._welcome_messages()
        self.messages = Signal(tuple(initial))
        self.typing = Signal(False)

    def _welcome_messages(self):
        welcome = getattr(self.api, "welcome_messages", None)
        if welcome is None:
            return ()
        now = datetime.now(timezone.utc)
        return tuple(
            ChatMessage(
                id=f"msg-welcome-{i}",
                content=content,
                sender=COUNTERPARTY,
                status="sent",
                timestamp=(now - timedelta(seconds=age)).isoformat(),
            )
            for i, (content, age) in enumerate(welcome(), start=1)
        )

    # ── Reads ────────────────────────────────────────────────────────

    def find(self, key) -> Optional[ChatMessage]:
        return next((m for m in self.messages() if m.key == key), None)

    @property
    def failed(self):
        return tuple(m for m in self.messages() if m.status == "failed")

    # ── Sending ──────────────────────────────────────────────────────

    def send(self, content, temp_id=None) -> Optional[asyncio.Task]:
        """
        Send ``content``, or retry the failed message ``temp_id``.

        Returns the delivery task, or None when nothing was sent (blank
        content, unknown temp_id, or a message that is not ``failed``).
        """
        if temp_id is None:
            content = (content or "").strip()
            if not content:
                return None
            temp_id = self._temp_ids()
            message = ChatMessage(
                id=temp_id,
                content=content,
                sender=USER,
                status="sending",
                timestamp=self._clock(),
                temp_id=temp_id,
            )
            self.messages.set(self.messages() + (message,))
        else:
            message = self.find(temp_id)
            if message is None:
                log.debug("retry of unknown message %s ignored", temp_id)
                return None
            if not MessageLifecycle.can_transition(message.status, "sending"):
                log.debug("retry of %s rejected while %s", temp_id, message.status)
                return None
            message = self._transition(temp_id, "sending")

        return self._spawn(self._deliver(temp_id, message.content))

    def retry(self, temp_id) -> Optional[asyncio.Task]:
        return self.send(None, temp_id)

    async def _deliver(self, temp_id, content):
        try:
            final_id = await self.api.send_chat_message(content)
        except Exception as exc:
            log.info("message %s failed: %s", temp_id, exc)
            self._transition(temp_id, "failed")
            return
        self._transition(temp_id, "sent", id=final_id, temp_id=None)
        await self._reply()

    async def _reply(self):
        self._pending_replies += 1
        self.typing.set(True)
        try:
            text = await self.api.counterparty_reply()
        finally:
            self._pending_replies -= 1
            self.typing.set(self._pending_replies > 0)
        reply = ChatMessage(
            id=f"msg-{int(time.time() * 1000)}-r{next(self._reply_ids)}",
            content=text,
            sender=COUNTERPARTY,
            status="sent",
            timestamp=self._clock(),
        )
        self.messages.set(self.messages() + (reply,))

    def _transition(self, key, status, **changes) -> ChatMessage:
        messages = self.messages()
        for i, message in enumerate(messages):
            if message.key == key:
                MessageLifecycle.validate_transition(message.status, status)
                updated = replace(message, status=status, **changes)
                self.messages.set(messages[:i] + (updated,) + messages[i + 1:])
                return updated
        raise KeyError(f"No message with key {key!r}")

    # ── Task ownership ───────────────────────────────────────────────

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every delivery and reply in flight."""
        while self._tasks:
            await asyncio.wait(set(self._tasks))

    def close(self) -> None:
        """Abandon in-flight work; called when the owning view goes away."""
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

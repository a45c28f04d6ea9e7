"""
Tests for the effect workflow layer.

Covers:
- latest-wins per category (superseded results are discarded)
- late results from a collaborator that ignores cancellation
- independence between categories
- error normalization and fallback messages
- request parameters reaching the collaborator unchanged
- stop() discarding in-flight work
- WorkflowHandle lifecycle and settle delays
"""

import asyncio

import pytest

from store.events import (
    Category, Requested, Succeeded,
    fetch_signals_request, fetch_trades_request, fetch_analytics_request,
    login_request, submit_contact_request,
)
from store.models import ContactForm
from store.state_machine import InvalidTransition
from server.mock_api import ApiError
from workflow.engine import EffectCoordinator, WorkflowHandle, WorkflowStatus, describe_error
from workflow.sagas import SAGAS, settle_delays, DEFAULT_SETTLE_DELAY, register_sagas
from conftest import spin, session


class UncancellableApi:
    """Signals backend whose calls still finish after the caller gives up on them."""

    def __init__(self):
        self.calls = []

    async def fetch_signals(self):
        future = asyncio.get_running_loop().create_future()
        self.calls.append(future)
        try:
            return await asyncio.shield(future)
        except asyncio.CancelledError:
            return await future


# ---------------------------------------------------------------------------
# Latest wins
# ---------------------------------------------------------------------------

class TestLatestWins:
    @pytest.mark.asyncio
    async def test_first_resolving_after_second_is_discarded(self, store, api, coordinator):
        outcomes = []
        store.on_category(Category.SIGNALS, lambda e, s: outcomes.append(e))

        store.dispatch(fetch_signals_request())
        await spin()
        store.dispatch(fetch_signals_request())
        await spin()

        first, second = [c for c in api.calls if c.name == "fetch_signals"]
        assert first.cancelled

        second.resolve(["B"])
        first.resolve(["A"])
        await coordinator.drain()

        assert store.select("signals").data == ("B",)
        succeeded = [e for e in outcomes if isinstance(e, Succeeded)]
        assert succeeded == [Succeeded(Category.SIGNALS, ["B"])]

    @pytest.mark.asyncio
    async def test_superseded_failure_is_discarded(self, store, api, coordinator):
        store.dispatch(fetch_signals_request())
        await spin()
        store.dispatch(fetch_signals_request())
        await spin()
        first, second = api.calls
        first.reject(ApiError("stale failure"))
        second.resolve(["fresh"])
        await coordinator.drain()
        assert store.select("signals").error is None
        assert store.select("signals").data == ("fresh",)

    @pytest.mark.asyncio
    async def test_late_result_of_superseded_call_is_discarded(self, store):
        api = UncancellableApi()
        coordinator = register_sagas(EffectCoordinator(store), api).start()
        outcomes = []
        store.on(Succeeded, lambda e, s: outcomes.append(e))

        store.dispatch(fetch_signals_request())
        await spin()
        first = coordinator.handle(Category.SIGNALS)
        store.dispatch(fetch_signals_request())
        await spin()

        old, new = api.calls
        new.set_result(["B"])
        await spin()
        old.set_result(["A"])
        await first.wait()
        await coordinator.drain()

        assert first.status is WorkflowStatus.CANCELLED
        assert first.outcome is None
        assert store.select("signals").data == ("B",)
        assert outcomes == [Succeeded(Category.SIGNALS, ["B"])]
        coordinator.stop()

    @pytest.mark.asyncio
    async def test_late_failure_of_superseded_call_is_discarded(self, store):
        api = UncancellableApi()
        coordinator = register_sagas(EffectCoordinator(store), api).start()

        store.dispatch(fetch_signals_request())
        await spin()
        first = coordinator.handle(Category.SIGNALS)
        store.dispatch(fetch_signals_request())
        await spin()

        old, new = api.calls
        new.set_result(["B"])
        await spin()
        old.set_exception(ApiError("stale failure"))
        await first.wait()
        await coordinator.drain()

        assert first.status is WorkflowStatus.CANCELLED
        assert store.select("signals").error is None
        assert store.select("signals").data == ("B",)
        coordinator.stop()

    @pytest.mark.asyncio
    async def test_supersede_is_synchronous(self, store, api, coordinator):
        store.dispatch(fetch_signals_request())
        first = coordinator.handle(Category.SIGNALS)
        store.dispatch(fetch_signals_request())
        assert first.status is WorkflowStatus.CANCELLED
        assert coordinator.handle(Category.SIGNALS) is not first
        coordinator.stop()
        await spin()

    @pytest.mark.asyncio
    async def test_categories_are_independent(self, store, api, coordinator):
        store.dispatch(fetch_signals_request())
        store.dispatch(fetch_trades_request())
        await spin()
        api.last("fetch_trades").resolve([])
        api.last("fetch_signals").resolve(["S"])
        await coordinator.drain()
        assert store.select("signals").data == ("S",)
        assert store.select("trades").status.value == "success"
        assert not any(c.cancelled for c in api.calls)

    @pytest.mark.asyncio
    async def test_loading_during_flight(self, store, api, coordinator):
        store.dispatch(fetch_signals_request())
        assert store.select("signals").loading
        assert coordinator.is_running(Category.SIGNALS)
        await spin()
        api.last("fetch_signals").resolve([])
        await coordinator.drain()
        assert not store.select("signals").loading
        assert not coordinator.is_running(Category.SIGNALS)


# ---------------------------------------------------------------------------
# Errors and parameters
# ---------------------------------------------------------------------------

class TestErrors:
    @pytest.mark.asyncio
    async def test_api_error_message_is_kept(self, store, api, coordinator):
        store.dispatch(login_request("admin@dashboard.com", "wrong"))
        await spin()
        api.last("login").reject(ApiError("Invalid email or password"))
        await coordinator.drain()
        assert store.select("auth").error == "Invalid email or password"
        assert not store.select("auth").is_authenticated

    @pytest.mark.asyncio
    async def test_blank_error_uses_category_fallback(self, store, api, coordinator):
        store.dispatch(fetch_signals_request())
        await spin()
        api.last("fetch_signals").reject(RuntimeError())
        await coordinator.drain()
        assert store.select("signals").error == SAGAS[Category.SIGNALS][1]

    def test_describe_error(self):
        assert describe_error(ApiError("Network error")) == "Network error"
        assert describe_error(ValueError("bad value")) == "bad value"
        assert describe_error(ValueError(""), "Oops") == "Oops"


class TestParams:
    @pytest.mark.asyncio
    async def test_login_params_reach_collaborator(self, store, api, coordinator):
        store.dispatch(login_request("admin@dashboard.com", "admin123"))
        await spin()
        call = api.last("login")
        assert call.args == ("admin@dashboard.com", "admin123")
        call.resolve(session())
        await coordinator.drain()
        assert store.select("auth").token == "tok-1"

    @pytest.mark.asyncio
    async def test_analytics_uses_slice_range_by_default(self, store, api, coordinator):
        store.dispatch(fetch_analytics_request("90d"))
        await spin()
        assert api.last("fetch_analytics").args == ("90d",)
        store.dispatch(fetch_analytics_request())
        await spin()
        assert api.last("fetch_analytics").args == ("90d",)
        api.last("fetch_analytics").resolve(None)
        await coordinator.drain()

    @pytest.mark.asyncio
    async def test_contact_form_passed_through(self, store, api, coordinator):
        form = ContactForm(name="A", email="a@b.co", subject="Hi", message="Hello")
        store.dispatch(submit_contact_request(form))
        await spin()
        call = api.last("submit_contact_form")
        assert call.args == (form,)
        call.resolve("TKT-1-ABCD")
        await coordinator.drain()
        assert store.select("contact").ticket_id == "TKT-1-ABCD"


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

class TestLifecycle:
    @pytest.mark.asyncio
    async def test_stop_discards_in_flight(self, store, api, coordinator):
        store.dispatch(fetch_signals_request())
        await spin()
        handle = coordinator.handle(Category.SIGNALS)
        coordinator.stop()
        assert handle.status is WorkflowStatus.CANCELLED
        api.last("fetch_signals").resolve(["late"])
        await spin()
        assert store.select("signals").data == ()
        store.dispatch(fetch_signals_request())
        assert not coordinator.is_running(Category.SIGNALS)

    @pytest.mark.asyncio
    async def test_unregistered_category_is_ignored(self, store):
        coordinator = EffectCoordinator(store).start()
        store.dispatch(Requested(Category.SIGNALS))
        assert coordinator.handle(Category.SIGNALS) is None
        coordinator.stop()

    @pytest.mark.asyncio
    async def test_settle_delay_runs_before_saga(self, store):
        slept = []
        called = []

        async def fake_sleep(seconds):
            slept.append(seconds)

        async def saga(event, state):
            called.append(slept[:])
            return ["x"]

        coordinator = EffectCoordinator(store, delays={Category.SIGNALS: 0.6}, sleep=fake_sleep)
        coordinator.take_latest(Category.SIGNALS, saga)
        coordinator.start()
        store.dispatch(fetch_signals_request())
        await coordinator.drain()
        assert called == [[0.6]]
        assert store.select("signals").data == ("x",)

    @pytest.mark.asyncio
    async def test_handle_records_outcome(self, store, api, coordinator):
        store.dispatch(fetch_signals_request())
        handle = coordinator.handle(Category.SIGNALS)
        assert handle.workflow_id.startswith("signals/fetch#")
        await spin()
        api.last("fetch_signals").resolve([])
        assert await handle.wait() is WorkflowStatus.SUCCESS
        assert handle.outcome == Succeeded(Category.SIGNALS, [])

    def test_handle_rejects_second_settlement(self):
        handle = WorkflowHandle("signals/fetch#1", Category.SIGNALS, Requested(Category.SIGNALS))
        handle.transition(WorkflowStatus.ERROR)
        with pytest.raises(InvalidTransition):
            handle.transition(WorkflowStatus.SUCCESS)

    def test_settle_delays(self):
        delays = settle_delays(0.5)
        assert delays[Category.LOGIN] == pytest.approx(0.4)
        assert delays[Category.SIGNALS] == pytest.approx(DEFAULT_SETTLE_DELAY * 0.5)
        assert set(delays) == set(SAGAS)
        assert all(v == 0 for v in settle_delays(0).values())

"""
Tests for the simulated backend and its record generators.
"""

import random

import pytest

from server.generators import (
    generate_signals, generate_trades, generate_accounts, build_dashboard, build_analytics, WIN_PAYOUT,
)
from server.mock_api import MockApi, ApiError, INJECTED_FAILURE_MESSAGE
from store.models import ContactForm, TradingSettings


@pytest.fixture
def api():
    return MockApi(latency_scale=0, rng=random.Random(7))


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class TestAuth:
    @pytest.mark.asyncio
    async def test_login_known_user(self, api):
        session = await api.login("admin@dashboard.com", "admin123")
        assert session.user.name == "Lilian Trader"
        assert session.token.startswith("mock-jwt-token-1-")

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, api):
        with pytest.raises(ApiError, match="Invalid email or password"):
            await api.login("admin@dashboard.com", "nope")

    @pytest.mark.asyncio
    async def test_register_then_login(self, api):
        await api.register("Ada", "ada@example.com", "secret1")
        session = await api.login("ada@example.com", "secret1")
        assert session.user.name == "Ada"

    @pytest.mark.asyncio
    async def test_register_duplicate(self, api):
        with pytest.raises(ApiError, match="already exists"):
            await api.register("Demo", "demo@dashboard.com", "demo123")

    @pytest.mark.asyncio
    async def test_register_short_password(self, api):
        with pytest.raises(ApiError, match="at least 6"):
            await api.register("Ada", "ada@example.com", "123")

    @pytest.mark.asyncio
    async def test_forgot_password(self, api):
        assert "sent" in await api.forgot_password("demo@dashboard.com")
        with pytest.raises(ApiError):
            await api.forgot_password("not-an-email")

    @pytest.mark.asyncio
    async def test_profile_requires_session(self, api):
        with pytest.raises(ApiError, match="User not found"):
            await api.fetch_user_profile()
        await api.login("demo@dashboard.com", "demo123")
        assert (await api.fetch_user_profile()).email == "demo@dashboard.com"


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------

class TestData:
    @pytest.mark.asyncio
    async def test_fetches(self, api):
        assert len(await api.fetch_signals()) == 50
        assert len(await api.fetch_trades()) == 100
        assert [a.id for a in await api.fetch_accounts()] == ["acc-1", "acc-2", "acc-3"]
        assert (await api.fetch_analytics("7d")).metrics["time_range"] == "7d"
        assert api.calls == ["fetch_signals", "fetch_trades", "fetch_accounts", "fetch_analytics"]

    @pytest.mark.asyncio
    async def test_update_settings_echoes(self, api):
        settings = TradingSettings(default_amount=25)
        assert await api.update_settings(settings) == settings

    @pytest.mark.asyncio
    async def test_contact_ticket_format(self, api):
        form = ContactForm(name="A", email="a@b.co", subject="Help", message="Please")
        ticket = await api.submit_contact_form(form)
        prefix, stamp, suffix = ticket.split("-")
        assert prefix == "TKT"
        assert stamp.isalnum() and stamp == stamp.upper()
        assert len(suffix) == 4

    @pytest.mark.asyncio
    async def test_injected_failure(self):
        api = MockApi(latency_scale=0, failure_rates={"fetch_signals": 1.0})
        with pytest.raises(ApiError, match=INJECTED_FAILURE_MESSAGE):
            await api.fetch_signals()

    @pytest.mark.asyncio
    async def test_latency_uses_injected_sleep(self):
        slept = []

        async def fake_sleep(seconds):
            slept.append(seconds)

        api = MockApi(latency_scale=0.5, sleep=fake_sleep)
        await api.fetch_accounts()
        assert slept == [pytest.approx(0.2)]


class TestGenerators:
    def test_signals_shape(self):
        signals = generate_signals(random.Random(1), 20)
        assert len({s.id for s in signals}) == 20
        assert all(65 <= s.confidence <= 97 for s in signals)
        assert all(s.profit is None for s in signals if s.status != "executed")

    def test_trade_pnl_follows_status(self):
        for trade in generate_trades(random.Random(2), 50):
            if trade.status == "won":
                assert trade.pnl == pytest.approx(round(trade.amount * WIN_PAYOUT, 2))
            elif trade.status == "lost":
                assert trade.pnl == -trade.amount
            else:
                assert trade.pnl == 0

    def test_accounts_fixture(self):
        accounts = generate_accounts()
        assert [a.is_default for a in accounts] == [False, True, False]
        assert accounts[2].status == "disconnected"

    def test_dashboard_bot_running(self):
        data = build_dashboard(random.Random(3))
        assert data.bot_stats.is_running
        assert data.stats["total_trades"] == len(data.recent_trades)

    def test_analytics_echoes_range(self):
        assert build_analytics("1y").metrics["time_range"] == "1y"

"""
Random record generators for the simulated backend.

Every generator takes a ``random.Random`` so tests can seed it.
"""

from datetime import datetime, timedelta, timezone

from store.models import (
    Signal, Trade, Account, BotStats, ActivityItem, DashboardData, AnalyticsData,
)


ASSETS = ["EURUSD", "GBPUSD", "USDJPY", "BTCUSD", "ETHUSD", "GOLD", "AUDUSD", "NZDUSD"]

SIGNAL_SOURCES = ["Premium Channel", "VIP Signals", "AI Bot", "Manual Analysis"]
SIGNAL_STATUSES = ["pending", "executed", "expired", "cancelled"]
TRADE_STATUSES = ["open", "won", "lost", "cancelled"]
DIRECTIONS = ["CALL", "PUT"]
TRADE_AMOUNTS = [5, 10, 25, 50, 100]

# Payout on a won binary-option trade
WIN_PAYOUT = 0.85

ACCOUNT_BALANCE = 2547.83


def _now():
    return datetime.now(timezone.utc)


def _iso(dt):
    return dt.isoformat()


def generate_signals(rng, count=50):
    now = _now()
    signals = []
    for i in range(count):
        status = rng.choice(SIGNAL_STATUSES)
        signals.append(Signal(
            id=f"sig-{1000 + i}",
            asset=rng.choice(ASSETS),
            direction=rng.choice(DIRECTIONS),
            confidence=rng.randint(65, 97),
            status=status,
            created_at=_iso(now - timedelta(milliseconds=rng.randint(0, 86_400_000))),
            entry_price=round(rng.uniform(1.0, 2000), 5),
            expiry_time=_iso(now + timedelta(seconds=rng.randint(60, 3600))),
            source=rng.choice(SIGNAL_SOURCES),
            profit=round(rng.uniform(-50, 100), 2) if status == "executed" else None,
        ))
    return signals


def generate_trades(rng, count=100):
    now = _now()
    trades = []
    for i in range(count):
        status = rng.choice(TRADE_STATUSES)
        amount = rng.choice(TRADE_AMOUNTS)
        entry_price = round(rng.uniform(1.0, 2000), 5)
        if status == "won":
            pnl = amount * WIN_PAYOUT
        elif status == "lost":
            pnl = -amount
        else:
            pnl = 0
        closed = status != "open"
        trades.append(Trade(
            id=f"trade-{2000 + i}",
            asset=rng.choice(ASSETS),
            direction=rng.choice(DIRECTIONS),
            amount=amount,
            entry_price=entry_price,
            status=status,
            pnl=pnl,
            created_at=_iso(now - timedelta(milliseconds=rng.randint(0, 604_800_000))),
            signal_id=f"sig-{1000 + rng.randint(0, 19)}" if rng.random() > 0.3 else None,
            exit_price=round(entry_price + rng.uniform(-0.001, 0.001), 5) if closed else None,
            expiry_time=_iso(now + timedelta(seconds=rng.randint(60, 3600))),
            closed_at=_iso(now - timedelta(milliseconds=rng.randint(0, 86_400_000))) if closed else None,
        ))
    return trades


def generate_accounts():
    return [
        Account(
            id="acc-1", name="Demo Practice", broker="Quotex",
            balance=50000.00, equity=52340.00, status="connected",
            account_type="demo", total_trades=156, win_rate=68.5,
            total_pnl=2340.00, profit_percent=4.68,
            last_sync="2024-01-15T10:28:00Z", created_at="2024-01-15T10:00:00Z",
        ),
        Account(
            id="acc-2", name="Primary Trading", broker="Quotex",
            balance=10432.50, equity=10890.25, status="connected", is_default=True,
            account_type="live", total_trades=89, win_rate=72.1,
            total_pnl=2890.25, profit_percent=38.5,
            last_sync="2024-01-15T10:30:00Z", created_at="2024-06-01T08:30:00Z",
        ),
        Account(
            id="acc-3", name="IQ Option Live", broker="IQ Option",
            balance=5200.00, equity=5420.00, status="disconnected",
            account_type="live", total_trades=45, win_rate=55.6,
            total_pnl=420.00, profit_percent=8.4,
            last_sync="2024-01-14T18:00:00Z", created_at="2024-09-10T14:00:00Z",
        ),
    ]


def generate_performance_data(rng, days=30):
    balance = 2000.0
    today = _now().date()
    data = []
    for i in range(days, -1, -1):
        profit = round(rng.uniform(0, 150), 2)
        loss = round(rng.uniform(0, 100), 2)
        balance += profit - loss
        data.append({
            "date": (today - timedelta(days=i)).isoformat(),
            "profit": profit,
            "loss": loss,
            "balance": round(balance, 2),
            "trades": rng.randint(5, 24),
        })
    return data


def generate_asset_performance(rng):
    return [
        {
            "asset": asset,
            "trades": rng.randint(10, 99),
            "win_rate": round(rng.uniform(50, 85), 1),
            "pnl": round(rng.uniform(-200, 500), 2),
            "volume": rng.randint(500, 4999),
        }
        for asset in ASSETS
    ]


def generate_activity_feed():
    now = _now()
    entries = [
        ("act-1", "trade", "Trade Won", "EURUSD CALL trade closed with +$8.50 profit", 300, "success"),
        ("act-2", "signal", "New Signal", "BTCUSD PUT signal received with 85% confidence", 600, "info"),
        ("act-3", "trade", "Trade Lost", "GBPUSD PUT trade closed with -$10.00 loss", 900, "error"),
        ("act-4", "system", "Bot Started", "Auto-trading bot started successfully", 1800, "success"),
        ("act-5", "account", "Balance Updated", "Account balance updated to $2,547.83", 3600, "info"),
        ("act-6", "signal", "Signal Executed", "GOLD CALL signal executed with $25 amount", 5400, "success"),
        ("act-7", "system", "Daily Limit Warning", "Approaching daily loss limit (80% used)", 7200, "warning"),
        ("act-8", "trade", "Trade Won", "USDJPY CALL trade closed with +$17.00 profit", 10800, "success"),
    ]
    return [
        ActivityItem(id=id_, type=type_, title=title, description=desc,
                     timestamp=_iso(now - timedelta(seconds=age)), status=status)
        for id_, type_, title, desc, age, status in entries
    ]


def build_dashboard(rng) -> DashboardData:
    """A full dashboard snapshot with stats derived from the generated records."""
    signals = generate_signals(rng, 10)
    trades = generate_trades(rng, 15)
    performance = generate_performance_data(rng)

    today = _now().date().isoformat()
    today_trades = [t for t in trades if t.created_at[:10] == today]
    won = [t for t in trades if t.status == "won"]
    total_pnl = sum(t.pnl for t in trades)
    today_pnl = round(sum(t.pnl for t in today_trades), 2)
    win_rate = round(len(won) / len(trades) * 100, 1) if trades else 0.0
    active_signals = sum(1 for s in signals if s.status == "pending")
    open_positions = sum(1 for t in trades if t.status == "open")

    cumulative = 0.0
    profit_history = []
    for point in performance:
        net = point["profit"] - point["loss"]
        cumulative += net
        profit_history.append({"date": point["date"], "profit": net, "cumulative": round(cumulative, 2)})

    stats = {
        "total_profit": round(total_pnl, 2),
        "profit_change": 12.5,
        "win_rate": win_rate,
        "win_rate_change": 2.3,
        "total_trades": len(trades),
        "trades_change": 8,
        "active_signals": active_signals,
        "account_balance": ACCOUNT_BALANCE,
        "balance_change": 5.2,
        "today_profit": today_pnl,
        "today_change": 15.3 if today_pnl >= 0 else -8.7,
        "open_positions": open_positions,
    }
    bot_stats = BotStats(
        total_balance=ACCOUNT_BALANCE,
        today_pnl=today_pnl,
        today_pnl_percent=round(today_pnl / ACCOUNT_BALANCE * 100, 2),
        total_trades=len(trades),
        today_trades=len(today_trades),
        win_rate=win_rate,
        active_signals=active_signals,
        open_positions=open_positions,
        max_drawdown=8.5,
        profit_factor=1.85,
        is_running=True,
    )
    return DashboardData(
        stats=stats,
        bot_stats=bot_stats,
        activity_feed=tuple(generate_activity_feed()),
        recent_signals=tuple(signals),
        recent_trades=tuple(trades),
        performance_data=tuple(performance),
        asset_performance=tuple(generate_asset_performance(rng)),
        profit_history=tuple(profit_history),
    )


def build_analytics(time_range) -> AnalyticsData:
    """Static analytics snapshot; the time range is echoed back in the metrics."""
    return AnalyticsData(
        metrics={
            "time_range": time_range,
            "total_profit": 2847.50,
            "total_profit_percent": 12.5,
            "win_rate": 68.5,
            "win_rate_change": 3.2,
            "total_trades": 145,
            "profit_factor": 1.85,
            "avg_trade_profit": 19.64,
            "max_drawdown": 8.2,
            "sharpe_ratio": 1.45,
            "best_trade": 245.00,
            "worst_trade": -89.00,
            "avg_holding_time": "4m 32s",
        },
        daily_pnl=tuple(
            {"date": day, "profit": profit, "loss": loss}
            for day, profit, loss in [
                ("Mon", 120, -45), ("Tue", 85, -30), ("Wed", 200, -80), ("Thu", 150, -25),
                ("Fri", 180, -60), ("Sat", 90, -20), ("Sun", 45, -15),
            ]
        ),
        cumulative_pnl=tuple(
            {"date": f"Week {i + 1}", "pnl": pnl, "balance": balance}
            for i, (pnl, balance) in enumerate([(250, 10250), (450, 10700), (320, 11020), (580, 11600)])
        ),
        asset_performance=tuple(
            {"asset": asset, "trades": trades, "win_rate": win_rate, "profit": profit}
            for asset, trades, win_rate, profit in [
                ("EUR/USD", 45, 72, 580), ("GBP/USD", 32, 68, 320), ("USD/JPY", 28, 75, 410),
                ("AUD/USD", 22, 64, 180), ("USD/CAD", 18, 78, 290),
            ]
        ),
        direction_data=({"name": "CALL", "value": 58}, {"name": "PUT", "value": 42}),
        result_distribution=({"name": "Wins", "value": 68}, {"name": "Losses", "value": 32}),
    )

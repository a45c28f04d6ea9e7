"""
Domain records exchanged with the data-access collaborator.

The state core never reinterprets these payloads: reducers store them,
selectors and overlays read them. Each is a frozen dataclass so a slice
holding one can be shared safely between store snapshots.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class User:
    """The signed-in session user."""
    id: str
    email: str
    name: str
    role: str = "Trader"
    avatar: Optional[str] = None


@dataclass(frozen=True)
class Session:
    """Payload of a successful login or registration."""
    user: User
    token: str


@dataclass(frozen=True)
class Signal:
    """A trading signal emitted by a signal source."""
    id: str
    asset: str
    direction: str          # "CALL" or "PUT"
    confidence: int         # 0..100
    status: str             # pending / executed / expired / cancelled
    created_at: str
    entry_price: float = 0.0
    expiry_time: Optional[str] = None
    source: str = ""
    profit: Optional[float] = None


@dataclass(frozen=True)
class Trade:
    """A trade placed by the bot, optionally from a signal."""
    id: str
    asset: str
    direction: str
    amount: float
    entry_price: float
    status: str             # open / won / lost / cancelled
    pnl: float
    created_at: str
    signal_id: Optional[str] = None
    exit_price: Optional[float] = None
    expiry_time: Optional[str] = None
    closed_at: Optional[str] = None


@dataclass(frozen=True)
class Account:
    """A broker account the bot can trade on."""
    id: str
    name: str
    broker: str
    balance: float
    equity: float
    status: str             # connected / disconnected / connecting / error
    is_default: bool = False
    account_type: str = "demo"
    currency: str = "USD"
    total_trades: int = 0
    win_rate: float = 0.0
    total_pnl: float = 0.0
    profit_percent: float = 0.0
    last_sync: Optional[str] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class BotStats:
    total_balance: float = 0.0
    today_pnl: float = 0.0
    today_pnl_percent: float = 0.0
    total_trades: int = 0
    today_trades: int = 0
    win_rate: float = 0.0
    active_signals: int = 0
    open_positions: int = 0
    max_drawdown: float = 0.0
    profit_factor: float = 0.0
    is_running: bool = False


@dataclass(frozen=True)
class ActivityItem:
    id: str
    type: str               # trade / signal / system / account
    title: str
    description: str
    timestamp: str
    status: Optional[str] = None


@dataclass(frozen=True)
class DashboardData:
    """Dashboard snapshot. Chart series are kept as plain dicts."""
    stats: dict
    bot_stats: BotStats
    activity_feed: Tuple[ActivityItem, ...] = ()
    recent_signals: Tuple[Signal, ...] = ()
    recent_trades: Tuple[Trade, ...] = ()
    performance_data: Tuple[dict, ...] = ()
    asset_performance: Tuple[dict, ...] = ()
    profit_history: Tuple[dict, ...] = ()


@dataclass(frozen=True)
class AnalyticsData:
    metrics: dict
    daily_pnl: Tuple[dict, ...] = ()
    cumulative_pnl: Tuple[dict, ...] = ()
    asset_performance: Tuple[dict, ...] = ()
    direction_data: Tuple[dict, ...] = ()
    result_distribution: Tuple[dict, ...] = ()


@dataclass(frozen=True)
class TradingSettings:
    default_amount: float = 10
    max_daily_loss: float = 100
    max_daily_trades: int = 50
    allowed_assets: Tuple[str, ...] = ("EURUSD", "GBPUSD", "USDJPY", "BTCUSD", "ETHUSD")
    min_confidence: int = 70
    auto_trading: bool = True
    martingale: bool = False
    martingale_multiplier: float = 2
    max_martingale_steps: int = 3
    trading_hours_start: str = "09:00"
    trading_hours_end: str = "17:00"


@dataclass(frozen=True)
class ContactForm:
    name: str
    email: str
    subject: str
    message: str


@dataclass(frozen=True)
class ChatMessage:
    """
    One message in a support conversation.

    While unconfirmed, a user message carries ``temp_id`` and uses it as its
    ``id`` too; once sent it gets a final id and ``temp_id`` is dropped.
    """
    id: str
    content: str
    sender: str             # "user" or "counterparty"
    status: str             # sending / sent / failed
    timestamp: str = ""
    temp_id: Optional[str] = None

    @property
    def key(self) -> str:
        """Identity used to find this unit of work for a retry."""
        return self.temp_id or self.id


# ── Plain-dict conversion (persisted session user) ──────────────────────────

def to_dict(obj) -> dict:
    """Convert a model dataclass to a JSON-friendly dict."""
    if not dataclasses.is_dataclass(obj) or isinstance(obj, type):
        raise TypeError(f"{type(obj).__name__} is not a dataclass instance")
    return dataclasses.asdict(obj)


def from_dict(cls, data: dict):
    """Build a model from a dict, ignoring keys the dataclass doesn't define."""
    field_names = {f.name for f in dataclasses.fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in field_names})

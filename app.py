"""
Trading Bot Dashboard — scripted session
========================================
Drives one DashboardClient through a typical session against the mock
collaborator and logs what the store sees:

- login, then every dashboard read at once
- a superseded signals refresh (latest request wins)
- optimistic account edits surviving a canonical refresh
- a chat exchange with automatic retry of failed messages

Run:  python3 app.py --latency-scale 0.1
      python3 app.py --storage session.json --log-level DEBUG
"""

import argparse
import asyncio
import logging
from dataclasses import replace

from config import AppConfig, configure_logging
from client import DashboardClient, ValidationError
from store.events import Failed, Succeeded

log = logging.getLogger("app")


# ── 1. Command line ─────────────────────────────────────────────────────────────

def parse_args(argv=None, base=None) -> AppConfig:
    base = base or AppConfig.from_env()
    parser = argparse.ArgumentParser(description="Run a scripted trading-bot dashboard session.")
    parser.add_argument("--storage", default=base.storage_path,
                        help="JSON file used as the session cache (default: in-memory)")
    parser.add_argument("--latency-scale", type=float, default=base.latency_scale,
                        help="multiplier on every simulated delay (0 disables them)")
    parser.add_argument("--chat-failure-rate", type=float, default=base.chat_failure_rate,
                        help="probability that a chat message fails to send")
    parser.add_argument("--dark", action="store_true", default=base.prefers_dark,
                        help="start in the dark theme when none is stored")
    parser.add_argument("--log-level", default=base.log_level,
                        help="logging level (DEBUG, INFO, WARNING, ...)")
    args = parser.parse_args(argv)
    return replace(
        base,
        storage_path=args.storage,
        latency_scale=args.latency_scale,
        chat_failure_rate=args.chat_failure_rate,
        prefers_dark=args.dark,
        log_level=args.log_level.upper(),
    )


# ── 2. Store observer ───────────────────────────────────────────────────────────

def log_outcomes(event, state):
    if isinstance(event, Succeeded):
        log.info("%s succeeded", event.category.value)
    elif isinstance(event, Failed):
        log.warning("%s failed: %s", event.category.value, event.error)


# ── 3. Session script ───────────────────────────────────────────────────────────

async def run_session(config: AppConfig, email="admin@dashboard.com", password="admin123"):
    async with DashboardClient(config=config) as dash:
        dash.store.subscribe(log_outcomes)
        sel = dash.selectors

        if not sel.auth().is_authenticated:
            try:
                dash.login(email, password)
            except ValidationError as exc:
                log.error("login form rejected: %s", exc.message)
                return dash.state
            await dash.settle()
            if not sel.auth().is_authenticated:
                log.error("login failed: %s", sel.auth().error)
                return dash.state
        log.info("signed in as %s", sel.auth().user.name)

        dash.refresh_all()
        dash.refresh_signals()  # supersedes the first signals request
        await dash.settle()
        log.info(
            "signals=%d pending=%d trades=%d open=%d pnl=%.2f",
            len(sel.signals()), len(sel.pending_signals()),
            len(sel.trades()), len(sel.open_trades()), sel.trades_pnl(),
        )

        view = dash.accounts_view()
        disconnected = [a for a in view.accounts() if a.status == "disconnected"]
        if disconnected:
            await view.connect(disconnected[0].id)
        view.add_account(name="Scratch Account")
        view.refresh()
        await dash.settle()
        log.info("accounts after refresh: %s", [(a.id, a.status) for a in view.accounts()])
        log.info("totals: %s", view.totals())

        chat = dash.open_chat()
        for text in ("Is the bot running?", "What is my win rate?"):
            chat.send(text)
        await chat.drain()
        for _ in range(3):
            if not chat.failed:
                break
            for message in chat.failed:
                chat.retry(message.temp_id)
            await chat.drain()
        for message in chat.messages():
            log.info("[%s/%s] %s", message.sender, message.status, message.content)
        chat.close()

        dash.toggle_theme()
        log.info("theme is now %s", sel.theme_mode())
        return dash.state


def main(argv=None):
    config = parse_args(argv)
    configure_logging(config.log_level)
    asyncio.run(run_session(config))


if __name__ == "__main__":
    main()

"""
Store — the single mutable state container of a dashboard session.

Each slice lives in its own reaktiv Signal, so selectors built as
Computed values only recompute when a slice they read was replaced.
All writes go through ``dispatch``: reducers produce the next state,
changed slices are written in one batch, then listeners are notified.

    store = Store()
    unsubscribe = store.subscribe(lambda event, state: print(event))
    store.dispatch(fetch_signals_request())
    store.select("signals").loading   # True
"""

import logging
from types import MappingProxyType

from reaktiv import Signal, batch

from store.events import Event
from store.reducers import initial_state, root_reducer
from store.subscriptions import EventBus

log = logging.getLogger(__name__)


class Store:
    """
    Keyed collection of slice states with subscribe/read/dispatch.

    Args:
        initial: optional {slice_name: slice} overrides for the initial
            state, e.g. a session restored from storage.
    """

    def __init__(self, initial=None):
        self._state = initial_state(initial)
        self._signals = {name: Signal(value) for name, value in self._state.items()}
        self._bus = EventBus()

    # ── Reads ────────────────────────────────────────────────────────

    def get_state(self):
        """Read-only snapshot of every slice. Later dispatches never alter it."""
        return MappingProxyType(self._state)

    def select(self, name):
        """Current state of one slice."""
        return self._state[name]

    def signal(self, name) -> Signal:
        """The reaktiv Signal carrying a slice. Read it, never set it."""
        return self._signals[name]

    @property
    def slice_names(self):
        return tuple(self._state)

    # ── Writes ───────────────────────────────────────────────────────

    def dispatch(self, event):
        """Reduce ``event`` into the state, then notify listeners."""
        if not isinstance(event, Event):
            raise TypeError(f"Cannot dispatch {type(event).__name__}; expected an Event")

        previous = self._state
        next_state = root_reducer(previous, event)
        if next_state is not previous:
            self._state = next_state
            with batch():
                for name, value in next_state.items():
                    if value is not previous[name]:
                        self._signals[name].set(value)
        log.debug("dispatched %s", event)

        self._bus.emit(event, self.get_state())
        return event

    # ── Subscriptions ────────────────────────────────────────────────

    def subscribe(self, listener):
        """Call listener(event, state) after every dispatch. Returns an unsubscribe callable."""
        return self._bus.on_all(listener)

    def on(self, event_type, listener):
        """Call listener(event, state) after dispatches of one event class."""
        return self._bus.on(event_type, listener)

    def on_category(self, category, listener):
        """Call listener(event, state) after lifecycle events of one category."""
        return self._bus.on_category(category, listener)

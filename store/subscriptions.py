"""
In-process event fan-out for the Store.

Listeners are called synchronously, in registration order, after the
reducers have produced the new state. Subscribe by event class, by
request category, or catch-all.
"""

import logging

log = logging.getLogger(__name__)


class EventBus:
    """
    Pub/sub for dispatched events.

    Everything runs on the event loop thread, so no locking is needed.
    A listener that raises is logged and skipped; the rest still run.
    """

    def __init__(self):
        self._type_listeners = {}       # event class → [callback]
        self._category_listeners = {}   # Category → [callback]
        self._all_listeners = []        # [callback]

    def on(self, event_type, callback):
        """Subscribe to every event of the given class (or subclass)."""
        self._type_listeners.setdefault(event_type, []).append(callback)
        return lambda: self.off(event_type, callback)

    def on_category(self, category, callback):
        """Subscribe to lifecycle events of one request category."""
        self._category_listeners.setdefault(category, []).append(callback)
        return lambda: self.off_category(category, callback)

    def on_all(self, callback):
        """Subscribe to every event."""
        self._all_listeners.append(callback)
        return lambda: self.off_all(callback)

    def off(self, event_type, callback):
        listeners = self._type_listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)

    def off_category(self, category, callback):
        listeners = self._category_listeners.get(category, [])
        if callback in listeners:
            listeners.remove(callback)

    def off_all(self, callback):
        if callback in self._all_listeners:
            self._all_listeners.remove(callback)

    def listeners_for(self, event):
        listeners = list(self._all_listeners)
        for event_type, callbacks in self._type_listeners.items():
            if isinstance(event, event_type):
                listeners += callbacks
        category = getattr(event, "category", None)
        if category is not None:
            listeners += self._category_listeners.get(category, [])
        return listeners

    def emit(self, event, *args):
        """Call every matching listener with (event, *args)."""
        for cb in self.listeners_for(event):
            try:
                cb(event, *args)
            except Exception:
                log.exception("Listener %r failed on %s", cb, type(event).__name__)

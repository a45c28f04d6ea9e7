"""
View-side state layered over the Store.

Selectors project the store into views (memoized with reaktiv Computed),
OptimisticOverlay blends unconfirmed local edits into canonical lists, and
ChatSession tracks retryable outbound messages.
"""

from reactive.overlay import OptimisticOverlay, OverlayState, merge_view
from reactive.accounts import AccountsViewModel
from reactive.chat import ChatSession
from reactive.selectors import StoreSelectors

"""
Optimistic overlay — local, unconfirmed edits layered over canonical data.

An overlay holds three independent mutation sources:

    modifications   id → partial patch, merged over the canonical entity
    added           locally created entities, appended after canonical ones
    deleted         ids hidden from the canonical list

The merged view is recomputed on every read and never touches the
canonical list:

    [patch(e) for e in canonical if e.id not in deleted] + added

Deletion wins over modification. Locally added entities are removed from
``added`` directly and never enter ``deleted``.

The overlay is not cleared when canonical data refreshes; a view that
wants to drop edits the server now reflects calls ``reconcile``.
"""

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Tuple

from reaktiv import Signal, Computed, batch


def entity_id(entity):
    """The ``id`` of a dataclass record or a mapping."""
    if isinstance(entity, Mapping):
        return entity["id"]
    return entity.id


def apply_patch(entity, patch):
    """Return a copy of ``entity`` with ``patch`` merged over it."""
    if not patch:
        return entity
    if isinstance(entity, Mapping):
        return {**entity, **patch}
    return dataclasses.replace(entity, **patch)


def _reflects(entity, patch) -> bool:
    """True if every patched field already has the patched value."""
    if isinstance(entity, Mapping):
        return all(k in entity and entity[k] == v for k, v in patch.items())
    return all(hasattr(entity, k) and getattr(entity, k) == v for k, v in patch.items())


@dataclass(frozen=True)
class OverlayState:
    modifications: Mapping = field(default_factory=lambda: MappingProxyType({}))
    added: Tuple[Any, ...] = ()
    deleted: frozenset = frozenset()

    @property
    def empty(self) -> bool:
        return not (self.modifications or self.added or self.deleted)


def merge_view(canonical, state: OverlayState) -> list:
    """Merged list of canonical entities and local edits. Pure."""
    merged = []
    for entity in canonical:
        eid = entity_id(entity)
        if eid in state.deleted:
            continue
        merged.append(apply_patch(entity, state.modifications.get(eid)))
    merged.extend(state.added)
    return merged


class OptimisticOverlay:
    """
    Per-view overlay state.

    Each of the three mutation sources is a reaktiv Signal, so a view bound
    with ``bind`` recomputes only when the overlay or its source changes.

    Usage:
        overlay = OptimisticOverlay()
        overlay.apply_modification("acc-3", {"status": "connected"})
        overlay.remove("acc-1")
        accounts = overlay.view(store.select("accounts").data)
    """

    def __init__(self):
        self._modifications = Signal(MappingProxyType({}))
        self._added = Signal(())
        self._deleted = Signal(frozenset())

    # ── Mutations ────────────────────────────────────────────────────

    def apply_modification(self, eid, patch) -> None:
        """Merge ``patch`` into the pending modification of ``eid``."""
        current = self._modifications()
        merged = {**current.get(eid, {}), **patch}
        if current.get(eid) == merged:
            return
        self._modifications.set(MappingProxyType({**current, eid: MappingProxyType(merged)}))

    def add_local(self, entity) -> None:
        """Append a locally created entity. Its id must not collide with canonical ids."""
        self._added.set(self._added() + (entity,))

    def remove(self, eid) -> None:
        """Drop a local entity, or hide a canonical one."""
        added = self._added()
        if any(entity_id(e) == eid for e in added):
            self._added.set(tuple(e for e in added if entity_id(e) != eid))
            return
        deleted = self._deleted()
        if eid not in deleted:
            self._deleted.set(deleted | {eid})

    def clear(self) -> None:
        with batch():
            self._modifications.set(MappingProxyType({}))
            self._added.set(())
            self._deleted.set(frozenset())

    def reconcile(self, canonical) -> int:
        """
        Drop modifications the canonical data already reflects.

        Returns the number of modifications removed. Never called
        implicitly.
        """
        current = self._modifications()
        by_id = {entity_id(e): e for e in canonical}
        kept = {
            eid: patch for eid, patch in current.items()
            if eid not in by_id or not _reflects(by_id[eid], patch)
        }
        removed = len(current) - len(kept)
        if removed:
            self._modifications.set(MappingProxyType(kept))
        return removed

    # ── Reads ────────────────────────────────────────────────────────

    @property
    def state(self) -> OverlayState:
        return OverlayState(
            modifications=self._modifications(),
            added=self._added(),
            deleted=self._deleted(),
        )

    def is_local(self, eid) -> bool:
        return any(entity_id(e) == eid for e in self._added())

    def view(self, canonical) -> list:
        """Merged view over ``canonical``."""
        return merge_view(canonical, self.state)

    def bind(self, source) -> Computed:
        """
        Memoized merged view over ``source`` (a zero-arg callable such as a
        reaktiv Signal or Computed yielding the canonical list).
        """
        return Computed(lambda: tuple(merge_view(source(), self.state)))

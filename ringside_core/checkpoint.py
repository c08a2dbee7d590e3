"""Checkpoints (immutable state snapshots) and checkpoint diffing.

The diff answers "which printed rings are stale since the checkpoint":
- added / removed competitors contribute every ring they sit in
- a modified competitor contributes its old and new ring for each event
  whose tracked fields or effective ring changed
Output depends only on the two snapshots.
"""
from __future__ import annotations

import logging
import uuid
from copy import deepcopy
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Iterable, Sequence

from .rings import build_pool_name, ring_key_for
from .types import (
    EVENT_TYPES,
    Checkpoint,
    Competitor,
    EventType,
    RingKey,
    TournamentState,
)

logger = logging.getLogger(__name__)


TRACKED_FIELDS: dict[EventType, tuple[str, ...]] = {
    "forms": ("category_id", "pool", "participating", "rank_order"),
    "sparring": ("category_id", "pool", "sub_ring", "participating", "rank_order"),
}


@dataclass(frozen=True)
class CompetitorChange:
    competitor_id: str
    competitor_name: str
    field: str  # "<event>.<field>", e.g. "sparring.pool"
    old_value: Any
    new_value: Any


@dataclass(frozen=True)
class CheckpointDiff:
    added: tuple[Competitor, ...]
    removed: tuple[Competitor, ...]
    modified: tuple[CompetitorChange, ...]
    rings_affected: frozenset[RingKey]

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.modified)


def create_checkpoint(
    state: TournamentState,
    name: str | None = None,
    *,
    now: datetime | None = None,
) -> Checkpoint:
    """Deep-copy the full state into a new named checkpoint."""
    timestamp = now or datetime.now(timezone.utc)
    checkpoint_name = (name or "").strip() or f"Checkpoint {timestamp:%Y-%m-%d %H:%M:%S}"
    checkpoint = Checkpoint(
        id=f"checkpoint-{uuid.uuid4().hex}",
        name=checkpoint_name,
        timestamp=timestamp,
        state=deepcopy(state),
    )
    logger.info(f"Created checkpoint {checkpoint.name!r} ({len(state.competitors)} competitors)")
    return checkpoint


def rename_checkpoint(checkpoint: Checkpoint, new_name: str) -> Checkpoint:
    stripped = (new_name or "").strip()
    if not stripped:
        raise ValueError("checkpoint name cannot be empty")
    return replace(checkpoint, name=stripped)


def find_checkpoint(checkpoints: Iterable[Checkpoint], checkpoint_id: str) -> Checkpoint | None:
    for checkpoint in checkpoints:
        if checkpoint.id == checkpoint_id:
            return checkpoint
    return None


def delete_checkpoint(checkpoints: Sequence[Checkpoint], checkpoint_id: str) -> list[Checkpoint]:
    return [checkpoint for checkpoint in checkpoints if checkpoint.id != checkpoint_id]


def restore_checkpoint(checkpoint: Checkpoint) -> TournamentState:
    """Fresh copy of the checkpoint's state; the checkpoint itself stays untouched."""
    return deepcopy(checkpoint.state)


def _ring_key(
    competitor: Competitor,
    event_type: EventType,
    category_ids: set[str],
) -> RingKey | None:
    key = ring_key_for(competitor, event_type)
    if key is None or key.category_id not in category_ids:
        return None
    return key


def _all_ring_keys(competitor: Competitor, category_ids: set[str]) -> set[RingKey]:
    keys = (_ring_key(competitor, event_type, category_ids) for event_type in EVENT_TYPES)
    return {key for key in keys if key is not None}


def _entry_changes(
    previous: Competitor,
    current: Competitor,
    event_type: EventType,
) -> list[CompetitorChange]:
    old_entry = previous.entry(event_type)
    new_entry = current.entry(event_type)
    changes: list[CompetitorChange] = []
    for field_name in TRACKED_FIELDS[event_type]:
        old_value = getattr(old_entry, field_name)
        new_value = getattr(new_entry, field_name)
        if old_value != new_value:
            changes.append(
                CompetitorChange(
                    competitor_id=current.id,
                    competitor_name=current.full_name,
                    field=f"{event_type}.{field_name}",
                    old_value=old_value,
                    new_value=new_value,
                )
            )
    return changes


def diff_states(old: TournamentState, new: TournamentState) -> CheckpointDiff:
    """Compare two snapshots: added, removed, field changes and stale rings."""
    old_by_id = {competitor.id: competitor for competitor in old.competitors}
    new_by_id = {competitor.id: competitor for competitor in new.competitors}
    old_category_ids = {category.id for category in old.categories}
    new_category_ids = {category.id for category in new.categories}

    added = tuple(c for c in new.competitors if c.id not in old_by_id)
    removed = tuple(c for c in old.competitors if c.id not in new_by_id)

    rings: set[RingKey] = set()
    for competitor in added:
        rings.update(_all_ring_keys(competitor, new_category_ids))
    for competitor in removed:
        rings.update(_all_ring_keys(competitor, old_category_ids))

    modified: list[CompetitorChange] = []
    for current in new.competitors:
        previous = old_by_id.get(current.id)
        if previous is None:
            continue
        for event_type in EVENT_TYPES:
            changes = _entry_changes(previous, current, event_type)
            modified.extend(changes)
            old_key = _ring_key(previous, event_type, old_category_ids)
            new_key = _ring_key(current, event_type, new_category_ids)
            # Aliased events can move without any of their own fields changing.
            if changes or old_key != new_key:
                for key in (old_key, new_key):
                    if key is not None:
                        rings.add(key)

    diff = CheckpointDiff(
        added=added,
        removed=removed,
        modified=tuple(modified),
        rings_affected=frozenset(rings),
    )
    logger.debug(
        f"Diff: +{len(added)} -{len(removed)} ~{len(modified)} fields, {len(rings)} rings affected"
    )
    return diff


def diff_checkpoint(checkpoint: Checkpoint, current: TournamentState) -> CheckpointDiff:
    return diff_states(checkpoint.state, current)


def affected_ring_names(
    diff: CheckpointDiff,
    old: TournamentState,
    new: TournamentState,
) -> list[str]:
    """Display names of the stale rings, e.g. for a reprint list."""
    categories = {category.id: category for category in old.categories}
    categories.update({category.id: category for category in new.categories})
    names: list[str] = []
    for key in sorted(diff.rings_affected):
        category = categories.get(key.category_id)
        if category is None:
            continue
        name = f"{build_pool_name(category.division, category.name, key.pool)} ({key.event_type})"
        if name not in names:
            names.append(name)
    return names

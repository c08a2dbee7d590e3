"""Ring projection: derive competition rings from competitor records.

Competitor records are the single source of truth. Rings are recomputed on
every read; nothing here stores ring membership.

Key concepts:
- Effective assignment: an event whose division is ``SameAsOther`` borrows
  the other event's category id and pool.
- Ring key: ``(event_type, category_id, pool)``.
- Stale references: a group pointing at a deleted category is dropped.
- Unmapped rings (no venue) are still emitted, flagged unassigned.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .types import (
    EVENT_TYPES,
    Category,
    CompetitionRing,
    Competitor,
    EventType,
    PoolMapping,
    RingKey,
    SameAsOther,
    other_event,
)

logger = logging.getLogger(__name__)

_POOL_NUMBER_RE = re.compile(r"^P(\d+)$")


@dataclass(frozen=True)
class EffectiveAssignment:
    category_id: Optional[str]
    pool: Optional[str]

    @property
    def is_placed(self) -> bool:
        return bool(self.category_id and self.pool)


_UNPLACED = EffectiveAssignment(category_id=None, pool=None)


def pool_id(number: int) -> str:
    return f"P{int(number)}"


def parse_pool_number(pool: str | None) -> int | None:
    """Extract the pool number from "P<n>"; None for anything else."""
    if not pool:
        return None
    match = _POOL_NUMBER_RE.match(pool.strip())
    if not match:
        return None
    return int(match.group(1))


def format_pool(pool: str | None) -> str:
    """Display form of a pool id ("P2" -> "Pool 2"); other shapes pass through."""
    if not pool:
        return ""
    return _POOL_NUMBER_RE.sub(r"Pool \1", pool)


def build_pool_name(division: str, category_name: str, pool: str) -> str:
    """Globally unique display name, e.g. "Beginner - Mixed 8-10 Pool 1"."""
    return f"{division} - {category_name} {format_pool(pool)}"


def resolve_division(competitor: Competitor, event_type: EventType) -> str | None:
    """Resolve the division name for an event, following the alias once."""
    division = competitor.entry(event_type).division
    if isinstance(division, SameAsOther):
        division = competitor.entry(other_event(event_type)).division
        if isinstance(division, SameAsOther):
            return None
    return division.name if division is not None else None


def resolve_assignment(competitor: Competitor, event_type: EventType) -> EffectiveAssignment:
    """Effective (category id, pool) for one event of a competitor.

    Only the event's own participation flag gates the lookup; an aliased
    event borrows the other event's category/pool regardless of whether
    the other event itself is marked participating.
    """
    entry = competitor.entry(event_type)
    if not entry.participating:
        return _UNPLACED
    if isinstance(entry.division, SameAsOther):
        source = competitor.entry(other_event(event_type))
        if isinstance(source.division, SameAsOther):
            logger.warning(
                f"Competitor {competitor.id} aliases both events to each other; ignoring {event_type}"
            )
            return _UNPLACED
        return EffectiveAssignment(category_id=source.category_id, pool=source.pool)
    return EffectiveAssignment(category_id=entry.category_id, pool=entry.pool)


def ring_key_for(competitor: Competitor, event_type: EventType) -> RingKey | None:
    assignment = resolve_assignment(competitor, event_type)
    if not assignment.is_placed:
        return None
    return RingKey(
        event_type=event_type,
        category_id=assignment.category_id,
        pool=assignment.pool,
    )


def ring_keys_for(competitor: Competitor) -> list[RingKey]:
    keys: list[RingKey] = []
    for event_type in EVENT_TYPES:
        key = ring_key_for(competitor, event_type)
        if key is not None:
            keys.append(key)
    return keys


def _rank_sort_key(indexed: tuple[int, Competitor], event_type: EventType) -> tuple[int, float, int]:
    idx, competitor = indexed
    rank = competitor.entry(event_type).rank_order
    # Unranked members go last, keeping input order among themselves.
    return (0 if rank is not None else 1, float(rank) if rank is not None else 0.0, idx)


def competitors_in_ring(competitors: Sequence[Competitor], key: RingKey) -> list[Competitor]:
    """Members of one ring, in rank order."""
    members = [
        (idx, competitor)
        for idx, competitor in enumerate(competitors)
        if ring_key_for(competitor, key.event_type) == key
    ]
    members.sort(key=lambda item: _rank_sort_key(item, key.event_type))
    return [competitor for _, competitor in members]


def _find_mapping(mappings: Iterable[PoolMapping], category_id: str, pool: str) -> PoolMapping | None:
    for mapping in mappings:
        if mapping.category_id == category_id and mapping.pool == pool:
            return mapping
    return None


def compute_competition_rings(
    competitors: Sequence[Competitor],
    categories: Sequence[Category],
    pool_mappings: Sequence[PoolMapping] = (),
) -> list[CompetitionRing]:
    """Project competitor records into the set of rings that currently exist.

    Args:
      competitors: all competitor records.
      categories: all category definitions; rings of unknown categories are dropped.
      pool_mappings: category pool -> venue ring mappings.

    Returns:
      Rings in first-seen order, members listed by rank order.
    """
    groups: dict[RingKey, list[tuple[int, Competitor]]] = {}
    for idx, competitor in enumerate(competitors):
        for key in ring_keys_for(competitor):
            groups.setdefault(key, []).append((idx, competitor))

    categories_by_id = {category.id: category for category in categories}
    rings: list[CompetitionRing] = []
    seen_names: dict[str, RingKey] = {}
    for key, members in groups.items():
        category = categories_by_id.get(key.category_id)
        if category is None:
            logger.warning(f"Category not found for ID {key.category_id}; dropping ring {key.ring_id}")
            continue
        members.sort(key=lambda item: _rank_sort_key(item, key.event_type))
        mapping = _find_mapping(pool_mappings, key.category_id, key.pool)
        name = build_pool_name(category.division, category.name, key.pool)

        previous = seen_names.get(f"{key.event_type}:{name}")
        if previous is not None and previous.category_id != key.category_id:
            logger.warning(
                f"Duplicate ring name {name!r} for categories {previous.category_id} and {key.category_id}"
            )
        seen_names[f"{key.event_type}:{name}"] = key

        rings.append(
            CompetitionRing(
                key=key,
                division=category.division,
                category_name=category.name,
                name=name,
                competitor_ids=tuple(competitor.id for _, competitor in members),
                venue_ring_id=mapping.venue_ring_id if mapping else None,
            )
        )
    logger.debug(f"Projected {len(rings)} rings from {len(competitors)} competitors")
    return rings

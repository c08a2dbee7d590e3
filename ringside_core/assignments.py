"""Single-competitor pool moves: move, withdraw, reinstate, copy.

All pool movement goes through move_competitor_to_pool so rank numbering
stays consistent:
- the moved competitor takes rank 1 in its new pool, existing members shift to 2..
- the ring it leaves is renumbered 1..N in rank order, unranked members last
- unknown competitor ids are a no-op
"""
from __future__ import annotations

import logging
from typing import Literal, Sequence, Union

from .rings import competitors_in_ring, ring_key_for
from .types import (
    Category,
    Competitor,
    DivisionChoice,
    EventType,
    ExplicitDivision,
    RingKey,
    SameAsOther,
)

logger = logging.getLogger(__name__)


def _find(competitors: Sequence[Competitor], competitor_id: str) -> Competitor | None:
    for competitor in competitors:
        if competitor.id == competitor_id:
            return competitor
    return None


def _ring_members(
    competitors: Sequence[Competitor],
    key: RingKey | None,
    exclude_id: str,
) -> list[Competitor]:
    if key is None:
        return []
    return [member for member in competitors_in_ring(competitors, key) if member.id != exclude_id]


def _replace_entry(
    competitors: Sequence[Competitor],
    competitor_id: str,
    event_type: EventType,
    **changes,
) -> list[Competitor]:
    return [
        competitor.with_entry(event_type, **changes) if competitor.id == competitor_id else competitor
        for competitor in competitors
    ]


def move_competitor_to_pool(
    competitors: Sequence[Competitor],
    competitor_id: str,
    event_type: EventType,
    category_id: str | None,
    pool: str | None,
) -> list[Competitor]:
    """Move one competitor to (category_id, pool); (None, None) clears the assignment."""
    competitor = _find(competitors, competitor_id)
    if competitor is None:
        return list(competitors)

    entry = competitor.entry(event_type)
    old_category_id, old_pool = entry.category_id, entry.pool
    if old_category_id == category_id and old_pool == pool:
        return list(competitors)

    updates: dict[str, dict] = {
        competitor_id: {
            "category_id": category_id,
            "pool": pool,
            "rank_order": 1.0 if pool else None,
        }
    }

    leaving = _ring_members(competitors, ring_key_for(competitor, event_type), competitor_id)
    for position, member in enumerate(leaving):
        updates.setdefault(member.id, {})["rank_order"] = float(position + 1)

    if category_id and pool:
        joining = _ring_members(competitors, RingKey(event_type, category_id, pool), competitor_id)
        for position, member in enumerate(joining):
            updates.setdefault(member.id, {})["rank_order"] = float(position + 2)

    logger.debug(
        f"Moved {competitor_id} ({event_type}) from {old_category_id}/{old_pool} to {category_id}/{pool}"
    )
    return [
        c.with_entry(event_type, **updates[c.id]) if c.id in updates else c
        for c in competitors
    ]


def withdraw_competitor(
    competitors: Sequence[Competitor],
    competitor_id: str,
    event_type: Union[EventType, Literal["both"]],
) -> list[Competitor]:
    """Withdraw from one or both events, remembering the last assignment."""
    result = list(competitors)
    event_types: tuple[EventType, ...] = (
        ("forms", "sparring") if event_type == "both" else (event_type,)
    )
    for current_type in event_types:
        competitor = _find(result, competitor_id)
        if competitor is None:
            return result
        entry = competitor.entry(current_type)
        result = _replace_entry(
            result,
            competitor_id,
            current_type,
            last_category_id=entry.category_id,
            last_pool=entry.pool,
        )
        result = move_competitor_to_pool(result, competitor_id, current_type, None, None)
        changes: dict = {"division": None, "participating": False}
        if current_type == "sparring":
            changes["sub_ring"] = ""
        result = _replace_entry(result, competitor_id, current_type, **changes)
    return result


def _as_division(division: Union[str, DivisionChoice]) -> DivisionChoice:
    if isinstance(division, str):
        return ExplicitDivision(division)
    return division


def reinstate_competitor(
    competitors: Sequence[Competitor],
    competitor_id: str,
    event_type: EventType,
    division: Union[str, DivisionChoice],
    categories: Sequence[Category],
) -> list[Competitor]:
    """Re-enter an event, restoring the remembered pool when its category still exists."""
    competitor = _find(competitors, competitor_id)
    if competitor is None:
        return list(competitors)

    entry = competitor.entry(event_type)
    category_ids = {category.id for category in categories}
    result = list(competitors)
    if entry.last_category_id in category_ids and entry.last_pool:
        result = move_competitor_to_pool(
            result, competitor_id, event_type, entry.last_category_id, entry.last_pool
        )
    else:
        logger.debug(f"No restorable assignment for {competitor_id} ({event_type})")
    return _replace_entry(
        result,
        competitor_id,
        event_type,
        division=_as_division(division),
        participating=True,
    )


def copy_sparring_from_forms(
    competitors: Sequence[Competitor],
    competitor_id: str,
) -> list[Competitor]:
    """One-time copy of the forms assignment and division onto sparring."""
    competitor = _find(competitors, competitor_id)
    if competitor is None or not competitor.forms.is_placed:
        return list(competitors)

    result = move_competitor_to_pool(
        competitors,
        competitor_id,
        "sparring",
        competitor.forms.category_id,
        competitor.forms.pool,
    )
    changes: dict = {"participating": competitor.forms.participating}
    # Copying an alias back onto sparring would make the two events point at each other.
    if not isinstance(competitor.forms.division, SameAsOther):
        changes["division"] = competitor.forms.division
    return _replace_entry(result, competitor_id, "sparring", **changes)

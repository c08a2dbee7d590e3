"""Fair competitor order within one ring.

Forms (interleaved):
- Competitors are grouped by (school, branch); each group is ordered by a
  content hash of (first name, last name, age), never by arrival order.
- Diversity seed: the first positions go to distinct schools, largest
  affiliations first.
- Urgency fill: every later position goes to the group with the highest
  remaining/positions_left, skipping the previous pick's school when
  possible, then its exact school+branch, then nobody.

Sparring (seeded):
- Ascending total height; when every member carries a sub-ring tag the
  ring is split into 'a' then 'b' with contiguous numbering.
- Mixed tags fall back to one sequence (or stay unordered in strict mode).

Ranks are written as 1..N floats; callers may later nudge with fractional
values (see rank_between) without renumbering the whole ring.
"""
from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Literal, Sequence

from .config import DEFAULT_CONFIG, EngineConfig
from .rings import competitors_in_ring
from .types import Competitor, EventType, RingKey

logger = logging.getLogger(__name__)


SubRingState = Literal["none", "all", "mixed"]


@dataclass(frozen=True)
class SubRingStatus:
    status: SubRingState
    count_a: int
    count_b: int
    count_empty: int

    @property
    def is_split(self) -> bool:
        return self.status == "all"

    @property
    def needs_attention(self) -> bool:
        return self.status == "mixed"


@dataclass
class _AffiliationGroup:
    school: str
    branch: str
    members: list[Competitor]
    cursor: int = 0

    @property
    def remaining(self) -> int:
        return len(self.members) - self.cursor

    def take(self) -> Competitor:
        competitor = self.members[self.cursor]
        self.cursor += 1
        return competitor


def _competitor_hash(competitor: Competitor) -> str:
    payload = {
        "first": competitor.first_name.strip().lower(),
        "last": competitor.last_name.strip().lower(),
        "age": int(competitor.age),
    }
    raw = json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()


def _stable_sort_key(competitor: Competitor) -> tuple[str, str]:
    return (_competitor_hash(competitor), competitor.id)


def _affiliation(competitor: Competitor) -> tuple[str, str]:
    return (
        (competitor.school or "").strip().lower(),
        (competitor.branch or "").strip().lower(),
    )


def _build_groups(members: Sequence[Competitor]) -> list[_AffiliationGroup]:
    grouped: dict[tuple[str, str], list[Competitor]] = {}
    for competitor in members:
        grouped.setdefault(_affiliation(competitor), []).append(competitor)
    groups = [
        _AffiliationGroup(school=school, branch=branch, members=sorted(items, key=_stable_sort_key))
        for (school, branch), items in grouped.items()
    ]
    # Largest affiliations first; names keep equal sizes deterministic.
    groups.sort(key=lambda g: (-len(g.members), g.school, g.branch))
    return groups


def _pick_group(
    groups: Sequence[_AffiliationGroup],
    previous: Competitor | None,
    positions_left: int,
) -> _AffiliationGroup:
    candidates = [group for group in groups if group.remaining > 0]
    if previous is not None:
        prev_school, prev_branch = _affiliation(previous)
        other_school = [g for g in candidates if g.school != prev_school]
        other_branch = [
            g for g in candidates if not (g.school == prev_school and g.branch == prev_branch)
        ]
        for narrowed in (other_school, other_branch):
            if narrowed:
                candidates = narrowed
                break
    order = {id(group): idx for idx, group in enumerate(groups)}
    return min(
        candidates,
        key=lambda g: (
            -(g.remaining / positions_left),
            -g.remaining,
            order[id(g)],
        ),
    )


def interleave_by_school(
    members: Sequence[Competitor],
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[Competitor]:
    """Forms order: spread affiliations so schools rarely compete back-to-back."""
    groups = _build_groups(members)
    total = len(members)
    sequence: list[Competitor] = []

    seed_size = min(config.diversity_seed_size, total)
    used_schools: set[str] = set()
    for group in groups:
        if len(sequence) >= seed_size:
            break
        if group.school in used_schools or group.remaining == 0:
            continue
        sequence.append(group.take())
        used_schools.add(group.school)

    while len(sequence) < total:
        previous = sequence[-1] if sequence else None
        group = _pick_group(groups, previous, total - len(sequence))
        sequence.append(group.take())
    return sequence


def sub_ring_status(members: Sequence[Competitor]) -> SubRingStatus:
    """Summarize sparring sub-ring tags for one ring ('none' | 'all' | 'mixed')."""
    count_a = sum(1 for c in members if c.sparring.sub_ring == "a")
    count_b = sum(1 for c in members if c.sparring.sub_ring == "b")
    count_empty = len(members) - count_a - count_b
    if count_a + count_b == 0:
        status: SubRingState = "none"
    elif count_empty == 0:
        status = "all"
    else:
        status = "mixed"
    return SubRingStatus(status=status, count_a=count_a, count_b=count_b, count_empty=count_empty)


def _height_sort_key(competitor: Competitor) -> tuple[int, str, str]:
    return (competitor.total_height_inches, *_stable_sort_key(competitor))


def seed_by_height(
    members: Sequence[Competitor],
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[Competitor] | None:
    """Sparring order by height, split into 'a' then 'b' when fully tagged.

    Returns None when strict sub-ring mode refuses a mixed-tag ring.
    """
    status = sub_ring_status(members)
    if status.is_split:
        group_a = sorted((c for c in members if c.sparring.sub_ring == "a"), key=_height_sort_key)
        group_b = sorted((c for c in members if c.sparring.sub_ring == "b"), key=_height_sort_key)
        return group_a + group_b
    if status.needs_attention:
        if config.strict_sub_rings:
            logger.warning(
                f"Mixed sub-ring tags (a={status.count_a}, b={status.count_b}, "
                f"empty={status.count_empty}); leaving ring unordered"
            )
            return None
        logger.warning(
            f"Mixed sub-ring tags (a={status.count_a}, b={status.count_b}, "
            f"empty={status.count_empty}); ordering whole ring by height"
        )
    return sorted(members, key=_height_sort_key)


def _assign_ranks(ordered: Sequence[Competitor], event_type: EventType) -> list[Competitor]:
    return [
        competitor.with_entry(event_type, rank_order=float(position + 1))
        for position, competitor in enumerate(ordered)
    ]


def order_pool_members(
    members: Sequence[Competitor],
    event_type: EventType,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[Competitor]:
    """Rank one pool's members for the given event; returns ranked copies."""
    if not members:
        return []
    if event_type == "forms":
        return _assign_ranks(interleave_by_school(members, config), event_type)
    ordered = seed_by_height(members, config)
    if ordered is None:
        return list(members)
    return _assign_ranks(ordered, event_type)


def merge_competitors(
    competitors: Sequence[Competitor],
    updated: Sequence[Competitor],
) -> list[Competitor]:
    """Replace records by id, keeping the caller's list order."""
    by_id = {competitor.id: competitor for competitor in updated}
    return [by_id.get(competitor.id, competitor) for competitor in competitors]


def order_ring(
    competitors: Sequence[Competitor],
    key: RingKey,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[Competitor]:
    """Recompute rank order for one ring; other competitors are untouched."""
    members = competitors_in_ring(competitors, key)
    if not members:
        return list(competitors)
    ranked = order_pool_members(members, key.event_type, config)
    logger.debug(f"Ordered {len(ranked)} competitors in {key.ring_id}")
    return merge_competitors(competitors, ranked)


def rank_between(lower: float | None, upper: float | None) -> float:
    """Sparse rank that sorts between two neighbours (either may be absent)."""
    if lower is None and upper is None:
        return 1.0
    if lower is None:
        return float(upper) / 2
    if upper is None:
        return float(lower) + 1
    if lower >= upper:
        raise ValueError(f"lower rank {lower} must be below upper rank {upper}")
    return (float(lower) + float(upper)) / 2


def set_rank_order(
    competitors: Sequence[Competitor],
    competitor_id: str,
    event_type: EventType,
    rank_order: float,
) -> list[Competitor]:
    """Manual nudge: set one rank without renumbering the rest of the ring."""
    return [
        competitor.with_entry(event_type, rank_order=float(rank_order))
        if competitor.id == competitor_id
        else competitor
        for competitor in competitors
    ]

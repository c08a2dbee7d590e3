"""Pool distribution for a category (pure, returns new competitor lists)."""
from __future__ import annotations

import logging
from typing import Sequence

from .config import DEFAULT_CONFIG, EngineConfig
from .ordering import merge_competitors, order_pool_members
from .rings import parse_pool_number, pool_id
from .types import Category, Competitor, ExplicitDivision

logger = logging.getLogger(__name__)


def _places_itself(competitor: Competitor, category: Category) -> bool:
    # Aliased events follow the other event's pool and are never placed here.
    entry = competitor.entry(category.event_type)
    return entry.participating and isinstance(entry.division, ExplicitDivision)


def _target_pool(
    competitor: Competitor,
    index: int,
    category: Category,
    num_pools: int,
) -> int:
    # Sparring reuses the forms pool number so one person stays in one physical pool.
    if category.event_type == "sparring":
        forms_pool = parse_pool_number(competitor.forms.pool)
        if forms_pool is not None and 1 <= forms_pool <= num_pools:
            return forms_pool
    return (index % num_pools) + 1


def distribute_category(
    category: Category,
    competitors: Sequence[Competitor],
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[Competitor]:
    """Place a category's competitors into pools and order each pool.

    Aliased entries follow the other event's pool and non-participating
    entries stay unplaced; neither is touched here.

    This is a full re-derivation: running it again (e.g. after num_pools
    changes) reassigns all members, not just the unplaced ones.

    Args:
      category: category with num_pools and its competitor ids.
      competitors: full competitor list (not mutated).
      config: ordering options.

    Returns:
      New competitor list; only the category's event entries change.
    """
    member_ids = set(category.competitor_ids)
    members = [
        competitor
        for competitor in competitors
        if competitor.id in member_ids and _places_itself(competitor, category)
    ]
    if not members:
        return list(competitors)

    num_pools = max(1, int(category.num_pools or 1))
    # sorted() is stable, so equal ages keep their input order.
    by_age = sorted(members, key=lambda competitor: int(competitor.age))

    pools: dict[int, list[Competitor]] = {number: [] for number in range(1, num_pools + 1)}
    for index, competitor in enumerate(by_age):
        number = _target_pool(competitor, index, category, num_pools)
        placed = competitor.with_entry(
            category.event_type,
            category_id=category.id,
            pool=pool_id(number),
        )
        pools[number].append(placed)

    updated: list[Competitor] = []
    for number, pool_members in pools.items():
        if not pool_members:
            continue
        updated.extend(order_pool_members(pool_members, category.event_type, config))
        logger.debug(
            f"Category {category.id} {pool_id(number)}: {len(pool_members)} competitors"
        )
    return merge_competitors(competitors, updated)


def distribute_all_categories(
    categories: Sequence[Category],
    competitors: Sequence[Competitor],
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[Competitor]:
    """Distribute and order every category, forms before sparring."""
    current = list(competitors)
    # Forms pools must exist before sparring can reuse their numbers.
    ordered = sorted(categories, key=lambda category: category.event_type != "forms")
    for category in ordered:
        current = distribute_category(category, current, config)
    return current

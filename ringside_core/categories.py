"""Category matching and generation from competitor attributes."""
from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from typing import Callable, Sequence

from .config import DEFAULT_CONFIG, EngineConfig
from .rings import resolve_division
from .types import Category, Competitor, EventType, ExplicitDivision, GenderFilter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryDefinition:
    division: str
    gender: GenderFilter
    min_age: int
    max_age: int
    num_pools: int = 1


def calculate_pools_needed(competitor_count: int) -> int:
    if competitor_count <= 10:
        return 1
    if competitor_count <= 20:
        return 2
    if competitor_count <= 30:
        return 3
    return math.ceil(competitor_count / 10)


def category_name(
    gender: str,
    min_age: int,
    max_age: int,
    config: EngineConfig = DEFAULT_CONFIG,
) -> str:
    upper = f"{config.adult_age}+" if max_age >= config.open_age_max else str(max_age)
    return f"{gender.strip().capitalize()} {min_age}-{upper}"


def matches_definition(
    competitor: Competitor,
    definition: CategoryDefinition,
    event_type: EventType,
) -> bool:
    entry = competitor.entry(event_type)
    if not entry.participating:
        return False
    # An aliased event rides along in the other event's category.
    if not isinstance(entry.division, ExplicitDivision) or entry.division.name != definition.division:
        return False
    if not (definition.min_age <= int(competitor.age) <= definition.max_age):
        return False
    gender = definition.gender.lower()
    return gender == "mixed" or (competitor.gender or "").strip().lower() == gender


def assign_categories(
    competitors: Sequence[Competitor],
    definitions: Sequence[CategoryDefinition],
    event_type: EventType = "forms",
    *,
    id_factory: Callable[[], str] | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[Category]:
    """Build one Category per definition that matches at least one competitor."""
    make_id = id_factory or (lambda: str(uuid.uuid4()))
    categories: list[Category] = []
    for definition in definitions:
        matching = [c for c in competitors if matches_definition(c, definition, event_type)]
        if not matching:
            continue
        categories.append(
            Category(
                id=make_id(),
                name=category_name(definition.gender, definition.min_age, definition.max_age, config),
                division=definition.division,
                event_type=event_type,
                gender=definition.gender.lower(),
                min_age=definition.min_age,
                max_age=definition.max_age,
                num_pools=config.clamp_pools(definition.num_pools),
                competitor_ids=tuple(c.id for c in matching),
            )
        )
    logger.debug(f"Built {len(categories)} {event_type} categories from {len(definitions)} definitions")
    return categories


def apply_categories(
    competitors: Sequence[Competitor],
    categories: Sequence[Category],
) -> list[Competitor]:
    """Write each category's id onto its members for the category's event.

    A competitor moving to a different category loses its old pool and rank.
    """
    result = list(competitors)
    for category in categories:
        member_ids = set(category.competitor_ids)
        result = [
            c.with_entry(category.event_type, category_id=category.id, pool=None, rank_order=None)
            if c.id in member_ids and c.entry(category.event_type).category_id != category.id
            else c
            for c in result
        ]
    return result


def auto_generate_definitions(
    competitors: Sequence[Competitor],
    division: str | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[CategoryDefinition]:
    """Suggest definitions per division and gender, split into youth and adults."""
    if division is not None:
        divisions = [division]
    else:
        divisions = []
        for competitor in competitors:
            for event_type in ("forms", "sparring"):
                name = resolve_division(competitor, event_type)
                if name and name not in divisions:
                    divisions.append(name)

    definitions: list[CategoryDefinition] = []
    for div in divisions:
        in_division = [
            c
            for c in competitors
            if div in (resolve_division(c, "forms"), resolve_division(c, "sparring"))
        ]
        for gender in ("male", "female"):
            group = [c for c in in_division if (c.gender or "").strip().lower() == gender]
            if not group:
                continue
            youth = [c for c in group if c.age < config.adult_age]
            adults = [c for c in group if c.age >= config.adult_age]
            if youth and adults:
                definitions.append(
                    CategoryDefinition(
                        division=div,
                        gender=gender,
                        min_age=min(c.age for c in youth),
                        max_age=config.adult_age - 1,
                        num_pools=calculate_pools_needed(len(youth)),
                    )
                )
                definitions.append(
                    CategoryDefinition(
                        division=div,
                        gender=gender,
                        min_age=config.adult_age,
                        max_age=max(c.age for c in adults),
                        num_pools=calculate_pools_needed(len(adults)),
                    )
                )
            else:
                definitions.append(
                    CategoryDefinition(
                        division=div,
                        gender=gender,
                        min_age=min(c.age for c in group),
                        max_age=max(c.age for c in group),
                        num_pools=calculate_pools_needed(len(group)),
                    )
                )
    return definitions

"""Type definitions for competitors, categories, rings and checkpoints."""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Literal, Optional, Union


EventType = Literal["forms", "sparring"]
SubRingTag = Literal["", "a", "b"]
GenderFilter = Literal["male", "female", "mixed"]

EVENT_TYPES: tuple[EventType, ...] = ("forms", "sparring")
SUB_RING_TAGS: tuple[str, ...] = ("", "a", "b")

_POOL_RE = re.compile(r"^P(\d+)$")


def other_event(event_type: EventType) -> EventType:
    return "sparring" if event_type == "forms" else "forms"


@dataclass(frozen=True)
class ExplicitDivision:
    """A concrete division name such as "Black Belt"."""

    name: str


@dataclass(frozen=True)
class SameAsOther:
    """Division alias: reuse the other event's category and pool."""


SAME_AS_OTHER = SameAsOther()

# None means "not participating".
DivisionChoice = Union[ExplicitDivision, SameAsOther, None]


@dataclass(frozen=True)
class EventEntry:
    """Per-event assignment carried by a competitor."""

    participating: bool = False
    division: DivisionChoice = None
    category_id: Optional[str] = None
    pool: Optional[str] = None  # "P1", "P2", ...
    rank_order: Optional[float] = None  # sparse; 1.5 sits between 1 and 2
    sub_ring: SubRingTag = ""  # sparring only
    # Remembered assignment for reinstatement after a withdrawal.
    last_category_id: Optional[str] = None
    last_pool: Optional[str] = None

    def __post_init__(self) -> None:
        if self.pool is not None:
            if not self.category_id:
                raise ValueError(f"pool {self.pool!r} requires a category id")
            if not _POOL_RE.match(self.pool):
                raise ValueError(f"pool must look like 'P<n>', got {self.pool!r}")
        if self.sub_ring not in SUB_RING_TAGS:
            raise ValueError(f"sub_ring must be one of {SUB_RING_TAGS}, got {self.sub_ring!r}")

    @property
    def is_placed(self) -> bool:
        return bool(self.category_id and self.pool)


@dataclass(frozen=True)
class Competitor:
    id: str
    first_name: str
    last_name: str
    age: int
    gender: str
    height_feet: int
    height_inches: int
    school: str
    branch: Optional[str] = None
    forms: EventEntry = field(default_factory=EventEntry)
    sparring: EventEntry = field(default_factory=EventEntry)

    @property
    def total_height_inches(self) -> int:
        return int(self.height_feet) * 12 + int(self.height_inches)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def entry(self, event_type: EventType) -> EventEntry:
        return self.forms if event_type == "forms" else self.sparring

    def with_entry(self, event_type: EventType, **changes) -> "Competitor":
        """Return a copy with the given event entry fields replaced."""
        updated = replace(self.entry(event_type), **changes)
        if event_type == "forms":
            return replace(self, forms=updated)
        return replace(self, sparring=updated)


@dataclass(frozen=True)
class Category:
    id: str
    name: str  # e.g. "Mixed 8-10"
    division: str
    event_type: EventType
    gender: GenderFilter
    min_age: int
    max_age: int  # 999 means "and up"
    num_pools: int = 1
    competitor_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class PoolMapping:
    """Maps one category pool onto a physical venue ring (e.g. "PR4b")."""

    category_id: str
    pool: str
    venue_ring_id: str
    division: str = ""


@dataclass(frozen=True, order=True)
class RingKey:
    event_type: EventType
    category_id: str
    pool: str

    @property
    def ring_id(self) -> str:
        return f"{self.event_type}-{self.category_id}-{self.pool}"


@dataclass(frozen=True)
class CompetitionRing:
    """Derived view of one (event, category, pool); never stored."""

    key: RingKey
    division: str
    category_name: str
    name: str
    competitor_ids: tuple[str, ...]
    venue_ring_id: Optional[str] = None

    @property
    def id(self) -> str:
        return self.key.ring_id

    @property
    def event_type(self) -> EventType:
        return self.key.event_type

    @property
    def is_unassigned(self) -> bool:
        return self.venue_ring_id is None


@dataclass(frozen=True)
class TournamentState:
    competitors: tuple[Competitor, ...] = ()
    categories: tuple[Category, ...] = ()
    pool_mappings: tuple[PoolMapping, ...] = ()


@dataclass(frozen=True)
class Checkpoint:
    id: str
    name: str
    timestamp: datetime
    state: TournamentState

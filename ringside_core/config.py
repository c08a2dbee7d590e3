"""Engine configuration (pydantic v2, immutable)."""
from __future__ import annotations

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Mirrors of the tournament-wide constants used by the desktop app.
OPEN_AGE_MAX = 999
ADULT_AGE = 18
NOT_PARTICIPATING = "not participating"
SAME_AS_FORMS = "same as forms"
SAME_AS_SPARRING = "same as sparring"


class EngineConfig(BaseModel):
    """Tunables for distribution and ordering."""

    open_age_max: int = Field(OPEN_AGE_MAX, ge=1, description="max_age meaning 'and up'")
    adult_age: int = Field(ADULT_AGE, ge=1, le=120)
    min_pools: int = Field(1, ge=1)
    max_pools: int = Field(10, ge=1, le=99)
    # Positions at the head of a forms ring reserved for distinct schools.
    diversity_seed_size: int = Field(3, ge=0, le=10)
    # Leave mixed-tag sparring rings unordered instead of ignoring the tags.
    strict_sub_rings: bool = False

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_pool_bounds(self) -> Self:
        if self.min_pools > self.max_pools:
            raise ValueError("min_pools cannot exceed max_pools")
        return self

    def clamp_pools(self, num_pools: int | None) -> int:
        return min(self.max_pools, max(self.min_pools, int(num_pools or self.min_pools)))


DEFAULT_CONFIG = EngineConfig()

"""
Input validation for competitor records using Pydantic v2.
Converts importer-shaped (camelCase) records into engine Competitors and back.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .config import NOT_PARTICIPATING, SAME_AS_FORMS, SAME_AS_SPARRING
from .types import (
    SAME_AS_OTHER,
    Competitor,
    DivisionChoice,
    EventEntry,
    ExplicitDivision,
    SameAsOther,
)

logger = logging.getLogger(__name__)

_POOL_RE = re.compile(r"^P(\d+)$")

# ==================== VALIDATOR FUNCTIONS ====================

_NAME_UNSAFE_RE = re.compile(r'[<>{}[\]\\|;()&$`"\*\x00-\x1f\x7f]')


def _clean_text(value: str) -> str:
    return value.replace("\0", "").strip()


def _clean_name(value: str) -> str:
    """Keep letters (incl. diacritics), digits, spaces, dashes and apostrophes"""
    return _NAME_UNSAFE_RE.sub("", _clean_text(value)).strip()


def _division_choice(value: Optional[str]) -> DivisionChoice:
    if value is None:
        return None
    lowered = value.strip().lower()
    if not lowered or lowered == NOT_PARTICIPATING:
        return None
    if lowered in (SAME_AS_FORMS, SAME_AS_SPARRING):
        return SAME_AS_OTHER
    return ExplicitDivision(value.strip())


def _division_text(division: DivisionChoice, other_event_name: str) -> Optional[str]:
    if division is None:
        return None
    if isinstance(division, SameAsOther):
        return f"same as {other_event_name}"
    return division.name


class CompetitorRecord(BaseModel):
    """One competitor row as produced by the spreadsheet importer"""

    id: str = Field(..., min_length=1, max_length=64, description="Competitor ID")
    firstName: str = Field(..., min_length=1, max_length=100)
    lastName: str = Field("", max_length=100)
    age: int = Field(..., ge=0, le=120, description="Age in years")
    gender: str = Field("", max_length=20, description="Free text; compared case-insensitively")
    heightFeet: int = Field(0, ge=0, le=8)
    heightInches: int = Field(0, ge=0, le=11)
    school: str = Field("", max_length=255)
    branch: Optional[str] = Field(None, max_length=255)

    # Division text: a division name, "not participating" or "same as <other event>"
    formsDivision: Optional[str] = Field(None, max_length=100)
    sparringDivision: Optional[str] = Field(None, max_length=100)
    competingForms: Optional[bool] = None
    competingSparring: Optional[bool] = None

    formsCategoryId: Optional[str] = Field(None, max_length=64)
    sparringCategoryId: Optional[str] = Field(None, max_length=64)
    formsPool: Optional[str] = Field(None, max_length=8, description="Pool ID (P1, P2, ...)")
    sparringPool: Optional[str] = Field(None, max_length=8)
    sparringAltRing: str = Field("", description="Sub-ring tag: '', 'a' or 'b'")
    formsRankOrder: Optional[float] = Field(None, ge=0)
    sparringRankOrder: Optional[float] = Field(None, ge=0)

    lastFormsCategoryId: Optional[str] = None
    lastFormsPool: Optional[str] = None
    lastSparringCategoryId: Optional[str] = None
    lastSparringPool: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("firstName", "lastName")
    @classmethod
    def validate_names(cls, v: str) -> str:
        """Strip and sanitize name parts"""
        return _clean_name(v)

    @field_validator("firstName")
    @classmethod
    def validate_first_name_present(cls, v: str) -> str:
        if len(v) == 0:
            raise ValueError("firstName cannot be empty")
        return v

    @field_validator("school", "gender")
    @classmethod
    def validate_plain_text(cls, v: str) -> str:
        return _clean_text(v)

    @field_validator("branch", "formsDivision", "sparringDivision")
    @classmethod
    def validate_optional_text(cls, v: Optional[str]) -> Optional[str]:
        """Blank optional strings collapse to None"""
        if v is None:
            return v
        v = _clean_text(v)
        return v or None

    @field_validator("formsPool", "sparringPool", "lastFormsPool", "lastSparringPool")
    @classmethod
    def validate_pool(cls, v: Optional[str]) -> Optional[str]:
        """Validate pool format (P<n>) and normalize case"""
        if v is None:
            return v
        v = v.strip().upper()
        if not v:
            return None
        if not _POOL_RE.match(v):
            raise ValueError(f"pool must be P<n> format, got {v}")
        return v

    @field_validator("sparringAltRing", mode="before")
    @classmethod
    def validate_alt_ring(cls, v: Any) -> str:
        if v is None:
            return ""
        if not isinstance(v, str):
            raise ValueError("sparringAltRing must be string")
        v = v.strip().lower()
        if v not in ("", "a", "b"):
            raise ValueError(f"sparringAltRing must be '', 'a' or 'b', got {v}")
        return v

    @model_validator(mode="after")
    def validate_assignments(self) -> Self:
        """A pool is only meaningful together with a category of the same event"""
        if self.formsPool and not self.formsCategoryId:
            raise ValueError("formsPool requires formsCategoryId")
        if self.sparringPool and not self.sparringCategoryId:
            raise ValueError("sparringPool requires sparringCategoryId")
        if (self.formsDivision or "").lower() == SAME_AS_FORMS:
            raise ValueError("formsDivision cannot be 'same as forms'")
        if (self.sparringDivision or "").lower() == SAME_AS_SPARRING:
            raise ValueError("sparringDivision cannot be 'same as sparring'")
        return self

    def _entry(
        self,
        division_text: Optional[str],
        competing: Optional[bool],
        category_id: Optional[str],
        pool: Optional[str],
        rank_order: Optional[float],
        last_category_id: Optional[str],
        last_pool: Optional[str],
        sub_ring: str = "",
    ) -> EventEntry:
        division = _division_choice(division_text)
        participating = competing if competing is not None else division is not None
        return EventEntry(
            participating=bool(participating),
            division=division,
            category_id=category_id,
            pool=pool,
            rank_order=rank_order,
            sub_ring=sub_ring,
            last_category_id=last_category_id,
            last_pool=last_pool if last_category_id else None,
        )

    def to_competitor(self) -> Competitor:
        return Competitor(
            id=self.id,
            first_name=self.firstName,
            last_name=self.lastName,
            age=self.age,
            gender=self.gender,
            height_feet=self.heightFeet,
            height_inches=self.heightInches,
            school=self.school,
            branch=self.branch,
            forms=self._entry(
                self.formsDivision,
                self.competingForms,
                self.formsCategoryId,
                self.formsPool,
                self.formsRankOrder,
                self.lastFormsCategoryId,
                self.lastFormsPool,
            ),
            sparring=self._entry(
                self.sparringDivision,
                self.competingSparring,
                self.sparringCategoryId,
                self.sparringPool,
                self.sparringRankOrder,
                self.lastSparringCategoryId,
                self.lastSparringPool,
                sub_ring=self.sparringAltRing,
            ),
        )


def competitor_to_record(competitor: Competitor) -> Dict[str, Any]:
    """Inverse of CompetitorRecord.to_competitor() for downstream consumers"""
    forms = competitor.forms
    sparring = competitor.sparring
    return {
        "id": competitor.id,
        "firstName": competitor.first_name,
        "lastName": competitor.last_name,
        "age": competitor.age,
        "gender": competitor.gender,
        "heightFeet": competitor.height_feet,
        "heightInches": competitor.height_inches,
        "totalHeightInches": competitor.total_height_inches,
        "school": competitor.school,
        "branch": competitor.branch,
        "formsDivision": _division_text(forms.division, "sparring"),
        "sparringDivision": _division_text(sparring.division, "forms"),
        "competingForms": forms.participating,
        "competingSparring": sparring.participating,
        "formsCategoryId": forms.category_id,
        "sparringCategoryId": sparring.category_id,
        "formsPool": forms.pool,
        "sparringPool": sparring.pool,
        "sparringAltRing": sparring.sub_ring,
        "formsRankOrder": forms.rank_order,
        "sparringRankOrder": sparring.rank_order,
        "lastFormsCategoryId": forms.last_category_id,
        "lastFormsPool": forms.last_pool,
        "lastSparringCategoryId": sparring.last_category_id,
        "lastSparringPool": sparring.last_pool,
    }


def parse_competitors(records: Iterable[Dict[str, Any]]) -> List[Competitor]:
    """
    Validate importer records and convert them to Competitors

    Raises:
        ValueError: naming the first invalid record (by index) or a duplicate ID
    """
    competitors: List[Competitor] = []
    seen_ids: set[str] = set()
    for i, record in enumerate(records):
        try:
            validated = CompetitorRecord.model_validate(record)
        except ValidationError as e:
            logger.warning(f"Competitor record {i} failed validation: {e}")
            raise ValueError(f"Invalid competitor record {i}: {str(e)}") from e
        if validated.id in seen_ids:
            raise ValueError(f"Duplicate competitor id {validated.id} at record {i}")
        seen_ids.add(validated.id)
        competitors.append(validated.to_competitor())
    logger.debug(f"Parsed {len(competitors)} competitor records")
    return competitors


# ==================== EXPORT ====================

__all__ = [
    "CompetitorRecord",
    "competitor_to_record",
    "parse_competitors",
]

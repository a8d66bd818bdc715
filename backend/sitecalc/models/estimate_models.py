"""
Estimate document models — pydantic v2.

An Estimate is one calculator document: ordered sections of ordered lines.
Lines are a tagged union on ``kind``; each variant carries only its own
fields (``extra="forbid"``), and an Estimate refuses lines of a kind other
than its own variant.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from sitecalc.config import DEFAULT_SECTION_TITLE, Variant


def new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Lines ──────────────────────────────────────────────────────────────────────

class _LineBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=new_id)
    amount: float = 0.0


class SquareFootageLine(_LineBase):
    kind: Literal["SquareFootage"] = "SquareFootage"
    measurement: str = ""
    description: str = ""


class ThreeFieldLine(_LineBase):
    kind: Literal["ThreeField"] = "ThreeField"
    description: str = ""
    description_two: str = ""


class SevenFieldLine(_LineBase):
    kind: Literal["SevenField"] = "SevenField"
    quantity: float = 0.0
    product_code: str = ""
    price: float = 0.0
    description: str = ""           # product name from the catalog
    description_two: str = ""       # free-text note
    description_three: str = ""     # length, "feet-inches"


class MeasurementLine(_LineBase):
    kind: Literal["Measurement"] = "Measurement"
    measurement: str = ""
    description: str = ""


Line = Annotated[
    Union[SquareFootageLine, ThreeFieldLine, SevenFieldLine, MeasurementLine],
    Field(discriminator="kind"),
]

LINE_MODELS: dict[Variant, type[_LineBase]] = {
    Variant.SQUARE_FOOTAGE: SquareFootageLine,
    Variant.THREE_FIELD: ThreeFieldLine,
    Variant.SEVEN_FIELD: SevenFieldLine,
    Variant.MEASUREMENT: MeasurementLine,
}


def new_line(variant: Variant) -> Line:
    """Blank line with the variant's zero/empty defaults."""
    return LINE_MODELS[Variant(variant)]()


# ── Sections ───────────────────────────────────────────────────────────────────

class Section(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=new_id)
    title: str = DEFAULT_SECTION_TITLE
    lines: list[Line] = Field(default_factory=list)
    total: float = 0.0

    @model_validator(mode="after")
    def _unique_line_ids(self):
        ids = [line.id for line in self.lines]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate line id in section {self.id}")
        return self


def new_section(variant: Variant) -> Section:
    """Section with one blank line of the given variant."""
    return Section(lines=[new_line(variant)])


# ── Estimate ───────────────────────────────────────────────────────────────────

class EstimateState(str, Enum):
    CLEAN = "clean"
    MUTATING = "mutating"
    DELETED = "deleted"


class Estimate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=new_id)
    name: str
    variant: Variant
    project_id: Optional[str] = None
    owner_id: Optional[str] = None      # None = guest document
    created_at: datetime = Field(default_factory=_utcnow)
    sections: list[Section] = Field(default_factory=list)
    grand_total: float = 0.0
    state: EstimateState = EstimateState.CLEAN

    @model_validator(mode="after")
    def _check_shape(self):
        section_ids = [s.id for s in self.sections]
        if len(section_ids) != len(set(section_ids)):
            raise ValueError(f"Duplicate section id in estimate {self.id}")
        for section in self.sections:
            for line in section.lines:
                if line.kind != self.variant.value:
                    raise ValueError(
                        f"{line.kind} line {line.id} in {self.variant.value} estimate"
                    )
        return self

    def find_section(self, section_id: str) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def line_ids(self) -> set[str]:
        return {line.id for section in self.sections for line in section.lines}


class ProductRecord(BaseModel):
    """Catalog entry used to price SevenField lines."""
    id: str = Field(default_factory=new_id)
    code: str
    name: str
    price: float = 0.0


class Project(BaseModel):
    """Project header; calculators reference it by ``project_id``."""
    id: str = Field(default_factory=new_id)
    name: str
    owner_id: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    # title page
    date_sent: str = ""
    job_address: str = ""
    to_address: str = ""

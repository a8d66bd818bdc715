"""
SiteCalc configuration — single source of truth for calculator variants,
line field tables, defaults and environment settings.

Import from here in the engine, services and routes rather than hardcoding
values.
"""
from __future__ import annotations

import os
from enum import Enum


# ── Calculator variants ────────────────────────────────────────────────────────

class Variant(str, Enum):
    """Calculator kind. Fixed at creation; selects the line shape and pricing rule."""
    SQUARE_FOOTAGE = "SquareFootage"
    THREE_FIELD = "ThreeField"
    SEVEN_FIELD = "SevenField"
    MEASUREMENT = "Measurement"


# Editable line fields per variant. ``id`` is never editable; SevenField
# ``description`` comes from the product catalog; derived ``amount`` is
# editable only where no formula exists (ThreeField).
EDITABLE_FIELDS: dict[Variant, frozenset[str]] = {
    Variant.SQUARE_FOOTAGE: frozenset({"measurement", "description"}),
    Variant.THREE_FIELD:    frozenset({"description", "description_two", "amount"}),
    Variant.SEVEN_FIELD:    frozenset({
        "quantity", "product_code", "price", "description_two", "description_three",
    }),
    Variant.MEASUREMENT:    frozenset({"measurement", "description"}),
}

# Fields coerced to float on write
NUMERIC_FIELDS: dict[Variant, frozenset[str]] = {
    Variant.SQUARE_FOOTAGE: frozenset(),
    Variant.THREE_FIELD:    frozenset({"amount"}),
    Variant.SEVEN_FIELD:    frozenset({"quantity", "price"}),
    Variant.MEASUREMENT:    frozenset(),
}


# Variants left out of the project grand total (take-off sheets, not priced work)
UNPRICED_VARIANTS: frozenset[Variant] = frozenset({Variant.MEASUREMENT})


# ── Defaults ───────────────────────────────────────────────────────────────────

DEFAULT_SECTION_TITLE: str = "Section Title"

# Lines added / removed by the bulk line operations
BULK_LINE_COUNT: int = 10

# SevenField length used when the length field is blank
DEFAULT_LENGTH_FT: float = 1.0

INCHES_PER_FOOT: float = 12.0


# ── Environment ────────────────────────────────────────────────────────────────

def store_backend() -> str:
    """``memory`` (dev/tests) or ``sql`` (async SQLAlchemy)."""
    return os.getenv("SITECALC_STORE", "memory").strip().lower()


JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "changethis_use_a_real_secret_in_production_64chars")
JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

APP_VERSION: str = "1.0.0"

# Accepted spellings for line fields from older clients
FIELD_ALIASES: dict[str, str] = {
    "productCode": "product_code",
    "descriptionTwo": "description_two",
    "description2": "description_two",
    "descriptionThree": "description_three",
    "description3": "description_three",
}

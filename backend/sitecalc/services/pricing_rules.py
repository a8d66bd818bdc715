"""
Line pricing rules — one formula per calculator variant.

  SquareFootage / Measurement : amount = W × H parsed from ``measurement``
  ThreeField                  : amount is entered directly (identity)
  SevenField                  : amount = quantity × price × length_ft

Only a blank SevenField length defaults to 1 ft. A length that is present
but unparseable (``"abc"``) reads as 0 ft and prices the line at 0, the
same as any other malformed measurement.
"""
import math
from typing import Any, Optional

from sitecalc.config import DEFAULT_LENGTH_FT, Variant
from sitecalc.models.estimate_models import Line, ProductRecord, SevenFieldLine
from sitecalc.services.measurement_parser import (
    parse_feet_inches,
    parse_leading_float,
    parse_measurement,
)


def coerce_number(value: Any) -> float:
    """Numeric coercion for user input; anything unparseable becomes 0.0."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    parsed = parse_leading_float(value) if isinstance(value, str) else None
    return parsed if parsed is not None else 0.0


def seven_field_length(line: SevenFieldLine) -> float:
    """Length in feet; a blank length field counts as 1 ft, not 0."""
    if not (line.description_three or "").strip():
        return DEFAULT_LENGTH_FT
    return parse_feet_inches(line.description_three)


def compute_line_amount(variant: Variant, line: Line) -> float:
    variant = Variant(variant)
    if variant in (Variant.SQUARE_FOOTAGE, Variant.MEASUREMENT):
        return parse_measurement(line.measurement)
    if variant is Variant.THREE_FIELD:
        return coerce_number(line.amount)
    if variant is Variant.SEVEN_FIELD:
        amount = coerce_number(line.quantity) * coerce_number(line.price) * seven_field_length(line)
        return amount if math.isfinite(amount) else 0.0
    raise ValueError(f"Unknown calculator variant: {variant}")


def apply_product(line: SevenFieldLine, product: Optional[ProductRecord]) -> bool:
    """
    Copy price and name from a catalog hit onto the line.
    Returns False and leaves the line untouched on a miss.
    """
    if product is None:
        return False
    line.price = coerce_number(product.price)
    line.description = product.name
    return True

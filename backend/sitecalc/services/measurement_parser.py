"""
Measurement parsing for takeoff text.

Both parsers are lenient: malformed input degrades to 0 instead of raising,
so a single bad cell never blocks the estimate total. Numbers are read with
a leading-float rule (``"60ft"`` reads as 60, ``"ft60"`` does not parse).
"""
import math
import re
from typing import Optional

from sitecalc.config import INCHES_PER_FOOT

_SEPARATOR_RE = re.compile(r"x", re.IGNORECASE)
_LEADING_FLOAT_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_leading_float(text: Optional[str]) -> Optional[float]:
    """Return the float at the start of ``text`` (after trimming), or None."""
    if text is None:
        return None
    match = _LEADING_FLOAT_RE.match(str(text).strip())
    if not match:
        return None
    value = float(match.group(0))
    return value if math.isfinite(value) else None


def parse_measurement(text: Optional[str]) -> float:
    """
    Area from a ``"W x H"`` string.

    ``"60 x 114"`` and ``"60X114"`` give 6840.0; anything with fewer than two
    parts or a non-numeric part gives 0.0. No rounding.
    """
    if not text:
        return 0.0
    parts = _SEPARATOR_RE.split(str(text))
    if len(parts) < 2:
        return 0.0
    width = parse_leading_float(parts[0])
    height = parse_leading_float(parts[1])
    if width is None or height is None:
        return 0.0
    area = width * height
    return area if math.isfinite(area) else 0.0


def parse_feet_inches(text: Optional[str]) -> float:
    """
    Length in feet from a ``"feet-inches"`` string.

    ``"11-0"`` → 11.0, ``"5-6"`` → 5.5, ``""`` → 0.0. Each segment that fails
    to parse counts as 0.
    """
    if not text:
        return 0.0
    segments = str(text).split("-")
    feet = parse_leading_float(segments[0])
    inches = parse_leading_float(segments[1]) if len(segments) > 1 else None
    feet = math.trunc(feet) if feet is not None else 0
    inches = inches if inches is not None else 0.0
    return feet + inches / INCHES_PER_FOOT

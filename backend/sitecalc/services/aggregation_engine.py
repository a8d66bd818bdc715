"""
Aggregation — section totals and the calculator grand total.

Totals are always recomputed from the lines, never patched incrementally.
"""
import math
from typing import Any

from sitecalc.models.estimate_models import Estimate, Section


def _as_amount(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value) if math.isfinite(value) else 0.0


def recompute_section_total(section: Section) -> float:
    return sum((_as_amount(line.amount) for line in section.lines), 0.0)


def recompute_grand_total(estimate: Estimate) -> float:
    return sum((_as_amount(section.total) for section in estimate.sections), 0.0)


def refresh_totals(estimate: Estimate) -> Estimate:
    """Write section totals, then the grand total, in place. Touches nothing else."""
    for section in estimate.sections:
        section.total = recompute_section_total(section)
    estimate.grand_total = recompute_grand_total(estimate)
    return estimate

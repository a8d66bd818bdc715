"""
EstimateEngine — the mutation API over a single calculator document.

Every operation takes the current Estimate and returns a new one with line
amounts, section totals and the grand total refreshed. Work happens on a
deep copy, so when an operation raises, the Estimate passed in is exactly
as it was. The engine is synchronous and takes no locks; callers keep at
most one mutation in flight per estimate (see CalculatorService).

State machine:  clean → mutating → clean,  anything → deleted (terminal).
"""
import logging
from typing import Any, Callable, Optional

from sitecalc.config import (
    BULK_LINE_COUNT,
    EDITABLE_FIELDS,
    FIELD_ALIASES,
    NUMERIC_FIELDS,
    Variant,
)
from sitecalc.models.estimate_models import (
    Estimate,
    EstimateState,
    Line,
    ProductRecord,
    Section,
    new_line,
    new_section,
)
from sitecalc.services.aggregation_engine import refresh_totals
from sitecalc.services.errors import InvalidFieldError, NotFoundError
from sitecalc.services.pricing_rules import apply_product, coerce_number, compute_line_amount

logger = logging.getLogger("sitecalc-api")

ProductLookup = Callable[[str], Optional[ProductRecord]]


class EstimateEngine:
    """Stateless; one instance can serve every calculator."""

    # ------------------------------------------------------------------
    # Transaction helpers
    # ------------------------------------------------------------------

    def _begin(self, estimate: Estimate) -> Estimate:
        if estimate.state is EstimateState.DELETED:
            raise NotFoundError("Calculator", estimate.id)
        draft = estimate.model_copy(deep=True)
        draft.state = EstimateState.MUTATING
        return draft

    def _commit(self, draft: Estimate) -> Estimate:
        refresh_totals(draft)
        draft.state = EstimateState.CLEAN
        return draft

    @staticmethod
    def _section(estimate: Estimate, section_id: str) -> Section:
        section = estimate.find_section(section_id)
        if section is None:
            raise NotFoundError("Section", section_id)
        return section

    @staticmethod
    def _line(section: Section, line_id: str) -> Line:
        for line in section.lines:
            if line.id == line_id:
                return line
        raise NotFoundError("Line", line_id)

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def add_section(self, estimate: Estimate) -> Estimate:
        draft = self._begin(estimate)
        draft.sections.append(new_section(draft.variant))
        return self._commit(draft)

    def delete_section(self, estimate: Estimate, section_id: str) -> Estimate:
        draft = self._begin(estimate)
        section = self._section(draft, section_id)
        draft.sections.remove(section)
        logger.debug("section deleted", extra={"estimate_id": draft.id, "operation": "delete_section"})
        return self._commit(draft)

    def rename_section(self, estimate: Estimate, section_id: str, new_title: Optional[str]) -> Estimate:
        """A title that trims to empty keeps the old one."""
        if estimate.state is EstimateState.DELETED:
            raise NotFoundError("Calculator", estimate.id)
        title = (new_title or "").strip()
        if not title:
            return estimate
        draft = self._begin(estimate)
        self._section(draft, section_id).title = title
        return self._commit(draft)

    # ------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------

    def add_line(self, estimate: Estimate, section_id: str) -> Estimate:
        return self._add_lines(estimate, section_id, 1)

    def add_ten_lines(self, estimate: Estimate, section_id: str) -> Estimate:
        return self._add_lines(estimate, section_id, BULK_LINE_COUNT)

    def _add_lines(self, estimate: Estimate, section_id: str, count: int) -> Estimate:
        draft = self._begin(estimate)
        section = self._section(draft, section_id)
        section.lines.extend(new_line(draft.variant) for _ in range(count))
        return self._commit(draft)

    def delete_line(self, estimate: Estimate, section_id: str, line_id: str) -> Estimate:
        draft = self._begin(estimate)
        section = self._section(draft, section_id)
        section.lines.remove(self._line(section, line_id))
        return self._commit(draft)

    def delete_ten_lines(self, estimate: Estimate, section_id: str) -> Estimate:
        """Drop up to the last ten lines; a short section just ends up empty."""
        draft = self._begin(estimate)
        section = self._section(draft, section_id)
        keep = max(len(section.lines) - BULK_LINE_COUNT, 0)
        del section.lines[keep:]
        return self._commit(draft)

    def update_field(
        self,
        estimate: Estimate,
        section_id: str,
        line_id: str,
        field: str,
        value: Any,
        product_lookup: Optional[ProductLookup] = None,
    ) -> Estimate:
        """
        Set one editable field and re-price the line.

        Editing ``product_code`` on a SevenField line consults
        ``product_lookup`` first; a hit replaces price and description before
        the amount is recomputed, a miss leaves them as they were.
        """
        draft = self._begin(estimate)
        variant = Variant(draft.variant)
        field = FIELD_ALIASES.get(field, field)
        if field not in EDITABLE_FIELDS[variant]:
            raise InvalidFieldError(variant.value, field)

        line = self._line(self._section(draft, section_id), line_id)

        if field in NUMERIC_FIELDS[variant]:
            setattr(line, field, coerce_number(value))
        else:
            setattr(line, field, "" if value is None else str(value))

        if field == "product_code":
            code = line.product_code.strip()
            product = product_lookup(code) if (product_lookup and code) else None
            if not apply_product(line, product):
                logger.info(
                    f"Product code '{code}' not found; keeping current price",
                    extra={"estimate_id": draft.id, "operation": "update_field"},
                )

        line.amount = compute_line_amount(variant, line)
        return self._commit(draft)

    # ------------------------------------------------------------------
    # Calculator
    # ------------------------------------------------------------------

    def rename_calculator(self, estimate: Estimate, new_name: Optional[str]) -> Estimate:
        if estimate.state is EstimateState.DELETED:
            raise NotFoundError("Calculator", estimate.id)
        name = (new_name or "").strip()
        if not name:
            return estimate
        draft = self._begin(estimate)
        draft.name = name
        return self._commit(draft)

    def delete_estimate(self, estimate: Estimate) -> Estimate:
        """Terminal: clears every section and line and marks the calculator deleted."""
        draft = self._begin(estimate)
        draft.sections.clear()
        refresh_totals(draft)
        draft.state = EstimateState.DELETED
        return draft

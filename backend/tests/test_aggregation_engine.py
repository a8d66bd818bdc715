"""
test_aggregation_engine.py — Unit tests for section and grand totals.

Totals are recomputed from scratch; amounts that are not finite numbers
count as 0 so one bad line never poisons the total.
"""

import pytest

from sitecalc.models.estimate_models import Estimate, Section, ThreeFieldLine
from sitecalc.services.aggregation_engine import (
    recompute_grand_total,
    recompute_section_total,
    refresh_totals,
)


def _section(*amounts, total=0.0):
    return Section(lines=[ThreeFieldLine(amount=a) for a in amounts], total=total)


class TestSectionTotal:

    def test_sum_of_line_amounts(self):
        assert recompute_section_total(_section(100.0, 250.5, 49.5)) == 400.0

    def test_empty_section_is_zero(self):
        assert recompute_section_total(_section()) == 0.0

    def test_nan_amount_counts_as_zero(self):
        assert recompute_section_total(_section(10.0, float("nan"), 5.0)) == 15.0

    def test_infinite_amount_counts_as_zero(self):
        assert recompute_section_total(_section(10.0, float("inf"))) == 10.0


class TestGrandTotal:

    def test_sum_of_section_totals(self):
        est = Estimate(name="E", variant="ThreeField", sections=[
            _section(total=100.0), _section(total=25.0),
        ])
        assert recompute_grand_total(est) == 125.0

    def test_no_sections_is_zero(self):
        assert recompute_grand_total(Estimate(name="E", variant="ThreeField")) == 0.0


class TestRefreshTotals:

    def test_sections_refreshed_before_grand_total(self):
        """Stale stored totals are replaced, and the grand total uses the new ones."""
        est = Estimate(name="E", variant="ThreeField", sections=[
            _section(100.0, 200.0, total=999.0),
            _section(50.0, total=-1.0),
        ])
        refresh_totals(est)
        assert [s.total for s in est.sections] == [300.0, 50.0]
        assert est.grand_total == 350.0

    def test_line_amounts_are_not_touched(self):
        est = Estimate(name="E", variant="ThreeField", sections=[_section(12.0, 8.0)])
        refresh_totals(est)
        assert [line.amount for line in est.sections[0].lines] == [12.0, 8.0]

    def test_returns_same_object(self):
        est = Estimate(name="E", variant="ThreeField")
        assert refresh_totals(est) is est

    def test_grand_total_matches_sum_of_line_amounts(self):
        est = Estimate(name="E", variant="ThreeField", sections=[
            _section(1.25, 2.5), _section(3.75), _section(),
        ])
        refresh_totals(est)
        assert est.grand_total == pytest.approx(7.5)

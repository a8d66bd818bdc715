"""
test_pricing_rules.py — Unit tests for per-variant line pricing.

Tests cover:
  - coerce_number: numeric input coercion for editable fields
  - seven_field_length: blank length defaults to 1 ft
  - compute_line_amount: one formula per calculator variant
  - apply_product: catalog hit copies price and name, miss leaves the line alone
"""

import math
import pytest

from sitecalc.config import Variant
from sitecalc.models.estimate_models import (
    MeasurementLine,
    ProductRecord,
    SevenFieldLine,
    SquareFootageLine,
    ThreeFieldLine,
)
from sitecalc.services.pricing_rules import (
    apply_product,
    coerce_number,
    compute_line_amount,
    seven_field_length,
)


# ===========================================================================
# Class 1: Number coercion
# ===========================================================================

class TestCoerceNumber:

    @pytest.mark.parametrize("value, expected", [
        (3, 3.0),
        (2.5, 2.5),
        ("4", 4.0),
        ("12.75", 12.75),
        ("7 boxes", 7.0),
        ("", 0.0),
        ("abc", 0.0),
        (None, 0.0),
        ([1, 2], 0.0),
    ])
    def test_coercion_table(self, value, expected):
        assert coerce_number(value) == expected

    def test_non_finite_floats_become_zero(self):
        assert coerce_number(float("nan")) == 0.0
        assert coerce_number(float("inf")) == 0.0

    def test_result_is_float(self):
        assert isinstance(coerce_number(3), float)


# ===========================================================================
# Class 2: SevenField length
# ===========================================================================

class TestSevenFieldLength:

    def test_blank_length_counts_as_one_foot(self):
        assert seven_field_length(SevenFieldLine(description_three="")) == 1.0

    def test_whitespace_length_counts_as_one_foot(self):
        assert seven_field_length(SevenFieldLine(description_three="   ")) == 1.0

    def test_feet_inches_length(self):
        assert seven_field_length(SevenFieldLine(description_three="5-6")) == 5.5

    def test_unparseable_length_is_zero_not_one(self):
        """Only a blank field gets the 1 ft default; junk text prices at 0."""
        assert seven_field_length(SevenFieldLine(description_three="abc")) == 0.0


# ===========================================================================
# Class 3: Line amount per variant
# ===========================================================================

class TestComputeLineAmount:

    def test_square_footage_area(self):
        line = SquareFootageLine(measurement="60 x 114")
        assert compute_line_amount(Variant.SQUARE_FOOTAGE, line) == 6840.0

    def test_measurement_area(self):
        line = MeasurementLine(measurement="10 x 12")
        assert compute_line_amount(Variant.MEASUREMENT, line) == 120.0

    def test_square_footage_malformed_is_zero(self):
        line = SquareFootageLine(measurement="sixty by twelve")
        assert compute_line_amount(Variant.SQUARE_FOOTAGE, line) == 0.0

    def test_three_field_amount_is_entered_directly(self):
        line = ThreeFieldLine(amount=1250.0)
        assert compute_line_amount(Variant.THREE_FIELD, line) == 1250.0

    def test_seven_field_quantity_price_length(self):
        """4 × 5.00 × 2.5 ft = 50.00"""
        line = SevenFieldLine(quantity=4, price=5.0, description_three="2-6")
        assert compute_line_amount(Variant.SEVEN_FIELD, line) == 50.0

    def test_seven_field_blank_length_prices_per_unit(self):
        """qty=3, price=10, blank length → 3 × 10 × 1 = 30."""
        line = SevenFieldLine(quantity=3, price=10.0)
        assert compute_line_amount(Variant.SEVEN_FIELD, line) == 30.0

    def test_seven_field_zero_quantity(self):
        line = SevenFieldLine(quantity=0, price=10.0, description_three="10-0")
        assert compute_line_amount(Variant.SEVEN_FIELD, line) == 0.0

    def test_variant_given_as_string(self):
        line = SquareFootageLine(measurement="2 x 3")
        assert compute_line_amount("SquareFootage", line) == 6.0

    def test_seven_field_unparseable_length_prices_at_zero(self):
        """Junk in a non-blank length field does not fall back to 1 ft."""
        line = SevenFieldLine(quantity=3, price=10.0, description_three="abc")
        assert compute_line_amount(Variant.SEVEN_FIELD, line) == 0.0

    def test_amount_is_always_finite(self):
        line = SevenFieldLine(quantity=1e200, price=1e200)
        assert math.isfinite(compute_line_amount(Variant.SEVEN_FIELD, line))


# ===========================================================================
# Class 4: Applying a catalog product
# ===========================================================================

class TestApplyProduct:

    def test_hit_copies_price_and_name(self):
        line = SevenFieldLine(product_code="PC-100")
        product = ProductRecord(code="PC-100", name="Post cap", price=5.0)
        assert apply_product(line, product) is True
        assert line.price == 5.0
        assert line.description == "Post cap"

    def test_miss_leaves_line_untouched(self):
        line = SevenFieldLine(product_code="ZZ-999", price=8.0, description="Old item")
        assert apply_product(line, None) is False
        assert line.price == 8.0
        assert line.description == "Old item"

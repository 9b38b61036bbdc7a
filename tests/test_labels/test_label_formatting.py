"""Tests for label number formatting and print payloads."""

import pytest

from bundletrack.db.models import Bundle, Variant
from bundletrack.labels.dispatcher import build_image_payload, build_print_fields
from bundletrack.labels.formatting import format_fixed, format_number, format_significant


class TestFormatSignificant:
    """Tests for three significant figure formatting."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (5.0, "5.00"),
            (0.4166666666, "0.417"),
            (16.833333, "16.8"),
            (123.0, "123"),
            (1234.5, "1.23e+3"),
            (9.999, "10.0"),
            (0.0000123, "0.0000123"),
            (0.0, "0.00"),
            (-2.5, "-2.50"),
        ],
    )
    def test_values(self, value, expected):
        """Test formatting matches the bridge's expected text."""
        assert format_significant(value) == expected


class TestFormatFixed:
    """Tests for fixed decimal formatting."""

    def test_three_decimals(self):
        """Test weights and lengths keep three decimals."""
        assert format_fixed(12) == "12.000"
        assert format_fixed(50.5) == "50.500"
        assert format_fixed(7.12345) == "7.123"


class TestFormatNumber:
    """Tests for plain number text."""

    def test_integral(self):
        """Test integral floats drop the fraction."""
        assert format_number(12.0) == "12"

    def test_fraction(self):
        """Test fractional values keep their shortest form."""
        assert format_number(12.5) == "12.5"


class TestPrintFields:
    """Tests for the layout 1 print payload."""

    def test_build_print_fields(self):
        """Test every field the bridge reads."""
        variant = Variant(s_no="AL-1020", name="Angle", series="ANGLE", print_series="ANG-40")
        bundle = Bundle(
            uid="3f0c6f0e-8a4b-4e55-9d1c-1d2e3f405060",
            sr_no="25A7",
            length=7.5,
            quantity=3,
            weight=50.5,
            vs_no="AL-1020",
            po_no="PO-9",
            location=1,
        )

        assert build_print_fields(bundle, variant) == {
            "uid": "3f0c6f0e-8a4b-4e55-9d1c-1d2e3f405060",
            "layout": 1,
            "weight": "50.500",
            "weight_each": "16.8",
            "weight12ft": "26.9",
            "sr_no": "25A7",
            "quantity": 3,
            "length": "7.500",
            "series": "ANG-40",
            "po": "PO-9",
        }

    def test_build_image_payload(self):
        """Test layout 0 payload names the cached image."""
        assert build_image_payload("abc") == {"uid": "abc.png", "layout": 0}

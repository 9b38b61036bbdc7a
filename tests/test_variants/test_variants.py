"""Tests for variants module."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from bundletrack.db.models import DEFAULT_RANGE, Variant
from bundletrack.variants.service import VariantService, normalize_range


def add_variant(db: Session, s_no: str, range_value: str | None) -> Variant:
    variant = Variant(
        s_no=s_no, name=f"Item {s_no}", series="FLAT", print_series="FL", range=range_value
    )
    db.add(variant)
    db.commit()
    return variant


class TestNormalizeRange:
    """Tests for range normalization."""

    @pytest.mark.parametrize(
        "value",
        [None, "", "   ", "not json", '{"start":1', '{"start":1}', '{"end":2}', "[1, 2]", "5"],
    )
    def test_unusable_values_use_default(self, value):
        """Test empty, malformed or incomplete ranges become the default range."""
        assert normalize_range(value, "V1") == DEFAULT_RANGE

    @pytest.mark.parametrize(
        "value",
        ['{"start":10,"end":12}', '{"start": 0.5, "end": 1.5, "unit": "kg"}'],
    )
    def test_valid_values_unchanged(self, value):
        """Test valid ranges are returned verbatim."""
        assert normalize_range(value, "V1") == value

    def test_default_is_parseable(self):
        """Test the default range itself is valid."""
        assert normalize_range(DEFAULT_RANGE) == DEFAULT_RANGE

    def test_deeply_nested_value_uses_default(self):
        """Test JSON too deep for the decoder is treated as invalid."""
        assert normalize_range("[" * 100000, "V1") == DEFAULT_RANGE


class TestVariantService:
    """Tests for variant lookups."""

    def test_list_variants_normalizes(self, db: Session):
        """Test listing normalizes each stored range."""
        add_variant(db, "A1", '{"start":1,"end":2}')
        add_variant(db, "B2", "")

        variants = VariantService(db).list_variants()

        assert [(v.s_no, v.range) for v in variants] == [
            ("A1", '{"start":1,"end":2}'),
            ("B2", DEFAULT_RANGE),
        ]

    def test_stored_value_untouched(self, db: Session):
        """Test normalization does not rewrite the database."""
        add_variant(db, "B2", "garbage")

        VariantService(db).list_variants()

        assert db.get(Variant, "B2").range == "garbage"


class TestVariantRoutes:
    """Tests for /api/variant routes."""

    def test_list_all(self, client: TestClient, db: Session):
        """Test the variant listing shape."""
        add_variant(db, "A1", None)

        response = client.get("/api/variant/all")

        assert response.status_code == 200
        assert response.json() == {
            "variants": [{"s_no": "A1", "series": "FLAT", "range": DEFAULT_RANGE}]
        }

    def test_list_all_empty(self, client: TestClient):
        """Test listing with no variants."""
        response = client.get("/api/variant/all")

        assert response.status_code == 200
        assert response.json() == {"variants": []}

    def test_get_variant(self, client: TestClient, test_variant: Variant):
        """Test fetching a single variant."""
        response = client.get(f"/api/variant/{test_variant.s_no}")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Angle 40x40"
        assert data["print_series"] == "ANG-40"
        assert data["range"] == '{"start":10,"end":12}'

    def test_get_variant_not_found(self, client: TestClient):
        """Test unknown section number returns 404."""
        response = client.get("/api/variant/NOPE")

        assert response.status_code == 404

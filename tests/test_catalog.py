"""
==============================================================================
Catalog & Lookup Tests
==============================================================================

Tests for product catalog loading, code matching and descriptions.

==============================================================================
"""

import json

import pytest

from labellense.catalog import MetadataLookup, ProductCatalog


@pytest.fixture
def legacy_catalog(tmp_path) -> ProductCatalog:
    """Catalog written with the older "upc" key and a malformed entry."""
    products_file = tmp_path / "legacy.json"
    products_file.write_text(json.dumps({
        "chilled": {
            "Dairy": [
                {"name": "Whole Milk 1L", "upc": "29377107", "calories": 64},
                {"name": "Missing code"},
            ],
            "Notes": "not a list",
        },
        "broken": "not a dict",
    }), encoding="utf-8")
    return ProductCatalog(products_file)


class TestProductCatalog:
    """Tests for ProductCatalog."""

    def test_loads_nested_categories(self, catalog, qr_text):
        product = catalog.find_by_code(qr_text)

        assert product.name == "Rolled Oats 1kg"
        assert product.main_category == "ambient"
        assert product.subcategory == "Cereal"
        assert catalog.get_stats() == {"total_products": 1, "main_categories": 1}

    def test_legacy_key_and_invalid_entries(self, legacy_catalog):
        assert [p.name for p in legacy_catalog.products] == ["Whole Milk 1L"]
        assert legacy_catalog.find_by_code("29377107").calories == 64
        assert "broken" not in legacy_catalog.categories

    def test_wildcard_match(self, legacy_catalog):
        scanned = "101526293771070000"

        assert legacy_catalog.find_by_code(scanned) is None
        assert legacy_catalog.find_by_code(scanned, wildcard=True).name == "Whole Milk 1L"
        assert legacy_catalog.find_by_scanned_code(scanned).name == "Whole Milk 1L"

    def test_wildcard_prefers_longest_code(self, tmp_path):
        products_file = tmp_path / "products.json"
        products_file.write_text(json.dumps({
            "ambient": {"Snacks": [
                {"name": "Short", "code": "2937"},
                {"name": "Long", "code": "29377107"},
            ]}
        }), encoding="utf-8")
        catalog = ProductCatalog(products_file)

        assert catalog.find_by_scanned_code("101526293771070000").name == "Long"

    def test_entry_category_keys_are_ignored(self, tmp_path):
        products_file = tmp_path / "products.json"
        products_file.write_text(json.dumps({
            "ambient": {"Tea": [
                {"name": "Green Tea", "code": "77", "main_category": "x", "subcategory": "y"},
            ]}
        }), encoding="utf-8")
        catalog = ProductCatalog(products_file)

        product = catalog.find_by_code("77")
        assert (product.main_category, product.subcategory) == ("ambient", "Tea")

    def test_unknown_code(self, catalog):
        assert catalog.find_by_scanned_code("999") is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ProductCatalog(tmp_path / "missing.json")

    def test_reload(self, tmp_path):
        products_file = tmp_path / "products.json"
        products_file.write_text(json.dumps({"a": {"b": []}}), encoding="utf-8")
        catalog = ProductCatalog(products_file)

        products_file.write_text(json.dumps({
            "a": {"b": [{"name": "Tea", "code": "42"}]}
        }), encoding="utf-8")
        catalog.reload()

        assert catalog.find_by_code("42").name == "Tea"


class TestMetadataLookup:
    """Tests for MetadataLookup."""

    def test_known_code(self, catalog, qr_text):
        text = MetadataLookup(catalog).lookup(qr_text)

        assert text.startswith("Product Name: Rolled Oats 1kg\n")
        assert "Category: ambient / Cereal" in text
        assert "Calories: 150" in text
        assert text.endswith(f"(Barcode: {qr_text})\n")

    def test_unknown_code_gets_placeholder(self, catalog):
        text = MetadataLookup(catalog).lookup("0000")

        assert text == (
            "Mock Product Name: Example Food\n"
            "Calories: 200\n"
            "Total Fat: 8g\n"
            "Sugars: 12g\n"
            "(Barcode: 0000)\n"
        )

    def test_without_catalog(self):
        lookup = MetadataLookup()

        assert lookup.find("123") is None
        assert lookup.lookup("123").startswith("Mock Product Name")

    def test_lookup_response(self, catalog, qr_text):
        lookup = MetadataLookup(catalog)

        known = lookup.lookup_response(qr_text)
        unknown = lookup.lookup_response("0000")

        assert known.known is True
        assert known.product.name == "Rolled Oats 1kg"
        assert unknown.known is False
        assert unknown.product is None

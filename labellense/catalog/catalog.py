"""
==============================================================================
Product Catalog Module
==============================================================================

Product metadata for decoded codes, read from a nested-category JSON file.

JSON Structure:
--------------
{
  "ambient": {
    "Cereal": [
      {"name": "Rolled Oats 1kg", "code": "4006381333931", "calories": 150,
       "total_fat": "2.8g", "sugars": "0.4g"},
      ...
    ]
  }
}

Entries written with the older "upc" key are accepted as well. Entries
without a name or code are skipped with a warning.

Matching:
---------
A scanned code first matches a registered code exactly. Failing that, the
longest registered code contained in the scanned text wins, so a long
GS1 payload still finds the product registered under its short code.

==============================================================================
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import ValidationError

from .models import Product


# Module logger
logger = logging.getLogger(__name__)

# Set from the file structure, never from the entry itself
_RESERVED_KEYS = ("code", "upc", "main_category", "subcategory")


class ProductCatalog:
    """
    In-memory product catalog.

    Example:
        >>> catalog = ProductCatalog(Path("data/products.json"))
        >>> catalog.find_by_scanned_code("(01)04006381333931").name
        'Rolled Oats 1kg'
    """

    def __init__(self, products_file: Path) -> None:
        self._products_file = Path(products_file)
        self._by_code: Dict[str, Product] = {}
        self._categories: Dict[str, Dict[str, List[Product]]] = {}

        self._load()

    @property
    def products(self) -> List[Product]:
        """All products in file order."""
        return list(self._by_code.values())

    @property
    def categories(self) -> Dict[str, Dict[str, List[Product]]]:
        return self._categories

    # =========================================================================
    # LOADING
    # =========================================================================

    def _load(self) -> None:
        try:
            with self._products_file.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.error(f"Products file not found: {self._products_file}")
            raise
        except json.JSONDecodeError as e:
            logger.error(f"Invalid products JSON in {self._products_file}: {e}")
            raise

        by_code: Dict[str, Product] = {}
        categories: Dict[str, Dict[str, List[Product]]] = {}

        for main_category, subcategory, entries in self._iter_groups(data):
            group = categories.setdefault(main_category, {}).setdefault(subcategory, [])

            for entry in entries:
                product = self._to_product(entry, main_category, subcategory)
                if product is None:
                    continue
                if product.code in by_code:
                    logger.warning(f"Duplicate code {product.code}; keeping the first entry")
                    continue

                by_code[product.code] = product
                group.append(product)

        self._by_code = by_code
        self._categories = categories

        logger.info(f"✅ Loaded {len(by_code)} products from {len(categories)} categories")

    @staticmethod
    def _iter_groups(data: dict) -> Iterator[Tuple[str, str, list]]:
        """Yield (main category, subcategory, entries) for well-formed groups."""
        for main_category, subcategories in data.items():
            if not isinstance(subcategories, dict):
                logger.warning(f"Skipping invalid category: {main_category}")
                continue

            for subcategory, entries in subcategories.items():
                if isinstance(entries, list):
                    yield main_category, subcategory, entries

    @staticmethod
    def _to_product(entry, main_category: str, subcategory: str) -> Optional[Product]:
        if not isinstance(entry, dict):
            return None

        code = entry.get("code", entry.get("upc"))
        if not entry.get("name") or code is None:
            logger.warning(f"Skipping entry without name or code in {main_category}/{subcategory}")
            return None

        fields = {k: v for k, v in entry.items() if k not in _RESERVED_KEYS}

        try:
            return Product(
                code=str(code),
                main_category=main_category,
                subcategory=subcategory,
                **fields
            )
        except ValidationError as e:
            logger.warning(f"Skipping invalid product {entry.get('name')!r}: {e}")
            return None

    def reload(self) -> None:
        """Re-read the products file."""
        logger.info("Reloading product catalog...")
        self._load()

    # =========================================================================
    # LOOKUP
    # =========================================================================

    @staticmethod
    def match_code_wildcard(scanned_code: str, stored_code: str) -> bool:
        """
        Check whether a registered code appears inside the scanned text.

        Example:
            >>> ProductCatalog.match_code_wildcard("101526293771070000", "29377107")
            True
        """
        return bool(stored_code) and stored_code in scanned_code

    def find_by_code(self, code: str, wildcard: bool = False) -> Optional[Product]:
        """
        Find a product by registered code.

        Args:
            code: Scanned or typed code
            wildcard: Also accept registered codes contained in ``code``;
                the longest such code wins

        Returns:
            Product or None
        """
        if not wildcard:
            return self._by_code.get(code)

        matches = [
            stored for stored in self._by_code
            if self.match_code_wildcard(code, stored)
        ]
        if not matches:
            return None

        best = max(matches, key=len)
        logger.debug(f"Wildcard match: {code} → {best}")
        return self._by_code[best]

    def find_by_scanned_code(self, scanned_code: str) -> Optional[Product]:
        """Exact match first, then the longest contained code."""
        return (
            self.find_by_code(scanned_code)
            or self.find_by_code(scanned_code, wildcard=True)
        )

    def get_stats(self) -> Dict:
        return {
            "total_products": len(self._by_code),
            "main_categories": len(self._categories),
        }


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

_catalog_instance: Optional[ProductCatalog] = None


def get_catalog() -> Optional[ProductCatalog]:
    """Catalog loaded at startup, if any."""
    return _catalog_instance


def init_catalog(products_file: Path) -> ProductCatalog:
    """Load the catalog used by the running application."""
    global _catalog_instance
    _catalog_instance = ProductCatalog(products_file)
    return _catalog_instance

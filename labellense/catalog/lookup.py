"""
==============================================================================
Metadata Lookup Module
==============================================================================

Turns a decoded code into a human-readable product description.

Codes found in the catalog are described from their catalog entry; any
other code gets a placeholder description so the scan flow can be
exercised without a real product database.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional

from .catalog import ProductCatalog
from .models import Product, ProductResponse


# Module logger
logger = logging.getLogger(__name__)


class MetadataLookup:
    """
    Product description lookup for decoded codes.

    Example:
        >>> lookup = MetadataLookup(catalog)
        >>> print(lookup.lookup("0012345678905"))
        Product Name: Example Food
        ...
    """

    def __init__(self, catalog: Optional[ProductCatalog] = None) -> None:
        self._catalog = catalog

    @property
    def catalog(self) -> Optional[ProductCatalog]:
        return self._catalog

    def find(self, code: str) -> Optional[Product]:
        """Catalog entry for a decoded code, if any."""
        if self._catalog is None:
            return None
        return self._catalog.find_by_scanned_code(code)

    def lookup(self, code: str) -> str:
        """
        Describe the product behind a decoded code.

        Args:
            code: Decoded symbol text

        Returns:
            Multi-line description
        """
        product = self.find(code)

        if product is None:
            logger.debug(f"No catalog entry for {code}, using placeholder")
            return self.placeholder(code)

        return self.describe(product, code)

    def lookup_response(self, code: str) -> ProductResponse:
        """Lookup result shaped for the API."""
        product = self.find(code)
        description = self.describe(product, code) if product else self.placeholder(code)

        return ProductResponse(
            code=code,
            known=product is not None,
            description=description,
            product=product,
        )

    @staticmethod
    def describe(product: Product, code: str) -> str:
        lines = [f"Product Name: {product.name}"]

        if product.main_category:
            category = product.main_category
            if product.subcategory:
                category = f"{category} / {product.subcategory}"
            lines.append(f"Category: {category}")
        if product.calories is not None:
            lines.append(f"Calories: {product.calories}")
        if product.total_fat:
            lines.append(f"Total Fat: {product.total_fat}")
        if product.sugars:
            lines.append(f"Sugars: {product.sugars}")

        lines.append(f"(Barcode: {code})")
        return "\n".join(lines) + "\n"

    @staticmethod
    def placeholder(code: str) -> str:
        # TODO: query Open Food Facts for codes missing from the catalog
        return (
            "Mock Product Name: Example Food\n"
            "Calories: 200\n"
            "Total Fat: 8g\n"
            "Sugars: 12g\n"
            f"(Barcode: {code})\n"
        )

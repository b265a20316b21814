"""
==============================================================================
Catalog Package - Product Metadata
==============================================================================

Product catalog with nested category structure and wildcard code matching.

Classes:
--------
- Product: Pydantic model for products
- ProductCatalog: Catalog manager with code lookup
- MetadataLookup: Decoded code -> description

==============================================================================
"""

from .models import Product, ProductResponse
from .catalog import ProductCatalog, get_catalog, init_catalog
from .lookup import MetadataLookup

__all__ = [
    "Product",
    "ProductResponse",
    "ProductCatalog",
    "MetadataLookup",
    "get_catalog",
    "init_catalog",
]

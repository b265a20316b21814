"""
==============================================================================
Product Lookup Endpoints
==============================================================================

Describe the product behind a decoded code.

==============================================================================
"""

from fastapi import APIRouter, Depends, Query

from labellense.catalog import MetadataLookup, ProductResponse
from labellense.core import exceptions
from labellense.core.dependencies import get_metadata_lookup


router = APIRouter(prefix="/products", tags=["Products"])


class ProductController:
    """Controller for product metadata operations."""

    def __init__(self, lookup: MetadataLookup):
        self._lookup = lookup

    def lookup(self, code: str, strict: bool) -> ProductResponse:
        """Look up a code; strict lookups reject unknown codes."""
        response = self._lookup.lookup_response(code)

        if strict and not response.known:
            raise exceptions.code_not_found(code)

        return response

    def stats(self) -> dict:
        """Catalog statistics."""
        catalog = self._lookup.catalog
        if not catalog:
            raise exceptions.catalog_not_loaded()

        return {"success": True, **catalog.get_stats()}


@router.get("/lookup/{code}", response_model=ProductResponse)
async def lookup_code(
    code: str,
    strict: bool = Query(False, description="404 instead of a placeholder for unknown codes"),
    lookup: MetadataLookup = Depends(get_metadata_lookup)
):
    """Describe the product registered for a decoded code."""
    return ProductController(lookup).lookup(code, strict)


@router.get("/stats")
async def catalog_stats(lookup: MetadataLookup = Depends(get_metadata_lookup)):
    """Product catalog statistics."""
    return ProductController(lookup).stats()

"""
==============================================================================
Product Models Module
==============================================================================

Pydantic models for product metadata entries.

==============================================================================
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    """
    Product metadata looked up from a decoded code.

    Attributes:
        name: Product display name
        code: Barcode/QR payload registered for the product
        main_category: Top-level category (e.g., "ambient", "cold_chain")
        subcategory: Sub-category (e.g., "Biscuits", "Dessert")
        calories: Energy per serving (kcal)
        total_fat: Fat per serving, with unit (e.g., "8g")
        sugars: Sugars per serving, with unit (e.g., "12g")
    """

    model_config = ConfigDict(
        from_attributes=True,
        extra="allow",
    )

    name: str = Field(..., min_length=1, description="Product name")
    code: str = Field(..., min_length=1, description="Registered code")
    main_category: Optional[str] = Field(default=None, description="Main category")
    subcategory: Optional[str] = Field(default=None, description="Subcategory")
    calories: Optional[int] = Field(default=None, ge=0, description="Calories per serving")
    total_fat: Optional[str] = Field(default=None, description="Total fat per serving")
    sugars: Optional[str] = Field(default=None, description="Sugars per serving")


class ProductResponse(BaseModel):
    """Product lookup response schema for API endpoints."""

    code: str
    known: bool
    description: str
    product: Optional[Product] = None

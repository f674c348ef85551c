"""
Part catalog schemas.

Listing, detail, facet and admin maintenance payloads for parts.
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from autoparts.api.v1.schemas.vehicle import VehicleResponse


class PartListItem(BaseModel):
    """
    A part as shown in catalog listings.

    ``vehicles`` is the legacy vehicle followed by the linked vehicles.
    """

    id: int = Field(..., description="Unique identifier")
    name: str = Field(..., description="Part name")
    brand: str = Field(..., description="Part brand (manufacturer)")
    category: str = Field(..., description="Category")
    price: float = Field(..., description="Unit price")
    stock: int = Field(..., description="Units in stock")
    image_url: Optional[str] = Field(None, description="Image URL")
    vehicles: List[VehicleResponse] = Field(default_factory=list, description="Compatible vehicles")
    seller_name: Optional[str] = Field(None, description="Seller display name")


class PartDetail(PartListItem):
    """Full part record."""

    description: Optional[str] = Field(None, description="Free-text description")
    condition: str = Field(..., description="Condition label")
    seller_id: Optional[int] = Field(None, description="Owning seller")


class PartBrowseResponse(BaseModel):
    """Storefront listing with the part-brand options for the current filters."""

    parts: List[PartListItem] = Field(..., description="Matching parts")
    total: int = Field(..., description="Number of matching parts")
    part_brand_options: List[str] = Field(
        default_factory=list,
        description="Part brands available before brand and price refinements",
    )


class PartFilterFacets(BaseModel):
    """Values for building the filter form."""

    categories: List[str] = Field(..., description="Distinct categories")
    part_brands: List[str] = Field(..., description="Distinct part brands")
    vehicles: List[VehicleResponse] = Field(..., description="All vehicles by brand, model, year")
    min_price: float = Field(..., description="Lowest part price, 0 when empty")
    max_price: float = Field(..., description="Highest part price, 0 when empty")


class VehicleYearRange(BaseModel):
    """Production range submitted for one selected vehicle."""

    start_year: Optional[int] = Field(None, ge=1, description="First production year")
    end_year: Optional[int] = Field(None, ge=1, description="Last production year")


class PartWrite(BaseModel):
    """
    Schema for creating or updating a part.

    ``year_ranges`` is aligned by position with ``vehicle_ids``; entries may be
    null or shorter than the id list.
    """

    name: str = Field(..., min_length=1, max_length=120, description="Part name")
    brand: str = Field(..., min_length=1, max_length=60, description="Part brand")
    category: str = Field(..., min_length=1, max_length=40, description="Category")
    price: Decimal = Field(..., ge=0, le=999999, description="Unit price")
    stock: int = Field(0, ge=0, description="Units in stock")
    description: Optional[str] = Field(None, description="Free-text description")
    image_url: Optional[str] = Field(None, max_length=300, description="Image URL")
    condition: Optional[str] = Field(None, max_length=20, description="Condition label")
    seller_id: Optional[int] = Field(None, description="Owning seller")
    vehicle_ids: List[int] = Field(default_factory=list, description="Compatible vehicle ids")
    year_ranges: List[Optional[VehicleYearRange]] = Field(
        default_factory=list, description="Per-vehicle production ranges"
    )

    @field_validator("name", "brand", "category")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Reject whitespace-only values."""
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Fren Balatasi",
                "brand": "Bosch",
                "category": "Fren",
                "price": "450.00",
                "stock": 12,
                "vehicle_ids": [3, 7],
                "year_ranges": [{"start_year": 2016, "end_year": 2020}, None],
            }
        }


class StockAdjustRequest(BaseModel):
    """Stock change; negative values decrement."""

    delta: int = Field(..., description="Amount to add to stock")


class StockResponse(BaseModel):
    id: int
    stock: int

    class Config:
        from_attributes = True

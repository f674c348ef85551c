"""
Vehicle schemas.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class VehicleResponse(BaseModel):
    """Schema for a vehicle catalog entry."""

    id: int = Field(..., description="Unique identifier")
    brand: str = Field(..., description="Vehicle brand")
    model: str = Field(..., description="Vehicle model")
    year: int = Field(..., description="Model year (mirrors start_year when a range is set)")
    engine: Optional[str] = Field(None, description="Engine or variant")
    start_year: Optional[int] = Field(None, description="First production year")
    end_year: Optional[int] = Field(None, description="Last production year")
    image_url: Optional[str] = Field(None, description="Vehicle image URL")
    brand_logo_url: Optional[str] = Field(None, description="Brand logo URL")

    class Config:
        from_attributes = True


class VehicleSearchResponse(BaseModel):
    """Schema for the vehicle catalog search."""

    vehicles: List[VehicleResponse] = Field(..., description="Matching vehicles")
    total: int = Field(..., description="Number of matching vehicles")
    brands: List[str] = Field(default_factory=list, description="All brands")
    models: List[str] = Field(default_factory=list, description="Models of the selected brand")
    years: List[int] = Field(default_factory=list, description="Model years, newest first")


class VehicleWrite(BaseModel):
    """Schema for creating or updating a vehicle."""

    brand: str = Field(..., min_length=1, max_length=60, description="Vehicle brand")
    model: str = Field(..., min_length=1, max_length=60, description="Vehicle model")
    year: Optional[int] = Field(None, description="Model year, required when no range is given")
    start_year: Optional[int] = Field(None, description="First production year")
    end_year: Optional[int] = Field(None, description="Last production year")
    engine: Optional[str] = Field(None, max_length=60, description="Engine or variant")
    image_url: Optional[str] = Field(None, max_length=300, description="Vehicle image URL")
    brand_logo_url: Optional[str] = Field(None, max_length=300, description="Brand logo URL")

    @field_validator("brand", "model")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "brand": "Fiat",
                "model": "Egea",
                "start_year": 2016,
                "end_year": 2023,
                "engine": "1.4 Fire",
            }
        }


class VehicleImportResponse(BaseModel):
    """Schema for the CSV import result."""

    imported: int = Field(..., description="Vehicles inserted")
    skipped: int = Field(..., description="Duplicate rows skipped")
    rejected: int = Field(0, description="Rows rejected by validation, including those beyond the error list cap")
    deleted_vehicles: int = Field(0, description="Vehicles removed by clear_existing")
    errors: List[str] = Field(default_factory=list, description="Row-level errors (capped)")
    message: str = Field(..., description="Summary message")

    class Config:
        from_attributes = True

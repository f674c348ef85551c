# Schemas module
from autoparts.api.v1.schemas.parts import (
    PartBrowseResponse,
    PartDetail,
    PartFilterFacets,
    PartListItem,
    PartWrite,
    StockAdjustRequest,
    StockResponse,
    VehicleYearRange,
)
from autoparts.api.v1.schemas.vehicle import (
    VehicleImportResponse,
    VehicleResponse,
    VehicleSearchResponse,
    VehicleWrite,
)

__all__ = [
    # Parts schemas
    "PartBrowseResponse",
    "PartDetail",
    "PartFilterFacets",
    "PartListItem",
    "PartWrite",
    "StockAdjustRequest",
    "StockResponse",
    "VehicleYearRange",
    # Vehicle schemas
    "VehicleImportResponse",
    "VehicleResponse",
    "VehicleSearchResponse",
    "VehicleWrite",
]

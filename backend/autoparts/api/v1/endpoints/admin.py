"""
Admin catalog maintenance endpoints.

Provides endpoints to:
- Create and update vehicles (with production-range validation)
- Bulk import vehicles from a CSV upload
- Create and update parts with their vehicle compatibility
- Adjust part stock

These routes are mounted behind the deployment's admin authentication.
"""

from typing import Any, Dict, Union

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.api.v1.endpoints.parts import part_to_detail
from autoparts.api.v1.schemas.parts import (
    PartDetail,
    PartWrite,
    StockAdjustRequest,
    StockResponse,
)
from autoparts.api.v1.schemas.vehicle import (
    VehicleImportResponse,
    VehicleResponse,
    VehicleWrite,
)
from autoparts.core.config import settings
from autoparts.core.logging import get_logger
from autoparts.db.postgres.repositories import YearRangeInput
from autoparts.db.postgres.session import get_db
from autoparts.services.part_maintenance import PartMaintenanceService
from autoparts.services.vehicle_catalog import VehicleCatalogService
from autoparts.services.vehicle_import import VehicleCsvImporter

router = APIRouter()
logger = get_logger(__name__)


IMPORT_RESPONSES: Dict[Union[int, str], Dict[str, Any]] = {
    200: {
        "description": "Vehicles imported",
        "content": {
            "application/json": {
                "example": {
                    "imported": 120,
                    "skipped": 3,
                    "rejected": 1,
                    "deleted_vehicles": 0,
                    "errors": ["Satir 7: Baslangic/bitis yili gecersiz."],
                    "message": "Aktarim tamamlandi. Eklenen: 120, Atlanan: 3. Hatali satir: 1.",
                }
            }
        },
    },
    400: {
        "description": "The file cannot be imported",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "ERR_4010",
                        "message": "CSV basliklari icinde Brand/Marka ve Model alanlari gerekli.",
                        "message_tr": "Arac CSV aktarimi basarisiz.",
                        "details": {"field": "file"},
                        "request_id": "5f0c6a0e-7c1e-4b43-9d8f-0d7f4c1b2a11",
                    }
                }
            }
        },
    },
}


def _year_ranges(payload: PartWrite) -> list[YearRangeInput | None]:
    return [
        YearRangeInput(start_year=r.start_year, end_year=r.end_year) if r is not None else None
        for r in payload.year_ranges
    ]


def _part_fields(payload: PartWrite) -> dict[str, Any]:
    return payload.model_dump(exclude={"vehicle_ids", "year_ranges"})


# =============================================================================
# Vehicles
# =============================================================================


@router.post(
    "/vehicles",
    response_model=VehicleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create vehicle",
)
async def create_vehicle(
    payload: VehicleWrite,
    db: AsyncSession = Depends(get_db),
) -> VehicleResponse:
    """
    Create a vehicle.

    Start and end year must be given together with start <= end, in which
    case the model year is set to the start year. Without a range a positive
    model year is required.
    """
    vehicle = await VehicleCatalogService(db).create_vehicle(payload.model_dump())
    return VehicleResponse.model_validate(vehicle)


@router.put(
    "/vehicles/{vehicle_id}",
    response_model=VehicleResponse,
    summary="Update vehicle",
)
async def update_vehicle(
    payload: VehicleWrite,
    vehicle_id: int = Path(..., description="Vehicle id"),
    db: AsyncSession = Depends(get_db),
) -> VehicleResponse:
    vehicle = await VehicleCatalogService(db).update_vehicle(vehicle_id, payload.model_dump())
    return VehicleResponse.model_validate(vehicle)


@router.post(
    "/vehicles/import",
    response_model=VehicleImportResponse,
    summary="Import vehicles from CSV",
    responses=IMPORT_RESPONSES,
)
async def import_vehicles(
    file: UploadFile = File(..., description="CSV file with a header line"),
    clear_existing: bool = Form(False, description="Replace the whole vehicle catalog"),
    db: AsyncSession = Depends(get_db),
) -> VehicleImportResponse:
    """
    Bulk-load vehicles.

    Rows with a blank brand/model or unusable years are reported and skipped;
    duplicate rows are counted as skipped. With ``clear_existing`` every
    vehicle and every part compatibility link is removed first, in the same
    transaction as the insert.
    """
    content = await file.read(settings.VEHICLE_IMPORT_MAX_BYTES + 1)
    logger.info(
        "Vehicle CSV upload received",
        extra={"upload_name": file.filename, "bytes": len(content), "clear_existing": clear_existing},
    )

    result = await VehicleCsvImporter(db).import_csv(content, clear_existing=clear_existing)

    message = f"Aktarim tamamlandi. Eklenen: {result.imported}, Atlanan: {result.skipped}."
    if result.rejected:
        message += f" Hatali satir: {result.rejected}."

    return VehicleImportResponse(
        imported=result.imported,
        skipped=result.skipped,
        rejected=result.rejected,
        deleted_vehicles=result.deleted_vehicles,
        errors=result.errors,
        message=message,
    )


# =============================================================================
# Parts
# =============================================================================


@router.post(
    "/parts",
    response_model=PartDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Create part",
)
async def create_part(
    payload: PartWrite,
    db: AsyncSession = Depends(get_db),
) -> PartDetail:
    """
    Create a part and link it to the selected vehicles.

    Each ``year_ranges`` entry applies to the vehicle at the same position in
    ``vehicle_ids``.
    """
    part = await PartMaintenanceService(db).create_part(
        _part_fields(payload), payload.vehicle_ids, _year_ranges(payload)
    )
    return part_to_detail(part)


@router.put(
    "/parts/{part_id}",
    response_model=PartDetail,
    summary="Update part",
)
async def update_part(
    payload: PartWrite,
    part_id: int = Path(..., description="Part id"),
    db: AsyncSession = Depends(get_db),
) -> PartDetail:
    """Update a part and reconcile its vehicle links with ``vehicle_ids``."""
    part = await PartMaintenanceService(db).update_part(
        part_id, _part_fields(payload), payload.vehicle_ids, _year_ranges(payload)
    )
    return part_to_detail(part)


@router.post(
    "/parts/{part_id}/stock",
    response_model=StockResponse,
    summary="Adjust part stock",
)
async def adjust_stock(
    payload: StockAdjustRequest,
    part_id: int = Path(..., description="Part id"),
    db: AsyncSession = Depends(get_db),
) -> StockResponse:
    """Add ``delta`` to stock. Stock never drops below zero."""
    part = await PartMaintenanceService(db).adjust_stock(part_id, payload.delta)
    return StockResponse.model_validate(part)

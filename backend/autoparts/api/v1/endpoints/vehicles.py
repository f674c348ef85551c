"""
Vehicle catalog endpoints.

Provides endpoints to:
- Search vehicles by free text, brand, model and production year
- Get a single vehicle
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.api.v1.schemas.vehicle import VehicleResponse, VehicleSearchResponse
from autoparts.core.logging import get_logger
from autoparts.db.postgres.session import get_db
from autoparts.services.vehicle_catalog import VehicleCatalogService, VehicleQuery, VehicleSort

router = APIRouter()
logger = get_logger(__name__)


@router.get(
    "",
    response_model=VehicleSearchResponse,
    summary="Search vehicles",
)
async def search_vehicles(
    q: Optional[str] = Query(None, description="Text matched against brand, model, engine and model year"),
    brand: Optional[str] = Query(None, description="Vehicle brand"),
    model: Optional[str] = Query(None, description="Vehicle model"),
    year: Optional[int] = Query(None, description="Production year"),
    sort: Optional[str] = Query(
        None, description="year_desc, year_asc, brand_az, brand_za; brand, model, newest year otherwise"
    ),
    db: AsyncSession = Depends(get_db),
) -> VehicleSearchResponse:
    """
    Search the vehicle catalog.

    Also returns select-box options: every brand, the models of the selected
    brand and the model years.
    """
    query = VehicleQuery(text=q, brand=brand, model=model, year=year, sort=VehicleSort.parse(sort))
    result = await VehicleCatalogService(db).search(query)
    logger.debug("Vehicle search", extra={"matched": len(result.vehicles), "sort": query.sort.value})

    return VehicleSearchResponse(
        vehicles=[VehicleResponse.model_validate(v) for v in result.vehicles],
        total=len(result.vehicles),
        brands=result.brands,
        models=result.models,
        years=result.years,
    )


@router.get(
    "/{vehicle_id}",
    response_model=VehicleResponse,
    summary="Get vehicle",
)
async def get_vehicle(
    vehicle_id: int = Path(..., description="Vehicle id"),
    db: AsyncSession = Depends(get_db),
) -> VehicleResponse:
    vehicle = await VehicleCatalogService(db).get_vehicle(vehicle_id)
    return VehicleResponse.model_validate(vehicle)

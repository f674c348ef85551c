"""
Part catalog endpoints.

Provides endpoints to:
- List parts with text, category, brand, price and vehicle filters
- Browse the storefront listing with part-brand options
- Get filter facets (categories, brands, vehicles, price span)
- Get a single part with its compatible vehicles
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.api.v1.schemas.parts import (
    PartBrowseResponse,
    PartDetail,
    PartFilterFacets,
    PartListItem,
)
from autoparts.api.v1.schemas.vehicle import VehicleResponse
from autoparts.core.logging import get_logger
from autoparts.db.postgres.models import Part
from autoparts.db.postgres.session import get_db
from autoparts.services.compatibility import VehicleFilter
from autoparts.services.normalization import merge_single_and_list, positive_years
from autoparts.services.part_catalog import (
    PartCatalogService,
    PartQuery,
    PartSort,
    compatible_vehicles,
)

router = APIRouter()
logger = get_logger(__name__)


# =============================================================================
# OpenAPI Response Examples
# =============================================================================

PART_LIST_RESPONSES: Dict[Union[int, str], Dict[str, Any]] = {
    200: {
        "description": "Filtered and sorted parts",
        "content": {
            "application/json": {
                "example": [
                    {
                        "id": 12,
                        "name": "Fren Balatasi",
                        "brand": "Bosch",
                        "category": "Fren",
                        "price": 450.0,
                        "stock": 8,
                        "image_url": None,
                        "vehicles": [
                            {
                                "id": 3,
                                "brand": "Fiat",
                                "model": "Egea",
                                "year": 2016,
                                "engine": "1.4 Fire",
                                "start_year": 2016,
                                "end_year": 2023,
                                "image_url": None,
                                "brand_logo_url": None,
                            }
                        ],
                        "seller_name": "Oto Yedek A.S.",
                    }
                ]
            }
        },
    },
}


# =============================================================================
# Query parsing
# =============================================================================


@dataclass
class PartQueryParams:
    """Raw query-string values shared by the listing endpoints."""

    q: Optional[str]
    category: Optional[str]
    category_list: Optional[List[str]]
    vehicle_id: Optional[int]
    brand: Optional[str]
    brand_list: Optional[List[str]]
    model: Optional[str]
    model_list: Optional[List[str]]
    year: Optional[int]
    year_list: Optional[List[int]]
    part_brand: Optional[str]
    part_brand_list: Optional[List[str]]
    min_price: Optional[Decimal]
    max_price: Optional[Decimal]
    sort: Optional[str]

    def to_query(self, positive_years_only: bool = True) -> PartQuery:
        if positive_years_only:
            years = positive_years(self.year, self.year_list)
        else:
            years = set(self.year_list or [])
            if self.year is not None:
                years.add(self.year)

        return PartQuery(
            text=self.q,
            categories=set(merge_single_and_list(self.category, self.category_list)),
            part_brands=set(merge_single_and_list(self.part_brand, self.part_brand_list)),
            price_min=self.min_price,
            price_max=self.max_price,
            vehicle=VehicleFilter(
                vehicle_id=self.vehicle_id,
                brands=set(merge_single_and_list(self.brand, self.brand_list)),
                models=set(merge_single_and_list(self.model, self.model_list)),
                years=years,
            ),
            sort=PartSort.parse(self.sort),
        )


def part_query_params(
    q: Optional[str] = Query(None, description="Text matched against name, brand and category"),
    category: Optional[str] = Query(None, description="Category"),
    category_list: Optional[List[str]] = Query(None, description="Categories (any of)"),
    vehicle_id: Optional[int] = Query(None, description="Explicit vehicle; overrides brand/model/year"),
    brand: Optional[str] = Query(None, description="Vehicle brand"),
    brand_list: Optional[List[str]] = Query(None, description="Vehicle brands (any of)"),
    model: Optional[str] = Query(None, description="Vehicle model"),
    model_list: Optional[List[str]] = Query(None, description="Vehicle models (any of)"),
    year: Optional[int] = Query(None, description="Vehicle production year"),
    year_list: Optional[List[int]] = Query(None, description="Vehicle production years (any of)"),
    part_brand: Optional[str] = Query(None, description="Part brand"),
    part_brand_list: Optional[List[str]] = Query(None, description="Part brands (any of)"),
    min_price: Optional[Decimal] = Query(None, description="Minimum price (inclusive)"),
    max_price: Optional[Decimal] = Query(None, description="Maximum price (inclusive)"),
    sort: Optional[str] = Query(
        None, description="price_asc, price_desc, name_asc, name_desc; newest first otherwise"
    ),
) -> PartQueryParams:
    return PartQueryParams(
        q=q,
        category=category,
        category_list=category_list,
        vehicle_id=vehicle_id,
        brand=brand,
        brand_list=brand_list,
        model=model,
        model_list=model_list,
        year=year,
        year_list=year_list,
        part_brand=part_brand,
        part_brand_list=part_brand_list,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
    )


# =============================================================================
# Serialization
# =============================================================================


def part_to_item(part: Part) -> PartListItem:
    return PartListItem(
        id=part.id,
        name=part.name,
        brand=part.brand,
        category=part.category,
        price=float(part.price),
        stock=part.stock,
        image_url=part.image_url,
        vehicles=[VehicleResponse.model_validate(v) for v in compatible_vehicles(part)],
        seller_name=part.seller.full_name if part.seller else None,
    )


def part_to_detail(part: Part) -> PartDetail:
    item = part_to_item(part)
    return PartDetail(
        **item.model_dump(exclude={"vehicles"}),
        vehicles=item.vehicles,
        description=part.description,
        condition=part.condition,
        seller_id=part.seller_id,
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.get(
    "",
    response_model=List[PartListItem],
    summary="List parts",
    responses=PART_LIST_RESPONSES,
)
async def list_parts(
    params: PartQueryParams = Depends(part_query_params),
    db: AsyncSession = Depends(get_db),
) -> List[PartListItem]:
    """
    List parts matching every supplied filter.

    Vehicle brand/model/year filters resolve to a set of vehicles first; when
    no vehicle matches, the result is empty. A vehicle matches a year when the
    year falls inside its production range, equals its model year when it has
    no range, or equals the single bound it has.
    """
    parts = await PartCatalogService(db).list_parts(params.to_query(positive_years_only=True))
    return [part_to_item(part) for part in parts]


@router.get(
    "/browse",
    response_model=PartBrowseResponse,
    summary="Storefront part listing",
)
async def browse_parts(
    params: PartQueryParams = Depends(part_query_params),
    db: AsyncSession = Depends(get_db),
) -> PartBrowseResponse:
    """
    Storefront listing.

    Hides parts of suspended sellers and returns the part brands available
    for the current text/category/vehicle filters. Years match a full
    production range, or the model year of vehicles without a start year.
    """
    result = await PartCatalogService(db).browse(params.to_query(positive_years_only=False))
    return PartBrowseResponse(
        parts=[part_to_item(part) for part in result.parts],
        total=len(result.parts),
        part_brand_options=result.part_brand_options,
    )


@router.get(
    "/filters",
    response_model=PartFilterFacets,
    summary="Filter facets",
)
async def get_filters(db: AsyncSession = Depends(get_db)) -> PartFilterFacets:
    """Distinct categories and part brands, every vehicle, and the price span."""
    facets = await PartCatalogService(db).filter_facets()
    return PartFilterFacets(
        categories=facets.categories,
        part_brands=facets.part_brands,
        vehicles=[VehicleResponse.model_validate(v) for v in facets.vehicles],
        min_price=float(facets.min_price),
        max_price=float(facets.max_price),
    )


@router.get(
    "/{part_id}",
    response_model=PartDetail,
    summary="Get part",
)
async def get_part(
    part_id: int = Path(..., description="Part id"),
    db: AsyncSession = Depends(get_db),
) -> PartDetail:
    part = await PartCatalogService(db).get_part(part_id)
    return part_to_detail(part)

"""
Vehicle catalog search and maintenance.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.core.exceptions import VehicleNotFoundException, VehicleYearException
from autoparts.core.logging import get_logger
from autoparts.db.postgres.models import Vehicle
from autoparts.db.postgres.repositories import VehicleRepository
from autoparts.services.compatibility import YearMatching, year_matches
from autoparts.services.normalization import clean_text, contains_ci, fold_case

logger = get_logger(__name__)

YEARS_REQUIRED_TOGETHER = "Baslangic ve bitis yili birlikte girilmeli."
START_AFTER_END = "Baslangic yili bitis yilindan buyuk olamaz."
YEAR_REQUIRED = "Yil girin."


class VehicleSort(StrEnum):
    DEFAULT = "default"
    YEAR_DESC = "year_desc"
    YEAR_ASC = "year_asc"
    BRAND_AZ = "brand_az"
    BRAND_ZA = "brand_za"

    @classmethod
    def parse(cls, value: str | None) -> "VehicleSort":
        try:
            return cls((value or "").strip())
        except ValueError:
            return cls.DEFAULT


@dataclass
class VehicleQuery:
    text: str | None = None
    brand: str | None = None
    model: str | None = None
    year: int | None = None
    sort: VehicleSort = VehicleSort.DEFAULT


@dataclass
class VehicleSearchResult:
    vehicles: list[Vehicle]
    brands: list[str] = field(default_factory=list)
    models: list[str] = field(default_factory=list)
    years: list[int] = field(default_factory=list)


def _text_matches(vehicle: Vehicle, text: str) -> bool:
    return (
        contains_ci(vehicle.brand, text)
        or contains_ci(vehicle.model, text)
        or contains_ci(vehicle.engine, text)
        or text in str(vehicle.year)
    )


def sort_vehicles(vehicles: Iterable[Vehicle], sort: VehicleSort) -> list[Vehicle]:
    """
    Order vehicles for the catalog page. Ties are broken by ascending id.

    Sorting runs from the least significant key to the most significant one,
    relying on sort stability.
    """
    ordered = sorted(vehicles, key=lambda v: v.id)
    if sort is VehicleSort.YEAR_DESC:
        ordered.sort(key=lambda v: (v.brand, v.model))
        ordered.sort(key=lambda v: v.year, reverse=True)
    elif sort is VehicleSort.YEAR_ASC:
        ordered.sort(key=lambda v: (v.year, v.brand, v.model))
    elif sort is VehicleSort.BRAND_ZA:
        ordered.sort(key=lambda v: v.year, reverse=True)
        ordered.sort(key=lambda v: v.model)
        ordered.sort(key=lambda v: v.brand, reverse=True)
    else:
        ordered.sort(key=lambda v: v.year, reverse=True)
        ordered.sort(key=lambda v: (v.brand, v.model))
    return ordered


def search_vehicles(vehicles: Iterable[Vehicle], query: VehicleQuery) -> list[Vehicle]:
    """
    Filter the vehicle catalog.

    ``text`` is a case-insensitive substring of brand, model, engine or model
    year. Brand and model are case-insensitive exact matches. ``year`` uses
    the partial-bounds year rule.
    """
    text = clean_text(query.text)
    brand = clean_text(query.brand)
    model = clean_text(query.model)

    result = []
    for vehicle in vehicles:
        if text and not _text_matches(vehicle, text):
            continue
        if brand and fold_case(vehicle.brand) != fold_case(brand):
            continue
        if model and fold_case(vehicle.model) != fold_case(model):
            continue
        if query.year is not None and query.year > 0:
            if not year_matches(vehicle, query.year, YearMatching.PARTIAL_BOUNDS):
                continue
        result.append(vehicle)
    return sort_vehicles(result, query.sort)


def vehicle_options(vehicles: Sequence[Vehicle], brand: str | None = None) -> tuple[list[str], list[str], list[int]]:
    """
    Select-box options: all brands, the models of ``brand`` (or of every
    brand), and model years newest first.
    """
    brand = clean_text(brand)
    brands = sorted({v.brand for v in vehicles})
    models = sorted({
        v.model for v in vehicles
        if brand is None or fold_case(v.brand) == fold_case(brand)
    })
    years = sorted({v.year for v in vehicles}, reverse=True)
    return brands, models, years


def normalize_vehicle_years(
    year: int | None,
    start_year: int | None,
    end_year: int | None,
) -> tuple[int, int | None, int | None]:
    """
    Validate the year fields of an admin vehicle form.

    If either bound is given both are required and must be ordered; the model
    year then mirrors the start year. Otherwise a positive model year is
    required.

    Raises:
        VehicleYearException: on any inconsistency
    """
    if start_year is not None or end_year is not None:
        if start_year is None or end_year is None:
            raise VehicleYearException(YEARS_REQUIRED_TOGETHER, field="start_year")
        if start_year > end_year:
            raise VehicleYearException(START_AFTER_END, field="start_year")
        return start_year, start_year, end_year

    if year is None or year <= 0:
        raise VehicleYearException(YEAR_REQUIRED, field="year")
    return year, None, None


class VehicleCatalogService:
    """Vehicle search and admin CRUD."""

    def __init__(self, db: AsyncSession):
        self.vehicles = VehicleRepository(db)

    async def search(self, query: VehicleQuery) -> VehicleSearchResult:
        all_vehicles = await self.vehicles.list_ordered()
        brands, models, years = vehicle_options(all_vehicles, query.brand)
        return VehicleSearchResult(
            vehicles=search_vehicles(all_vehicles, query),
            brands=brands,
            models=models,
            years=years,
        )

    async def get_vehicle(self, vehicle_id: int) -> Vehicle:
        vehicle = await self.vehicles.get(vehicle_id)
        if vehicle is None:
            raise VehicleNotFoundException(vehicle_id=vehicle_id)
        return vehicle

    @staticmethod
    def _prepare(data: dict[str, Any]) -> dict[str, Any]:
        year, start_year, end_year = normalize_vehicle_years(
            data.get("year"), data.get("start_year"), data.get("end_year")
        )
        prepared = {
            "brand": data["brand"].strip(),
            "model": data["model"].strip(),
            "engine": clean_text(data.get("engine")),
            "image_url": clean_text(data.get("image_url")),
            "brand_logo_url": clean_text(data.get("brand_logo_url")),
        }
        prepared.update(year=year, start_year=start_year, end_year=end_year)
        return prepared

    async def create_vehicle(self, data: dict[str, Any]) -> Vehicle:
        vehicle = await self.vehicles.create(self._prepare(data))
        logger.info("Vehicle created", extra={"vehicle_id": vehicle.id})
        return vehicle

    async def update_vehicle(self, vehicle_id: int, data: dict[str, Any]) -> Vehicle:
        await self.get_vehicle(vehicle_id)
        vehicle = await self.vehicles.update(vehicle_id, self._prepare(data))
        logger.info("Vehicle updated", extra={"vehicle_id": vehicle_id})
        return vehicle

"""
Part catalog filtering service.

Filters are built as an ordered list of predicates over already-loaded parts
and applied in a single conjunctive pass. Two call sites exist:

- the JSON parts listing (``filter_parts``) using the partial-bounds year rule
- the storefront browse listing (``browse_parts``) which keeps the simpler
  range-or-model-year rule, hides parts of suspended sellers and reports the
  part-brand options available before brand and price refinements
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum

from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.core.exceptions import PartNotFoundException
from autoparts.core.logging import get_logger
from autoparts.db.postgres.models import Part, Vehicle
from autoparts.db.postgres.repositories import PartRepository, UserRepository, VehicleRepository
from autoparts.services.compatibility import (
    VehicleFilter,
    YearMatching,
    part_matches,
    restricted_vehicle_ids,
)
from autoparts.services.normalization import casefold_set, clean_text, contains_ci, fold_case

logger = get_logger(__name__)

PartPredicate = Callable[[Part], bool]


class PartSort(StrEnum):
    """Supported sort keys for part listings."""

    DEFAULT = "default"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"

    @classmethod
    def parse(cls, value: str | None) -> "PartSort":
        """Unknown or missing values fall back to the default order."""
        try:
            return cls((value or "").strip())
        except ValueError:
            return cls.DEFAULT


@dataclass
class PartQuery:
    """Every filter a part listing accepts."""

    text: str | None = None
    categories: set[str] = field(default_factory=set)
    part_brands: set[str] = field(default_factory=set)
    price_min: Decimal | None = None
    price_max: Decimal | None = None
    vehicle: VehicleFilter = field(default_factory=VehicleFilter)
    sort: PartSort = PartSort.DEFAULT


@dataclass
class BrowseResult:
    parts: list[Part]
    part_brand_options: list[str]


@dataclass
class FilterFacets:
    categories: list[str]
    part_brands: list[str]
    vehicles: list[Vehicle]
    min_price: Decimal
    max_price: Decimal


# =============================================================================
# Predicates
# =============================================================================


def _narrowing_predicates(query: PartQuery, vehicle_ids: set[int] | None) -> list[PartPredicate]:
    """Text, category and vehicle predicates."""
    predicates: list[PartPredicate] = []

    text = clean_text(query.text)
    if text:
        predicates.append(
            lambda p: contains_ci(p.name, text) or contains_ci(p.brand, text) or contains_ci(p.category, text)
        )

    categories = casefold_set(query.categories)
    if categories:
        predicates.append(lambda p: fold_case(p.category or "") in categories)

    if vehicle_ids is not None:
        predicates.append(lambda p: part_matches(p, vehicle_ids))

    return predicates


def _refining_predicates(query: PartQuery) -> list[PartPredicate]:
    """Part-brand and price predicates."""
    predicates: list[PartPredicate] = []

    part_brands = casefold_set(query.part_brands)
    if part_brands:
        predicates.append(lambda p: fold_case(p.brand or "") in part_brands)

    if query.price_min is not None:
        price_min = query.price_min
        predicates.append(lambda p: p.price >= price_min)
    if query.price_max is not None:
        price_max = query.price_max
        predicates.append(lambda p: p.price <= price_max)

    return predicates


def apply_predicates(parts: Iterable[Part], predicates: Sequence[PartPredicate]) -> list[Part]:
    return [part for part in parts if all(predicate(part) for predicate in predicates)]


def sort_parts(parts: Iterable[Part], sort: PartSort) -> list[Part]:
    """
    Order parts by the requested key.

    The default is newest first (id descending). Every other key breaks ties
    by ascending id. Name comparison is case-sensitive.
    """
    by_id = sorted(parts, key=lambda p: p.id)
    if sort is PartSort.PRICE_ASC:
        return sorted(by_id, key=lambda p: p.price)
    if sort is PartSort.PRICE_DESC:
        return sorted(by_id, key=lambda p: p.price, reverse=True)
    if sort is PartSort.NAME_ASC:
        return sorted(by_id, key=lambda p: p.name)
    if sort is PartSort.NAME_DESC:
        return sorted(by_id, key=lambda p: p.name, reverse=True)
    return list(reversed(by_id))


def distinct_sorted(values: Iterable[str | None]) -> list[str]:
    """Distinct non-blank values in lexical order."""
    return sorted({value for value in values if value and value.strip()})


# =============================================================================
# Listings
# =============================================================================


def filter_parts(
    parts: Iterable[Part],
    vehicles: Iterable[Vehicle],
    query: PartQuery,
    matching: YearMatching = YearMatching.PARTIAL_BOUNDS,
) -> list[Part]:
    """
    Filter and sort parts.

    A vehicle filter that resolves to no vehicles yields no parts rather than
    falling back to the unfiltered catalog.
    """
    vehicle_ids = restricted_vehicle_ids(vehicles, query.vehicle, matching)
    if vehicle_ids is not None and not vehicle_ids:
        return []

    predicates = _narrowing_predicates(query, vehicle_ids) + _refining_predicates(query)
    return sort_parts(apply_predicates(parts, predicates), query.sort)


def browse_parts(
    parts: Iterable[Part],
    vehicles: Iterable[Vehicle],
    query: PartQuery,
    suspended_seller_ids: set[int] | None = None,
) -> BrowseResult:
    """
    Storefront listing.

    Part-brand options are taken from the candidates left after the text,
    category and vehicle filters, before part-brand and price are applied.
    """
    vehicle_ids = restricted_vehicle_ids(vehicles, query.vehicle, YearMatching.RANGE_OR_MODEL_YEAR)
    if vehicle_ids is not None and not vehicle_ids:
        return BrowseResult(parts=[], part_brand_options=[])

    predicates: list[PartPredicate] = []
    if suspended_seller_ids:
        predicates.append(lambda p: p.seller_id is None or p.seller_id not in suspended_seller_ids)
    predicates.extend(_narrowing_predicates(query, vehicle_ids))

    candidates = apply_predicates(parts, predicates)
    options = distinct_sorted(p.brand for p in candidates)

    refined = apply_predicates(candidates, _refining_predicates(query))
    return BrowseResult(parts=sort_parts(refined, query.sort), part_brand_options=options)


def build_filter_facets(parts: Sequence[Part], vehicles: Sequence[Vehicle]) -> FilterFacets:
    """Distinct categories and brands, the vehicle list, and the price span."""
    prices = [p.price for p in parts]
    return FilterFacets(
        categories=distinct_sorted(p.category for p in parts),
        part_brands=distinct_sorted(p.brand for p in parts),
        vehicles=sorted(vehicles, key=lambda v: (v.brand, v.model, v.year, v.id)),
        min_price=min(prices) if prices else Decimal("0"),
        max_price=max(prices) if prices else Decimal("0"),
    )


def compatible_vehicles(part: Part) -> list[Vehicle]:
    """Legacy vehicle first, then linked vehicles, without repeats."""
    result: list[Vehicle] = []
    seen: set[int] = set()
    if part.vehicle is not None:
        result.append(part.vehicle)
        seen.add(part.vehicle.id)
    for link in part.vehicle_links:
        if link.vehicle is None or link.vehicle_id in seen:
            continue
        result.append(link.vehicle)
        seen.add(link.vehicle_id)
    return result


# =============================================================================
# Service
# =============================================================================


class PartCatalogService:
    """Loads the catalog from the database and runs the in-memory filters."""

    def __init__(self, db: AsyncSession):
        self.parts = PartRepository(db)
        self.vehicles = VehicleRepository(db)
        self.users = UserRepository(db)

    async def list_parts(self, query: PartQuery) -> list[Part]:
        parts = await self.parts.list_for_catalog()
        vehicles = await self.vehicles.list_ordered() if query.vehicle.has_dimensions else []
        result = filter_parts(parts, vehicles, query)
        logger.debug(
            "Parts filtered",
            extra={"candidates": len(parts), "matched": len(result), "sort": query.sort.value},
        )
        return result

    async def browse(self, query: PartQuery) -> BrowseResult:
        parts = await self.parts.list_for_catalog()
        vehicles = await self.vehicles.list_ordered() if query.vehicle.has_dimensions else []
        suspended = await self.users.get_suspended_seller_ids()
        return browse_parts(parts, vehicles, query, suspended)

    async def filter_facets(self) -> FilterFacets:
        parts = await self.parts.list_for_catalog()
        vehicles = await self.vehicles.list_ordered()
        return build_filter_facets(parts, vehicles)

    async def get_part(self, part_id: int) -> Part:
        part = await self.parts.get_with_compatibility(part_id)
        if part is None:
            raise PartNotFoundException(part_id=part_id)
        return part

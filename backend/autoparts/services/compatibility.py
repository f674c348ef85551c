"""
Vehicle compatibility resolution.

A vehicle carries either a model year or a production range, and a part is
compatible with the union of its legacy ``vehicle_id`` and its
``PartVehicle`` links. This module turns a brand/model/year filter into a set
of vehicle ids and tests parts against that set.

Restricted id sets follow one convention throughout: ``None`` means "no
vehicle constraint", an empty set means "nothing matches".
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol, Union

from autoparts.services.normalization import casefold_set, fold_case


class VehicleLike(Protocol):
    id: int
    brand: str
    model: str
    year: int
    start_year: int | None
    end_year: int | None


class YearMatching(StrEnum):
    """Which year rule a call site uses."""

    # Full range, model year, or the single bound that is set
    PARTIAL_BOUNDS = "partial_bounds"
    # Full range, or model year when no start year is set
    RANGE_OR_MODEL_YEAR = "range_or_model_year"


# =============================================================================
# Year specification
# =============================================================================


@dataclass(frozen=True)
class Exact:
    year: int

    def matches(self, query_year: int) -> bool:
        return self.year == query_year


@dataclass(frozen=True)
class Range:
    start: int
    end: int

    def matches(self, query_year: int) -> bool:
        return self.start <= query_year <= self.end


@dataclass(frozen=True)
class PartialStart:
    start: int

    def matches(self, query_year: int) -> bool:
        return self.start == query_year


@dataclass(frozen=True)
class PartialEnd:
    end: int

    def matches(self, query_year: int) -> bool:
        return self.end == query_year


YearSpec = Union[Exact, Range, PartialStart, PartialEnd]


def year_spec(vehicle: VehicleLike) -> YearSpec:
    """Classify a vehicle's year columns."""
    start, end = vehicle.start_year, vehicle.end_year
    if start is not None and end is not None:
        return Range(start, end)
    if start is not None:
        return PartialStart(start)
    if end is not None:
        return PartialEnd(end)
    return Exact(vehicle.year)


def year_matches(
    vehicle: VehicleLike,
    query_year: int,
    matching: YearMatching = YearMatching.PARTIAL_BOUNDS,
) -> bool:
    """
    Test whether a vehicle was produced in ``query_year``.

    Under ``RANGE_OR_MODEL_YEAR`` a vehicle with only a start year never
    matches, and one with only an end year falls back to its model year.
    """
    spec = year_spec(vehicle)
    if matching is YearMatching.PARTIAL_BOUNDS:
        return spec.matches(query_year)

    if isinstance(spec, Range):
        return spec.matches(query_year)
    if vehicle.start_year is None:
        return vehicle.year == query_year
    return False


# =============================================================================
# Vehicle filter
# =============================================================================


@dataclass
class VehicleFilter:
    """
    Vehicle part of a catalog query.

    An explicit ``vehicle_id`` takes precedence over brand/model/year.
    """

    vehicle_id: int | None = None
    brands: set[str] = field(default_factory=set)
    models: set[str] = field(default_factory=set)
    years: set[int] = field(default_factory=set)

    @property
    def has_explicit_vehicle(self) -> bool:
        return self.vehicle_id is not None and self.vehicle_id > 0

    @property
    def has_dimensions(self) -> bool:
        return bool(casefold_set(self.brands) or casefold_set(self.models) or self.years)

    @property
    def is_active(self) -> bool:
        return self.has_explicit_vehicle or self.has_dimensions


def resolve_vehicle_ids(
    vehicles: Iterable[VehicleLike],
    brands: Iterable[str] = (),
    models: Iterable[str] = (),
    years: Iterable[int] = (),
    matching: YearMatching = YearMatching.PARTIAL_BOUNDS,
) -> set[int]:
    """
    Ids of vehicles satisfying every active dimension.

    Brand and model are case-insensitive exact matches. A vehicle passes the
    year dimension when it matches at least one requested year. An empty
    dimension places no constraint; an empty result is a valid outcome.
    """
    brand_keys = casefold_set(brands)
    model_keys = casefold_set(models)
    year_set = set(years)

    matched: set[int] = set()
    for vehicle in vehicles:
        if brand_keys and fold_case(vehicle.brand or "") not in brand_keys:
            continue
        if model_keys and fold_case(vehicle.model or "") not in model_keys:
            continue
        if year_set and not any(year_matches(vehicle, y, matching) for y in year_set):
            continue
        matched.add(vehicle.id)
    return matched


def restricted_vehicle_ids(
    vehicles: Iterable[VehicleLike],
    vehicle_filter: VehicleFilter,
    matching: YearMatching = YearMatching.PARTIAL_BOUNDS,
) -> set[int] | None:
    """
    Resolve a vehicle filter to the restricted id set.

    Returns None when the filter is inactive, the singleton set for an
    explicit vehicle id, and otherwise the (possibly empty) resolved set.
    """
    if vehicle_filter.has_explicit_vehicle:
        return {vehicle_filter.vehicle_id}
    if not vehicle_filter.has_dimensions:
        return None
    return resolve_vehicle_ids(
        vehicles,
        brands=vehicle_filter.brands,
        models=vehicle_filter.models,
        years=vehicle_filter.years,
        matching=matching,
    )


def part_matches(part, vehicle_ids: set[int]) -> bool:
    """True if the legacy vehicle or any linked vehicle is in ``vehicle_ids``."""
    if not vehicle_ids:
        return False
    if part.vehicle_id is not None and part.vehicle_id in vehicle_ids:
        return True
    return any(link.vehicle_id in vehicle_ids for link in part.vehicle_links)

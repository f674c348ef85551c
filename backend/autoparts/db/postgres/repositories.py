"""
Repository pattern implementations for database operations.

This module provides repository classes for database operations following
the repository pattern for clean separation of data access logic.

Catalog filtering itself runs in memory over rows loaded here, so the part
loaders eagerly fetch everything the filters and the DTOs touch (legacy
vehicle, vehicle links with their vehicles, seller).
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from autoparts.db.postgres.models import Base, Part, PartVehicle, User, UserRole, Vehicle

# Generic type for models
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common CRUD operations.

    Attributes:
        model: The SQLAlchemy model class.
        db: The async database session.
    """

    def __init__(self, model: type[ModelType], db: AsyncSession) -> None:
        self.model = model
        self.db = db

    async def get(self, id: int) -> ModelType | None:
        """Get a single record by ID."""
        result = await self.db.execute(select(self.model).where(self.model.id == id))  # type: ignore[attr-defined]
        return result.scalar_one_or_none()

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[ModelType]:
        """Get all records with pagination."""
        result = await self.db.execute(select(self.model).offset(skip).limit(limit))
        return list(result.scalars().all())

    async def create(self, obj_in: dict[str, Any]) -> ModelType:
        """Create a new record."""
        db_obj = self.model(**obj_in)
        self.db.add(db_obj)
        await self.db.flush()
        await self.db.refresh(db_obj)
        return db_obj

    async def update(self, id: int, obj_in: dict[str, Any]) -> ModelType | None:
        """Update an existing record."""
        db_obj = await self.get(id)
        if db_obj:
            for key, value in obj_in.items():
                setattr(db_obj, key, value)
            await self.db.flush()
            await self.db.refresh(db_obj)
        return db_obj

    async def delete(self, id: int) -> bool:
        """Delete a record."""
        db_obj = await self.get(id)
        if db_obj:
            await self.db.delete(db_obj)
            await self.db.flush()
            return True
        return False

    async def count(self) -> int:
        """Count all records."""
        result = await self.db.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()


class UserRepository(BaseRepository[User]):
    """Repository for marketplace accounts."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(User, db)

    async def get_suspended_seller_ids(self) -> set[int]:
        """Ids of sellers whose listings are hidden from the storefront."""
        result = await self.db.execute(
            select(User.id).where(User.role == UserRole.SELLER_SUSPENDED)
        )
        return set(result.scalars().all())


class VehicleRepository(BaseRepository[Vehicle]):
    """Repository for the vehicle catalog."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(Vehicle, db)

    async def list_ordered(self) -> list[Vehicle]:
        """All vehicles ordered by brand, model, year."""
        result = await self.db.execute(
            select(Vehicle).order_by(Vehicle.brand, Vehicle.model, Vehicle.year, Vehicle.id)
        )
        return list(result.scalars().all())

    async def get_many(self, ids: Sequence[int]) -> dict[int, Vehicle]:
        """Vehicles keyed by id. Unknown ids are absent from the result."""
        if not ids:
            return {}
        result = await self.db.execute(select(Vehicle).where(Vehicle.id.in_(set(ids))))
        return {vehicle.id: vehicle for vehicle in result.scalars().all()}

    async def find_missing_ids(self, ids: Sequence[int]) -> list[int]:
        """Requested ids with no matching vehicle, in request order."""
        found = await self.get_many(ids)
        missing: list[int] = []
        for vehicle_id in ids:
            if vehicle_id not in found and vehicle_id not in missing:
                missing.append(vehicle_id)
        return missing

    async def add_many(self, vehicles: Sequence[Vehicle]) -> None:
        """Stage new vehicles and flush them."""
        self.db.add_all(list(vehicles))
        await self.db.flush()

    async def delete_all(self) -> int:
        """Delete every vehicle. Returns the number of rows removed."""
        result = await self.db.execute(delete(Vehicle))
        return result.rowcount or 0


@dataclass
class YearRangeInput:
    """Per-vehicle production range submitted with a part's compatibility list."""

    start_year: int | None = None
    end_year: int | None = None

    @property
    def is_valid(self) -> bool:
        return (
            self.start_year is not None
            and self.end_year is not None
            and self.start_year <= self.end_year
        )


class PartRepository(BaseRepository[Part]):
    """Repository for parts and their vehicle compatibility links."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(Part, db)

    @staticmethod
    def _with_compatibility():
        return (
            selectinload(Part.vehicle),
            selectinload(Part.vehicle_links).selectinload(PartVehicle.vehicle),
            selectinload(Part.seller),
        )

    async def get_with_compatibility(self, id: int) -> Part | None:
        """Get a part with its legacy vehicle, links and seller loaded."""
        result = await self.db.execute(
            select(Part)
            .where(Part.id == id)
            .options(*self._with_compatibility())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_for_catalog(self) -> list[Part]:
        """Every part with what the catalog filters and DTOs read."""
        result = await self.db.execute(
            select(Part).options(*self._with_compatibility()).order_by(Part.id)
        )
        return list(result.scalars().all())

    async def sync_vehicle_links(
        self,
        part: Part,
        vehicle_ids: Sequence[int] | None,
        year_ranges: Sequence[YearRangeInput | None] | None = None,
    ) -> None:
        """
        Reconcile a part's PartVehicle rows with the submitted selection.

        Non-positive ids are ignored and duplicates collapse. Links that are no
        longer selected are deleted, missing ones are inserted.

        ``year_ranges`` is aligned by position with ``vehicle_ids``; a vehicle
        uses the range at the position of its first occurrence. A valid range
        overwrites the vehicle's production range, otherwise a vehicle without
        a full range gets start = end = model year.
        """
        submitted = list(vehicle_ids or [])
        ranges = list(year_ranges or [])
        desired: list[int] = []
        for vehicle_id in submitted:
            if vehicle_id > 0 and vehicle_id not in desired:
                desired.append(vehicle_id)

        result = await self.db.execute(
            select(PartVehicle).where(PartVehicle.part_id == part.id)
        )
        existing = {link.vehicle_id: link for link in result.scalars().all()}

        for vehicle_id, link in existing.items():
            if vehicle_id not in desired:
                await self.db.delete(link)

        vehicles = await VehicleRepository(self.db).get_many(desired)
        for vehicle_id in desired:
            if vehicle_id not in existing:
                self.db.add(PartVehicle(part_id=part.id, vehicle_id=vehicle_id))

            vehicle = vehicles.get(vehicle_id)
            if vehicle is None:
                continue

            index = submitted.index(vehicle_id)
            year_range = ranges[index] if index < len(ranges) else None
            if year_range is not None and year_range.is_valid:
                vehicle.start_year = year_range.start_year
                vehicle.end_year = year_range.end_year
                vehicle.year = year_range.start_year
            elif vehicle.start_year is None or vehicle.end_year is None:
                vehicle.start_year = vehicle.year
                vehicle.end_year = vehicle.year

        await self.db.flush()

    async def adjust_stock(self, part: Part, delta: int) -> Part:
        """Change stock by ``delta``, never going below zero."""
        part.stock = max(0, part.stock + delta)
        await self.db.flush()
        return part

    async def delete_all_vehicle_links(self) -> int:
        """Remove every PartVehicle row. Returns the number removed."""
        result = await self.db.execute(delete(PartVehicle))
        return result.rowcount or 0

    async def detach_legacy_vehicles(self) -> int:
        """Null every part's legacy vehicle_id. Returns the number of parts touched."""
        result = await self.db.execute(
            update(Part).where(Part.vehicle_id.is_not(None)).values(vehicle_id=None)
        )
        return result.rowcount or 0

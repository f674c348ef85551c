"""
Admin maintenance of parts: create, update with vehicle compatibility, stock.
"""

from collections.abc import Sequence
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.core.exceptions import PartNotFoundException, ValidationException
from autoparts.core.logging import get_logger
from autoparts.db.postgres.models import Part
from autoparts.db.postgres.repositories import (
    PartRepository,
    UserRepository,
    VehicleRepository,
    YearRangeInput,
)
from autoparts.services.normalization import clean_text

logger = get_logger(__name__)

UNKNOWN_VEHICLE = "Secilen arac bulunamadi."
UNKNOWN_SELLER = "Satici bulunamadi."


class PartMaintenanceService:
    """Creates and edits parts and keeps their PartVehicle links in sync."""

    def __init__(self, db: AsyncSession):
        self.parts = PartRepository(db)
        self.vehicles = VehicleRepository(db)
        self.users = UserRepository(db)

    async def _validate_references(self, data: dict[str, Any], vehicle_ids: Sequence[int]) -> None:
        positive_ids = [vid for vid in vehicle_ids if vid > 0]
        missing = await self.vehicles.find_missing_ids(positive_ids)
        if missing:
            raise ValidationException(
                UNKNOWN_VEHICLE,
                field="vehicle_ids",
                details={"missing_vehicle_ids": missing},
            )

        seller_id = data.get("seller_id")
        if seller_id is not None and await self.users.get(seller_id) is None:
            raise ValidationException(UNKNOWN_SELLER, field="seller_id")

    @staticmethod
    def _prepare(data: dict[str, Any]) -> dict[str, Any]:
        prepared = dict(data)
        for key in ("name", "brand", "category"):
            prepared[key] = prepared[key].strip()
        prepared["description"] = clean_text(prepared.get("description"))
        prepared["image_url"] = clean_text(prepared.get("image_url"))
        if not clean_text(prepared.get("condition")):
            prepared.pop("condition", None)
        # Compatibility lives in part_vehicles; the legacy column is cleared on save
        prepared["vehicle_id"] = None
        return prepared

    async def create_part(
        self,
        data: dict[str, Any],
        vehicle_ids: Sequence[int] = (),
        year_ranges: Sequence[YearRangeInput | None] | None = None,
    ) -> Part:
        await self._validate_references(data, vehicle_ids)
        part = await self.parts.create(self._prepare(data))
        await self.parts.sync_vehicle_links(part, vehicle_ids, year_ranges)
        logger.info("Part created", extra={"part_id": part.id, "vehicle_count": len(set(vehicle_ids))})
        return await self.parts.get_with_compatibility(part.id)

    async def update_part(
        self,
        part_id: int,
        data: dict[str, Any],
        vehicle_ids: Sequence[int] = (),
        year_ranges: Sequence[YearRangeInput | None] | None = None,
    ) -> Part:
        part = await self.parts.get(part_id)
        if part is None:
            raise PartNotFoundException(part_id=part_id)

        await self._validate_references(data, vehicle_ids)
        for key, value in self._prepare(data).items():
            setattr(part, key, value)
        await self.parts.sync_vehicle_links(part, vehicle_ids, year_ranges)
        logger.info("Part updated", extra={"part_id": part_id, "vehicle_count": len(set(vehicle_ids))})
        return await self.parts.get_with_compatibility(part_id)

    async def adjust_stock(self, part_id: int, delta: int) -> Part:
        """Change stock by ``delta``; the result is clamped at zero."""
        part = await self.parts.get(part_id)
        if part is None:
            raise PartNotFoundException(part_id=part_id)
        await self.parts.adjust_stock(part, delta)
        logger.info("Part stock adjusted", extra={"part_id": part_id, "delta": delta, "stock": part.stock})
        return part

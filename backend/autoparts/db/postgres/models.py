"""
SQLAlchemy models for PostgreSQL database.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class UserRole:
    """Role names stored on ``User.role``."""

    ADMIN = "Admin"
    SELLER = "Seller"
    SELLER_SUSPENDED = "SellerSuspended"
    USER = "User"


class User(Base):
    """Marketplace account. Only the fields the catalog needs to own parts."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    role: Mapped[str] = mapped_column(String(30), default=UserRole.USER, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    parts = relationship("Part", back_populates="seller")


class Vehicle(Base):
    """
    Vehicle catalog entry.

    ``year`` is the model year; ``start_year``/``end_year`` describe an
    inclusive production range. When both bounds are set ``year`` mirrors
    ``start_year``.
    """

    __tablename__ = "vehicles"
    __table_args__ = (
        CheckConstraint(
            "start_year IS NULL OR end_year IS NULL OR start_year <= end_year",
            name="ck_vehicles_year_range",
        ),
        Index("ix_vehicles_brand_model", "brand", "model"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    brand: Mapped[str] = mapped_column(String(60), nullable=False)
    model: Mapped[str] = mapped_column(String(60), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    start_year: Mapped[int | None] = mapped_column(Integer)
    end_year: Mapped[int | None] = mapped_column(Integer)
    engine: Mapped[str | None] = mapped_column(String(60))
    image_url: Mapped[str | None] = mapped_column(String(300))
    brand_logo_url: Mapped[str | None] = mapped_column(String(300))

    # Relationships
    legacy_parts = relationship("Part", back_populates="vehicle")
    part_links = relationship("PartVehicle", back_populates="vehicle", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Vehicle {self.id} {self.brand} {self.model} {self.year}>"


class Part(Base):
    """Spare part listed by an admin or a seller."""

    __tablename__ = "parts"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_parts_stock_non_negative"),
        CheckConstraint("price >= 0 AND price <= 999999", name="ck_parts_price_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    brand: Mapped[str] = mapped_column(String(60), nullable=False)
    category: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    image_url: Mapped[str | None] = mapped_column(String(300))
    condition: Mapped[str] = mapped_column(String(20), default="Sıfır", nullable=False)

    seller_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), index=True
    )
    # Deprecated single-vehicle link, kept alongside part_vehicles
    vehicle_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("vehicles.id", ondelete="SET NULL"), index=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    seller = relationship("User", back_populates="parts")
    vehicle = relationship("Vehicle", back_populates="legacy_parts")
    vehicle_links = relationship("PartVehicle", back_populates="part", cascade="all, delete-orphan")

    @property
    def compatible_vehicle_ids(self) -> set[int]:
        """Legacy vehicle_id united with every linked vehicle id."""
        ids = {link.vehicle_id for link in self.vehicle_links}
        if self.vehicle_id is not None:
            ids.add(self.vehicle_id)
        return ids

    def __repr__(self) -> str:
        return f"<Part {self.id} {self.name}>"


class PartVehicle(Base):
    """Association between a part and a compatible vehicle."""

    __tablename__ = "part_vehicles"

    part_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("parts.id", ondelete="CASCADE"), primary_key=True
    )
    vehicle_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), primary_key=True, index=True
    )

    # Relationships
    part = relationship("Part", back_populates="vehicle_links")
    vehicle = relationship("Vehicle", back_populates="part_links")

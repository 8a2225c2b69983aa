from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Numeric, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql.sqltypes import BigInteger, DateTime, Integer, String


class Base(DeclarativeBase):
    pass


class Location(Base):
    __tablename__ = "locations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    google_calendar_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    time_slots: Mapped[list["TimeSlot"]] = relationship(back_populates="location")


class Treatment(Base):
    __tablename__ = "treatments"
    __table_args__ = (
        CheckConstraint("duration_minutes_200ml > 0", name="chk_treatments_duration_200"),
        CheckConstraint("duration_minutes_1000ml > 0", name="chk_treatments_duration_1000"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal(0))
    duration_minutes_200ml: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    duration_minutes_1000ml: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class AdditionalVitamin(Base):
    __tablename__ = "additional_vitamins"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal(0))


class TimeSlot(Base):
    __tablename__ = "time_slots"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="chk_time_slots_time"),
        CheckConstraint("capacity >= 1", name="chk_time_slots_capacity"),
        CheckConstraint("booked_count >= 0 AND booked_count <= capacity", name="chk_time_slots_booked"),
        UniqueConstraint("location_id", "start_time", name="uq_time_slots"),
        Index("idx_time_slots_location_start", "location_id", "start_time"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    location_id: Mapped[str] = mapped_column(ForeignKey("locations.id"), nullable=False)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    booked_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    location: Mapped["Location"] = relationship(back_populates="time_slots")

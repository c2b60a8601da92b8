from datetime import date, time
from typing import Optional

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sis_records.models.audit import AuditMixin
from sis_records.models.base import Base
from sis_records.models.enums import DisplayEnum
from sis_records.models.lifecycle import is_in_force
from sis_records.models.people import Staff


class RouteType(DisplayEnum):
    REGULAR = ("Regular Route",)
    SPECIAL_NEEDS = ("Special Needs Route",)
    ACTIVITY = ("Activity/Late Bus",)
    FIELD_TRIP = ("Field Trip",)
    SHUTTLE = ("Shuttle",)


class BusRoute(AuditMixin, Base):
    __tablename__ = "bus_routes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    route_number: Mapped[str] = mapped_column(
        String(20), unique=True, index=True, nullable=False
    )
    name: Mapped[Optional[str]] = mapped_column(String(100))
    route_type: Mapped[RouteType] = mapped_column(
        default=RouteType.REGULAR, nullable=False
    )
    driver_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("staff.id", ondelete="SET NULL")
    )
    bus_number: Mapped[Optional[str]] = mapped_column(String(20))
    capacity: Mapped[Optional[int]] = mapped_column(Integer)
    current_ridership: Mapped[Optional[int]] = mapped_column(Integer, default=0)
    morning_departure: Mapped[Optional[time]] = mapped_column(Time)
    afternoon_departure: Mapped[Optional[time]] = mapped_column(Time)
    service_start_date: Mapped[Optional[date]] = mapped_column(Date)
    service_end_date: Mapped[Optional[date]] = mapped_column(Date)
    active: Mapped[Optional[bool]] = mapped_column(Boolean, default=True)

    driver: Mapped[Optional["Staff"]] = relationship()

    def occupancy_percentage(self) -> float:
        """Share of seats taken, 0.0 for a route with no known capacity."""
        if not self.capacity:
            return 0.0
        return round((self.current_ridership or 0) * 100.0 / self.capacity, 1)

    def available_seats(self) -> int:
        if not self.capacity:
            return 0
        return max(self.capacity - (self.current_ridership or 0), 0)

    def is_at_capacity(self) -> bool:
        return bool(self.capacity) and (self.current_ridership or 0) >= self.capacity

    def is_in_service(self, today: Optional[date] = None) -> bool:
        return is_in_force(
            self.active, self.service_start_date, self.service_end_date, today
        )

    def __repr__(self) -> str:
        return (
            f"<BusRoute id={self.id!r} route_number={self.route_number!r} "
            f"ridership={self.current_ridership!r}/{self.capacity!r}>"
        )

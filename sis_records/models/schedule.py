from datetime import date, datetime, time
from typing import List, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sis_records.models.audit import AuditMixin
from sis_records.models.base import Base
from sis_records.models.enums import DisplayEnum
from sis_records.models.lifecycle import is_in_force


class ScheduleType(DisplayEnum):
    REGULAR = ("Regular Day",)
    EARLY_RELEASE = ("Early Release",)
    LATE_START = ("Late Start",)
    ASSEMBLY = ("Assembly Schedule",)
    TESTING = ("Testing Schedule",)
    HALF_DAY = ("Half Day",)


class PeriodType(DisplayEnum):
    CLASS = ("Class Period",)
    LUNCH = ("Lunch",)
    PASSING = ("Passing Time",)
    HOMEROOM = ("Homeroom",)
    ADVISORY = ("Advisory",)
    BREAK = ("Break",)


NON_INSTRUCTIONAL = frozenset({PeriodType.LUNCH, PeriodType.PASSING, PeriodType.BREAK})


class BellSchedule(AuditMixin, Base):
    __tablename__ = "bell_schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    schedule_type: Mapped[ScheduleType] = mapped_column(
        default=ScheduleType.REGULAR, nullable=False
    )
    is_default: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    active: Mapped[Optional[bool]] = mapped_column(Boolean, default=True)
    effective_date: Mapped[Optional[date]] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date)

    periods: Mapped[List["BellPeriod"]] = relationship(
        back_populates="bell_schedule",
        order_by="BellPeriod.sequence",
        cascade="all, delete-orphan",
    )

    def total_instructional_minutes(self) -> int:
        """Sum of the class-time periods; lunch, passing time and breaks are excluded."""
        return sum(
            period.duration_minutes()
            for period in self.periods
            if period.is_instructional()
        )

    def total_minutes(self) -> int:
        return sum(period.duration_minutes() for period in self.periods)

    def is_in_effect(self, today: Optional[date] = None) -> bool:
        return is_in_force(self.active, self.effective_date, self.end_date, today)

    def __repr__(self) -> str:
        return f"<BellSchedule id={self.id!r} name={self.name!r} schedule_type={self.schedule_type!r}>"


class BellPeriod(Base):
    __tablename__ = "bell_periods"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    bell_schedule_id: Mapped[int] = mapped_column(
        ForeignKey("bell_schedules.id", ondelete="cascade"), nullable=False
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    period_type: Mapped[PeriodType] = mapped_column(
        default=PeriodType.CLASS, nullable=False
    )
    start_time: Mapped[Optional[time]] = mapped_column(Time)
    end_time: Mapped[Optional[time]] = mapped_column(Time)

    bell_schedule: Mapped["BellSchedule"] = relationship(back_populates="periods")

    def duration_minutes(self) -> int:
        if self.start_time is None or self.end_time is None:
            return 0
        anchor = date.min
        delta = datetime.combine(anchor, self.end_time) - datetime.combine(
            anchor, self.start_time
        )
        return max(int(delta.total_seconds() // 60), 0)

    def is_instructional(self) -> bool:
        return self.period_type not in NON_INSTRUCTIONAL

    def __repr__(self) -> str:
        return (
            f"<BellPeriod id={self.id!r} name={self.name!r} "
            f"start_time={self.start_time!r} end_time={self.end_time!r}>"
        )

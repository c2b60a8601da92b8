"""
Lifecycle window and validity predicate shared by most record types.

A record is "in force" when its status is one of the record type's active
statuses and today falls inside its optional [start, end] window. Both window
ends are inclusive: a missing start means "already started" and a missing end
means the record never expires by date.
"""

from datetime import date
from typing import ClassVar, FrozenSet, List, Optional, Tuple

from sis_records.models.enums import DisplayEnum


def window_contains(
    start: Optional[date], end: Optional[date], today: Optional[date] = None
) -> bool:
    today = today or date.today()
    if start is not None and start > today:
        return False
    if end is not None and end < today:
        return False
    return True


def is_in_force(
    active: Optional[bool],
    start: Optional[date],
    end: Optional[date],
    today: Optional[date] = None,
) -> bool:
    """Validity predicate for records that use a boolean flag instead of a status."""
    return bool(active) and window_contains(start, end, today)


def days_between(start: Optional[date], end: Optional[date]) -> Optional[int]:
    if start is None or end is None:
        return None
    return (end - start).days


class LifecycleMixin:
    """
    Validity helpers for a record with a status and a date window.

    Concrete classes declare which attributes hold the window and which status
    members count as in force::

        __window__ = ("effective_date", "expiration_date")
        ACTIVE_STATUSES = frozenset({PlanStatus.ACTIVE})
    """

    __window__: ClassVar[Tuple[str, str]] = ("start_date", "end_date")
    __status_attr__: ClassVar[str] = "status"
    ACTIVE_STATUSES: ClassVar[FrozenSet[DisplayEnum]] = frozenset()

    @property
    def window_start(self) -> Optional[date]:
        return getattr(self, self.__window__[0], None)

    @property
    def window_end(self) -> Optional[date]:
        return getattr(self, self.__window__[1], None)

    @property
    def lifecycle_status(self) -> Optional[DisplayEnum]:
        return getattr(self, self.__status_attr__, None)

    def status_is_active(self) -> bool:
        return self.lifecycle_status in self.ACTIVE_STATUSES

    def has_started(self, today: Optional[date] = None) -> bool:
        start = self.window_start
        return start is None or start <= (today or date.today())

    def is_valid(self, today: Optional[date] = None) -> bool:
        return self.status_is_active() and window_contains(
            self.window_start, self.window_end, today
        )

    def is_expired(self, today: Optional[date] = None) -> bool:
        """True once the end date has passed. Status is not considered."""
        end = self.window_end
        return end is not None and end < (today or date.today())

    def days_until_expiration(self, today: Optional[date] = None) -> Optional[int]:
        return days_between(today or date.today(), self.window_end)

    def is_expiring_soon(self, days: int = 30, today: Optional[date] = None) -> bool:
        remaining = self.days_until_expiration(today)
        return remaining is not None and 0 <= remaining <= days

    def window_problems(self) -> List[str]:
        start, end = self.window_start, self.window_end
        if start is not None and end is not None and start > end:
            return [
                f"{self.__window__[0]} ({start.isoformat()}) is after "
                f"{self.__window__[1]} ({end.isoformat()})"
            ]
        return []

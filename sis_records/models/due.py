from datetime import date, timedelta
from typing import Optional

from sis_records.models.enums import DisplayEnum


class DueStatus(DisplayEnum):
    OVERDUE = ("Overdue", "red")
    DUE_SOON = ("Due Soon", "yellow")
    ON_TRACK = ("On Track", "green")
    NOT_SCHEDULED = ("Not Scheduled", "white")

    @property
    def needs_attention(self) -> bool:
        return self in (DueStatus.OVERDUE, DueStatus.DUE_SOON)


def classify_due(
    target: Optional[date],
    threshold_days: int,
    today: Optional[date] = None,
    missing: DueStatus = DueStatus.NOT_SCHEDULED,
) -> DueStatus:
    """
    Classify a review, assessment or follow-up date relative to today.

    Args:
        target: The date something is due
        threshold_days: How many days ahead counts as "due soon"
        today: Reference date (defaults to today)
        missing: What to report when there is no target date. Record types
            choose this deliberately; some treat a missing review date as
            needing attention, others as nothing scheduled.

    Returns:
        OVERDUE if today is past the target, DUE_SOON if the target falls in
        [today, today + threshold_days], otherwise ON_TRACK
    """
    if target is None:
        return missing
    today = today or date.today()
    if today > target:
        return DueStatus.OVERDUE
    if target <= today + timedelta(days=threshold_days):
        return DueStatus.DUE_SOON
    return DueStatus.ON_TRACK


def days_until(target: Optional[date], today: Optional[date] = None) -> Optional[int]:
    if target is None:
        return None
    return (target - (today or date.today())).days


def days_since(when: Optional[date], today: Optional[date] = None) -> Optional[int]:
    if when is None:
        return None
    return ((today or date.today()) - when).days

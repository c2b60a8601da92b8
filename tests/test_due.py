from datetime import date, timedelta

import pytest

from sis_records.models import DueStatus, classify_due
from sis_records.models.due import days_since, days_until

TODAY = date(2025, 3, 15)


@pytest.mark.parametrize(
    "offset, expected",
    [
        (-30, DueStatus.OVERDUE),
        (-1, DueStatus.OVERDUE),
        (0, DueStatus.DUE_SOON),
        (7, DueStatus.DUE_SOON),
        (14, DueStatus.DUE_SOON),
        (15, DueStatus.ON_TRACK),
        (90, DueStatus.ON_TRACK),
    ],
)
def test_classify_due(offset, expected):
    target = TODAY + timedelta(days=offset)
    assert classify_due(target, 14, TODAY) == expected


def test_missing_target_uses_caller_policy():
    assert classify_due(None, 14, TODAY) == DueStatus.NOT_SCHEDULED
    assert classify_due(None, 14, TODAY, missing=DueStatus.OVERDUE) == DueStatus.OVERDUE


def test_zero_threshold_only_flags_today():
    assert classify_due(TODAY, 0, TODAY) == DueStatus.DUE_SOON
    assert classify_due(TODAY + timedelta(days=1), 0, TODAY) == DueStatus.ON_TRACK


def test_needs_attention():
    assert DueStatus.OVERDUE.needs_attention
    assert DueStatus.DUE_SOON.needs_attention
    assert not DueStatus.ON_TRACK.needs_attention
    assert not DueStatus.NOT_SCHEDULED.needs_attention


def test_day_counts():
    assert days_until(TODAY + timedelta(days=3), TODAY) == 3
    assert days_since(TODAY - timedelta(days=3), TODAY) == 3
    assert days_until(None, TODAY) is None
    assert days_since(None, TODAY) is None

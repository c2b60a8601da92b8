from datetime import date

import pytest

from sis_records.models import (
    WITHDRAWAL_CHECKLIST,
    HealthPlan,
    PlanStatus,
    PlanType,
    Student,
    VerificationStatus,
    WithdrawalRecord,
    WithdrawalStatus,
)
from sis_records.validation import (
    RecordValidationError,
    collect_problems,
    status_enum,
    transition,
    validate,
)


def test_plain_record_has_no_problems():
    assert collect_problems(Student(student_number="S9", first_name="A", last_name="B")) == []


def test_reversed_window_is_rejected():
    plan = HealthPlan(
        plan_type=PlanType.CARDIAC,
        diagnosis="Arrhythmia",
        status=PlanStatus.ACTIVE,
        start_date=date(2025, 6, 1),
        end_date=date(2025, 1, 1),
    )
    with pytest.raises(RecordValidationError) as excinfo:
        validate(plan)
    assert len(excinfo.value.problems) == 1
    assert "start_date" in str(excinfo.value)
    assert isinstance(excinfo.value, ValueError)


def test_transition_blocked_until_clearance_complete(db, withdrawal, registrar):
    transition(withdrawal, WithdrawalStatus.PENDING_CLEARANCE, registrar.id)
    db.commit()
    assert withdrawal.status == WithdrawalStatus.PENDING_CLEARANCE

    with pytest.raises(RecordValidationError, match="24 clearance item"):
        transition(withdrawal, WithdrawalStatus.CLEARED, registrar.id)
    assert withdrawal.status == WithdrawalStatus.PENDING_CLEARANCE

    for item in WITHDRAWAL_CHECKLIST:
        withdrawal.set_item(item.name)
    transition(withdrawal, WithdrawalStatus.CLEARED, "registrar-2")
    db.commit()
    assert withdrawal.status == WithdrawalStatus.CLEARED
    assert withdrawal.all_cleared is True
    assert withdrawal.created_by == registrar.id
    assert withdrawal.updated_by == "registrar-2"


def test_transition_refreshes_stale_totals(withdrawal):
    withdrawal.cleared_items = 99
    transition(withdrawal, WithdrawalStatus.CANCELLED)
    assert withdrawal.cleared_items == 0
    assert withdrawal.is_cancelled()


def test_transition_rejects_foreign_status(withdrawal):
    with pytest.raises(ValueError, match="not a valid status"):
        transition(withdrawal, VerificationStatus.ISSUED)


def test_fresh_withdrawal_validates_before_first_flush():
    record = WithdrawalRecord(
        withdrawal_number="WD-2025-000009", withdrawal_date=date(2025, 3, 1)
    )
    assert collect_problems(record) == []
    validate(record)


def test_stale_totals_are_still_reported(withdrawal):
    withdrawal.cleared_items = 5
    problems = collect_problems(withdrawal)
    assert len(problems) == 1
    assert "do not match" in problems[0]


def test_fresh_record_rejects_foreign_status():
    record = WithdrawalRecord(
        withdrawal_number="WD-2025-000010", withdrawal_date=date(2025, 3, 1)
    )
    with pytest.raises(ValueError, match="not a valid status"):
        transition(record, VerificationStatus.ISSUED)
    assert record.status is None


def test_fresh_record_accepts_own_status():
    record = WithdrawalRecord(
        withdrawal_number="WD-2025-000011", withdrawal_date=date(2025, 3, 1)
    )
    transition(record, WithdrawalStatus.PENDING_CLEARANCE, "registrar-1")
    assert record.status == WithdrawalStatus.PENDING_CLEARANCE
    assert status_enum(record, "status") is WithdrawalStatus

"""
Student withdrawal records and their 24-item exit clearance checklist.

A withdrawal moves DRAFT -> PENDING_CLEARANCE -> CLEARED -> COMPLETED as the
clearance items are ticked off by the departments involved. The model accepts
any status; ``sis_records.validation.transition`` is where the checklist gate
is applied.
"""

import re
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Text, func, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from sis_records.models.audit import AuditMixin
from sis_records.models.base import Base
from sis_records.models.checklist import (
    ChecklistCompletion,
    ChecklistItem,
    ChecklistMixin,
    checklist_flag,
)
from sis_records.models.enums import DisplayEnum
from sis_records.models.lifecycle import LifecycleMixin
from sis_records.models.people import Student

NUMBER_PREFIX = "WD"
NUMBER_PATTERN = re.compile(r"^WD-(\d{4})-(\d{6})$")
MAX_SEQUENCE = 999999

ACADEMIC = "Academic"
LIBRARY = "Library & Materials"
FACILITIES = "Facilities"
FINANCIAL = "Financial"
ADMINISTRATIVE = "Administrative"


class WithdrawalStatus(DisplayEnum):
    DRAFT = ("Draft", "white")
    PENDING_CLEARANCE = ("Pending Clearance", "yellow")
    CLEARED = ("Cleared", "cyan")
    COMPLETED = ("Completed", "green")
    CANCELLED = ("Cancelled", "red")


class WithdrawalType(DisplayEnum):
    TRANSFER_IN_DISTRICT = ("Transfer - Within District",)
    TRANSFER_OUT_OF_DISTRICT = ("Transfer - Out of District",)
    TRANSFER_OUT_OF_STATE = ("Transfer - Out of State",)
    PRIVATE_SCHOOL = ("Transfer - Private School",)
    HOMESCHOOL = ("Homeschool",)
    MEDICAL = ("Medical Withdrawal",)
    DROPOUT = ("Dropout",)
    EARLY_GRADUATION = ("Early Graduation",)
    OTHER = ("Other",)


WITHDRAWAL_CHECKLIST: Tuple[ChecklistItem, ...] = (
    ChecklistItem("final_grades_entered", "Final grades entered", ACADEMIC),
    ChecklistItem("transcript_generated", "Transcript generated", ACADEMIC),
    ChecklistItem("attendance_finalized", "Attendance finalized", ACADEMIC),
    ChecklistItem("teacher_signoffs_received", "Teacher sign-offs received", ACADEMIC),
    ChecklistItem("library_books_returned", "Library books returned", LIBRARY),
    ChecklistItem("textbooks_returned", "Textbooks returned", LIBRARY),
    ChecklistItem("device_returned", "School device returned", LIBRARY),
    ChecklistItem("device_charger_returned", "Device charger returned", LIBRARY),
    ChecklistItem("calculator_returned", "Calculator returned", LIBRARY),
    ChecklistItem("instrument_returned", "Musical instrument returned", LIBRARY),
    ChecklistItem("locker_cleared", "Locker cleared", FACILITIES),
    ChecklistItem("locker_lock_returned", "Locker lock returned", FACILITIES),
    ChecklistItem(
        "athletic_equipment_returned", "Athletic equipment returned", FACILITIES
    ),
    ChecklistItem("parking_permit_returned", "Parking permit returned", FACILITIES),
    ChecklistItem("library_fines_paid", "Library fines paid", FINANCIAL),
    ChecklistItem("cafeteria_balance_settled", "Cafeteria balance settled", FINANCIAL),
    ChecklistItem("activity_fees_paid", "Activity fees paid", FINANCIAL),
    ChecklistItem("damage_fees_paid", "Damage fees paid", FINANCIAL),
    ChecklistItem("id_card_returned", "Student ID card returned", ADMINISTRATIVE),
    ChecklistItem("bus_pass_returned", "Bus pass returned", ADMINISTRATIVE),
    ChecklistItem("parent_notified", "Parent/guardian notified", ADMINISTRATIVE),
    ChecklistItem(
        "records_request_received", "Records request received", ADMINISTRATIVE
    ),
    ChecklistItem("exit_interview_completed", "Exit interview completed", ADMINISTRATIVE),
    ChecklistItem("state_reporting_updated", "State reporting updated", ADMINISTRATIVE),
)


class WithdrawalRecord(AuditMixin, LifecycleMixin, ChecklistMixin, Base):
    __tablename__ = "withdrawal_records"

    __window__ = ("effective_date", "expiration_date")
    ACTIVE_STATUSES = frozenset(
        {
            WithdrawalStatus.PENDING_CLEARANCE,
            WithdrawalStatus.CLEARED,
            WithdrawalStatus.COMPLETED,
        }
    )
    CHECKLIST = WITHDRAWAL_CHECKLIST
    CHECKLIST_GATED_STATUSES = frozenset(
        {WithdrawalStatus.CLEARED, WithdrawalStatus.COMPLETED}
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    withdrawal_number: Mapped[str] = mapped_column(
        String(20), unique=True, index=True, nullable=False
    )
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="cascade"), nullable=False, index=True
    )
    status: Mapped[WithdrawalStatus] = mapped_column(
        default=WithdrawalStatus.DRAFT, nullable=False
    )
    withdrawal_type: Mapped[Optional[WithdrawalType]] = mapped_column()
    withdrawal_date: Mapped[date] = mapped_column(Date, nullable=False)
    effective_date: Mapped[Optional[date]] = mapped_column(Date)
    expiration_date: Mapped[Optional[date]] = mapped_column(Date)
    last_attendance_date: Mapped[Optional[date]] = mapped_column(Date)
    reason: Mapped[Optional[str]] = mapped_column(Text)
    destination_school: Mapped[Optional[str]] = mapped_column(String(200))
    records_sent_date: Mapped[Optional[date]] = mapped_column(Date)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    # Academic
    final_grades_entered: Mapped[Optional[bool]] = checklist_flag()
    transcript_generated: Mapped[Optional[bool]] = checklist_flag()
    attendance_finalized: Mapped[Optional[bool]] = checklist_flag()
    teacher_signoffs_received: Mapped[Optional[bool]] = checklist_flag()
    # Library & materials
    library_books_returned: Mapped[Optional[bool]] = checklist_flag()
    textbooks_returned: Mapped[Optional[bool]] = checklist_flag()
    device_returned: Mapped[Optional[bool]] = checklist_flag()
    device_charger_returned: Mapped[Optional[bool]] = checklist_flag()
    calculator_returned: Mapped[Optional[bool]] = checklist_flag()
    instrument_returned: Mapped[Optional[bool]] = checklist_flag()
    # Facilities
    locker_cleared: Mapped[Optional[bool]] = checklist_flag()
    locker_lock_returned: Mapped[Optional[bool]] = checklist_flag()
    athletic_equipment_returned: Mapped[Optional[bool]] = checklist_flag()
    parking_permit_returned: Mapped[Optional[bool]] = checklist_flag()
    # Financial
    library_fines_paid: Mapped[Optional[bool]] = checklist_flag()
    cafeteria_balance_settled: Mapped[Optional[bool]] = checklist_flag()
    activity_fees_paid: Mapped[Optional[bool]] = checklist_flag()
    damage_fees_paid: Mapped[Optional[bool]] = checklist_flag()
    # Administrative
    id_card_returned: Mapped[Optional[bool]] = checklist_flag()
    bus_pass_returned: Mapped[Optional[bool]] = checklist_flag()
    parent_notified: Mapped[Optional[bool]] = checklist_flag()
    records_request_received: Mapped[Optional[bool]] = checklist_flag()
    exit_interview_completed: Mapped[Optional[bool]] = checklist_flag()
    state_reporting_updated: Mapped[Optional[bool]] = checklist_flag()

    total_items: Mapped[int] = mapped_column(
        Integer, default=len(WITHDRAWAL_CHECKLIST), nullable=False
    )
    cleared_items: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    all_cleared: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    student: Mapped["Student"] = relationship(back_populates="withdrawals")

    @staticmethod
    def format_number(year: int, sequence: int) -> str:
        if not 1 <= sequence <= MAX_SEQUENCE:
            raise ValueError(
                f"Withdrawal sequence {sequence} for {year} is outside 1..{MAX_SEQUENCE}"
            )
        return f"{NUMBER_PREFIX}-{year:04d}-{sequence:06d}"

    @staticmethod
    def parse_number(withdrawal_number: str) -> Optional[Tuple[int, int]]:
        match = NUMBER_PATTERN.match(withdrawal_number or "")
        if not match:
            return None
        return int(match.group(1)), int(match.group(2))

    @classmethod
    def next_number(cls, db: Session, year: int) -> str:
        """Next unused withdrawal number for the year, e.g. WD-2025-000042."""
        latest = db.scalar(
            select(func.max(cls.withdrawal_number)).where(
                cls.withdrawal_number.like(f"{NUMBER_PREFIX}-{year:04d}-%")
            )
        )
        parsed = cls.parse_number(latest) if latest else None
        sequence = parsed[1] + 1 if parsed else 1
        return cls.format_number(year, sequence)

    def calculate_clearance_completion(self) -> ChecklistCompletion:
        return self.recompute_completion()

    def is_cancelled(self) -> bool:
        return self.status == WithdrawalStatus.CANCELLED

    def is_transfer(self) -> bool:
        return self.withdrawal_type in (
            WithdrawalType.TRANSFER_IN_DISTRICT,
            WithdrawalType.TRANSFER_OUT_OF_DISTRICT,
            WithdrawalType.TRANSFER_OUT_OF_STATE,
            WithdrawalType.PRIVATE_SCHOOL,
        )

    def needs_records_sent(self) -> bool:
        return (
            self.is_transfer()
            and self.records_request_received is True
            and self.records_sent_date is None
        )

    def validation_problems(
        self, target_status: Optional[WithdrawalStatus] = None
    ) -> List[str]:
        problems: List[str] = []
        status = target_status or self.status
        if self.withdrawal_date is None:
            problems.append("withdrawal_date is required")
        if status in self.CHECKLIST_GATED_STATUSES:
            completion = self.checklist_completion()
            if not completion.all_complete:
                problems.append(
                    f"cannot be {status.label.lower()} with "
                    f"{completion.outstanding} clearance item(s) outstanding"
                )
        if (
            self.effective_date is not None
            and self.withdrawal_date is not None
            and self.effective_date < self.withdrawal_date
        ):
            problems.append("effective_date is before withdrawal_date")
        return problems

    def __repr__(self) -> str:
        return (
            f"<WithdrawalRecord id={self.id!r} withdrawal_number={self.withdrawal_number!r} "
            f"status={self.status!r} cleared={self.cleared_items!r}/{self.total_items!r}>"
        )

from datetime import date
from typing import Optional

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sis_records.models.audit import AuditMixin
from sis_records.models.base import Base
from sis_records.models.enums import DisplayEnum
from sis_records.models.lifecycle import LifecycleMixin
from sis_records.models.people import Student


class VerificationPurpose(DisplayEnum):
    DRIVERS_LICENSE = ("Driver's License / Permit",)
    AUTO_INSURANCE = ("Auto Insurance Discount",)
    HEALTH_INSURANCE = ("Health Insurance",)
    SOCIAL_SECURITY = ("Social Security Benefits",)
    SCHOLARSHIP = ("Scholarship Application",)
    EMPLOYMENT = ("Employment / Work Permit",)
    OTHER = ("Other",)


class VerificationStatus(DisplayEnum):
    REQUESTED = ("Requested", "yellow")
    ISSUED = ("Issued", "green")
    REVOKED = ("Revoked", "red")
    EXPIRED = ("Expired", "white")


class EnrollmentVerification(AuditMixin, LifecycleMixin, Base):
    """A letter certifying a student is enrolled, valid for a limited period."""

    __tablename__ = "enrollment_verifications"

    __window__ = ("issued_date", "valid_until")
    ACTIVE_STATUSES = frozenset({VerificationStatus.ISSUED})

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    verification_number: Mapped[str] = mapped_column(
        String(20), unique=True, index=True, nullable=False
    )
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="cascade"), nullable=False, index=True
    )
    purpose: Mapped[VerificationPurpose] = mapped_column(nullable=False)
    status: Mapped[VerificationStatus] = mapped_column(
        default=VerificationStatus.REQUESTED, nullable=False
    )
    academic_year: Mapped[Optional[str]] = mapped_column(String(9))
    requested_by_name: Mapped[Optional[str]] = mapped_column(String(100))
    issued_date: Mapped[Optional[date]] = mapped_column(Date)
    valid_until: Mapped[Optional[date]] = mapped_column(Date)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    student: Mapped["Student"] = relationship()

    def is_issued(self) -> bool:
        return self.status == VerificationStatus.ISSUED

    def __repr__(self) -> str:
        return (
            f"<EnrollmentVerification id={self.id!r} "
            f"verification_number={self.verification_number!r} status={self.status!r}>"
        )

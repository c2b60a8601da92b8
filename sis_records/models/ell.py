from datetime import date
from typing import List, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sis_records.models.audit import AuditMixin
from sis_records.models.base import Base
from sis_records.models.due import DueStatus, classify_due
from sis_records.models.enums import DisplayEnum
from sis_records.models.lifecycle import LifecycleMixin
from sis_records.models.people import Staff, Student


class EllStatus(DisplayEnum):
    IDENTIFIED = ("Identified - Pending Placement", "yellow")
    ACTIVE = ("Active ELL", "green")
    MONITORING = ("Reclassified - Monitoring", "cyan")
    EXITED = ("Exited Program", "white")
    WAIVED = ("Services Waived by Parent", "red")


class ProficiencyLevel(DisplayEnum):
    ENTERING = ("Level 1 - Entering",)
    EMERGING = ("Level 2 - Emerging",)
    DEVELOPING = ("Level 3 - Developing",)
    EXPANDING = ("Level 4 - Expanding",)
    BRIDGING = ("Level 5 - Bridging",)
    REACHING = ("Level 6 - Reaching",)


class EllProgramType(DisplayEnum):
    PULL_OUT = ("ESL Pull-Out",)
    PUSH_IN = ("ESL Push-In",)
    SHELTERED_INSTRUCTION = ("Sheltered Instruction",)
    DUAL_LANGUAGE = ("Dual Language",)
    TRANSITIONAL_BILINGUAL = ("Transitional Bilingual",)
    NEWCOMER = ("Newcomer Program",)


class EllStudent(AuditMixin, LifecycleMixin, Base):
    """A student's English learner program enrolment."""

    __tablename__ = "ell_students"

    __window__ = ("program_entry_date", "program_exit_date")
    __status_attr__ = "ell_status"
    ACTIVE_STATUSES = frozenset({EllStatus.ACTIVE, EllStatus.MONITORING})

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="cascade"),
        unique=True,
        nullable=False,
    )
    ell_status: Mapped[EllStatus] = mapped_column(
        default=EllStatus.IDENTIFIED, nullable=False
    )
    proficiency_level: Mapped[Optional[ProficiencyLevel]] = mapped_column()
    program_type: Mapped[Optional[EllProgramType]] = mapped_column()
    native_language: Mapped[Optional[str]] = mapped_column(String(50))
    home_language: Mapped[Optional[str]] = mapped_column(String(50))
    identification_date: Mapped[Optional[date]] = mapped_column(Date)
    program_entry_date: Mapped[Optional[date]] = mapped_column(Date)
    program_exit_date: Mapped[Optional[date]] = mapped_column(Date)
    next_annual_assessment_date: Mapped[Optional[date]] = mapped_column(Date)
    parent_notification_sent: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    interpreter_required: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    title_iii_funded: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)

    student: Mapped["Student"] = relationship()
    services: Mapped[List["EllService"]] = relationship(back_populates="ell_student")

    def is_active(self, today: Optional[date] = None) -> bool:
        return self.is_valid(today)

    def is_monitoring(self) -> bool:
        return self.ell_status == EllStatus.MONITORING

    def assessment_status(self, days: int = 30, today: Optional[date] = None) -> DueStatus:
        # Only students still receiving services owe an annual assessment
        if self.ell_status != EllStatus.ACTIVE:
            return DueStatus.NOT_SCHEDULED
        return classify_due(
            self.next_annual_assessment_date, days, today, missing=DueStatus.OVERDUE
        )

    def __repr__(self) -> str:
        return (
            f"<EllStudent id={self.id!r} student_id={self.student_id!r} "
            f"ell_status={self.ell_status!r}>"
        )


class EllServiceType(DisplayEnum):
    ESL_INSTRUCTION = ("ESL Instruction",)
    CONTENT_SUPPORT = ("Content Area Support",)
    TUTORING = ("Tutoring",)
    TRANSLATION = ("Translation/Interpretation",)
    TESTING_ACCOMMODATION = ("Testing Accommodation",)
    PARENT_OUTREACH = ("Parent Outreach",)


class EllServiceStatus(DisplayEnum):
    PLANNED = ("Planned", "yellow")
    ACTIVE = ("Active", "green")
    SUSPENDED = ("Suspended", "white")
    COMPLETED = ("Completed", "cyan")
    CANCELLED = ("Cancelled", "red")


class EllService(AuditMixin, LifecycleMixin, Base):
    __tablename__ = "ell_services"

    ACTIVE_STATUSES = frozenset({EllServiceStatus.ACTIVE})

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ell_student_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("ell_students.id", ondelete="SET NULL"), index=True
    )
    provider_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("staff.id", ondelete="SET NULL")
    )
    service_type: Mapped[EllServiceType] = mapped_column(nullable=False)
    status: Mapped[EllServiceStatus] = mapped_column(
        default=EllServiceStatus.PLANNED, nullable=False
    )
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    minutes_per_week: Mapped[Optional[int]] = mapped_column(Integer)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    ell_student: Mapped[Optional["EllStudent"]] = relationship(
        back_populates="services"
    )
    provider: Mapped[Optional["Staff"]] = relationship()

    @property
    def student(self) -> Optional["Student"]:
        """The student served, or None when the service is not linked to an ELL enrolment."""
        if self.ell_student is None:
            return None
        return self.ell_student.student

    def is_active(self, today: Optional[date] = None) -> bool:
        return self.is_valid(today)

    def __repr__(self) -> str:
        return (
            f"<EllService id={self.id!r} service_type={self.service_type!r} "
            f"status={self.status!r}>"
        )

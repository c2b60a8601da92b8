from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sis_records.models.audit import AuditMixin
from sis_records.models.base import Base
from sis_records.models.due import days_until
from sis_records.models.enums import DisplayEnum
from sis_records.models.people import Staff, Student

DEADLINE_WARNING_DAYS = 14


class CollegeType(DisplayEnum):
    FOUR_YEAR_PUBLIC = ("4-Year Public University",)
    FOUR_YEAR_PRIVATE = ("4-Year Private University",)
    TWO_YEAR_PUBLIC = ("2-Year Public College",)
    TWO_YEAR_PRIVATE = ("2-Year Private College",)
    COMMUNITY_COLLEGE = ("Community College",)
    LIBERAL_ARTS = ("Liberal Arts College",)
    TECHNICAL_SCHOOL = ("Technical/Trade School",)
    MILITARY_ACADEMY = ("Military Academy",)
    ONLINE = ("Online University",)
    INTERNATIONAL = ("International University",)


class ApplicationCategory(DisplayEnum):
    REACH = ("Reach School",)
    MATCH = ("Match School",)
    SAFETY = ("Safety School",)
    LIKELY = ("Likely School",)


class ApplicationPlan(DisplayEnum):
    REGULAR_DECISION = ("Regular Decision",)
    EARLY_ACTION = ("Early Action",)
    EARLY_DECISION = ("Early Decision",)
    EARLY_DECISION_II = ("Early Decision II",)
    ROLLING_ADMISSION = ("Rolling Admission",)
    PRIORITY_DEADLINE = ("Priority Deadline",)


class ApplicationStatus(DisplayEnum):
    PLANNING = ("Planning to Apply", "white")
    IN_PROGRESS = ("Application In Progress", "yellow")
    SUBMITTED = ("Application Submitted", "cyan")
    UNDER_REVIEW = ("Under Review", "cyan")
    DECISION_RECEIVED = ("Decision Received", "blue")
    ENROLLED = ("Enrolled", "green")
    DECLINED = ("Declined Offer", "red")
    WITHDRAWN = ("Application Withdrawn", "red")


class AdmissionDecision(DisplayEnum):
    PENDING = ("Decision Pending", "yellow")
    ACCEPTED = ("Accepted", "green")
    DENIED = ("Denied", "red")
    WAITLISTED = ("Waitlisted", "yellow")
    DEFERRED = ("Deferred", "yellow")
    CONDITIONAL_ACCEPTANCE = ("Conditional Acceptance", "green")


def _money(*amounts: Optional[Decimal]) -> Decimal:
    return sum((amount for amount in amounts if amount is not None), Decimal("0"))


class CollegeApplication(AuditMixin, Base):
    """
    A student's application to one college, tracked by their counselor.

    Requirement flags follow the same rule throughout: a requirement that is
    not required (False or unset) never counts as missing.
    """

    __tablename__ = "college_applications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="cascade"), nullable=False, index=True
    )
    counselor_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("staff.id", ondelete="SET NULL")
    )
    college_name: Mapped[str] = mapped_column(String(200), nullable=False)
    college_state: Mapped[Optional[str]] = mapped_column(String(2))
    college_type: Mapped[Optional[CollegeType]] = mapped_column()
    ceeb_code: Mapped[Optional[str]] = mapped_column(String(10))
    application_category: Mapped[Optional[ApplicationCategory]] = mapped_column()
    application_priority: Mapped[Optional[int]] = mapped_column(Integer)
    application_plan: Mapped[Optional[ApplicationPlan]] = mapped_column()
    intended_major: Mapped[Optional[str]] = mapped_column(String(100))
    entry_year: Mapped[Optional[int]] = mapped_column(Integer)

    application_status: Mapped[ApplicationStatus] = mapped_column(
        default=ApplicationStatus.PLANNING, nullable=False
    )
    application_deadline: Mapped[Optional[date]] = mapped_column(Date)
    application_submitted_date: Mapped[Optional[date]] = mapped_column(Date)
    confirmation_number: Mapped[Optional[str]] = mapped_column(String(50))
    application_fee: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    fee_waiver_used: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)

    essay_required: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    essay_submitted: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    transcript_requested: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    transcript_sent_date: Mapped[Optional[date]] = mapped_column(Date)
    test_scores_required: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    test_scores_sent: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    letters_required: Mapped[Optional[int]] = mapped_column(Integer)
    letters_submitted: Mapped[Optional[int]] = mapped_column(Integer, default=0)
    portfolio_required: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    portfolio_submitted: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    interview_required: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    interview_completed: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )

    admission_decision: Mapped[Optional[AdmissionDecision]] = mapped_column()
    decision_date: Mapped[Optional[date]] = mapped_column(Date)
    decision_deadline: Mapped[Optional[date]] = mapped_column(Date)
    enrollment_confirmed: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    student_declined: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)

    grants_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    scholarships_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    loans_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    work_study_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    merit_scholarship_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2)
    )
    athletic_scholarship_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2)
    )

    counselor_notes: Mapped[Optional[str]] = mapped_column(Text)

    student: Mapped["Student"] = relationship()
    counselor: Mapped[Optional["Staff"]] = relationship()

    def missing_requirements(self) -> List[str]:
        missing = []
        if self.essay_required is True and self.essay_submitted is not True:
            missing.append("Essay")
        if self.transcript_requested is True and self.transcript_sent_date is None:
            missing.append("Transcript")
        if self.test_scores_required is True and self.test_scores_sent is not True:
            missing.append("Test scores")
        if self.letters_required is not None and (self.letters_submitted or 0) < (
            self.letters_required
        ):
            missing.append(
                f"Letters of recommendation "
                f"({self.letters_submitted or 0}/{self.letters_required})"
            )
        if self.portfolio_required is True and self.portfolio_submitted is not True:
            missing.append("Portfolio")
        if self.interview_required is True and self.interview_completed is not True:
            missing.append("Interview")
        return missing

    def has_missing_requirements(self) -> bool:
        return bool(self.missing_requirements())

    def is_application_complete(self) -> bool:
        return (
            self.application_submitted_date is not None
            and not self.has_missing_requirements()
        )

    def days_until_deadline(self, today: Optional[date] = None) -> Optional[int]:
        return days_until(self.application_deadline, today)

    def is_deadline_approaching(self, today: Optional[date] = None) -> bool:
        """Unsubmitted with the deadline at most two weeks out, or already missed."""
        if self.application_deadline is None or self.application_submitted_date:
            return False
        today = today or date.today()
        return self.application_deadline <= today + timedelta(
            days=DEADLINE_WARNING_DAYS
        )

    def is_decision_pending(self) -> bool:
        return self.admission_decision == AdmissionDecision.PENDING or (
            self.application_status == ApplicationStatus.SUBMITTED
            and self.admission_decision is None
        )

    def is_accepted(self) -> bool:
        return self.admission_decision in (
            AdmissionDecision.ACCEPTED,
            AdmissionDecision.CONDITIONAL_ACCEPTANCE,
        )

    def needs_decision_response(self, today: Optional[date] = None) -> bool:
        return (
            self.is_accepted()
            and self.enrollment_confirmed is not True
            and self.student_declined is not True
            and self.decision_deadline is not None
            and (today or date.today()) < self.decision_deadline
        )

    def total_financial_aid(self) -> Decimal:
        return _money(
            self.grants_amount,
            self.scholarships_amount,
            self.loans_amount,
            self.work_study_amount,
        )

    def total_scholarships(self) -> Decimal:
        return _money(
            self.scholarships_amount,
            self.merit_scholarship_amount,
            self.athletic_scholarship_amount,
        )

    def is_top_choice(self) -> bool:
        return self.application_priority == 1

    def __repr__(self) -> str:
        return (
            f"<CollegeApplication id={self.id!r} college_name={self.college_name!r} "
            f"application_status={self.application_status!r}>"
        )

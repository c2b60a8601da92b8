from datetime import date
from typing import List, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sis_records.models.audit import AuditMixin
from sis_records.models.base import Base
from sis_records.models.due import DueStatus, classify_due
from sis_records.models.enums import DisplayEnum
from sis_records.models.lifecycle import LifecycleMixin, is_in_force
from sis_records.models.people import Student


class AccommodationType(DisplayEnum):
    PLAN_504 = ("Section 504 Plan",)
    IEP = ("Individualized Education Program",)
    ELL = ("English Language Learner Services",)
    GIFTED = ("Gifted & Talented",)
    TITLE_I = ("Title I Services",)
    HEALTH = ("Health Accommodation",)
    OTHER = ("Other",)


class AccommodationStatus(DisplayEnum):
    DRAFT = ("Draft", "white")
    PENDING_EVALUATION = ("Pending Evaluation", "yellow")
    ACTIVE = ("Active", "green")
    INACTIVE = ("Inactive", "white")
    EXPIRED = ("Expired", "red")
    UNDER_REVIEW = ("Under Review", "cyan")
    DISCONTINUED = ("Discontinued", "red")


class IEPPlacement(DisplayEnum):
    GENERAL_EDUCATION = ("General Education - Full Time",)
    GENERAL_ED_WITH_SUPPORT = ("General Education with Support Services",)
    RESOURCE_ROOM = ("Resource Room - Part Time",)
    SELF_CONTAINED = ("Self-Contained Classroom",)
    SPECIAL_SCHOOL = ("Special Education School",)
    HOME_HOSPITAL = ("Home/Hospital Instruction",)
    RESIDENTIAL = ("Residential Placement",)


class GiftedCategory(DisplayEnum):
    GENERAL_INTELLECTUAL = ("General Intellectual Ability",)
    SPECIFIC_ACADEMIC = ("Specific Academic Aptitude",)
    CREATIVE_THINKING = ("Creative Thinking",)
    LEADERSHIP = ("Leadership Ability",)
    VISUAL_PERFORMING_ARTS = ("Visual/Performing Arts",)


class StudentAccommodation(AuditMixin, LifecycleMixin, Base):
    """Summary of the support programs a student is receiving."""

    __tablename__ = "student_accommodations"

    ACTIVE_STATUSES = frozenset({AccommodationStatus.ACTIVE})

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="cascade"), nullable=False, index=True
    )
    accommodation_type: Mapped[AccommodationType] = mapped_column(nullable=False)
    status: Mapped[AccommodationStatus] = mapped_column(
        default=AccommodationStatus.DRAFT, nullable=False
    )
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    last_review_date: Mapped[Optional[date]] = mapped_column(Date)
    next_review_date: Mapped[Optional[date]] = mapped_column(Date)
    case_manager_name: Mapped[Optional[str]] = mapped_column(String(100))
    has_504_plan: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    has_iep: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    iep_placement: Mapped[Optional[IEPPlacement]] = mapped_column()
    is_ell: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    is_gifted: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    title_i_participating: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    notes: Mapped[Optional[str]] = mapped_column(Text)

    student: Mapped["Student"] = relationship()
    plan_504_items: Mapped[List["Plan504Accommodation"]] = relationship(
        back_populates="student_accommodation"
    )

    def is_active(self, today: Optional[date] = None) -> bool:
        return self.is_valid(today)

    def is_review_overdue(self, today: Optional[date] = None) -> bool:
        # No review date scheduled means nothing is overdue yet
        return classify_due(self.next_review_date, 0, today) == DueStatus.OVERDUE

    def review_status(self, days: int = 30, today: Optional[date] = None) -> DueStatus:
        return classify_due(self.next_review_date, days, today)

    def active_services_summary(self) -> str:
        services = []
        if self.has_504_plan is True:
            services.append("504 Plan")
        if self.has_iep is True:
            services.append("IEP")
        if self.is_ell is True:
            services.append("ELL/ESL")
        if self.is_gifted is True:
            services.append("Gifted")
        if self.title_i_participating is True:
            services.append("Title I")
        return ", ".join(services) if services else "No active services"

    def __repr__(self) -> str:
        return (
            f"<StudentAccommodation id={self.id!r} student_id={self.student_id!r} "
            f"accommodation_type={self.accommodation_type!r} status={self.status!r}>"
        )


class Plan504Category(DisplayEnum):
    INSTRUCTIONAL = ("Instructional",)
    TESTING = ("Testing",)
    ENVIRONMENTAL = ("Environmental",)
    BEHAVIORAL = ("Behavioral",)
    ASSISTIVE_TECHNOLOGY = ("Assistive Technology",)
    HEALTH = ("Health",)


class Plan504Accommodation(AuditMixin, Base):
    """A single accommodation line item within a student's 504 plan."""

    __tablename__ = "plan_504_accommodations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_accommodation_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("student_accommodations.id", ondelete="cascade")
    )
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="cascade"), nullable=False, index=True
    )
    category: Mapped[Plan504Category] = mapped_column(nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    applies_to_state_testing: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    effective_date: Mapped[Optional[date]] = mapped_column(Date)
    expiration_date: Mapped[Optional[date]] = mapped_column(Date)
    active: Mapped[Optional[bool]] = mapped_column(Boolean, default=True)

    student: Mapped["Student"] = relationship()
    student_accommodation: Mapped[Optional["StudentAccommodation"]] = relationship(
        back_populates="plan_504_items"
    )

    def is_currently_active(self, today: Optional[date] = None) -> bool:
        return is_in_force(self.active, self.effective_date, self.expiration_date, today)

    def __repr__(self) -> str:
        return f"<Plan504Accommodation id={self.id!r} category={self.category!r} active={self.active!r}>"


class GiftedPlanStatus(DisplayEnum):
    DRAFT = ("Draft", "white")
    PENDING_PARENT_APPROVAL = ("Pending Parent Approval", "yellow")
    ACTIVE = ("Active", "green")
    UNDER_REVIEW = ("Under Review", "cyan")
    COMPLETED = ("Completed", "white")
    DISCONTINUED = ("Discontinued", "red")


class GiftedEducationPlan(AuditMixin, LifecycleMixin, Base):
    __tablename__ = "gifted_education_plans"

    __window__ = ("plan_start_date", "plan_end_date")
    ACTIVE_STATUSES = frozenset({GiftedPlanStatus.ACTIVE, GiftedPlanStatus.UNDER_REVIEW})

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="cascade"), nullable=False, index=True
    )
    gifted_category: Mapped[Optional[GiftedCategory]] = mapped_column()
    status: Mapped[GiftedPlanStatus] = mapped_column(
        default=GiftedPlanStatus.DRAFT, nullable=False
    )
    plan_start_date: Mapped[Optional[date]] = mapped_column(Date)
    plan_end_date: Mapped[Optional[date]] = mapped_column(Date)
    annual_review_date: Mapped[Optional[date]] = mapped_column(Date)
    goals: Mapped[Optional[str]] = mapped_column(Text)
    parent_approved: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)

    student: Mapped["Student"] = relationship()

    def is_active(self, today: Optional[date] = None) -> bool:
        return self.is_valid(today)

    def review_status(self, days: int = 30, today: Optional[date] = None) -> DueStatus:
        return classify_due(self.annual_review_date, days, today)

    def needs_parent_approval(self) -> bool:
        return self.parent_approved is not True and self.status in (
            GiftedPlanStatus.DRAFT,
            GiftedPlanStatus.PENDING_PARENT_APPROVAL,
        )

    def __repr__(self) -> str:
        return f"<GiftedEducationPlan id={self.id!r} student_id={self.student_id!r} status={self.status!r}>"

"""
Health office records: individualized health plans, medications, screenings
and the per-student medical summary.
"""

from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import Boolean, Date, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sis_records.models.audit import AuditMixin
from sis_records.models.base import Base
from sis_records.models.due import DueStatus, classify_due, days_since, days_until
from sis_records.models.enums import DisplayEnum
from sis_records.models.lifecycle import LifecycleMixin, is_in_force
from sis_records.models.people import Student


def _filled(text: Optional[str]) -> bool:
    return text is not None and text.strip() != ""


class PlanType(DisplayEnum):
    ASTHMA = ("Asthma Action Plan",)
    ALLERGY = ("Allergy Action Plan",)
    FOOD_ALLERGY = ("Food Allergy Action Plan",)
    ANAPHYLAXIS = ("Anaphylaxis Action Plan",)
    SEIZURE = ("Seizure Action Plan",)
    DIABETES_TYPE_1 = ("Type 1 Diabetes Management Plan",)
    DIABETES_TYPE_2 = ("Type 2 Diabetes Management Plan",)
    CARDIAC = ("Cardiac Condition Plan",)
    BLEEDING_DISORDER = ("Bleeding Disorder Plan",)
    SICKLE_CELL = ("Sickle Cell Disease Plan",)
    INDIVIDUALIZED_HEALTHCARE = ("Individualized Healthcare Plan",)
    OTHER = ("Other Health Care Plan",)


class PlanStatus(DisplayEnum):
    DRAFT = ("Draft", "white")
    PENDING_PHYSICIAN_APPROVAL = ("Pending Physician Approval", "yellow")
    PENDING_PARENT_CONSENT = ("Pending Parent Consent", "yellow")
    ACTIVE = ("Active", "green")
    UNDER_REVIEW = ("Under Review", "cyan")
    EXPIRED = ("Expired", "red")
    INACTIVE = ("Inactive", "white")
    ARCHIVED = ("Archived", "white")


class ConditionSeverity(DisplayEnum):
    MILD = ("Mild",)
    MODERATE = ("Moderate",)
    SEVERE = ("Severe",)
    LIFE_THREATENING = ("Life-Threatening", "red")


class AllergySeverity(DisplayEnum):
    NONE = ("None", None, "No known allergies")
    MILD = ("Mild", None, "Minor discomfort")
    MODERATE = ("Moderate", "yellow", "Requires monitoring")
    SEVERE = ("Severe", "red", "Anaphylaxis risk, requires immediate intervention")
    LIFE_THREATENING = (
        "Life-Threatening",
        "red",
        "Emergency protocol required, immediate EpiPen",
    )


class HealthPlan(AuditMixin, LifecycleMixin, Base):
    __tablename__ = "health_plans"

    ACTIVE_STATUSES = frozenset({PlanStatus.ACTIVE})
    REVIEW_WINDOW_DAYS = 30
    EPIPEN_WARNING_DAYS = 30

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plan_number: Mapped[Optional[str]] = mapped_column(String(50), unique=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="cascade"), nullable=False, index=True
    )
    plan_type: Mapped[PlanType] = mapped_column(nullable=False)
    plan_name: Mapped[Optional[str]] = mapped_column(String(200))
    status: Mapped[PlanStatus] = mapped_column(
        default=PlanStatus.DRAFT, nullable=False, index=True
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    diagnosis: Mapped[str] = mapped_column(String(200), nullable=False)
    diagnosis_code: Mapped[Optional[str]] = mapped_column(String(50))
    condition_severity: Mapped[Optional[ConditionSeverity]] = mapped_column()
    allergy_severity: Mapped[Optional[AllergySeverity]] = mapped_column()
    physician_name: Mapped[Optional[str]] = mapped_column(String(100))
    physician_orders_on_file: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    parent_consent_received: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    staff_training_required: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    staff_training_completed: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    distributed_to_teachers: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    has_epipen: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    epipen_expiration_date: Mapped[Optional[date]] = mapped_column(Date)
    emergency_protocol: Mapped[Optional[str]] = mapped_column(Text)
    annual_review_required: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=True
    )
    last_review_date: Mapped[Optional[date]] = mapped_column(Date)
    next_review_date: Mapped[Optional[date]] = mapped_column(Date, index=True)

    student: Mapped["Student"] = relationship()
    medications: Mapped[List["Medication"]] = relationship(
        back_populates="health_plan"
    )

    def is_active(self, today: Optional[date] = None) -> bool:
        return self.is_valid(today)

    def is_expired(self, today: Optional[date] = None) -> bool:
        return self.status == PlanStatus.EXPIRED or super().is_expired(today)

    def review_status(
        self, days: Optional[int] = None, today: Optional[date] = None
    ) -> DueStatus:
        # A plan with no review date but an annual review requirement needs one scheduled now
        missing = (
            DueStatus.OVERDUE
            if self.annual_review_required is not False
            else DueStatus.NOT_SCHEDULED
        )
        return classify_due(
            self.next_review_date,
            self.REVIEW_WINDOW_DAYS if days is None else days,
            today,
            missing=missing,
        )

    def is_due_for_review(self, today: Optional[date] = None) -> bool:
        if self.next_review_date is None:
            return self.annual_review_required is not False
        return self.next_review_date <= (today or date.today())

    def needs_physician_approval(self) -> bool:
        return (
            self.status == PlanStatus.PENDING_PHYSICIAN_APPROVAL
            or self.physician_orders_on_file is not True
        )

    def needs_parent_consent(self) -> bool:
        return (
            self.status == PlanStatus.PENDING_PARENT_CONSENT
            or self.parent_consent_received is not True
        )

    def needs_staff_training(self) -> bool:
        return (
            self.staff_training_required is True
            and self.staff_training_completed is not True
        )

    def needs_distribution(self) -> bool:
        return (
            self.distributed_to_teachers is not True
            and self.status == PlanStatus.ACTIVE
        )

    def has_life_threatening_condition(self) -> bool:
        return (
            self.condition_severity == ConditionSeverity.LIFE_THREATENING
            or self.allergy_severity == AllergySeverity.LIFE_THREATENING
            or self.has_epipen is True
        )

    def epipen_expiring(self, today: Optional[date] = None) -> bool:
        """EpiPen still usable but expiring within the warning window."""
        if self.epipen_expiration_date is None:
            return False
        today = today or date.today()
        return (
            today
            < self.epipen_expiration_date
            < today + timedelta(days=self.EPIPEN_WARNING_DAYS)
        )

    def epipen_expired(self, today: Optional[date] = None) -> bool:
        return (
            self.epipen_expiration_date is not None
            and self.epipen_expiration_date < (today or date.today())
        )

    def days_since_review(self, today: Optional[date] = None) -> Optional[int]:
        return days_since(self.last_review_date, today)

    def days_until_review(self, today: Optional[date] = None) -> Optional[int]:
        return days_until(self.next_review_date, today)

    def __repr__(self) -> str:
        return (
            f"<HealthPlan id={self.id!r} plan_number={self.plan_number!r} "
            f"plan_type={self.plan_type!r} status={self.status!r}>"
        )


class Medication(AuditMixin, Base):
    __tablename__ = "medications"

    REFILL_WARNING_DOSES = 5

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="cascade"), nullable=False, index=True
    )
    health_plan_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("health_plans.id", ondelete="SET NULL")
    )
    medication_name: Mapped[str] = mapped_column(String(200), nullable=False)
    dosage: Mapped[Optional[str]] = mapped_column(String(100))
    frequency: Mapped[Optional[str]] = mapped_column(String(100))
    route: Mapped[Optional[str]] = mapped_column(String(50))
    administration_time: Mapped[Optional[str]] = mapped_column(String(50))
    prescribing_physician: Mapped[Optional[str]] = mapped_column(String(100))
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    active: Mapped[Optional[bool]] = mapped_column(Boolean, default=True)
    self_administered: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    controlled_substance: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    doses_remaining: Mapped[Optional[int]] = mapped_column(Integer)

    student: Mapped["Student"] = relationship()
    health_plan: Mapped[Optional["HealthPlan"]] = relationship(
        back_populates="medications"
    )

    def is_active_today(self, today: Optional[date] = None) -> bool:
        return is_in_force(self.active, self.start_date, self.end_date, today)

    def needs_refill(self) -> bool:
        return (
            self.doses_remaining is not None
            and self.doses_remaining <= self.REFILL_WARNING_DOSES
        )

    def __repr__(self) -> str:
        return f"<Medication id={self.id!r} medication_name={self.medication_name!r} active={self.active!r}>"


class ScreeningType(DisplayEnum):
    VISION = ("Vision Screening",)
    HEARING = ("Hearing Screening",)
    SCOLIOSIS = ("Scoliosis Screening",)
    DENTAL = ("Dental Screening",)
    BMI = ("Height/Weight/BMI",)
    BLOOD_PRESSURE = ("Blood Pressure",)
    OTHER = ("Other",)


class ScreeningStatus(DisplayEnum):
    SCHEDULED = ("Scheduled", "yellow")
    COMPLETED = ("Completed", "green")
    RESCHEDULED = ("Rescheduled", "cyan")
    PARENT_DECLINED = ("Parent Declined", "white")
    CANCELLED = ("Cancelled", "red")


class ScreeningResult(DisplayEnum):
    PASS = ("Pass", "green")
    FAIL = ("Fail", "red")
    REFER = ("Refer for Follow-Up", "yellow")
    INCONCLUSIVE = ("Inconclusive", "white")


class HealthScreening(AuditMixin, Base):
    __tablename__ = "health_screenings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="cascade"), nullable=False, index=True
    )
    screening_type: Mapped[ScreeningType] = mapped_column(nullable=False)
    status: Mapped[ScreeningStatus] = mapped_column(
        default=ScreeningStatus.SCHEDULED, nullable=False
    )
    result: Mapped[Optional[ScreeningResult]] = mapped_column()
    scheduled_date: Mapped[Optional[date]] = mapped_column(Date)
    completed_date: Mapped[Optional[date]] = mapped_column(Date)
    height_inches: Mapped[Optional[float]] = mapped_column(Float)
    weight_pounds: Mapped[Optional[float]] = mapped_column(Float)
    parent_notification_required: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    parent_notified: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    referral_needed: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    referral_completed: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    student: Mapped["Student"] = relationship()

    def is_completed(self) -> bool:
        return self.status == ScreeningStatus.COMPLETED

    def failed(self) -> bool:
        return self.result in (ScreeningResult.FAIL, ScreeningResult.REFER)

    def needs_parent_notification(self) -> bool:
        return (
            self.parent_notification_required is True
            and self.parent_notified is not True
        )

    def has_outstanding_referral(self) -> bool:
        return self.referral_needed is True and self.referral_completed is not True

    def is_overdue(self, today: Optional[date] = None) -> bool:
        # Never overdue without a scheduled date
        return (
            self.status == ScreeningStatus.SCHEDULED
            and classify_due(self.scheduled_date, 0, today) == DueStatus.OVERDUE
        )

    def calculate_bmi(self) -> Optional[float]:
        if not self.height_inches or self.weight_pounds is None:
            return None
        return round(self.weight_pounds / (self.height_inches**2) * 703, 1)

    def vision_impaired(self) -> bool:
        return self.screening_type == ScreeningType.VISION and self.failed()

    def hearing_impaired(self) -> bool:
        return self.screening_type == ScreeningType.HEARING and self.failed()

    def days_since_screening(self, today: Optional[date] = None) -> Optional[int]:
        return days_since(self.completed_date, today)

    def __repr__(self) -> str:
        return (
            f"<HealthScreening id={self.id!r} screening_type={self.screening_type!r} "
            f"status={self.status!r} result={self.result!r}>"
        )


class MedicalRecord(AuditMixin, Base):
    __tablename__ = "medical_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="cascade"), unique=True, nullable=False
    )
    food_allergies: Mapped[Optional[str]] = mapped_column(Text)
    medication_allergies: Mapped[Optional[str]] = mapped_column(Text)
    environmental_allergies: Mapped[Optional[str]] = mapped_column(Text)
    allergy_severity: Mapped[Optional[AllergySeverity]] = mapped_column()
    has_diabetes: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    diabetes_type: Mapped[Optional[str]] = mapped_column(String(20))
    has_asthma: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    asthma_severity: Mapped[Optional[str]] = mapped_column(String(20))
    has_seizure_disorder: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    has_heart_condition: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    has_epipen: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    epipen_location: Mapped[Optional[str]] = mapped_column(String(100))
    other_conditions: Mapped[Optional[str]] = mapped_column(Text)
    current_medications: Mapped[Optional[str]] = mapped_column(Text)
    physical_restrictions: Mapped[Optional[str]] = mapped_column(Text)
    medical_alert: Mapped[Optional[str]] = mapped_column(String(500))
    last_review_date: Mapped[Optional[date]] = mapped_column(Date)
    next_review_date: Mapped[Optional[date]] = mapped_column(Date)

    student: Mapped["Student"] = relationship()

    def has_medical_conditions(self) -> bool:
        return (
            _filled(self.food_allergies)
            or _filled(self.medication_allergies)
            or _filled(self.environmental_allergies)
            or self.has_diabetes is True
            or self.has_asthma is True
            or self.has_seizure_disorder is True
            or self.has_heart_condition is True
            or _filled(self.other_conditions)
            or _filled(self.current_medications)
        )

    def is_critical_case(self) -> bool:
        return (
            self.allergy_severity
            in (AllergySeverity.SEVERE, AllergySeverity.LIFE_THREATENING)
            or self.has_epipen is True
            or self.has_seizure_disorder is True
            or self.has_heart_condition is True
            or _filled(self.medical_alert)
        )

    def quick_summary(self) -> str:
        """Short multi-line summary for tooltips and rosters."""
        lines: List[str] = []
        if _filled(self.medical_alert):
            lines.append(f"ALERT: {self.medical_alert}")
        if _filled(self.food_allergies):
            lines.append(f"Food Allergies: {self.food_allergies}")
        if self.has_diabetes is True:
            lines.append(f"Diabetes: {self.diabetes_type or 'Yes'}")
        if self.has_asthma is True:
            lines.append(f"Asthma: {self.asthma_severity or 'Yes'}")
        if self.has_epipen is True:
            lines.append(f"EpiPen: {self.epipen_location or 'Available'}")
        if _filled(self.current_medications):
            lines.append("Medications: Yes")
        if _filled(self.physical_restrictions):
            lines.append(f"Restrictions: {self.physical_restrictions}")
        return "\n".join(lines) if lines else "No medical conditions on record"

    def is_review_overdue(self, today: Optional[date] = None) -> bool:
        return classify_due(self.next_review_date, 0, today) == DueStatus.OVERDUE

    def __repr__(self) -> str:
        return f"<MedicalRecord id={self.id!r} student_id={self.student_id!r}>"

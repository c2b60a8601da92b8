"""
Counseling referrals, sessions, crisis interventions and social work cases.

All four are safety-sensitive, so their predicates lean toward flagging: an
unset risk field never clears a record, it only fails to raise one.
"""

from datetime import date, time, timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sis_records.models.audit import AuditMixin
from sis_records.models.base import Base
from sis_records.models.checklist import ChecklistItem, ChecklistMixin, checklist_flag
from sis_records.models.due import DueStatus, classify_due, days_since
from sis_records.models.enums import DisplayEnum
from sis_records.models.lifecycle import LifecycleMixin
from sis_records.models.people import Staff, Student


class ReferralSource(DisplayEnum):
    TEACHER = ("Teacher Referral",)
    PARENT = ("Parent/Guardian Request",)
    SELF_REFERRAL = ("Student Self-Referral",)
    ADMINISTRATOR = ("Administrator Referral",)
    COUNSELOR = ("Counselor Referral",)
    NURSE = ("School Nurse Referral",)
    SOCIAL_WORKER = ("Social Worker Referral",)
    COMMUNITY = ("Community Agency",)
    COURT = ("Court Ordered",)
    PHYSICIAN = ("Physician Referral",)
    OTHER = ("Other Source",)


class ReferralType(DisplayEnum):
    INTERNAL_COUNSELOR = ("Internal School Counselor",)
    SCHOOL_PSYCHOLOGIST = ("School Psychologist",)
    SCHOOL_SOCIAL_WORKER = ("School Social Worker",)
    EXTERNAL_THERAPIST = ("External Therapist/Counselor",)
    PSYCHIATRIST = ("Psychiatrist",)
    COMMUNITY_MENTAL_HEALTH = ("Community Mental Health Center",)
    CRISIS_SERVICES = ("Crisis Services",)
    HOSPITAL_PSYCHIATRIC = ("Hospital/Psychiatric Unit",)
    SUBSTANCE_ABUSE = ("Substance Abuse Treatment",)
    FAMILY_THERAPY = ("Family Therapy",)
    GROUP_THERAPY = ("Group Therapy",)
    ACADEMIC_SUPPORT = ("Academic Support Services",)
    SPECIAL_EDUCATION = ("Special Education Evaluation",)
    THREAT_ASSESSMENT = ("Threat Assessment Team",)
    COLLEGE_CAREER = ("College/Career Counseling",)
    OTHER = ("Other Service",)


EXTERNAL_REFERRAL_TYPES = frozenset(
    {
        ReferralType.EXTERNAL_THERAPIST,
        ReferralType.PSYCHIATRIST,
        ReferralType.COMMUNITY_MENTAL_HEALTH,
        ReferralType.HOSPITAL_PSYCHIATRIC,
        ReferralType.SUBSTANCE_ABUSE,
        ReferralType.FAMILY_THERAPY,
    }
)


class UrgencyLevel(DisplayEnum):
    ROUTINE = ("Routine - Within 2 Weeks", "green")
    MODERATE = ("Moderate - Within 1 Week", "yellow")
    URGENT = ("Urgent - Within 48 Hours", "magenta")
    EMERGENCY = ("Emergency - Immediate", "red")


# Days a referral may wait for services to start before it is overdue
RESPONSE_DAYS: Dict[UrgencyLevel, int] = {
    UrgencyLevel.EMERGENCY: 0,
    UrgencyLevel.URGENT: 2,
    UrgencyLevel.MODERATE: 7,
    UrgencyLevel.ROUTINE: 14,
}


class ReferralStatus(DisplayEnum):
    PENDING = ("Pending Review", "yellow")
    ASSIGNED = ("Assigned to Counselor", "cyan")
    INTAKE_SCHEDULED = ("Intake Scheduled", "cyan")
    IN_PROGRESS = ("Services In Progress", "green")
    ON_HOLD = ("On Hold", "white")
    COMPLETED = ("Services Completed", "green")
    DECLINED = ("Student/Parent Declined", "red")
    CANCELLED = ("Referral Cancelled", "red")
    NO_SHOW = ("Student No-Show", "red")


class ConcernArea(DisplayEnum):
    ACADEMIC_PERFORMANCE = ("Academic Performance",)
    BEHAVIORAL_ISSUES = ("Behavioral Issues",)
    ATTENDANCE = ("Attendance Problems",)
    SOCIAL_EMOTIONAL = ("Social-Emotional Concerns",)
    MENTAL_HEALTH = ("Mental Health Concerns",)
    CRISIS_SAFETY = ("Crisis/Safety Concerns",)
    PEER_RELATIONSHIPS = ("Peer Relationship Issues",)
    FAMILY_ISSUES = ("Family/Home Issues",)
    GRIEF_LOSS = ("Grief/Loss",)
    TRAUMA = ("Trauma",)
    ANXIETY_DEPRESSION = ("Anxiety/Depression",)
    SELF_HARM = ("Self-Harm",)
    SUICIDAL_IDEATION = ("Suicidal Ideation",)
    SUBSTANCE_USE = ("Substance Use",)
    BULLYING = ("Bullying",)
    COLLEGE_CAREER = ("College/Career Planning",)
    OTHER = ("Other Concern",)


RISK_ASSESSMENT_CONCERNS = frozenset(
    {
        ConcernArea.SUICIDAL_IDEATION,
        ConcernArea.SELF_HARM,
        ConcernArea.CRISIS_SAFETY,
        ConcernArea.MENTAL_HEALTH,
    }
)


class CounselingReferral(AuditMixin, Base):
    __tablename__ = "counseling_referrals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="cascade"), nullable=False, index=True
    )
    assigned_counselor_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("staff.id", ondelete="SET NULL")
    )
    referral_date: Mapped[Optional[date]] = mapped_column(Date)
    referral_source: Mapped[Optional[ReferralSource]] = mapped_column()
    referral_type: Mapped[Optional[ReferralType]] = mapped_column()
    urgency_level: Mapped[UrgencyLevel] = mapped_column(
        default=UrgencyLevel.ROUTINE, nullable=False
    )
    status: Mapped[ReferralStatus] = mapped_column(
        default=ReferralStatus.PENDING, nullable=False
    )
    primary_concern: Mapped[Optional[ConcernArea]] = mapped_column()
    reason: Mapped[Optional[str]] = mapped_column(Text)
    suicide_risk_indicated: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    harm_to_others_indicated: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    immediate_safety_concerns: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    crisis_intervention_needed: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    risk_assessment_completed: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    parent_contacted: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    parent_consent_obtained: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    services_initiated: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)

    student: Mapped["Student"] = relationship()
    assigned_counselor: Mapped[Optional["Staff"]] = relationship()

    def is_pending(self) -> bool:
        return self.status == ReferralStatus.PENDING

    def is_active(self) -> bool:
        return self.status in (
            ReferralStatus.ASSIGNED,
            ReferralStatus.INTAKE_SCHEDULED,
            ReferralStatus.IN_PROGRESS,
        )

    def is_closed(self) -> bool:
        return self.status in (
            ReferralStatus.COMPLETED,
            ReferralStatus.DECLINED,
            ReferralStatus.CANCELLED,
        )

    def is_high_priority(self) -> bool:
        return (
            self.urgency_level in (UrgencyLevel.URGENT, UrgencyLevel.EMERGENCY)
            or self.suicide_risk_indicated is True
            or self.harm_to_others_indicated is True
            or self.immediate_safety_concerns is True
        )

    def is_external_referral(self) -> bool:
        return self.referral_type in EXTERNAL_REFERRAL_TYPES

    def needs_parent_consent(self) -> bool:
        return self.is_external_referral() and self.parent_consent_obtained is not True

    def needs_risk_assessment(self) -> bool:
        return (
            self.risk_assessment_completed is not True
            and self.primary_concern in RISK_ASSESSMENT_CONCERNS
        )

    def needs_parent_contact(self) -> bool:
        return self.parent_contacted is not True and (
            self.is_high_priority()
            or self.is_external_referral()
            or self.crisis_intervention_needed is True
        )

    def days_since_referral(self, today: Optional[date] = None) -> Optional[int]:
        return days_since(self.referral_date, today)

    def is_overdue(self, today: Optional[date] = None) -> bool:
        """
        Services have not started within the window allowed by the urgency level.

        Closed referrals and referrals without a date are never overdue.
        """
        if self.is_closed() or self.referral_date is None:
            return False
        if self.services_initiated is True:
            return False
        allowed = RESPONSE_DAYS.get(self.urgency_level, RESPONSE_DAYS[UrgencyLevel.ROUTINE])
        return self.days_since_referral(today) > allowed

    def __repr__(self) -> str:
        return (
            f"<CounselingReferral id={self.id!r} student_id={self.student_id!r} "
            f"urgency_level={self.urgency_level!r} status={self.status!r}>"
        )


class CrisisType(DisplayEnum):
    SUICIDAL_IDEATION = ("Suicidal Ideation",)
    SUICIDE_ATTEMPT = ("Suicide Attempt",)
    SELF_HARM = ("Self-Harm",)
    THREAT_TO_OTHERS = ("Threat to Harm Others",)
    VIOLENT_BEHAVIOR = ("Violent/Aggressive Behavior",)
    PANIC_ATTACK = ("Severe Panic/Anxiety Attack",)
    SUBSTANCE_OVERDOSE = ("Substance Overdose",)
    ABUSE_DISCLOSURE = ("Abuse Disclosure",)
    GRIEF_TRAUMA = ("Acute Grief/Trauma Response",)
    RUNAWAY = ("Runaway/Missing Student",)
    SCHOOL_THREAT = ("School Threat Assessment",)
    MEDICAL_EMERGENCY = ("Medical Emergency",)
    OTHER = ("Other Crisis",)


class RiskLevel(DisplayEnum):
    NONE = ("No Risk", "green")
    LOW = ("Low Risk", "green")
    MODERATE = ("Moderate Risk", "yellow")
    HIGH = ("High Risk", "red")
    IMMINENT = ("Imminent Risk", "red")


class SuicideRiskLevel(DisplayEnum):
    NO_RISK = ("No Current Risk", "green")
    LOW = ("Low Risk", "green")
    MODERATE = ("Moderate Risk", "yellow")
    HIGH = ("High Risk", "red")
    IMMINENT = ("Imminent Risk", "red")


class ThreatLevel(DisplayEnum):
    NO_THREAT = ("No Threat", "green")
    LOW = ("Low Threat", "green")
    MEDIUM = ("Medium Threat", "yellow")
    HIGH = ("High Threat", "red")
    IMMINENT = ("Imminent Threat", "red")


SAFETY_RESPONSE = "Safety Response"
NOTIFICATIONS = "Notifications"
DOCUMENTATION = "Documentation"

CRISIS_RESPONSE_CHECKLIST: Tuple[ChecklistItem, ...] = (
    ChecklistItem("safety_plan_created", "Safety plan created", SAFETY_RESPONSE),
    ChecklistItem("crisis_hotline_provided", "Crisis hotline provided", SAFETY_RESPONSE),
    ChecklistItem("environment_made_safe", "Environment made safe", SAFETY_RESPONSE),
    ChecklistItem(
        "means_restriction_discussed", "Means restriction discussed", SAFETY_RESPONSE
    ),
    ChecklistItem("admin_notified", "Administration notified", NOTIFICATIONS),
    ChecklistItem("parent_notified", "Parent/guardian notified", NOTIFICATIONS),
    ChecklistItem("district_notified", "District notified", NOTIFICATIONS),
    ChecklistItem("incident_report_completed", "Incident report completed", DOCUMENTATION),
    ChecklistItem("mandated_report_filed", "Mandated report filed", DOCUMENTATION),
    ChecklistItem("safety_plan_documented", "Safety plan documented", DOCUMENTATION),
)


class CrisisIntervention(AuditMixin, ChecklistMixin, Base):
    """
    A single crisis response event.

    The response protocol is a checklist without stored totals; completion is
    always counted from the flags on read.
    """

    __tablename__ = "crisis_interventions"

    CHECKLIST = CRISIS_RESPONSE_CHECKLIST

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="cascade"), nullable=False, index=True
    )
    responder_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("staff.id", ondelete="SET NULL")
    )
    crisis_date: Mapped[Optional[date]] = mapped_column(Date)
    crisis_type: Mapped[Optional[CrisisType]] = mapped_column()
    description: Mapped[Optional[str]] = mapped_column(Text)
    location: Mapped[Optional[str]] = mapped_column(String(200))
    risk_level: Mapped[Optional[RiskLevel]] = mapped_column()
    suicide_risk_assessment: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    suicide_risk_level: Mapped[Optional[SuicideRiskLevel]] = mapped_column()
    threat_assessment_conducted: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    threat_level: Mapped[Optional[ThreatLevel]] = mapped_column()
    imminent_danger: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    emergency_services_called: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    follow_up_required: Mapped[Optional[bool]] = mapped_column(Boolean, default=True)
    follow_up_date: Mapped[Optional[date]] = mapped_column(Date)
    follow_up_completed: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    clearance_required_to_return: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    clearance_received: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    clearance_date: Mapped[Optional[date]] = mapped_column(Date)

    safety_plan_created: Mapped[Optional[bool]] = checklist_flag()
    crisis_hotline_provided: Mapped[Optional[bool]] = checklist_flag()
    environment_made_safe: Mapped[Optional[bool]] = checklist_flag()
    means_restriction_discussed: Mapped[Optional[bool]] = checklist_flag()
    admin_notified: Mapped[Optional[bool]] = checklist_flag()
    parent_notified: Mapped[Optional[bool]] = checklist_flag()
    district_notified: Mapped[Optional[bool]] = checklist_flag()
    incident_report_completed: Mapped[Optional[bool]] = checklist_flag()
    mandated_report_filed: Mapped[Optional[bool]] = checklist_flag()
    safety_plan_documented: Mapped[Optional[bool]] = checklist_flag()

    student: Mapped["Student"] = relationship()
    responder: Mapped[Optional["Staff"]] = relationship()

    def is_high_risk(self) -> bool:
        return (
            self.risk_level in (RiskLevel.HIGH, RiskLevel.IMMINENT)
            or self.suicide_risk_level
            in (SuicideRiskLevel.HIGH, SuicideRiskLevel.IMMINENT)
            or self.threat_level in (ThreatLevel.HIGH, ThreatLevel.IMMINENT)
        )

    def is_imminent_risk(self) -> bool:
        return (
            self.risk_level == RiskLevel.IMMINENT
            or self.suicide_risk_level == SuicideRiskLevel.IMMINENT
            or self.threat_level == ThreatLevel.IMMINENT
            or self.imminent_danger is True
        )

    def is_suicide_risk(self) -> bool:
        return self.suicide_risk_assessment is True and self.suicide_risk_level in (
            SuicideRiskLevel.MODERATE,
            SuicideRiskLevel.HIGH,
            SuicideRiskLevel.IMMINENT,
        )

    def is_violence_risk(self) -> bool:
        return self.threat_assessment_conducted is True and self.threat_level in (
            ThreatLevel.MEDIUM,
            ThreatLevel.HIGH,
            ThreatLevel.IMMINENT,
        )

    def needs_emergency_services(self) -> bool:
        return self.is_imminent_risk() and self.emergency_services_called is not True

    def needs_parent_notification(self) -> bool:
        return self.parent_notified is not True and (
            self.is_high_risk() or self.emergency_services_called is True
        )

    def needs_follow_up(self, today: Optional[date] = None) -> bool:
        """Follow-up is due today or already past. No follow-up date means none is due."""
        return (
            self.follow_up_required is True
            and self.follow_up_completed is not True
            and self.follow_up_date is not None
            and self.follow_up_date <= (today or date.today())
        )

    def needs_clearance_to_return(self) -> bool:
        return (
            self.clearance_required_to_return is True
            and self.clearance_received is not True
        )

    def days_since_crisis(self, today: Optional[date] = None) -> Optional[int]:
        return days_since(self.crisis_date, today)

    def open_actions(self) -> List[str]:
        actions = [item.label for item in self.outstanding_items()]
        if self.needs_emergency_services():
            actions.insert(0, "Call emergency services")
        if self.needs_clearance_to_return():
            actions.append("Obtain clearance to return")
        return actions

    def __repr__(self) -> str:
        return (
            f"<CrisisIntervention id={self.id!r} student_id={self.student_id!r} "
            f"crisis_type={self.crisis_type!r} risk_level={self.risk_level!r}>"
        )


class SessionType(DisplayEnum):
    INITIAL_CONSULTATION = ("Initial Consultation",)
    FOLLOW_UP = ("Follow-Up Session",)
    ACADEMIC_ADVISING = ("Academic Advising",)
    COURSE_SELECTION = ("Course Selection",)
    SCHEDULE_CHANGE = ("Schedule Change Consultation",)
    CREDIT_RECOVERY = ("Credit Recovery Planning",)
    GRADUATION_PLANNING = ("Graduation Planning",)
    COLLEGE_PLANNING = ("College Planning",)
    CAREER_COUNSELING = ("Career Counseling",)
    PERSONAL_COUNSELING = ("Personal/Social Counseling",)
    CRISIS_INTERVENTION = ("Crisis Intervention",)
    CONFLICT_RESOLUTION = ("Conflict Resolution",)
    BEHAVIORAL_SUPPORT = ("Behavioral Support",)
    SOCIAL_SKILLS = ("Social Skills Development",)
    GROUP_COUNSELING = ("Group Counseling Session",)
    PARENT_CONFERENCE = ("Parent Conference",)
    CHECK_IN = ("Brief Check-In",)
    OTHER = ("Other",)


ACADEMIC_SESSION_TYPES = frozenset(
    {
        SessionType.ACADEMIC_ADVISING,
        SessionType.COURSE_SELECTION,
        SessionType.GRADUATION_PLANNING,
    }
)


class SessionFormat(DisplayEnum):
    INDIVIDUAL = ("Individual",)
    GROUP = ("Group",)
    FAMILY = ("Family",)
    PARENT_ONLY = ("Parent Only",)
    VIRTUAL = ("Virtual/Remote",)
    PHONE = ("Phone Call",)


class SessionStatus(DisplayEnum):
    DRAFT = ("Draft", "white")
    SCHEDULED = ("Scheduled", "cyan")
    IN_PROGRESS = ("In Progress", "cyan")
    COMPLETED = ("Completed", "green")
    CANCELLED = ("Cancelled", "red")
    NO_SHOW = ("Student No-Show", "red")
    RESCHEDULED = ("Rescheduled", "yellow")


class CounselingFocus(DisplayEnum):
    ACADEMIC = ("Academic Performance",)
    BEHAVIORAL = ("Behavioral Concerns",)
    SOCIAL_EMOTIONAL = ("Social-Emotional",)
    MENTAL_HEALTH = ("Mental Health",)
    CRISIS = ("Crisis/Safety",)
    COLLEGE_CAREER = ("College/Career Planning",)
    ATTENDANCE = ("Attendance Issues",)
    PEER_RELATIONSHIPS = ("Peer Relationships",)
    FAMILY_ISSUES = ("Family Issues",)
    GRIEF_LOSS = ("Grief/Loss",)
    ANXIETY_STRESS = ("Anxiety/Stress Management",)
    SELF_ESTEEM = ("Self-Esteem",)
    BULLYING = ("Bullying/Harassment",)
    SUBSTANCE_USE = ("Substance Use",)
    OTHER = ("Other",)


class CounselingSession(AuditMixin, Base):
    __tablename__ = "counseling_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="cascade"), nullable=False, index=True
    )
    counselor_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("staff.id", ondelete="SET NULL")
    )
    referral_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("counseling_referrals.id", ondelete="SET NULL")
    )
    crisis_intervention_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("crisis_interventions.id", ondelete="SET NULL")
    )
    session_number: Mapped[Optional[str]] = mapped_column(String(30), unique=True)
    session_date: Mapped[Optional[date]] = mapped_column(Date)
    session_time: Mapped[Optional[time]] = mapped_column(Time)
    duration_minutes: Mapped[Optional[int]] = mapped_column(Integer)
    session_type: Mapped[Optional[SessionType]] = mapped_column()
    session_format: Mapped[SessionFormat] = mapped_column(
        default=SessionFormat.INDIVIDUAL, nullable=False
    )
    status: Mapped[SessionStatus] = mapped_column(
        default=SessionStatus.SCHEDULED, nullable=False
    )
    primary_focus: Mapped[Optional[CounselingFocus]] = mapped_column()
    topic: Mapped[Optional[str]] = mapped_column(String(200))
    session_notes: Mapped[Optional[str]] = mapped_column(Text)
    crisis_situation: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    safety_concerns: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    risk_level: Mapped[Optional[RiskLevel]] = mapped_column()
    safety_plan_created: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    parent_notified: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    parent_notification_date: Mapped[Optional[date]] = mapped_column(Date)
    administration_notified: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    follow_up_needed: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    follow_up_date: Mapped[Optional[date]] = mapped_column(Date)
    follow_up_completed: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    student_attended: Mapped[Optional[bool]] = mapped_column(Boolean, default=True)
    absence_reason: Mapped[Optional[str]] = mapped_column(String(200))

    student: Mapped["Student"] = relationship()
    counselor: Mapped[Optional["Staff"]] = relationship()
    referral: Mapped[Optional["CounselingReferral"]] = relationship()
    crisis_intervention: Mapped[Optional["CrisisIntervention"]] = relationship()

    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    def is_high_risk(self) -> bool:
        return self.risk_level in (RiskLevel.HIGH, RiskLevel.IMMINENT)

    def is_crisis(self) -> bool:
        return self.crisis_situation is True or self.is_high_risk()

    def is_group_session(self) -> bool:
        return self.session_format == SessionFormat.GROUP

    def is_academic_focus(self) -> bool:
        return (
            self.session_type in ACADEMIC_SESSION_TYPES
            or self.primary_focus == CounselingFocus.ACADEMIC
        )

    def needs_parent_notification(self) -> bool:
        return self.is_crisis() and self.parent_notified is not True

    def needs_follow_up(self, today: Optional[date] = None) -> bool:
        """
        A follow-up was asked for and is still ahead: unscheduled, or scheduled
        for today or later. Past-dated follow-ups show up in follow_up_status.
        """
        if self.follow_up_needed is not True or self.follow_up_completed is True:
            return False
        return self.follow_up_date is None or self.follow_up_date >= (
            today or date.today()
        )

    def follow_up_status(self, days: int = 7, today: Optional[date] = None) -> DueStatus:
        if self.follow_up_needed is not True or self.follow_up_completed is True:
            return DueStatus.NOT_SCHEDULED
        return classify_due(self.follow_up_date, days, today)

    def days_since_session(self, today: Optional[date] = None) -> Optional[int]:
        return days_since(self.session_date, today)

    def __repr__(self) -> str:
        return (
            f"<CounselingSession id={self.id!r} session_number={self.session_number!r} "
            f"status={self.status!r}>"
        )


class CaseType(DisplayEnum):
    HOMELESS_SERVICES = ("McKinney-Vento Homeless Services",)
    FOSTER_CARE = ("Foster Care Coordination",)
    CPS_INVOLVEMENT = ("CPS/Child Welfare",)
    FAMILY_SUPPORT = ("Family Support Services",)
    BASIC_NEEDS = ("Basic Needs Assistance",)
    HOUSING_INSTABILITY = ("Housing Instability",)
    FOOD_INSECURITY = ("Food Insecurity",)
    ATTENDANCE_INTERVENTION = ("Attendance/Truancy Intervention",)
    BEHAVIORAL_SUPPORT = ("Behavioral Support",)
    MENTAL_HEALTH = ("Mental Health Services",)
    SUBSTANCE_ABUSE = ("Substance Abuse (Family)",)
    DOMESTIC_VIOLENCE = ("Domestic Violence Support",)
    MEDICAL_NEEDS = ("Medical/Health Needs",)
    IMMIGRANT_REFUGEE = ("Immigrant/Refugee Services",)
    TEEN_PARENT = ("Teen Parent Support",)
    GRIEF_TRAUMA = ("Grief/Trauma Support",)
    COMMUNITY_REFERRAL = ("Community Resource Referral",)
    CRISIS_INTERVENTION = ("Crisis Intervention",)
    OTHER = ("Other Social Services",)


class CaseStatus(DisplayEnum):
    OPEN = ("Open/Active", "green")
    ON_HOLD = ("On Hold", "white")
    PENDING_REFERRAL = ("Pending Referral", "yellow")
    SERVICES_IN_PROGRESS = ("Services In Progress", "green")
    CLOSED_SUCCESSFUL = ("Closed - Goals Met", "cyan")
    CLOSED_UNSUCCESSFUL = ("Closed - Goals Not Met", "red")
    TRANSFERRED = ("Transferred to Another Provider", "cyan")
    FAMILY_DECLINED = ("Family Declined Services", "red")
    STUDENT_WITHDREW = ("Student Withdrew from School", "red")


CLOSED_CASE_STATUSES = frozenset(
    {
        CaseStatus.CLOSED_SUCCESSFUL,
        CaseStatus.CLOSED_UNSUCCESSFUL,
        CaseStatus.TRANSFERRED,
        CaseStatus.FAMILY_DECLINED,
        CaseStatus.STUDENT_WITHDREW,
    }
)


class PriorityLevel(DisplayEnum):
    LOW = ("Low Priority", "green")
    MEDIUM = ("Medium Priority", "yellow")
    HIGH = ("High Priority", "magenta")
    URGENT = ("Urgent", "red")
    CRISIS = ("Crisis", "red")


class HousingSituation(DisplayEnum):
    DOUBLED_UP = ("Doubled Up with Another Family",)
    SHELTER = ("Emergency Shelter",)
    HOTEL_MOTEL = ("Hotel/Motel",)
    TRANSITIONAL_HOUSING = ("Transitional Housing",)
    UNSHELTERED = ("Unsheltered (Car, Park, Abandoned Building)",)
    AWAITING_FOSTER_CARE = ("Awaiting Foster Care Placement",)
    UNACCOMPANIED_YOUTH = ("Unaccompanied Youth",)
    STABLE_HOUSING = ("Stable Housing (Case Resolved)",)


class CPSStatus(DisplayEnum):
    INVESTIGATION_OPEN = ("Investigation Open",)
    SUBSTANTIATED = ("Substantiated",)
    UNSUBSTANTIATED = ("Unsubstantiated",)
    SERVICES_OPEN = ("Services Open",)
    PENDING = ("Pending Review",)
    CLOSED = ("Case Closed",)


# A home visit older than this is due again
HOME_VISIT_INTERVAL_DAYS = 90


class SocialWorkCase(AuditMixin, LifecycleMixin, Base):
    """
    A social work case from opening to closure.

    ``is_active`` follows the case status alone. The opened and closed dates
    only feed window validation.
    """

    __tablename__ = "social_work_cases"
    __window__ = ("case_opened_date", "case_closed_date")
    ACTIVE_STATUSES = frozenset(
        {CaseStatus.OPEN, CaseStatus.PENDING_REFERRAL, CaseStatus.SERVICES_IN_PROGRESS}
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="cascade"), nullable=False, index=True
    )
    social_worker_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("staff.id", ondelete="SET NULL")
    )
    case_number: Mapped[Optional[str]] = mapped_column(String(30), unique=True)
    case_opened_date: Mapped[Optional[date]] = mapped_column(Date)
    case_closed_date: Mapped[Optional[date]] = mapped_column(Date)
    case_type: Mapped[Optional[CaseType]] = mapped_column()
    status: Mapped[CaseStatus] = mapped_column(default=CaseStatus.OPEN, nullable=False)
    priority_level: Mapped[PriorityLevel] = mapped_column(
        default=PriorityLevel.MEDIUM, nullable=False
    )
    presenting_issue: Mapped[Optional[str]] = mapped_column(Text)
    mckinney_vento_eligible: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    housing_situation: Mapped[Optional[HousingSituation]] = mapped_column()
    in_foster_care: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    cps_involvement: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    cps_status: Mapped[Optional[CPSStatus]] = mapped_column()
    safety_plan_in_place: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    home_visit_conducted: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    last_home_visit_date: Mapped[Optional[date]] = mapped_column(Date)
    number_of_home_visits: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    follow_up_needed: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    next_follow_up_date: Mapped[Optional[date]] = mapped_column(Date)
    last_contact_date: Mapped[Optional[date]] = mapped_column(Date)
    closure_reason: Mapped[Optional[str]] = mapped_column(Text)

    student: Mapped["Student"] = relationship()
    social_worker: Mapped[Optional["Staff"]] = relationship()

    def is_active(self) -> bool:
        return self.status_is_active()

    def is_closed(self) -> bool:
        return self.status in CLOSED_CASE_STATUSES

    def is_high_priority(self) -> bool:
        return self.priority_level in (
            PriorityLevel.HIGH,
            PriorityLevel.URGENT,
            PriorityLevel.CRISIS,
        )

    def needs_immediate_attention(self) -> bool:
        return (
            self.priority_level in (PriorityLevel.URGENT, PriorityLevel.CRISIS)
            and self.is_active()
        )

    def needs_follow_up(self, today: Optional[date] = None) -> bool:
        """A scheduled follow-up is due today or already past."""
        return (
            self.follow_up_needed is True
            and self.next_follow_up_date is not None
            and self.next_follow_up_date <= (today or date.today())
        )

    def follow_up_status(self, days: int = 7, today: Optional[date] = None) -> DueStatus:
        if self.follow_up_needed is not True:
            return DueStatus.NOT_SCHEDULED
        return classify_due(self.next_follow_up_date, days, today)

    def has_active_child_welfare_involvement(self) -> bool:
        return self.in_foster_care is True or (
            self.cps_involvement is True and self.cps_status != CPSStatus.CLOSED
        )

    def days_since_case_opened(self, today: Optional[date] = None) -> Optional[int]:
        return days_since(self.case_opened_date, today)

    def days_since_last_contact(self, today: Optional[date] = None) -> Optional[int]:
        return days_since(self.last_contact_date, today)

    def needs_home_visit(self, today: Optional[date] = None) -> bool:
        if self.home_visit_conducted is not True:
            return True
        if self.last_home_visit_date is None:
            return False
        due = self.last_home_visit_date + timedelta(days=HOME_VISIT_INTERVAL_DAYS)
        return due < (today or date.today())

    def record_home_visit(self, visit_date: date) -> None:
        self.home_visit_conducted = True
        self.last_home_visit_date = visit_date
        self.last_contact_date = visit_date
        self.number_of_home_visits = (self.number_of_home_visits or 0) + 1

    def __repr__(self) -> str:
        return (
            f"<SocialWorkCase id={self.id!r} case_number={self.case_number!r} "
            f"status={self.status!r} priority_level={self.priority_level!r}>"
        )

from sis_records.models.accommodation import (
    AccommodationStatus,
    AccommodationType,
    GiftedCategory,
    GiftedEducationPlan,
    GiftedPlanStatus,
    IEPPlacement,
    Plan504Accommodation,
    Plan504Category,
    StudentAccommodation,
)
from sis_records.models.audit import AuditMixin
from sis_records.models.base import Base
from sis_records.models.checklist import (
    ChecklistCompletion,
    ChecklistItem,
    ChecklistMixin,
)
from sis_records.models.college import (
    AdmissionDecision,
    ApplicationStatus,
    CollegeApplication,
)
from sis_records.models.counseling import (
    CaseStatus,
    CaseType,
    ConcernArea,
    CounselingFocus,
    CounselingReferral,
    CounselingSession,
    CPSStatus,
    CrisisIntervention,
    CrisisType,
    HousingSituation,
    PriorityLevel,
    ReferralStatus,
    ReferralType,
    RiskLevel,
    SessionFormat,
    SessionStatus,
    SessionType,
    SocialWorkCase,
    SuicideRiskLevel,
    ThreatLevel,
    UrgencyLevel,
)
from sis_records.models.course_code import (
    CourseCategory,
    CourseType,
    EducationLevel,
    StateCourseCode,
)
from sis_records.models.due import DueStatus, classify_due
from sis_records.models.ell import EllService, EllServiceStatus, EllStatus, EllStudent
from sis_records.models.enrollment import (
    EnrollmentVerification,
    VerificationPurpose,
    VerificationStatus,
)
from sis_records.models.enums import DisplayEnum, display
from sis_records.models.health import (
    AllergySeverity,
    HealthPlan,
    HealthScreening,
    MedicalRecord,
    Medication,
    PlanStatus,
    PlanType,
    ScreeningResult,
    ScreeningStatus,
    ScreeningType,
)
from sis_records.models.lifecycle import LifecycleMixin, is_in_force, window_contains
from sis_records.models.people import (
    EnrollmentStatus,
    Staff,
    StaffCategory,
    StaffOccupation,
    Student,
    User,
)
from sis_records.models.schedule import BellPeriod, BellSchedule, PeriodType
from sis_records.models.security import ApiKey, LockedEntity, RecordLock
from sis_records.models.transport import BusRoute
from sis_records.models.withdrawal import (
    WITHDRAWAL_CHECKLIST,
    WithdrawalRecord,
    WithdrawalStatus,
    WithdrawalType,
)

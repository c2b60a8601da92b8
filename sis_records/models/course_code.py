"""
State-assigned course codes and their SCED classification.

Grade levels are integers with -1 for Pre-K and 0 for kindergarten. A missing
minimum or maximum leaves that side of the range open.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column

from sis_records.models.audit import AuditMixin
from sis_records.models.base import Base
from sis_records.models.enums import DisplayEnum

PRE_K = -1
KINDERGARTEN = 0
LOWEST_GRADE = PRE_K
HIGHEST_GRADE = 12

# Two-digit SCED subject area prefixes
SCED_SUBJECT_AREAS = {
    "01": "English Language and Literature",
    "02": "Mathematics",
    "03": "Life and Physical Sciences",
    "04": "Social Sciences and History",
    "05": "Fine and Performing Arts",
    "06": "Foreign Language and Literature",
    "07": "Religious Education and Theology",
    "08": "Physical, Health, and Safety Education",
    "09": "Military Science",
    "10": "Information Technology",
    "11": "Communication and Audio/Visual Technology",
    "12": "Business and Marketing",
    "13": "Manufacturing",
    "14": "Health Care Sciences",
    "15": "Public, Protective, and Government Service",
    "16": "Hospitality and Tourism",
    "17": "Architecture and Construction",
    "18": "Agriculture, Food, and Natural Resources",
    "19": "Human Services",
    "20": "Transportation, Distribution and Logistics",
    "21": "Engineering and Technology",
    "22": "Miscellaneous",
}


class CourseCategory(DisplayEnum):
    CORE = ("Core Academic",)
    ELECTIVE = ("Elective",)
    CTE = ("Career and Technical Education",)
    ENRICHMENT = ("Enrichment",)
    INTERVENTION = ("Intervention",)


class CourseType(DisplayEnum):
    REGULAR = ("Regular",)
    HONORS = ("Honors",)
    AP = ("Advanced Placement",)
    IB = ("International Baccalaureate",)
    DUAL_CREDIT = ("Dual Credit",)
    REMEDIAL = ("Remedial",)
    SPECIAL_EDUCATION = ("Special Education",)


ADVANCED_COURSE_TYPES = frozenset({CourseType.HONORS, CourseType.AP, CourseType.IB})


class EducationLevel(DisplayEnum):
    PRE_K = ("Pre-Kindergarten",)
    KINDERGARTEN = ("Kindergarten",)
    ELEMENTARY = ("Elementary School",)
    MIDDLE_SCHOOL = ("Middle School",)
    HIGH_SCHOOL = ("High School",)


def education_level_for(grade: Optional[int]) -> EducationLevel:
    if grade is None:
        return EducationLevel.HIGH_SCHOOL
    if grade < KINDERGARTEN:
        return EducationLevel.PRE_K
    if grade == KINDERGARTEN:
        return EducationLevel.KINDERGARTEN
    if grade <= 5:
        return EducationLevel.ELEMENTARY
    if grade <= 8:
        return EducationLevel.MIDDLE_SCHOOL
    return EducationLevel.HIGH_SCHOOL


def format_grade_level(grade: Optional[int]) -> str:
    if grade is None:
        return ""
    if grade == PRE_K:
        return "Pre-K"
    if grade == KINDERGARTEN:
        return "K"
    return f"Grade {grade}"


def sced_subject_area(sced_code: Optional[str]) -> Optional[str]:
    if not sced_code or len(sced_code) < 2:
        return None
    return SCED_SUBJECT_AREAS.get(sced_code[:2])


class StateCourseCode(AuditMixin, Base):
    __tablename__ = "state_course_codes"
    __table_args__ = (UniqueConstraint("state", "state_course_code"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    state: Mapped[str] = mapped_column(String(2), nullable=False, index=True)
    state_course_code: Mapped[str] = mapped_column(String(20), nullable=False)
    sced_code: Mapped[Optional[str]] = mapped_column(String(10))
    subject_area: Mapped[Optional[str]] = mapped_column(String(100))
    course_name: Mapped[str] = mapped_column(String(200), nullable=False)
    course_abbreviation: Mapped[Optional[str]] = mapped_column(String(30))
    description: Mapped[Optional[str]] = mapped_column(Text)
    course_category: Mapped[CourseCategory] = mapped_column(
        default=CourseCategory.CORE, nullable=False
    )
    course_type: Mapped[CourseType] = mapped_column(
        default=CourseType.REGULAR, nullable=False
    )
    min_grade_level: Mapped[Optional[int]] = mapped_column(Integer)
    max_grade_level: Mapped[Optional[int]] = mapped_column(Integer)
    education_level: Mapped[Optional[EducationLevel]] = mapped_column()
    credits: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(4, 2), default=Decimal("1.00")
    )
    is_cte: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    is_ap: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    is_ib: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    is_dual_credit: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    graduation_requirement: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False
    )
    school_year: Mapped[Optional[str]] = mapped_column(String(9))
    effective_date: Mapped[Optional[date]] = mapped_column(Date)
    expiration_date: Mapped[Optional[date]] = mapped_column(Date)
    active: Mapped[Optional[bool]] = mapped_column(Boolean, default=True)

    def display_name(self) -> str:
        return f"{self.state_course_code} - {self.course_name} ({self.state or ''})"

    def grade_level_range(self) -> str:
        low, high = self.min_grade_level, self.max_grade_level
        if low is None and high is None:
            return "All Grades"
        if low is not None and high is not None:
            if low == high:
                return f"{format_grade_level(low)} Only"
            return f"{format_grade_level(low)} - {format_grade_level(high)}"
        if low is not None:
            return f"{format_grade_level(low)} and above"
        return f"Up to {format_grade_level(high)}"

    def available_grade_levels(self) -> List[int]:
        low = self.min_grade_level if self.min_grade_level is not None else LOWEST_GRADE
        high = self.max_grade_level if self.max_grade_level is not None else HIGHEST_GRADE
        return list(range(low, high + 1))

    def is_eligible_for_grade(self, grade: Optional[int]) -> bool:
        """An unknown student grade is never excluded."""
        if grade is None:
            return True
        if self.min_grade_level is not None and grade < self.min_grade_level:
            return False
        if self.max_grade_level is not None and grade > self.max_grade_level:
            return False
        return True

    def is_advanced(self) -> bool:
        return (
            self.is_ap is True
            or self.is_ib is True
            or self.is_dual_credit is True
            or self.course_type in ADVANCED_COURSE_TYPES
        )

    def is_current(self, today: Optional[date] = None) -> bool:
        """Active and not past its expiration date. The effective date is not checked."""
        if self.active is not True:
            return False
        return self.expiration_date is None or self.expiration_date >= (
            today or date.today()
        )

    def validation_problems(
        self, target_status: Optional[DisplayEnum] = None
    ) -> List[str]:
        problems: List[str] = []
        for attr in ("min_grade_level", "max_grade_level"):
            grade = getattr(self, attr)
            if grade is not None and not LOWEST_GRADE <= grade <= HIGHEST_GRADE:
                problems.append(
                    f"{attr} {grade} is outside {LOWEST_GRADE}..{HIGHEST_GRADE}"
                )
        if (
            self.min_grade_level is not None
            and self.max_grade_level is not None
            and self.min_grade_level > self.max_grade_level
        ):
            problems.append("min_grade_level is above max_grade_level")
        if (
            self.effective_date is not None
            and self.expiration_date is not None
            and self.effective_date > self.expiration_date
        ):
            problems.append("effective_date is after expiration_date")
        return problems

    def __repr__(self) -> str:
        return (
            f"<StateCourseCode id={self.id!r} state={self.state!r} "
            f"state_course_code={self.state_course_code!r} "
            f"course_name={self.course_name!r}>"
        )


@event.listens_for(StateCourseCode, "before_insert")
def _fill_derived_fields(mapper, connection, target: StateCourseCode) -> None:
    if target.subject_area is None:
        target.subject_area = sced_subject_area(target.sced_code)
    if target.education_level is None and target.min_grade_level is not None:
        target.education_level = education_level_for(target.min_grade_level)

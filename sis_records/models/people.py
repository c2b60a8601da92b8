from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from nanoid import generate
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sis_records.models.audit import AuditMixin
from sis_records.models.base import Base
from sis_records.models.enums import DisplayEnum

UserRole = Literal[
    "user", "admin", "registrar", "counselor", "nurse", "teacher", "transport"
]


class User(Base):
    """An account that can act on records; referenced by every audit trail."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=lambda: generate()
    )
    name: Mapped[Optional[str]] = mapped_column(String)
    role: Mapped[UserRole] = mapped_column(String, default="user", nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String, unique=True)

    def __repr__(self) -> str:
        return f"<User id={self.id!r} name={self.name!r} role={self.role!r}>"


class EnrollmentStatus(DisplayEnum):
    ACTIVE = ("Active", "green")
    PRE_ENROLLED = ("Pre-Enrolled", "blue")
    WITHDRAWN = ("Withdrawn", "red")
    TRANSFERRED = ("Transferred", "yellow")
    GRADUATED = ("Graduated", "cyan")


staff_student_assignments = Table(
    "staff_student_assignments",
    Base.metadata,
    Column("staff_id", ForeignKey("staff.id", ondelete="cascade"), primary_key=True),
    Column(
        "student_id", ForeignKey("students.id", ondelete="cascade"), primary_key=True
    ),
)


class Student(AuditMixin, Base):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_number: Mapped[str] = mapped_column(
        String(20), unique=True, index=True, nullable=False
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    preferred_name: Mapped[Optional[str]] = mapped_column(String(100))
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date)
    grade_level: Mapped[Optional[int]] = mapped_column(Integer)
    enrollment_status: Mapped[EnrollmentStatus] = mapped_column(
        default=EnrollmentStatus.ACTIVE, nullable=False
    )

    withdrawals: Mapped[List["WithdrawalRecord"]] = relationship(
        back_populates="student"
    )

    @property
    def full_name(self) -> str:
        first = self.preferred_name or self.first_name
        return f"{first} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Student id={self.id!r} student_number={self.student_number!r} name={self.full_name!r}>"


class StaffCategory(DisplayEnum):
    INSTRUCTIONAL = ("Instructional",)
    ADMINISTRATIVE = ("Administrative",)
    STUDENT_SERVICES = ("Student Services",)
    SUPPORT = ("Support Staff",)


class StaffOccupation(DisplayEnum):
    TEACHER = ("Teacher",)
    PARAPROFESSIONAL = ("Paraprofessional",)
    TEACHER_AIDE = ("Teacher Aide",)
    PRINCIPAL = ("Principal",)
    ASSISTANT_PRINCIPAL = ("Assistant Principal",)
    REGISTRAR = ("Registrar",)
    COUNSELOR = ("School Counselor",)
    SOCIAL_WORKER = ("School Social Worker",)
    NURSE = ("School Nurse",)
    PSYCHOLOGIST = ("School Psychologist",)
    BUS_DRIVER = ("Bus Driver",)
    CUSTODIAN = ("Custodian",)

    @property
    def category(self) -> StaffCategory:
        return OCCUPATION_CATEGORIES[self]


OCCUPATION_CATEGORIES: Dict[StaffOccupation, StaffCategory] = {
    StaffOccupation.TEACHER: StaffCategory.INSTRUCTIONAL,
    StaffOccupation.PARAPROFESSIONAL: StaffCategory.INSTRUCTIONAL,
    StaffOccupation.TEACHER_AIDE: StaffCategory.INSTRUCTIONAL,
    StaffOccupation.PRINCIPAL: StaffCategory.ADMINISTRATIVE,
    StaffOccupation.ASSISTANT_PRINCIPAL: StaffCategory.ADMINISTRATIVE,
    StaffOccupation.REGISTRAR: StaffCategory.ADMINISTRATIVE,
    StaffOccupation.COUNSELOR: StaffCategory.STUDENT_SERVICES,
    StaffOccupation.SOCIAL_WORKER: StaffCategory.STUDENT_SERVICES,
    StaffOccupation.NURSE: StaffCategory.STUDENT_SERVICES,
    StaffOccupation.PSYCHOLOGIST: StaffCategory.STUDENT_SERVICES,
    StaffOccupation.BUS_DRIVER: StaffCategory.SUPPORT,
    StaffOccupation.CUSTODIAN: StaffCategory.SUPPORT,
}


class Staff(AuditMixin, Base):
    __tablename__ = "staff"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[str] = mapped_column(
        String(20), unique=True, index=True, nullable=False
    )
    title: Mapped[Optional[str]] = mapped_column(String(20))
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    preferred_name: Mapped[Optional[str]] = mapped_column(String(100))
    occupation: Mapped[Optional[StaffOccupation]] = mapped_column()
    department: Mapped[Optional[str]] = mapped_column(String(100))
    background_check_expiration: Mapped[Optional[date]] = mapped_column(Date)
    i9_expiration_date: Mapped[Optional[date]] = mapped_column(Date)
    max_students: Mapped[Optional[int]] = mapped_column(Integer)
    certifications: Mapped[List[str]] = mapped_column(
        JSON, default=lambda: [], nullable=False
    )
    active: Mapped[Optional[bool]] = mapped_column(Boolean, default=True)
    deleted: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    deleted_by: Mapped[Optional[str]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL")
    )

    assigned_students: Mapped[List["Student"]] = relationship(
        secondary=staff_student_assignments
    )

    @property
    def full_name(self) -> str:
        first = self.preferred_name or self.first_name
        return f"{first} {self.last_name}"

    @property
    def display_name(self) -> str:
        return f"{self.title} {self.full_name}" if self.title else self.full_name

    @property
    def name_last_first(self) -> str:
        return f"{self.last_name}, {self.first_name}"

    @property
    def occupation_display(self) -> str:
        return self.occupation.label if self.occupation else "Unknown"

    @property
    def category_display(self) -> str:
        return self.occupation.category.label if self.occupation else "Unknown"

    def is_active_staff(self) -> bool:
        return self.active is True and self.deleted is not True

    def has_background_check_expiring(
        self, days_threshold: int = 30, today: Optional[date] = None
    ) -> bool:
        """True when the background check lapses within the threshold, or already has."""
        if self.background_check_expiration is None:
            return False
        today = today or date.today()
        return (self.background_check_expiration - today).days < days_threshold

    def is_background_check_expired(self, today: Optional[date] = None) -> bool:
        return (
            self.background_check_expiration is not None
            and self.background_check_expiration < (today or date.today())
        )

    def needs_i9_reverification(self, today: Optional[date] = None) -> bool:
        if self.i9_expiration_date is None:
            return False
        return (self.i9_expiration_date - (today or date.today())).days < 90

    def is_paraprofessional(self) -> bool:
        return self.occupation in (
            StaffOccupation.PARAPROFESSIONAL,
            StaffOccupation.TEACHER_AIDE,
        )

    def is_administrative(self) -> bool:
        return (
            self.occupation is not None
            and self.occupation.category == StaffCategory.ADMINISTRATIVE
        )

    def is_student_services(self) -> bool:
        return (
            self.occupation is not None
            and self.occupation.category == StaffCategory.STUDENT_SERVICES
        )

    @property
    def current_student_count(self) -> int:
        return len(self.assigned_students or [])

    def is_at_student_capacity(self) -> bool:
        return (
            self.max_students is not None
            and self.current_student_count >= self.max_students
        )

    def assign_student(self, student: Student) -> None:
        if student not in self.assigned_students:
            self.assigned_students.append(student)

    def remove_assigned_student(self, student: Student) -> None:
        if student in self.assigned_students:
            self.assigned_students.remove(student)

    def add_certification(self, certification: str) -> None:
        current = list(self.certifications or [])
        if certification not in current:
            # Reassign so the JSON column is flagged dirty
            self.certifications = current + [certification]

    @property
    def certifications_display(self) -> str:
        if not self.certifications:
            return "None"
        return ", ".join(self.certifications)

    def soft_delete(self, deleted_by: Optional[str]) -> None:
        self.deleted = True
        self.deleted_at = datetime.now()
        self.deleted_by = deleted_by
        self.active = False
        self.stamp(deleted_by)

    def restore(self) -> None:
        self.deleted = False
        self.deleted_at = None
        self.deleted_by = None
        self.active = True

    def __repr__(self) -> str:
        return (
            f"<Staff id={self.id!r} employee_id={self.employee_id!r} "
            f"name={self.full_name!r} occupation={self.occupation!r}>"
        )

from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

import click
from sqlalchemy.orm import Session

from sis_records.models import (
    AccommodationStatus,
    ApiKey,
    EnrollmentVerification,
    HealthPlan,
    PlanStatus,
    Staff,
    StateCourseCode,
    StudentAccommodation,
    VerificationStatus,
)

Finding = Tuple[str, str, bool]


def _describe(days_left: Optional[int]) -> str:
    if days_left is None:
        return "no end date"
    if days_left < 0:
        return f"expired {-days_left} day(s) ago"
    if days_left == 0:
        return "expires today"
    return f"expires in {days_left} day(s)"


def find_expiring(db: Session, days: int, today: Optional[date] = None) -> List[Finding]:
    """
    Collect in-force records that lapse within ``days`` or already have.

    Returns:
        (kind, description, already expired) tuples
    """
    today = today or date.today()
    findings: List[Finding] = []

    plans = db.query(HealthPlan).filter(HealthPlan.status == PlanStatus.ACTIVE).all()
    for plan in plans:
        if plan.is_expiring_soon(days, today) or plan.is_expired(today):
            findings.append(
                (
                    "Health plan",
                    f"{plan.plan_number or plan.id} {plan.student.full_name}: "
                    f"{_describe(plan.days_until_expiration(today))}",
                    plan.is_expired(today),
                )
            )
        if plan.epipen_expired(today):
            findings.append(
                ("EpiPen", f"{plan.student.full_name}: EpiPen expired", True)
            )
        elif plan.epipen_expiring(today):
            findings.append(
                (
                    "EpiPen",
                    f"{plan.student.full_name}: EpiPen expires "
                    f"{plan.epipen_expiration_date.isoformat()}",
                    False,
                )
            )

    accommodations = (
        db.query(StudentAccommodation)
        .filter(StudentAccommodation.status == AccommodationStatus.ACTIVE)
        .all()
    )
    for accommodation in accommodations:
        if accommodation.is_expiring_soon(days, today) or accommodation.is_expired(today):
            findings.append(
                (
                    "Accommodation",
                    f"{accommodation.accommodation_type.label} "
                    f"{accommodation.student.full_name}: "
                    f"{_describe(accommodation.days_until_expiration(today))}",
                    accommodation.is_expired(today),
                )
            )

    verifications = (
        db.query(EnrollmentVerification)
        .filter(EnrollmentVerification.status == VerificationStatus.ISSUED)
        .all()
    )
    for verification in verifications:
        if verification.is_expiring_soon(days, today) or verification.is_expired(today):
            findings.append(
                (
                    "Enrollment verification",
                    f"{verification.verification_number}: "
                    f"{_describe(verification.days_until_expiration(today))}",
                    verification.is_expired(today),
                )
            )

    for staff in db.query(Staff).filter(Staff.active == True).all():
        if staff.deleted is True:
            continue
        # Threshold is exclusive
        if staff.has_background_check_expiring(days + 1, today):
            findings.append(
                (
                    "Background check",
                    f"{staff.name_last_first}: "
                    f"{_describe((staff.background_check_expiration - today).days)}",
                    staff.is_background_check_expired(today),
                )
            )

    course_codes = (
        db.query(StateCourseCode)
        .filter(
            StateCourseCode.active == True,
            StateCourseCode.expiration_date.is_not(None),
            StateCourseCode.expiration_date <= today + timedelta(days=days),
        )
        .all()
    )
    for course in course_codes:
        findings.append(
            (
                "Course code",
                f"{course.display_name()}: "
                f"{_describe((course.expiration_date - today).days)}",
                not course.is_current(today),
            )
        )

    now = datetime.combine(today, datetime.now().time())
    for key in db.query(ApiKey).filter(ApiKey.active == True).all():
        if key.is_expiring_soon(days, now) or (key.is_expired(now) and not key.is_revoked()):
            findings.append(
                (
                    "API key",
                    f"{key.name} ({key.key_prefix}...): expires "
                    f"{key.expires_at.isoformat(sep=' ', timespec='minutes')}",
                    key.is_expired(now),
                )
            )

    return findings


def check_expiring(db: Session, days: int = 30) -> List[Finding]:
    findings = find_expiring(db, days)
    if not findings:
        click.secho(f"Nothing expires in the next {days} day(s)", fg="green")
        return findings

    click.secho(f"\n{len(findings)} item(s) expired or expiring within {days} day(s)", fg="yellow")
    for kind, description, expired in findings:
        click.secho(f"  {kind}: {description}", fg="red" if expired else "yellow")
    return findings

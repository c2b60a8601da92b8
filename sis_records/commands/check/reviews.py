from datetime import date
from typing import List, Optional, Tuple

import click
from sqlalchemy.orm import Session

from sis_records.models import (
    AccommodationStatus,
    CounselingReferral,
    CounselingSession,
    CrisisIntervention,
    DueStatus,
    EllStatus,
    EllStudent,
    GiftedEducationPlan,
    GiftedPlanStatus,
    HealthPlan,
    HealthScreening,
    MedicalRecord,
    PlanStatus,
    ScreeningStatus,
    SessionStatus,
    SocialWorkCase,
    StudentAccommodation,
)

Review = Tuple[str, str, DueStatus]


def find_reviews(db: Session, days: int, today: Optional[date] = None) -> List[Review]:
    """
    Collect reviews, assessments and follow-ups that are overdue or due within ``days``.

    Returns:
        (kind, description, due status) tuples, overdue first
    """
    today = today or date.today()
    reviews: List[Review] = []

    def add(kind: str, description: str, status: DueStatus) -> None:
        if status.needs_attention:
            reviews.append((kind, description, status))

    for plan in db.query(HealthPlan).filter(HealthPlan.status == PlanStatus.ACTIVE):
        add(
            "Health plan review",
            f"{plan.plan_number or plan.id} {plan.student.full_name}",
            plan.review_status(days, today),
        )

    accommodations = db.query(StudentAccommodation).filter(
        StudentAccommodation.status == AccommodationStatus.ACTIVE
    )
    for accommodation in accommodations:
        add(
            "Accommodation review",
            f"{accommodation.accommodation_type.label} {accommodation.student.full_name}",
            accommodation.review_status(days, today),
        )

    gifted_plans = db.query(GiftedEducationPlan).filter(
        GiftedEducationPlan.status.in_(
            [GiftedPlanStatus.ACTIVE, GiftedPlanStatus.UNDER_REVIEW]
        )
    )
    for gifted in gifted_plans:
        add(
            "Gifted plan review",
            gifted.student.full_name,
            gifted.review_status(days, today),
        )

    for ell in db.query(EllStudent).filter(EllStudent.ell_status == EllStatus.ACTIVE):
        add(
            "ELL annual assessment",
            ell.student.full_name,
            ell.assessment_status(days, today),
        )

    for record in db.query(MedicalRecord).filter(MedicalRecord.next_review_date.is_not(None)):
        if record.is_review_overdue(today):
            add("Medical record review", record.student.full_name, DueStatus.OVERDUE)

    screenings = db.query(HealthScreening).filter(
        HealthScreening.status == ScreeningStatus.SCHEDULED
    )
    for screening in screenings:
        if screening.is_overdue(today):
            add(
                "Screening",
                f"{screening.screening_type.label} {screening.student.full_name}",
                DueStatus.OVERDUE,
            )

    for referral in db.query(CounselingReferral):
        if referral.is_overdue(today):
            add(
                "Counseling referral",
                f"{referral.urgency_level.label} {referral.student.full_name}",
                DueStatus.OVERDUE,
            )

    for crisis in db.query(CrisisIntervention).filter(
        CrisisIntervention.follow_up_date.is_not(None)
    ):
        if crisis.needs_follow_up(today):
            status = (
                DueStatus.OVERDUE if crisis.follow_up_date < today else DueStatus.DUE_SOON
            )
            add("Crisis follow-up", crisis.student.full_name, status)

    sessions = db.query(CounselingSession).filter(
        CounselingSession.follow_up_needed.is_(True),
        CounselingSession.status != SessionStatus.CANCELLED,
    )
    for session in sessions:
        add(
            "Counseling session follow-up",
            f"{session.session_number or session.id} {session.student.full_name}",
            session.follow_up_status(days, today),
        )

    for case in db.query(SocialWorkCase).filter(SocialWorkCase.follow_up_needed.is_(True)):
        if case.is_active():
            add(
                "Social work follow-up",
                f"{case.case_number or case.id} {case.student.full_name}",
                case.follow_up_status(days, today),
            )

    reviews.sort(key=lambda review: review[2] != DueStatus.OVERDUE)
    return reviews


def check_reviews(db: Session, days: int = 30) -> List[Review]:
    reviews = find_reviews(db, days)
    if not reviews:
        click.secho(f"No reviews due in the next {days} day(s)", fg="green")
        return reviews

    click.secho(f"\n{len(reviews)} review(s) need attention", fg="yellow")
    for kind, description, status in reviews:
        click.secho(f"  [{status.label}] {kind}: {description}", fg=status.color)
    return reviews

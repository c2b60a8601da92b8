from datetime import date, timedelta

from sis_records.models import (
    AccommodationStatus,
    AccommodationType,
    DueStatus,
    GiftedEducationPlan,
    GiftedPlanStatus,
    Plan504Accommodation,
    Plan504Category,
    StudentAccommodation,
)

TODAY = date(2025, 3, 15)


def make_accommodation(**kwargs) -> StudentAccommodation:
    kwargs.setdefault("accommodation_type", AccommodationType.PLAN_504)
    kwargs.setdefault("status", AccommodationStatus.ACTIVE)
    return StudentAccommodation(**kwargs)


def test_active_within_window():
    accommodation = make_accommodation(
        start_date=TODAY - timedelta(days=100), end_date=TODAY + timedelta(days=10)
    )
    assert accommodation.is_active(TODAY)
    assert accommodation.is_expiring_soon(30, TODAY)
    assert accommodation.days_until_expiration(TODAY) == 10

    accommodation.status = AccommodationStatus.UNDER_REVIEW
    assert not accommodation.is_active(TODAY)


def test_review_overdue_needs_a_date():
    assert not make_accommodation().is_review_overdue(TODAY)
    assert make_accommodation().review_status(today=TODAY) == DueStatus.NOT_SCHEDULED
    overdue = make_accommodation(next_review_date=TODAY - timedelta(days=2))
    assert overdue.is_review_overdue(TODAY)
    assert overdue.review_status(30, TODAY) == DueStatus.OVERDUE


def test_services_summary():
    assert make_accommodation().active_services_summary() == "No active services"
    accommodation = make_accommodation(
        has_504_plan=True, is_ell=True, title_i_participating=True
    )
    assert accommodation.active_services_summary() == "504 Plan, ELL/ESL, Title I"


def test_504_item_currently_active():
    item = Plan504Accommodation(
        category=Plan504Category.TESTING,
        description="Extended time",
        active=True,
        effective_date=TODAY,
        expiration_date=TODAY + timedelta(days=180),
    )
    assert item.is_currently_active(TODAY)
    assert not item.is_currently_active(TODAY - timedelta(days=1))
    item.active = None
    assert not item.is_currently_active(TODAY)


def test_gifted_plan():
    plan = GiftedEducationPlan(status=GiftedPlanStatus.DRAFT)
    assert not plan.is_active(TODAY)
    assert plan.needs_parent_approval()
    assert plan.review_status(today=TODAY) == DueStatus.NOT_SCHEDULED

    plan.status = GiftedPlanStatus.ACTIVE
    plan.parent_approved = True
    plan.annual_review_date = TODAY + timedelta(days=5)
    assert plan.is_active(TODAY)
    assert not plan.needs_parent_approval()
    assert plan.review_status(30, TODAY) == DueStatus.DUE_SOON


def test_plan_items_link_to_accommodation(db, student):
    accommodation = make_accommodation(student=student)
    accommodation.plan_504_items.append(
        Plan504Accommodation(
            student=student,
            category=Plan504Category.ENVIRONMENTAL,
            description="Preferential seating",
        )
    )
    db.add(accommodation)
    db.commit()
    item = accommodation.plan_504_items[0]
    assert item.student_accommodation is accommodation
    assert item.active is True

from datetime import date, timedelta

import pytest

from sis_records.models import (
    AllergySeverity,
    DueStatus,
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

TODAY = date(2025, 3, 15)


def make_plan(**kwargs) -> HealthPlan:
    kwargs.setdefault("plan_type", PlanType.ASTHMA)
    kwargs.setdefault("diagnosis", "Asthma")
    kwargs.setdefault("status", PlanStatus.ACTIVE)
    kwargs.setdefault("start_date", date(2024, 9, 1))
    return HealthPlan(**kwargs)


class TestHealthPlanReview:
    def test_missing_review_date_is_overdue_when_review_required(self):
        plan = make_plan(annual_review_required=True)
        assert plan.review_status(today=TODAY) == DueStatus.OVERDUE
        assert plan.is_due_for_review(TODAY)

    def test_unset_requirement_defaults_to_required(self):
        plan = make_plan()
        assert plan.annual_review_required is None
        assert plan.is_due_for_review(TODAY)

    def test_missing_review_date_without_requirement(self):
        plan = make_plan(annual_review_required=False)
        assert plan.review_status(today=TODAY) == DueStatus.NOT_SCHEDULED
        assert not plan.is_due_for_review(TODAY)

    @pytest.mark.parametrize(
        "offset, expected",
        [(-1, DueStatus.OVERDUE), (0, DueStatus.DUE_SOON), (30, DueStatus.DUE_SOON), (31, DueStatus.ON_TRACK)],
    )
    def test_review_window(self, offset, expected):
        plan = make_plan(next_review_date=TODAY + timedelta(days=offset))
        assert plan.review_status(today=TODAY) == expected

    def test_review_day_counts(self):
        plan = make_plan(
            last_review_date=TODAY - timedelta(days=300),
            next_review_date=TODAY + timedelta(days=65),
        )
        assert plan.days_since_review(TODAY) == 300
        assert plan.days_until_review(TODAY) == 65


class TestHealthPlanNeeds:
    def test_needs_flags(self):
        plan = make_plan(staff_training_required=True)
        assert plan.needs_physician_approval()
        assert plan.needs_parent_consent()
        assert plan.needs_staff_training()
        assert plan.needs_distribution()

        plan.physician_orders_on_file = True
        plan.parent_consent_received = True
        plan.staff_training_completed = True
        plan.distributed_to_teachers = True
        assert not plan.needs_physician_approval()
        assert not plan.needs_parent_consent()
        assert not plan.needs_staff_training()
        assert not plan.needs_distribution()

    def test_pending_status_needs_approval_even_with_orders(self):
        plan = make_plan(
            status=PlanStatus.PENDING_PHYSICIAN_APPROVAL, physician_orders_on_file=True
        )
        assert plan.needs_physician_approval()

    def test_life_threatening(self):
        assert make_plan(allergy_severity=AllergySeverity.LIFE_THREATENING).has_life_threatening_condition()
        assert make_plan(has_epipen=True).has_life_threatening_condition()
        assert not make_plan().has_life_threatening_condition()

    def test_epipen_expiry(self):
        expiring = make_plan(epipen_expiration_date=TODAY + timedelta(days=10))
        assert expiring.epipen_expiring(TODAY)
        assert not expiring.epipen_expired(TODAY)

        expired = make_plan(epipen_expiration_date=TODAY - timedelta(days=1))
        assert expired.epipen_expired(TODAY)
        assert not expired.epipen_expiring(TODAY)

        later = make_plan(epipen_expiration_date=TODAY + timedelta(days=30))
        assert not later.epipen_expiring(TODAY)
        assert not make_plan().epipen_expiring(TODAY)


def test_medication_active_today():
    med = Medication(medication_name="Albuterol", active=True, end_date=TODAY)
    assert med.is_active_today(TODAY)
    assert not med.is_active_today(TODAY + timedelta(days=1))
    med.active = False
    assert not med.is_active_today(TODAY)


def test_medication_refill():
    assert Medication(medication_name="X", doses_remaining=5).needs_refill()
    assert not Medication(medication_name="X", doses_remaining=6).needs_refill()
    assert not Medication(medication_name="X").needs_refill()


class TestScreening:
    def test_overdue_only_when_scheduled_and_past(self):
        screening = HealthScreening(
            screening_type=ScreeningType.VISION,
            status=ScreeningStatus.SCHEDULED,
            scheduled_date=TODAY - timedelta(days=1),
        )
        assert screening.is_overdue(TODAY)
        screening.status = ScreeningStatus.COMPLETED
        assert not screening.is_overdue(TODAY)

    def test_never_overdue_without_date(self):
        screening = HealthScreening(
            screening_type=ScreeningType.HEARING, status=ScreeningStatus.SCHEDULED
        )
        assert not screening.is_overdue(TODAY)

    def test_failed_and_impairment(self):
        screening = HealthScreening(
            screening_type=ScreeningType.VISION, result=ScreeningResult.REFER
        )
        assert screening.failed()
        assert screening.vision_impaired()
        assert not screening.hearing_impaired()

    def test_bmi(self):
        screening = HealthScreening(
            screening_type=ScreeningType.BMI, height_inches=60.0, weight_pounds=100.0
        )
        assert screening.calculate_bmi() == 19.5
        screening.height_inches = 0
        assert screening.calculate_bmi() is None
        screening.height_inches = None
        assert screening.calculate_bmi() is None

    def test_notification_and_referral(self):
        screening = HealthScreening(
            screening_type=ScreeningType.DENTAL,
            parent_notification_required=True,
            referral_needed=True,
        )
        assert screening.needs_parent_notification()
        assert screening.has_outstanding_referral()


class TestMedicalRecord:
    def test_empty_record(self):
        record = MedicalRecord(food_allergies="  ")
        assert not record.has_medical_conditions()
        assert not record.is_critical_case()
        assert record.quick_summary() == "No medical conditions on record"

    def test_summary_lines(self):
        record = MedicalRecord(
            medical_alert="Carries inhaler",
            food_allergies="Peanuts",
            has_asthma=True,
            has_epipen=True,
            epipen_location="Nurse office",
        )
        assert record.has_medical_conditions()
        assert record.is_critical_case()
        assert record.quick_summary().split("\n") == [
            "ALERT: Carries inhaler",
            "Food Allergies: Peanuts",
            "Asthma: Yes",
            "EpiPen: Nurse office",
        ]

    def test_review_overdue(self):
        assert not MedicalRecord().is_review_overdue(TODAY)
        assert MedicalRecord(next_review_date=TODAY - timedelta(days=1)).is_review_overdue(TODAY)
        assert not MedicalRecord(next_review_date=TODAY).is_review_overdue(TODAY)

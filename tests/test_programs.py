from datetime import date, time, timedelta
from decimal import Decimal

from sis_records.models import (
    AdmissionDecision,
    ApplicationStatus,
    BellPeriod,
    BellSchedule,
    BusRoute,
    CollegeApplication,
    DueStatus,
    EllService,
    EllServiceStatus,
    EllStatus,
    EllStudent,
    PeriodType,
)
from sis_records.models.ell import EllServiceType

TODAY = date(2025, 3, 15)


class TestCollegeApplication:
    def make(self, **kwargs) -> CollegeApplication:
        kwargs.setdefault("college_name", "State University")
        return CollegeApplication(**kwargs)

    def test_complete_when_submitted_with_all_requirements(self):
        app = self.make(
            application_submitted_date=TODAY,
            essay_required=True,
            essay_submitted=True,
            letters_required=2,
            letters_submitted=2,
        )
        assert app.missing_requirements() == []
        assert app.is_application_complete()

    def test_missing_requirements_listed(self):
        app = self.make(
            essay_required=True,
            transcript_requested=True,
            letters_required=3,
            letters_submitted=1,
            interview_required=True,
        )
        assert app.missing_requirements() == [
            "Essay",
            "Transcript",
            "Letters of recommendation (1/3)",
            "Interview",
        ]
        assert app.has_missing_requirements()
        assert not app.is_application_complete()

    def test_deadline_approaching(self):
        app = self.make(application_deadline=TODAY + timedelta(days=14))
        assert app.is_deadline_approaching(TODAY)
        assert app.days_until_deadline(TODAY) == 14
        assert not self.make(
            application_deadline=TODAY + timedelta(days=15)
        ).is_deadline_approaching(TODAY)
        app.application_submitted_date = TODAY
        assert not app.is_deadline_approaching(TODAY)
        assert self.make().days_until_deadline(TODAY) is None

    def test_decision(self):
        assert self.make(application_status=ApplicationStatus.SUBMITTED).is_decision_pending()
        app = self.make(
            admission_decision=AdmissionDecision.CONDITIONAL_ACCEPTANCE,
            decision_deadline=TODAY + timedelta(days=20),
        )
        assert app.is_accepted()
        assert app.needs_decision_response(TODAY)
        app.enrollment_confirmed = True
        assert not app.needs_decision_response(TODAY)

    def test_financial_aid_totals(self):
        app = self.make(
            grants_amount=Decimal("5000.00"),
            loans_amount=Decimal("3500.50"),
            scholarships_amount=Decimal("1000"),
            merit_scholarship_amount=Decimal("2000"),
        )
        assert app.total_financial_aid() == Decimal("9500.50")
        assert app.total_scholarships() == Decimal("3000")
        assert self.make().total_financial_aid() == Decimal("0")


class TestEll:
    def test_service_student_delegation(self, db, student):
        unlinked = EllService(service_type=EllServiceType.TUTORING)
        assert unlinked.student is None

        ell = EllStudent(student=student, ell_status=EllStatus.ACTIVE)
        service = EllService(
            ell_student=ell,
            service_type=EllServiceType.ESL_INSTRUCTION,
            status=EllServiceStatus.ACTIVE,
        )
        db.add(service)
        db.commit()
        assert service.student is student
        assert ell.services == [service]

    def test_active(self):
        ell = EllStudent(
            ell_status=EllStatus.MONITORING, program_exit_date=TODAY - timedelta(days=1)
        )
        assert not ell.is_active(TODAY)
        ell.program_exit_date = None
        assert ell.is_active(TODAY)
        assert ell.is_monitoring()

        service = EllService(
            service_type=EllServiceType.TRANSLATION,
            status=EllServiceStatus.SUSPENDED,
        )
        assert not service.is_active(TODAY)

    def test_assessment_status(self):
        ell = EllStudent(ell_status=EllStatus.ACTIVE)
        assert ell.assessment_status(today=TODAY) == DueStatus.OVERDUE
        ell.next_annual_assessment_date = TODAY + timedelta(days=60)
        assert ell.assessment_status(30, TODAY) == DueStatus.ON_TRACK
        ell.ell_status = EllStatus.EXITED
        assert ell.assessment_status(30, TODAY) == DueStatus.NOT_SCHEDULED


class TestBusRoute:
    def test_capacity(self):
        route = BusRoute(route_number="12", capacity=48, current_ridership=36)
        assert route.occupancy_percentage() == 75.0
        assert route.available_seats() == 12
        assert not route.is_at_capacity()
        route.current_ridership = 50
        assert route.is_at_capacity()
        assert route.available_seats() == 0

    def test_unknown_capacity(self):
        route = BusRoute(route_number="7")
        assert route.occupancy_percentage() == 0.0
        assert route.available_seats() == 0
        assert not route.is_at_capacity()

    def test_in_service(self):
        route = BusRoute(
            route_number="3", active=True, service_end_date=TODAY
        )
        assert route.is_in_service(TODAY)
        assert not route.is_in_service(TODAY + timedelta(days=1))


class TestBellSchedule:
    def test_instructional_minutes(self, db):
        schedule = BellSchedule(name="Regular")
        schedule.periods = [
            BellPeriod(sequence=1, name="1st", start_time=time(8, 0), end_time=time(8, 50)),
            BellPeriod(
                sequence=2,
                name="Passing",
                period_type=PeriodType.PASSING,
                start_time=time(8, 50),
                end_time=time(8, 55),
            ),
            BellPeriod(sequence=3, name="2nd", start_time=time(8, 55), end_time=time(9, 45)),
            BellPeriod(
                sequence=4,
                name="Lunch",
                period_type=PeriodType.LUNCH,
                start_time=time(11, 30),
                end_time=time(12, 0),
            ),
            BellPeriod(sequence=5, name="TBD"),
        ]
        db.add(schedule)
        db.commit()
        assert schedule.total_instructional_minutes() == 100
        assert schedule.total_minutes() == 135
        assert schedule.periods[-1].duration_minutes() == 0

    def test_in_effect(self):
        schedule = BellSchedule(name="Testing", active=True, effective_date=TODAY)
        assert schedule.is_in_effect(TODAY)
        assert not schedule.is_in_effect(TODAY - timedelta(days=1))

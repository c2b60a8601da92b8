from datetime import date, timedelta

import pytest

from sis_records.commands.check.reviews import find_reviews
from sis_records.models import (
    CaseStatus,
    ConcernArea,
    CounselingFocus,
    CounselingReferral,
    CounselingSession,
    CPSStatus,
    CrisisIntervention,
    DueStatus,
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

TODAY = date(2025, 3, 15)


def make_referral(**kwargs) -> CounselingReferral:
    kwargs.setdefault("status", ReferralStatus.PENDING)
    kwargs.setdefault("urgency_level", UrgencyLevel.ROUTINE)
    return CounselingReferral(**kwargs)


@pytest.mark.parametrize(
    "urgency, allowed_days",
    [
        (UrgencyLevel.EMERGENCY, 0),
        (UrgencyLevel.URGENT, 2),
        (UrgencyLevel.MODERATE, 7),
        (UrgencyLevel.ROUTINE, 14),
    ],
)
def test_overdue_scales_with_urgency(urgency, allowed_days):
    on_time = make_referral(
        urgency_level=urgency, referral_date=TODAY - timedelta(days=allowed_days)
    )
    late = make_referral(
        urgency_level=urgency, referral_date=TODAY - timedelta(days=allowed_days + 1)
    )
    assert not on_time.is_overdue(TODAY)
    assert late.is_overdue(TODAY)


def test_not_overdue_once_services_start_or_closed():
    referral = make_referral(referral_date=TODAY - timedelta(days=60))
    assert referral.is_overdue(TODAY)
    referral.services_initiated = True
    assert not referral.is_overdue(TODAY)

    closed = make_referral(
        status=ReferralStatus.COMPLETED, referral_date=TODAY - timedelta(days=60)
    )
    assert closed.is_closed()
    assert not closed.is_overdue(TODAY)
    assert not make_referral().is_overdue(TODAY)


def test_referral_states():
    assert make_referral().is_pending()
    assert make_referral(status=ReferralStatus.IN_PROGRESS).is_active()
    assert not make_referral(status=ReferralStatus.ON_HOLD).is_active()


def test_high_priority():
    assert make_referral(urgency_level=UrgencyLevel.URGENT).is_high_priority()
    assert make_referral(suicide_risk_indicated=True).is_high_priority()
    assert not make_referral().is_high_priority()


def test_external_referral_needs_consent_and_contact():
    referral = make_referral(referral_type=ReferralType.PSYCHIATRIST)
    assert referral.is_external_referral()
    assert referral.needs_parent_consent()
    assert referral.needs_parent_contact()
    referral.parent_consent_obtained = True
    referral.parent_contacted = True
    assert not referral.needs_parent_consent()
    assert not referral.needs_parent_contact()

    internal = make_referral(referral_type=ReferralType.INTERNAL_COUNSELOR)
    assert not internal.needs_parent_consent()


def test_risk_assessment_needed_for_safety_concerns():
    referral = make_referral(primary_concern=ConcernArea.SELF_HARM)
    assert referral.needs_risk_assessment()
    referral.risk_assessment_completed = True
    assert not referral.needs_risk_assessment()
    assert not make_referral(primary_concern=ConcernArea.BULLYING).needs_risk_assessment()


def test_days_since_referral():
    assert make_referral(referral_date=TODAY - timedelta(days=4)).days_since_referral(TODAY) == 4
    assert make_referral().days_since_referral(TODAY) is None


class TestCrisis:
    def test_risk_predicates(self):
        crisis = CrisisIntervention(risk_level=RiskLevel.MODERATE)
        assert not crisis.is_high_risk()
        crisis.threat_level = ThreatLevel.HIGH
        assert crisis.is_high_risk()
        assert not crisis.is_imminent_risk()
        crisis.imminent_danger = True
        assert crisis.is_imminent_risk()
        assert crisis.needs_emergency_services()
        crisis.emergency_services_called = True
        assert not crisis.needs_emergency_services()

    def test_suicide_and_violence_need_assessment(self):
        crisis = CrisisIntervention(suicide_risk_level=SuicideRiskLevel.HIGH)
        assert not crisis.is_suicide_risk()
        crisis.suicide_risk_assessment = True
        assert crisis.is_suicide_risk()

        crisis = CrisisIntervention(
            threat_assessment_conducted=True, threat_level=ThreatLevel.LOW
        )
        assert not crisis.is_violence_risk()

    def test_follow_up(self):
        crisis = CrisisIntervention(
            follow_up_required=True, follow_up_date=TODAY + timedelta(days=1)
        )
        assert not crisis.needs_follow_up(TODAY)
        assert crisis.needs_follow_up(TODAY + timedelta(days=1))
        crisis.follow_up_completed = True
        assert not crisis.needs_follow_up(TODAY + timedelta(days=1))
        assert not CrisisIntervention(follow_up_required=True).needs_follow_up(TODAY)

    def test_clearance_to_return(self):
        crisis = CrisisIntervention(clearance_required_to_return=True)
        assert crisis.needs_clearance_to_return()
        crisis.clearance_received = True
        assert not crisis.needs_clearance_to_return()

    def test_parent_notification(self):
        crisis = CrisisIntervention(risk_level=RiskLevel.HIGH)
        assert crisis.needs_parent_notification()
        crisis.set_item("parent_notified")
        assert not crisis.needs_parent_notification()

    def test_response_checklist_is_computed_on_read(self):
        crisis = CrisisIntervention(clearance_required_to_return=True)
        assert crisis.checklist_completion().total == 10
        crisis.set_item("safety_plan_created")
        crisis.set_item("admin_notified")
        assert crisis.checklist_completion().completed == 2
        assert crisis.recompute_completion().completed == 2
        assert crisis.checklist_problems() == []
        actions = crisis.open_actions()
        assert "Safety plan created" not in actions
        assert actions[-1] == "Obtain clearance to return"

    def test_days_since_crisis(self):
        crisis = CrisisIntervention(crisis_date=TODAY - timedelta(days=3))
        assert crisis.days_since_crisis(TODAY) == 3

    def test_persists(self, db, student):
        crisis = CrisisIntervention(student=student, crisis_date=TODAY)
        crisis.set_item("parent_notified")
        db.add(crisis)
        db.commit()
        assert crisis.follow_up_required is True
        assert crisis.is_item_done("parent_notified")
        assert not crisis.is_item_done("district_notified")


def test_session_crisis_and_parent_notification():
    routine = CounselingSession(
        status=SessionStatus.COMPLETED, risk_level=RiskLevel.MODERATE
    )
    assert routine.is_completed()
    assert not routine.is_crisis()
    assert not routine.needs_parent_notification()

    risky = CounselingSession(risk_level=RiskLevel.IMMINENT)
    assert risky.is_high_risk()
    assert risky.is_crisis()
    assert risky.needs_parent_notification()
    risky.parent_notified = True
    assert not risky.needs_parent_notification()

    flagged = CounselingSession(crisis_situation=True)
    assert flagged.is_crisis()
    assert not flagged.is_high_risk()


def test_session_focus_and_format():
    assert CounselingSession(session_type=SessionType.COURSE_SELECTION).is_academic_focus()
    assert CounselingSession(primary_focus=CounselingFocus.ACADEMIC).is_academic_focus()
    assert not CounselingSession(session_type=SessionType.CHECK_IN).is_academic_focus()
    assert CounselingSession(session_format=SessionFormat.GROUP).is_group_session()


def test_session_follow_up():
    session = CounselingSession(follow_up_needed=True)
    assert session.needs_follow_up(TODAY)
    assert session.follow_up_status(7, TODAY) == DueStatus.NOT_SCHEDULED

    session.follow_up_date = TODAY
    assert session.needs_follow_up(TODAY)
    assert session.follow_up_status(7, TODAY) == DueStatus.DUE_SOON

    session.follow_up_date = TODAY - timedelta(days=1)
    assert not session.needs_follow_up(TODAY)
    assert session.follow_up_status(7, TODAY) == DueStatus.OVERDUE

    session.follow_up_completed = True
    assert session.follow_up_status(7, TODAY) == DueStatus.NOT_SCHEDULED
    assert not CounselingSession(follow_up_needed=False).needs_follow_up(TODAY)


def test_days_since_session():
    assert CounselingSession(session_date=date(2025, 3, 5)).days_since_session(TODAY) == 10
    assert CounselingSession().days_since_session(TODAY) is None


def make_case(**kwargs) -> SocialWorkCase:
    kwargs.setdefault("status", CaseStatus.OPEN)
    kwargs.setdefault("priority_level", PriorityLevel.MEDIUM)
    return SocialWorkCase(**kwargs)


@pytest.mark.parametrize(
    "status, active, closed",
    [
        (CaseStatus.OPEN, True, False),
        (CaseStatus.PENDING_REFERRAL, True, False),
        (CaseStatus.SERVICES_IN_PROGRESS, True, False),
        (CaseStatus.ON_HOLD, False, False),
        (CaseStatus.CLOSED_SUCCESSFUL, False, True),
        (CaseStatus.FAMILY_DECLINED, False, True),
        (CaseStatus.STUDENT_WITHDREW, False, True),
    ],
)
def test_case_status_groups(status, active, closed):
    case = make_case(status=status)
    assert case.is_active() is active
    assert case.is_closed() is closed


def test_case_priority():
    assert not make_case().is_high_priority()
    urgent = make_case(priority_level=PriorityLevel.URGENT)
    assert urgent.is_high_priority()
    assert urgent.needs_immediate_attention()
    assert make_case(priority_level=PriorityLevel.HIGH).is_high_priority()
    assert not make_case(priority_level=PriorityLevel.HIGH).needs_immediate_attention()
    on_hold = make_case(priority_level=PriorityLevel.CRISIS, status=CaseStatus.ON_HOLD)
    assert not on_hold.needs_immediate_attention()


def test_case_follow_up_is_due_on_or_after_its_date():
    case = make_case(follow_up_needed=True)
    assert not case.needs_follow_up(TODAY)
    case.next_follow_up_date = TODAY + timedelta(days=1)
    assert not case.needs_follow_up(TODAY)
    assert case.follow_up_status(7, TODAY) == DueStatus.DUE_SOON
    case.next_follow_up_date = TODAY
    assert case.needs_follow_up(TODAY)


def test_case_home_visits():
    case = make_case()
    assert case.needs_home_visit(TODAY)
    case.record_home_visit(TODAY - timedelta(days=90))
    assert case.number_of_home_visits == 1
    assert not case.needs_home_visit(TODAY)
    assert case.needs_home_visit(TODAY + timedelta(days=1))
    assert case.days_since_last_contact(TODAY) == 90


def test_case_child_welfare_involvement():
    assert not make_case().has_active_child_welfare_involvement()
    assert make_case(in_foster_care=True).has_active_child_welfare_involvement()
    open_cps = make_case(cps_involvement=True, cps_status=CPSStatus.INVESTIGATION_OPEN)
    assert open_cps.has_active_child_welfare_involvement()
    closed_cps = make_case(cps_involvement=True, cps_status=CPSStatus.CLOSED)
    assert not closed_cps.has_active_child_welfare_involvement()


def test_case_window_feeds_validation():
    case = make_case(
        case_opened_date=date(2025, 3, 1), case_closed_date=date(2025, 2, 1)
    )
    assert case.window_problems() == [
        "case_opened_date (2025-03-01) is after case_closed_date (2025-02-01)"
    ]
    assert case.days_since_case_opened(TODAY) == 14


def test_reviews_include_session_and_case_follow_ups(db, student):
    db.add_all(
        [
            CounselingSession(
                student=student,
                session_number="CS-1",
                follow_up_needed=True,
                follow_up_date=TODAY - timedelta(days=2),
            ),
            CounselingSession(
                student=student,
                session_number="CS-2",
                status=SessionStatus.CANCELLED,
                follow_up_needed=True,
                follow_up_date=TODAY - timedelta(days=2),
            ),
            make_case(
                student=student,
                case_number="SW-1",
                follow_up_needed=True,
                next_follow_up_date=TODAY + timedelta(days=3),
            ),
            make_case(
                student=student,
                case_number="SW-2",
                status=CaseStatus.CLOSED_SUCCESSFUL,
                follow_up_needed=True,
                next_follow_up_date=TODAY,
            ),
        ]
    )
    db.commit()

    reviews = find_reviews(db, 7, TODAY)
    assert ("Counseling session follow-up", "CS-1 Alex Rivera", DueStatus.OVERDUE) in reviews
    assert ("Social work follow-up", "SW-1 Alex Rivera", DueStatus.DUE_SOON) in reviews
    assert len(reviews) == 2

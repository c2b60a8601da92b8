from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from sis_records.commands.check.expiring import find_expiring
from sis_records.models import CourseType, EducationLevel, StateCourseCode
from sis_records.validation import RecordValidationError, validate

TODAY = date(2025, 3, 15)


def make_course(**kwargs) -> StateCourseCode:
    kwargs.setdefault("state", "TX")
    kwargs.setdefault("state_course_code", "03220100")
    kwargs.setdefault("course_name", "Algebra I")
    return StateCourseCode(**kwargs)


@pytest.mark.parametrize(
    "low, high, expected",
    [
        (None, None, "All Grades"),
        (9, 9, "Grade 9 Only"),
        (-1, 0, "Pre-K - K"),
        (9, 12, "Grade 9 - Grade 12"),
        (6, None, "Grade 6 and above"),
        (None, 5, "Up to Grade 5"),
    ],
)
def test_grade_level_range(low, high, expected):
    course = make_course(min_grade_level=low, max_grade_level=high)
    assert course.grade_level_range() == expected


def test_grade_eligibility():
    course = make_course(min_grade_level=9, max_grade_level=10)
    assert course.is_eligible_for_grade(9)
    assert course.is_eligible_for_grade(10)
    assert not course.is_eligible_for_grade(8)
    assert not course.is_eligible_for_grade(11)
    assert course.is_eligible_for_grade(None)
    assert make_course().is_eligible_for_grade(3)


def test_available_grade_levels():
    assert make_course(min_grade_level=10).available_grade_levels() == [10, 11, 12]
    assert make_course(max_grade_level=0).available_grade_levels() == [-1, 0]


def test_advanced_courses():
    assert not make_course().is_advanced()
    assert make_course(course_type=CourseType.HONORS).is_advanced()
    assert make_course(is_dual_credit=True).is_advanced()
    assert make_course(is_ap=True, course_type=CourseType.REGULAR).is_advanced()


def test_is_current():
    course = make_course(active=True, expiration_date=TODAY)
    assert course.is_current(TODAY)
    assert not course.is_current(TODAY + timedelta(days=1))
    assert make_course(active=True).is_current(TODAY)
    assert not make_course(active=False).is_current(TODAY)


def test_validation_catches_bad_grade_range():
    with pytest.raises(RecordValidationError) as excinfo:
        validate(make_course(min_grade_level=11, max_grade_level=14))
    assert excinfo.value.problems == ["max_grade_level 14 is outside -1..12"]

    with pytest.raises(RecordValidationError) as excinfo:
        validate(make_course(min_grade_level=12, max_grade_level=9))
    assert excinfo.value.problems == ["min_grade_level is above max_grade_level"]

    validate(make_course(min_grade_level=9, max_grade_level=12))


def test_insert_fills_subject_area_and_level(db):
    course = make_course(sced_code="02052", min_grade_level=9)
    db.add(course)
    db.commit()
    assert course.subject_area == "Mathematics"
    assert course.education_level == EducationLevel.HIGH_SCHOOL
    assert course.credits == Decimal("1.00")
    assert course.display_name() == "03220100 - Algebra I (TX)"


def test_code_is_unique_per_state(db):
    db.add(make_course())
    db.add(make_course(state="OK"))
    db.commit()
    db.add(make_course())
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_expiring_sweep_lists_course_codes(db):
    db.add(make_course(active=True, expiration_date=TODAY + timedelta(days=10)))
    db.add(
        make_course(
            state_course_code="03220200",
            active=True,
            expiration_date=TODAY + timedelta(days=90),
        )
    )
    db.commit()
    findings = find_expiring(db, 30, TODAY)
    assert findings == [
        ("Course code", "03220100 - Algebra I (TX): expires in 10 day(s)", False)
    ]

from datetime import date
from typing import Optional

import click
from sqlalchemy.orm import Session

from sis_records.models import Student, WithdrawalRecord, WithdrawalType
from sis_records.utils.logging_config import get_logger

logger = get_logger(__name__)


def create_withdrawal(
    db: Session,
    student_number: str,
    actor_id: str,
    withdrawal_date: Optional[date] = None,
    withdrawal_type: Optional[str] = None,
    reason: Optional[str] = None,
) -> Optional[WithdrawalRecord]:
    """
    Open a draft withdrawal for a student with the next free withdrawal number.

    Args:
        db: Database session
        student_number: The student's school-issued number
        actor_id: User id recorded as the creator
        withdrawal_date: Date of withdrawal, defaults to today
        withdrawal_type: WithdrawalType name or label
        reason: Free text reason
    """
    student = db.query(Student).filter(Student.student_number == student_number).first()
    if not student:
        click.secho(f"Student {student_number} not found", fg="red")
        return None

    withdrawal_date = withdrawal_date or date.today()
    try:
        kind = WithdrawalType.parse(withdrawal_type) if withdrawal_type else None
        number = WithdrawalRecord.next_number(db, withdrawal_date.year)
    except ValueError as e:
        click.secho(str(e), fg="red")
        return None

    record = WithdrawalRecord(
        withdrawal_number=number,
        student=student,
        withdrawal_type=kind,
        withdrawal_date=withdrawal_date,
        reason=reason,
    )
    record.stamp(actor_id)
    db.add(record)
    db.commit()

    logger.info(
        f"Created withdrawal {record.withdrawal_number} for student {student_number}"
    )
    click.secho(
        f"Created {record.withdrawal_number} for {student.full_name} ({student_number})",
        fg="green",
    )
    return record

import click
from sqlalchemy.orm import Session

from sis_records.models import WithdrawalRecord, WithdrawalStatus
from sis_records.validation import RecordValidationError, transition


def update_withdrawal_status(
    db: Session, withdrawal_number: str, status: str, actor_id: str
) -> bool:
    record = (
        db.query(WithdrawalRecord)
        .filter(WithdrawalRecord.withdrawal_number == withdrawal_number)
        .first()
    )
    if not record:
        click.secho(f"Withdrawal {withdrawal_number} not found", fg="red")
        return False

    try:
        new_status = WithdrawalStatus.parse(status)
        transition(record, new_status, actor_id)
    except RecordValidationError as e:
        db.rollback()
        click.secho(f"Cannot move {withdrawal_number} to {status}:", fg="red")
        for problem in e.problems:
            click.secho(f"  - {problem}", fg="red")
        return False
    except ValueError as e:
        db.rollback()
        click.secho(str(e), fg="red")
        return False

    db.commit()
    click.secho(f"{withdrawal_number} is now {new_status.label}", fg="green")
    return True

from typing import Sequence

import click
from sqlalchemy.orm import Session

from sis_records.models import WithdrawalRecord
from sis_records.utils.logging_config import get_logger

logger = get_logger(__name__)


def update_clearance(
    db: Session,
    withdrawal_number: str,
    items: Sequence[str],
    actor_id: str,
    undo: bool = False,
) -> None:
    """Tick (or untick with undo) clearance items on a withdrawal."""
    record = (
        db.query(WithdrawalRecord)
        .filter(WithdrawalRecord.withdrawal_number == withdrawal_number)
        .first()
    )
    if not record:
        click.secho(f"Withdrawal {withdrawal_number} not found", fg="red")
        return

    try:
        for name in items:
            record.set_item(name.strip().lower().replace("-", "_"), not undo)
    except ValueError as e:
        db.rollback()
        click.secho(str(e), fg="red")
        return

    completion = record.calculate_clearance_completion()
    record.stamp(actor_id)
    db.commit()

    logger.info(
        f"{withdrawal_number}: {'cleared' if not undo else 'reopened'} "
        f"{', '.join(items)} ({completion.completed}/{completion.total})"
    )
    click.echo(
        f"{withdrawal_number}: {completion.completed}/{completion.total} items cleared "
        f"({completion.percentage}%)"
    )
    if completion.all_complete:
        click.secho("All clearance items complete", fg="green")

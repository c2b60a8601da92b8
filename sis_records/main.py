from datetime import datetime
from typing import Optional

import click
from sqlalchemy.orm import Session

from sis_records.commands.check.expiring import check_expiring
from sis_records.commands.check.reviews import check_reviews
from sis_records.commands.check.withdrawal import check_withdrawal
from sis_records.commands.create.withdrawal import create_withdrawal
from sis_records.commands.update.clearance import update_clearance
from sis_records.commands.update.withdrawal_status import update_withdrawal_status
from sis_records.db.config import get_engine, get_session_factory, init_db
from sis_records.utils.logging_config import configure_from_env


def get_db() -> Session:
    SessionLocal = get_session_factory(get_engine())
    return SessionLocal()


@click.group()
def cli() -> None:
    configure_from_env()


@cli.command()
def init() -> None:
    """Create any missing tables."""
    init_db(get_engine())
    click.secho("Database initialised", fg="green")


@cli.group()
def create() -> None:
    pass


@create.command(name="withdrawal")
@click.argument("student_number")
@click.option("--actor", required=True, help="User id of the person recording this")
@click.option(
    "--date",
    "withdrawal_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Withdrawal date (YYYY-MM-DD), defaults to today",
)
@click.option("--type", "withdrawal_type", help="Withdrawal type, e.g. HOMESCHOOL")
@click.option("--reason", help="Reason for withdrawal")
def create_withdrawal_cmd(
    student_number: str,
    actor: str,
    withdrawal_date: Optional[datetime],
    withdrawal_type: Optional[str],
    reason: Optional[str],
) -> None:
    db = get_db()
    try:
        create_withdrawal(
            db,
            student_number,
            actor,
            withdrawal_date.date() if withdrawal_date else None,
            withdrawal_type,
            reason,
        )
    finally:
        db.close()


@cli.group()
def update() -> None:
    pass


@update.command(name="clearance")
@click.argument("withdrawal_number")
@click.argument("items", nargs=-1, required=True)
@click.option("--actor", required=True, help="User id of the person clearing items")
@click.option("--undo", is_flag=True, help="Mark the items as not done")
def clearance(
    withdrawal_number: str, items: tuple[str, ...], actor: str, undo: bool
) -> None:
    """Mark withdrawal clearance items as done."""
    db = get_db()
    try:
        update_clearance(db, withdrawal_number, items, actor, undo)
    finally:
        db.close()


@update.command(name="withdrawal-status")
@click.argument("withdrawal_number")
@click.argument("status")
@click.option("--actor", required=True, help="User id of the person making the change")
def withdrawal_status(withdrawal_number: str, status: str, actor: str) -> None:
    """Move a withdrawal to a new status, e.g. PENDING_CLEARANCE or CLEARED."""
    db = get_db()
    try:
        update_withdrawal_status(db, withdrawal_number, status, actor)
    finally:
        db.close()


@cli.group()
def check() -> None:
    pass


@check.command(name="withdrawal")
@click.argument("withdrawal_number")
def withdrawal(withdrawal_number: str) -> None:
    db = get_db()
    try:
        check_withdrawal(db, withdrawal_number)
    finally:
        db.close()


@check.command()
@click.option("--days", type=int, default=30, help="Look-ahead window in days")
def expiring(days: int) -> None:
    """List plans, verifications, course codes, keys and background checks about to lapse."""
    db = get_db()
    try:
        check_expiring(db, days)
    finally:
        db.close()


@check.command()
@click.option("--days", type=int, default=30, help="Look-ahead window in days")
def reviews(days: int) -> None:
    """List reviews, assessments and follow-ups that are due or overdue."""
    db = get_db()
    try:
        check_reviews(db, days)
    finally:
        db.close()


if __name__ == "__main__":
    cli()

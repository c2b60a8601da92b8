import click
from sqlalchemy.orm import Session

from sis_records.models import WithdrawalRecord, display


def check_withdrawal(db: Session, withdrawal_number: str) -> None:
    """Show a withdrawal's clearance checklist grouped by department."""
    record = (
        db.query(WithdrawalRecord)
        .filter(WithdrawalRecord.withdrawal_number == withdrawal_number)
        .first()
    )
    if not record:
        click.secho(f"Withdrawal {withdrawal_number} not found", fg="red")
        return

    student = record.student
    click.echo(f"\n{record.withdrawal_number}  {student.full_name} ({student.student_number})")
    click.secho(f"Status: {record.status.label}", fg=record.status.color)
    click.echo(f"Type: {display(record.withdrawal_type)}")
    click.echo(f"Withdrawal date: {record.withdrawal_date.isoformat()}")

    by_category = record.category_completion()
    for category in record.checklist_categories():
        completion = by_category[category]
        click.secho(
            f"\n{category} ({completion.completed}/{completion.total})",
            bold=True,
        )
        for item in record.CHECKLIST:
            if item.category != category:
                continue
            if record.is_item_done(item.name):
                click.secho(f"  [x] {item.label}", fg="green")
            else:
                click.secho(f"  [ ] {item.label}  ({item.name})", fg="yellow")

    overall = record.checklist_completion()
    color = "green" if overall.all_complete else "yellow"
    click.secho(
        f"\nOverall: {overall.completed}/{overall.total} ({overall.percentage}%)",
        fg=color,
    )
    problems = record.checklist_problems()
    for problem in problems:
        click.secho(f"Warning: {problem}", fg="red")

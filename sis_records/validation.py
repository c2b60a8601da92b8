"""
Explicit validation for records before they are saved or change status.

Constructing or loading a record never validates it; commands call
``validate`` or ``transition`` at the points where bad data would matter.
"""

from typing import Any, List, Optional, Type

from sqlalchemy import inspect

from sis_records.models.audit import AuditMixin
from sis_records.models.checklist import ChecklistMixin
from sis_records.models.enums import DisplayEnum, display
from sis_records.models.lifecycle import LifecycleMixin
from sis_records.utils.logging_config import get_logger

logger = get_logger(__name__)


class RecordValidationError(ValueError):
    def __init__(self, record: Any, problems: List[str]):
        self.record = record
        self.problems = list(problems)
        super().__init__(
            f"{type(record).__name__} failed validation: " + "; ".join(self.problems)
        )


def collect_problems(record: Any, target_status: Optional[DisplayEnum] = None) -> List[str]:
    """
    Gather every rule the record currently breaks.

    Args:
        record: Any model instance
        target_status: Status the record is about to move to, checked in place
            of its current status by record types that gate on status

    Returns:
        Human readable problem descriptions, empty when the record is valid
    """
    problems: List[str] = []
    if isinstance(record, LifecycleMixin):
        problems.extend(record.window_problems())
    if isinstance(record, ChecklistMixin):
        problems.extend(record.checklist_problems())
    hook = getattr(record, "validation_problems", None)
    if callable(hook):
        problems.extend(hook(target_status) if target_status is not None else hook())
    return problems


def validate(record: Any, target_status: Optional[DisplayEnum] = None) -> None:
    problems = collect_problems(record, target_status)
    if problems:
        raise RecordValidationError(record, problems)


def status_enum(record: Any, status_attr: str) -> Optional[Type[DisplayEnum]]:
    """The enum class mapped on the record's status column, if it has one."""
    column = inspect(type(record)).columns.get(status_attr)
    if column is None:
        return None
    return getattr(column.type, "enum_class", None)


def transition(record: Any, new_status: DisplayEnum, actor_id: Optional[str] = None) -> None:
    """
    Move a record to a new status after checking it is allowed there.

    Raises:
        RecordValidationError: If the record would be invalid in the new status
        ValueError: If the status does not belong to the record's status enum
    """
    status_attr = getattr(record, "__status_attr__", "status")
    current = getattr(record, status_attr, None)
    expected = status_enum(record, status_attr)
    if expected is None and current is not None:
        expected = type(current)
    if expected is not None and not isinstance(new_status, expected):
        raise ValueError(
            f"{new_status!r} is not a valid status for {type(record).__name__}"
        )

    # Stored checklist totals are refreshed first so they never block a move
    if isinstance(record, ChecklistMixin):
        record.recompute_completion()
    validate(record, new_status)

    setattr(record, status_attr, new_status)
    if isinstance(record, AuditMixin):
        record.stamp(actor_id)
    logger.info(
        f"{type(record).__name__} id={getattr(record, 'id', None)!r} "
        f"{display(current)} -> {display(new_status)} by {actor_id or 'unknown'}"
    )

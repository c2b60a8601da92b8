"""
Audit trail columns and the flush hooks that maintain them.

``created_at`` is stamped once on insert and cannot be changed afterwards;
``updated_at`` is refreshed on every update and never moves backwards. The
acting user is always supplied by the caller through ``stamp()``.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import DateTime, ForeignKey, String, event, inspect
from sqlalchemy.orm import (
    Mapped,
    declared_attr,
    mapped_column,
    object_session,
    relationship,
)

from sis_records.utils.logging_config import get_logger

if TYPE_CHECKING:
    from sis_records.models.people import User

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now()


def _committed_value(target: Any, key: str) -> Any:
    history = inspect(target).attrs[key].load_history()
    if history.deleted:
        return history.deleted[0]
    if history.unchanged:
        return history.unchanged[0]
    return None


class AuditMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, active_history=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, active_history=True
    )
    created_by: Mapped[Optional[str]] = mapped_column(
        String, ForeignKey("users.id", ondelete="SET NULL")
    )
    updated_by: Mapped[Optional[str]] = mapped_column(
        String, ForeignKey("users.id", ondelete="SET NULL")
    )

    @declared_attr
    def creator(cls) -> Mapped[Optional["User"]]:
        return relationship("User", foreign_keys=f"[{cls.__name__}.created_by]")

    @declared_attr
    def updater(cls) -> Mapped[Optional["User"]]:
        return relationship("User", foreign_keys=f"[{cls.__name__}.updated_by]")

    def stamp(self, actor_id: Optional[str]) -> None:
        """Record who is creating or changing this record."""
        if actor_id is None:
            return
        if self.created_by is None:
            self.created_by = actor_id
        self.updated_by = actor_id


@event.listens_for(AuditMixin, "before_insert", propagate=True)
def _stamp_created(mapper, connection, target: AuditMixin) -> None:
    now = _now()
    target.created_at = now
    target.updated_at = now
    if target.updated_by is None:
        target.updated_by = target.created_by


@event.listens_for(AuditMixin, "before_update", propagate=True)
def _stamp_updated(mapper, connection, target: AuditMixin) -> None:
    session = object_session(target)
    if session is not None and not session.is_modified(
        target, include_collections=False
    ):
        return

    created = inspect(target).attrs.created_at.load_history()
    if created.has_changes() and created.deleted and created.deleted[0] is not None:
        logger.warning(
            f"Ignoring change to created_at on {type(target).__name__} "
            f"id={getattr(target, 'id', None)!r}"
        )
        target.created_at = created.deleted[0]

    previous = _committed_value(target, "updated_at")
    now = _now()
    target.updated_at = max(now, previous) if previous is not None else now

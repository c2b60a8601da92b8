"""
API keys and record edit locks.

Only a SHA-256 digest of an API key is stored; the raw key is returned once by
``ApiKey.generate`` and never persisted. A ``RecordLock`` is a claim on a
record, not a mutex: callers check ``is_expired``/``is_held_by`` before editing.
"""

import hashlib
import hmac
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from nanoid import generate
from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sis_records.models.audit import AuditMixin
from sis_records.models.base import Base
from sis_records.models.enums import DisplayEnum
from sis_records.models.people import User

KEY_PREFIX = "sis_"
KEY_SECRET_LENGTH = 40
PREFIX_LENGTH = 12
DEFAULT_LOCK_MINUTES = 15


def hash_key(raw_key: str) -> str:
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


class ApiKey(AuditMixin, Base):
    __tablename__ = "api_keys"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    user_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("users.id", ondelete="cascade"), index=True
    )
    key_prefix: Mapped[str] = mapped_column(String(PREFIX_LENGTH), index=True)
    key_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    scopes: Mapped[List[str]] = mapped_column(JSON, default=list)
    active: Mapped[Optional[bool]] = mapped_column(Boolean, default=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    last_used_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    revoked_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    user: Mapped[Optional["User"]] = relationship(foreign_keys=[user_id])

    @classmethod
    def generate(
        cls,
        name: str,
        user_id: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        scopes: Optional[List[str]] = None,
    ) -> Tuple["ApiKey", str]:
        """
        Create a new key.

        Returns:
            The unsaved ApiKey and the raw key string to hand to the client
        """
        raw_key = f"{KEY_PREFIX}{generate(size=KEY_SECRET_LENGTH)}"
        api_key = cls(
            name=name,
            user_id=user_id,
            key_prefix=raw_key[:PREFIX_LENGTH],
            key_hash=hash_key(raw_key),
            scopes=list(scopes or []),
            active=True,
            expires_at=expires_at,
        )
        api_key.stamp(user_id)
        return api_key, raw_key

    def matches(self, raw_key: Optional[str]) -> bool:
        if not raw_key or not self.key_hash:
            return False
        return hmac.compare_digest(self.key_hash, hash_key(raw_key))

    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at is not None and self.expires_at < (now or datetime.now())

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        return (
            self.active is True and not self.is_revoked() and not self.is_expired(now)
        )

    def is_expiring_soon(self, days: int = 30, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None or not self.is_valid(now):
            return False
        return self.expires_at <= (now or datetime.now()) + timedelta(days=days)

    def has_scope(self, scope: str) -> bool:
        return scope in (self.scopes or [])

    def record_use(self, now: Optional[datetime] = None) -> None:
        self.last_used_at = now or datetime.now()

    def revoke(self, actor_id: Optional[str] = None, now: Optional[datetime] = None) -> None:
        if self.revoked_at is None:
            self.revoked_at = now or datetime.now()
        self.active = False
        self.stamp(actor_id)

    def __repr__(self) -> str:
        return (
            f"<ApiKey id={self.id!r} name={self.name!r} key_prefix={self.key_prefix!r} "
            f"active={self.active!r}>"
        )


class LockedEntity(DisplayEnum):
    STUDENT = ("Student",)
    WITHDRAWAL = ("Withdrawal Record",)
    HEALTH_PLAN = ("Health Plan",)
    ACCOMMODATION = ("Student Accommodation",)
    COUNSELING_REFERRAL = ("Counseling Referral",)
    BELL_SCHEDULE = ("Bell Schedule",)
    STAFF = ("Staff",)


class LockMode(DisplayEnum):
    EDIT = ("Edit",)
    EXCLUSIVE = ("Exclusive",)


class RecordLock(Base):
    """A held edit lock. Like ApiKey, it still holds at the exact expires_at instant."""

    __tablename__ = "record_locks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entity_type: Mapped[LockedEntity] = mapped_column(nullable=False)
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False)
    locked_by: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="cascade"), nullable=False
    )
    lock_mode: Mapped[LockMode] = mapped_column(default=LockMode.EDIT, nullable=False)
    lock_reason: Mapped[Optional[str]] = mapped_column(String(200))
    locked_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    holder: Mapped["User"] = relationship()

    @classmethod
    def acquire(
        cls,
        entity_type: LockedEntity,
        entity_id: int,
        user_id: str,
        minutes: int = DEFAULT_LOCK_MINUTES,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "RecordLock":
        now = now or datetime.now()
        return cls(
            entity_type=entity_type,
            entity_id=entity_id,
            locked_by=user_id,
            lock_reason=reason,
            locked_at=now,
            expires_at=now + timedelta(minutes=minutes),
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at is not None and self.expires_at < (now or datetime.now())

    def is_held_by(self, user_id: Optional[str], now: Optional[datetime] = None) -> bool:
        return user_id is not None and self.locked_by == user_id and not self.is_expired(now)

    def refresh(self, minutes: int = DEFAULT_LOCK_MINUTES, now: Optional[datetime] = None) -> None:
        self.expires_at = (now or datetime.now()) + timedelta(minutes=minutes)

    def duration_minutes(self, now: Optional[datetime] = None) -> int:
        if self.locked_at is None:
            return 0
        return int(((now or datetime.now()) - self.locked_at).total_seconds() // 60)

    def __repr__(self) -> str:
        return (
            f"<RecordLock id={self.id!r} entity_type={self.entity_type!r} "
            f"entity_id={self.entity_id!r} locked_by={self.locked_by!r}>"
        )

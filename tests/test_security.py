from datetime import datetime, timedelta

from sis_records.models import ApiKey, LockedEntity, RecordLock
from sis_records.models.security import KEY_PREFIX, hash_key

NOW = datetime(2025, 3, 15, 12, 0)


def test_generate_returns_raw_key_once(registrar):
    api_key, raw = ApiKey.generate("Reporting", user_id=registrar.id)
    assert raw.startswith(KEY_PREFIX)
    assert raw not in (api_key.key_hash, api_key.key_prefix)
    assert api_key.key_hash == hash_key(raw)
    assert raw.startswith(api_key.key_prefix)
    assert api_key.created_by == registrar.id


def test_generated_keys_are_unique():
    _, first = ApiKey.generate("A")
    _, second = ApiKey.generate("B")
    assert first != second


def test_matches():
    api_key, raw = ApiKey.generate("Sync")
    assert api_key.matches(raw)
    assert not api_key.matches(raw + "x")
    assert not api_key.matches("")
    assert not api_key.matches(None)


def test_validity_and_revocation():
    api_key, _ = ApiKey.generate("Sync", expires_at=NOW + timedelta(days=10))
    assert api_key.is_valid(NOW)
    assert api_key.is_expiring_soon(30, NOW)
    assert not api_key.is_expiring_soon(5, NOW)
    assert not api_key.is_valid(NOW + timedelta(days=11))

    api_key.revoke("admin-1", NOW)
    assert api_key.is_revoked()
    assert not api_key.is_valid(NOW)
    assert api_key.revoked_at == NOW


def test_key_without_expiry_stays_valid():
    api_key, _ = ApiKey.generate("Forever")
    assert api_key.is_valid(NOW + timedelta(days=3650))
    assert not api_key.is_expiring_soon(30, NOW)


def test_scopes_and_usage(db, registrar):
    api_key, raw = ApiKey.generate(
        "Nurse app", user_id=registrar.id, scopes=["health:read"]
    )
    db.add(api_key)
    db.commit()
    assert api_key.has_scope("health:read")
    assert not api_key.has_scope("health:write")
    api_key.record_use(NOW)
    db.commit()
    assert api_key.last_used_at == NOW
    assert api_key.user is registrar


def test_record_lock_lifecycle():
    lock = RecordLock.acquire(LockedEntity.WITHDRAWAL, 7, "user-1", minutes=15, now=NOW)
    assert lock.is_held_by("user-1", NOW)
    assert not lock.is_held_by("user-2", NOW)
    assert not lock.is_expired(NOW + timedelta(minutes=14))
    assert not lock.is_expired(NOW + timedelta(minutes=15))
    assert lock.is_expired(NOW + timedelta(minutes=15, seconds=1))
    assert not lock.is_held_by("user-1", NOW + timedelta(minutes=20))

    lock.refresh(15, NOW + timedelta(minutes=10))
    assert not lock.is_expired(NOW + timedelta(minutes=20))
    assert lock.duration_minutes(NOW + timedelta(minutes=20)) == 20
    assert not lock.is_held_by(None, NOW)


def test_key_and_lock_share_the_expiry_instant():
    api_key, _ = ApiKey.generate("Sync", expires_at=NOW)
    lock = RecordLock.acquire(LockedEntity.WITHDRAWAL, 1, "user-1", minutes=0, now=NOW)
    assert api_key.is_expired(NOW) is lock.is_expired(NOW) is False
    later = NOW + timedelta(seconds=1)
    assert api_key.is_expired(later) is lock.is_expired(later) is True

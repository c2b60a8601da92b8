from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sis_records.models import Base, Student, User, WithdrawalRecord

TODAY = date(2025, 3, 15)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def registrar(db):
    user = User(id="registrar-1", name="Pat Registrar", role="registrar")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def student(db):
    student = Student(student_number="S1001", first_name="Alex", last_name="Rivera")
    db.add(student)
    db.commit()
    return student


@pytest.fixture
def withdrawal(db, student, registrar):
    record = WithdrawalRecord(
        withdrawal_number="WD-2025-000001",
        student=student,
        withdrawal_date=date(2025, 3, 1),
    )
    record.stamp(registrar.id)
    db.add(record)
    db.commit()
    return record

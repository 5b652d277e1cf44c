"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from ecollect_gateway.api.main import create_app
from ecollect_gateway.infrastructure.database.models import Base, NoteHistoryRow, SMSLogRow
from ecollect_gateway.infrastructure.database.session import get_session_factory
from ecollect_gateway.domain.models import Note, SMSLog


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

BASE_DATE = datetime(2024, 3, 1, 9, 0, 0)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    return TestClient(app)


@pytest.fixture
def seeded_db(db: Session) -> Session:
    """
    Test database with three customers:
    - C100: notes only, explicit "45 DPD" in the newest note
    - C200: notes and SMS, bankruptcy mentioned
    - C300: SMS only, "late by 40 days"
    Plus rows with placeholder customer numbers that must be ignored.
    """
    db.add_all(
        [
            NoteHistoryRow(
                id=1,
                custnumber="C100",
                accnumber="A100",
                notemade="Called customer, account is 45 DPD",
                owner="agent1",
                notedate=BASE_DATE,
                reason="Follow up",
            ),
            NoteHistoryRow(
                id=2,
                custnumber="C100",
                accnumber="A100",
                notemade="Left voicemail",
                owner="agent1",
                notedate=BASE_DATE - timedelta(days=3),
            ),
            NoteHistoryRow(
                id=3,
                custnumber="C200",
                accnumber="A200",
                notemade="Customer filed for bankruptcy",
                owner="agent2",
                notedate=BASE_DATE - timedelta(days=1),
            ),
            NoteHistoryRow(
                id=4,
                custnumber="NULL",
                accnumber="NULL",
                notemade="Orphan note 200 DPD",
                notedate=BASE_DATE,
            ),
            SMSLogRow(
                sms_id=1,
                customer_number="C200",
                phone_number="254700000001",
                message="Dear customer, your arrears of Kes 1,500.00 are due",
                send_status="Success",
                date_sent=BASE_DATE - timedelta(days=2),
            ),
            SMSLogRow(
                sms_id=2,
                customer_number="C300",
                phone_number="254700000002",
                message="Your loan payment is late by 40 days. Pay Kes 12,000.00 today",
                send_status="Success",
                date_sent=BASE_DATE - timedelta(days=4),
            ),
            SMSLogRow(
                sms_id=3,
                customer_number="C300",
                phone_number="254700000002",
                message="Reminder: payment overdue",
                send_status="Failed",
                date_sent=BASE_DATE - timedelta(days=10),
            ),
            SMSLogRow(
                sms_id=4,
                customer_number="undefined",
                message="Unroutable",
                send_status="Failed",
                date_sent=BASE_DATE,
            ),
        ]
    )
    db.commit()
    return db


def make_note(
    custnumber: str | None = "C1",
    notemade: str = "",
    accnumber: str | None = "A1",
    days_ago: int = 0,
    **kwargs,
) -> Note:
    """Build a Note dated relative to BASE_DATE"""
    return Note(
        custnumber=custnumber,
        accnumber=accnumber,
        notemade=notemade,
        notedate=BASE_DATE - timedelta(days=days_ago),
        **kwargs,
    )


def make_sms(
    customer_number: str | None = "C1",
    message: str = "",
    send_status: str = "Success",
    days_ago: int = 0,
    **kwargs,
) -> SMSLog:
    """Build an SMSLog dated relative to BASE_DATE"""
    return SMSLog(
        customer_number=customer_number,
        message=message,
        send_status=send_status,
        date_sent=BASE_DATE - timedelta(days=days_ago),
        **kwargs,
    )

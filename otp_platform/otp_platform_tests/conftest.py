import re

import pytest
from fastapi.testclient import TestClient

from otp_platform.otp_platform.auth_service.main import app
from otp_platform.otp_platform.auth_service.db import Base, engine, SessionLocal
from otp_platform.otp_platform.auth_service.models import User
from otp_platform.otp_platform.auth_service.auth import hash_password
from otp_platform.otp_platform.auth_service.challenge_store import challenge_store
from otp_platform.otp_platform.auth_service.notifier import get_notifier


class RecordingSender:
    """Stands in for the email sender and keeps every message."""

    def __init__(self):
        self.sent = []

    def send(self, to_email, subject, text_body):
        self.sent.append({"to": to_email, "subject": subject, "body": text_body})

    def last_code(self, email):
        for message in reversed(self.sent):
            if message["to"] == email:
                return re.search(r"\d{6}", message["body"]).group(0)
        return None


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture(autouse=True)
def reset_database():
    # Drop all tables and recreate them before each test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    challenge_store.clear()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def outbox():
    sender = RecordingSender()
    app.dependency_overrides[get_notifier] = lambda: sender
    return sender


@pytest.fixture
def db_session():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def ensure_user():
    def _ensure_user(email="user@example.com", password="Secret123!", name="Test User"):
        db = SessionLocal()
        try:
            user = db.query(User).filter(User.email == email).first()
            if not user:
                user = User(email=email, name=name, password=hash_password(password) if password else "")
                db.add(user)
                db.commit()
                db.refresh(user)
            # return stable scalar values to avoid DetachedInstance
            return {"id": user.id, "email": email, "password": password, "name": user.name}
        finally:
            db.close()

    return _ensure_user

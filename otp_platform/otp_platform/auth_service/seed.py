"""
Seed the credential store with development accounts.

Usage:
    python -m otp_platform.otp_platform.auth_service.seed
"""
import logging
from sqlalchemy.orm import Session

from .auth import hash_password
from .db import SessionLocal, init_db
from .models import User

logger = logging.getLogger(__name__)

SEED_USERS = [
    {"name": "Jane Doe", "email": "jane@example.com", "password": "password123"},
    {"name": "Alice Johnson", "email": "alice@example.com", "password": "password123"},
]


def seed_users(db: Session, users: list = None) -> int:
    """
    Insert seed users, skipping emails that already exist.

    Returns:
        Number of users created
    """
    users = SEED_USERS if users is None else users
    existing = {
        email for (email,) in
        db.query(User.email).filter(User.email.in_([u["email"] for u in users])).all()
    }

    new_users = [
        User(name=u["name"], email=u["email"], password=hash_password(u["password"]))
        for u in users
        if u["email"] not in existing
    ]
    db.add_all(new_users)
    db.commit()

    logger.info("Seeded %d user(s), skipped %d existing", len(new_users), len(existing))
    return len(new_users)


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s:%(message)s")
    init_db()
    db = SessionLocal()
    try:
        seed_users(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()

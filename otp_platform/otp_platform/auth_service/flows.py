"""
OTP login, signup, verification, resend and social login flows.

Each function runs one flow to completion against the credential store
(SQLAlchemy session), the challenge store and the email sender, and
raises an ``AuthError`` subclass on failure. Raw collaborator errors are
logged here and never reach the caller.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from fastapi import Request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .auth import create_access_token, generate_otp, hash_password, verify_password
from .challenge_store import Challenge, ChallengeStore
from .config import settings
from .errors import (
    EmailInUse,
    InvalidCredentials,
    InvalidOrExpiredOtp,
    UpstreamUnavailable,
    UserCreationFailed,
    UserNotFound,
    ValidationError,
)
from .models import User
from .notifier import EmailSender, NotificationError
from .schemas import ChallengeIssuedResponse, MessageResponse, SessionResponse
from .utils.event_logger import log_auth_event

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _find_user(db: Session, email: str) -> Optional[User]:
    try:
        return db.query(User).filter(User.email == email).first()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("User lookup failed for %s: %s", email, e)
        raise UpstreamUnavailable() from e


def _create_user(db: Session, email: str, name: str, password: str) -> User:
    """
    Insert a user row.

    IntegrityError (duplicate email) is re-raised after rollback so the
    caller can decide how to recover; other database failures become
    UpstreamUnavailable.
    """
    user = User(email=email, name=name, password=password)
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("User creation failed for %s: %s", email, e)
        raise UpstreamUnavailable() from e
    return user


def _issue_challenge(store: ChallengeStore, email: str, password: str = None, name: str = None) -> Challenge:
    challenge = Challenge(
        email=email,
        otp=generate_otp(),
        expires_at=_utcnow() + timedelta(minutes=settings.OTP_EXPIRE_MINUTES),
        password=password,
        name=name,
    )
    # Replaces any earlier challenge for this email, live or not
    store.put(email, challenge)
    return challenge


def _send_otp(notifier: EmailSender, email: str, subject: str, text_body: str) -> None:
    try:
        notifier.send(email, subject, text_body)
    except NotificationError as e:
        raise UpstreamUnavailable("Failed to send OTP") from e


def _session_for(user: User) -> SessionResponse:
    token = create_access_token(user.id, user.email)
    return SessionResponse(token=token, name=user.name, email=user.email)


def login(
    db: Session,
    store: ChallengeStore,
    notifier: EmailSender,
    email: str,
    password: str,
    request: Request = None,
) -> ChallengeIssuedResponse:
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = _find_user(db, email)
    if not user or not verify_password(password, user.password):
        log_auth_event("login_failure", email, request, user_id=user.id if user else None)
        raise InvalidCredentials()

    challenge = _issue_challenge(store, email)
    _send_otp(notifier, email, "Your Login OTP", f"Your OTP is: {challenge.otp}")

    log_auth_event("otp_issued", email, request, user_id=user.id)
    return ChallengeIssuedResponse()


def signup(
    db: Session,
    store: ChallengeStore,
    notifier: EmailSender,
    email: str,
    password: str,
    name: str,
    request: Request = None,
) -> ChallengeIssuedResponse:
    """
    Start a signup. The user row is only written once the emailed code
    is verified; until then the hash and name wait in the challenge.
    """
    if _find_user(db, email):
        raise EmailInUse()

    challenge = _issue_challenge(store, email, password=hash_password(password), name=name)
    _send_otp(notifier, email, "Verify your account", f"Your signup OTP is: {challenge.otp}")

    log_auth_event("signup_started", email, request)
    return ChallengeIssuedResponse()


def verify_otp(
    db: Session,
    store: ChallengeStore,
    email: str,
    otp: str,
    request: Request = None,
) -> SessionResponse:
    # The challenge is consumed by the first attempt, right or wrong.
    challenge = store.pop(email)

    if challenge is None or challenge.otp != otp or challenge.is_expired(_utcnow()):
        log_auth_event("otp_failure", email, request,
                       metadata={"reason": "missing" if challenge is None else "mismatch_or_expired"})
        raise InvalidOrExpiredOtp()

    user = _find_user(db, email)
    if user is None:
        if not challenge.is_signup:
            raise UserNotFound()
        try:
            user = _create_user(db, email, challenge.name, challenge.password)
        except IntegrityError as e:
            logger.error("User creation error after OTP for %s: %s", email, e)
            raise UserCreationFailed() from e
        log_auth_event("user_created", email, request, user_id=user.id)

    log_auth_event("otp_verified", email, request, user_id=user.id)
    return _session_for(user)


def resend_otp(
    db: Session,
    store: ChallengeStore,
    notifier: EmailSender,
    email: str,
    request: Request = None,
) -> MessageResponse:
    if not email:
        raise ValidationError("Email is required")

    user = _find_user(db, email)
    if not user:
        raise UserNotFound()

    # Always a login challenge, whether or not a flow was in progress
    challenge = _issue_challenge(store, email)
    _send_otp(notifier, email, "Your OTP (Resent)", f"Your new OTP is: {challenge.otp}")

    log_auth_event("otp_resent", email, request, user_id=user.id)
    return MessageResponse(message="OTP resent")


def social_login(db: Session, email: str, name: str, request: Request = None) -> SessionResponse:
    """
    Sign in a user whose email an external identity provider has
    already verified. Creates the account on first use; no OTP step.
    """
    user = _find_user(db, email)
    if user is None:
        try:
            user = _create_user(db, email, name, "")
            log_auth_event("user_created", email, request, user_id=user.id, metadata={"source": "social"})
        except IntegrityError as e:
            # Lost a race with a concurrent first login for the same email
            user = _find_user(db, email)
            if user is None:
                logger.error("Social login user creation failed for %s: %s", email, e)
                raise UserCreationFailed() from e

    log_auth_event("social_login", email, request, user_id=user.id)
    return _session_for(user)

from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from dataclasses import dataclass
from typing import Optional
from fastapi import Header, Request
import secrets
import jwt

from .config import settings
from .errors import MissingToken, InvalidToken

# Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass(frozen=True)
class TokenSubject:
    id: int
    email: str


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    # Social-login accounts carry an empty hash and can never match
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def generate_otp() -> str:
    """Uniform 6-digit code in 100000-999999 from a CSPRNG."""
    return str(secrets.randbelow(900000) + 100000)


def create_access_token(user_id: int, email: str, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user_id),
        "id": user_id,
        "email": email,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> TokenSubject:
    """
    Verify signature and expiry of a session token.

    Raises:
        InvalidToken: if the token is malformed, tampered with or expired
    """
    try:
        data = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError as exc:
        raise InvalidToken() from exc

    user_id = data.get("id")
    email = data.get("email")
    if user_id is None or email is None:
        raise InvalidToken()
    return TokenSubject(id=user_id, email=email)


def get_current_subject(
    request: Request,
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> TokenSubject:
    """
    Session gate for protected routes.

    Requires ``Authorization: Bearer <token>``. The decoded subject is
    attached to ``request.state.user`` for downstream handlers.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise MissingToken()
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise MissingToken()

    subject = decode_access_token(token)
    request.state.user = subject
    return subject

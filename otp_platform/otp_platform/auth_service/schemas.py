from pydantic import BaseModel, Field, field_validator
from pydantic.networks import validate_email
from datetime import datetime


def _well_formed_email(value: str) -> str:
    # Validate only; the address is kept exactly as sent so every flow
    # keys the challenge store and the users table by the same string.
    validate_email(value)
    return value


class LoginRequest(BaseModel):
    email: str
    password: str


class SignupRequest(BaseModel):
    email: str
    password: str = Field(min_length=6)
    name: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _well_formed_email(value)


class SocialLoginRequest(BaseModel):
    email: str
    name: str = ""

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _well_formed_email(value)


class VerifyOtpRequest(BaseModel):
    email: str
    otp: str


class ResendOtpRequest(BaseModel):
    email: str = ""


class ChallengeIssuedResponse(BaseModel):
    message: str = "OTP sent"
    step: str = "verify_otp"


class SessionResponse(BaseModel):
    token: str
    name: str
    email: str


class MessageResponse(BaseModel):
    message: str


# Public projection of a user; the password hash is never included
class UserPublic(BaseModel):
    id: int
    name: str
    email: str
    createdAt: datetime

from fastapi import FastAPI, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.orm import Session
import logging

from .config import settings
from .db import get_db, init_db
from .schemas import (
    LoginRequest,
    SignupRequest,
    SocialLoginRequest,
    VerifyOtpRequest,
    ResendOtpRequest,
    ChallengeIssuedResponse,
    SessionResponse,
    MessageResponse,
)
from .challenge_store import ChallengeStore, get_challenge_store
from .errors import AuthError
from .notifier import EmailSender, get_notifier
from .routes import users
from . import flows

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Initialize database on startup"""
    init_db()
    yield


app = FastAPI(title="OTP Auth Service", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(users.router)


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err.get("loc", ())[1:]), "msg": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "errors": errors},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Something went wrong!"},
    )


@app.get("/")
def root():
    return {"service": "OTP Auth Service", "status": "running"}


@app.post("/api/auth/login", response_model=ChallengeIssuedResponse)
def login(
    payload: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    store: ChallengeStore = Depends(get_challenge_store),
    notifier: EmailSender = Depends(get_notifier),
):
    return flows.login(db, store, notifier, payload.email, payload.password, request)


@app.post("/api/auth/signup", response_model=ChallengeIssuedResponse)
def signup(
    payload: SignupRequest,
    request: Request,
    db: Session = Depends(get_db),
    store: ChallengeStore = Depends(get_challenge_store),
    notifier: EmailSender = Depends(get_notifier),
):
    return flows.signup(db, store, notifier, payload.email, payload.password, payload.name, request)


@app.post("/api/auth/social-login", response_model=SessionResponse)
def social_login(payload: SocialLoginRequest, request: Request, db: Session = Depends(get_db)):
    return flows.social_login(db, payload.email, payload.name, request)


@app.post("/api/auth/verify-otp", response_model=SessionResponse)
def verify_otp(
    payload: VerifyOtpRequest,
    request: Request,
    db: Session = Depends(get_db),
    store: ChallengeStore = Depends(get_challenge_store),
):
    return flows.verify_otp(db, store, payload.email, payload.otp, request)


@app.post("/api/auth/resend-otp", response_model=MessageResponse)
def resend_otp(
    payload: ResendOtpRequest,
    request: Request,
    db: Session = Depends(get_db),
    store: ChallengeStore = Depends(get_challenge_store),
    notifier: EmailSender = Depends(get_notifier),
):
    return flows.resend_otp(db, store, notifier, payload.email, request)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)

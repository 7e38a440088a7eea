"""
User Router - read access to user profiles for authenticated callers.
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth import get_current_subject
from ..db import get_db
from ..errors import UpstreamUnavailable, UserNotFound
from ..models import User
from ..schemas import UserPublic

router = APIRouter(prefix="/api/user", tags=["users"], dependencies=[Depends(get_current_subject)])
logger = logging.getLogger(__name__)


@router.get("/{user_id}", response_model=UserPublic)
def get_user(user_id: int, db: Session = Depends(get_db)):
    """
    Fetch the public profile of a user by id.

    Non-numeric ids are rejected by path validation before reaching here.
    """
    try:
        user = db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Fetch user error for id=%s: %s", user_id, e)
        raise UpstreamUnavailable() from e

    if not user:
        raise UserNotFound()

    return UserPublic(id=user.id, name=user.name, email=user.email, createdAt=user.created_at)

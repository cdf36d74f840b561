import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()

def get_user_by_google_id(db: Session, google_id: str) -> Optional[User]:
    return db.query(User).filter(User.google_id == google_id).first()

def create_user(db: Session, name: Optional[str], email: str, google_id: Optional[str] = None,
                hashed_password: Optional[str] = None) -> User:
    db_user = User(
        name=name,
        email=email,
        google_id=google_id,
        hashed_password=hashed_password,
        role=UserRole.USER,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info("Created user %s", db_user.id)
    return db_user

def promote_to_admin(db: Session, current_user: User) -> bool:
    """
    Grant the admin role to the calling user.

    Allowed when the caller's email is on the ADMIN_EMAILS allow-list, or
    when no admin exists yet (first-admin bootstrap). Returns False when
    the caller already was an admin.
    """
    if current_user.role == UserRole.ADMIN:
        return False

    allow_list = {email.lower() for email in settings.ADMIN_EMAILS}
    on_allow_list = current_user.email.lower() in allow_list
    admin_exists = db.query(User.id).filter(User.role == UserRole.ADMIN).first() is not None

    if not on_allow_list and admin_exists:
        logger.warning("User %s attempted to self-promote to admin", current_user.id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to grant admin role")

    current_user.role = UserRole.ADMIN
    db.commit()
    db.refresh(current_user)
    logger.info("User %s promoted to admin", current_user.id)
    return True

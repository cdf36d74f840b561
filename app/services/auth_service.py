import logging
from typing import Optional

from sqlalchemy.orm import Session
from fastapi import Depends, HTTPException, status

from google.oauth2 import id_token
from google.auth.transport import requests as google_requests

from app.api.dependencies import get_db
from app.core.config import settings
from app.core import security
from app.models import user as user_model
from app.schemas import auth_schemas
from app.services import user_service

logger = logging.getLogger(__name__)

def verify_google_id_token(token: str, db: Session) -> user_model.User:
    try:
        idinfo = id_token.verify_oauth2_token(
            token, google_requests.Request(), settings.GOOGLE_CLIENT_ID
        )
    except ValueError as e:
        # Invalid token
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid Google ID token: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    email = idinfo.get("email")
    google_id = idinfo.get("sub") # 'sub' is the standard field for Google ID
    name = idinfo.get("name")

    if not email or not google_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email or Google ID missing from token payload",
        )

    user = user_service.get_user_by_google_id(db, google_id)
    if user:
        if name and user.name != name:
            user.name = name
            db.commit()
            db.refresh(user)
        return user

    # Existing account registered with a password: link it
    user = user_service.get_user_by_email(db, email)
    if user:
        user.google_id = google_id
        if name:
            user.name = name
        db.commit()
        db.refresh(user)
        logger.info("Linked Google account to user %s", user.id)
        return user

    return user_service.create_user(db, name=name, email=email, google_id=google_id)

def register_user(db: Session, request: auth_schemas.RegisterRequest) -> user_model.User:
    if user_service.get_user_by_email(db, request.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
    return user_service.create_user(
        db,
        name=request.name.strip(),
        email=request.email,
        hashed_password=security.get_password_hash(request.password),
    )

def authenticate_user(db: Session, email: str, password: str) -> Optional[user_model.User]:
    user = user_service.get_user_by_email(db, email)
    if not user or not user.hashed_password:
        return None
    if not security.verify_password(password, user.hashed_password):
        return None
    return user

def get_current_user(token: str = Depends(security.oauth2_scheme), db: Session = Depends(get_db)) -> user_model.User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    token_data = security.verify_token(token, credentials_exception)

    user = user_service.get_user_by_email(db, token_data.email)
    if user is None:
        raise credentials_exception
    return user

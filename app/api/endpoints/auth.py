from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from datetime import timedelta

from app.services import auth_service
from app.core import security
from app.models import user as user_model
from app.schemas import auth_schemas
from app.api.dependencies import get_db

router = APIRouter()

def _token_for(user: user_model.User) -> dict:
    # The subject of the token is the user's email
    access_token_expires = timedelta(minutes=security.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = security.create_access_token(
        data={"sub": user.email}, expires_delta=access_token_expires
    )
    return {"access_token": access_token, "token_type": "bearer"}

@router.post("/login", response_model=auth_schemas.Token)
async def login_with_google(
    request: auth_schemas.GoogleLoginRequest,
    db: Session = Depends(get_db)
):
    user = auth_service.verify_google_id_token(token=request.token, db=db)
    return _token_for(user)

@router.post("/register", response_model=auth_schemas.Token, status_code=status.HTTP_201_CREATED)
async def register(
    request: auth_schemas.RegisterRequest,
    db: Session = Depends(get_db)
):
    user = auth_service.register_user(db=db, request=request)
    return _token_for(user)

@router.post("/token", response_model=auth_schemas.Token)
async def login_with_password(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    user = auth_service.authenticate_user(db, email=form_data.username, password=form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _token_for(user)

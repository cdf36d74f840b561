from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.services import auth_service, user_service
from app.models import user as user_model
from app.schemas import user_schemas
from app.api.dependencies import get_db

router = APIRouter()

@router.get("/users/me", response_model=user_schemas.UserRead)
async def read_users_me(
    current_user: user_model.User = Depends(auth_service.get_current_user)
):
    return current_user

@router.post("/update-user-role", response_model=user_schemas.RoleUpdateResponse)
async def update_user_role(
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    promoted = user_service.promote_to_admin(db, current_user)
    message = "User role updated to admin successfully" if promoted else "User is already an admin"
    return user_schemas.RoleUpdateResponse(success=True, message=message, role=current_user.role)

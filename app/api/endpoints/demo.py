from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.services import auth_service, demo_data_service
from app.models import user as user_model
from app.schemas import participant_schemas
from app.api.dependencies import get_db

router = APIRouter()

@router.post("/create-test-participants", response_model=participant_schemas.DemoParticipantsResponse)
async def create_test_participants_endpoint(
    request: participant_schemas.DemoParticipantsRequest,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    participants = demo_data_service.create_demo_participants(
        db=db, event_id=request.event_id, count=request.count, current_user=current_user
    )
    return participant_schemas.DemoParticipantsResponse(
        message=f"Created {len(participants)} test participants",
        participants=participants,
    )

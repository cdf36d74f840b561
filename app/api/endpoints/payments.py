from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.services import auth_service, payment_service
from app.models import user as user_model
from app.schemas import payment_schemas
from app.api.dependencies import get_db

router = APIRouter()

@router.post("/submit-payment", response_model=payment_schemas.PaymentResponse)
async def submit_payment_endpoint(
    payment_in: payment_schemas.PaymentSubmit,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    payment = payment_service.submit_payment(db=db, payment_in=payment_in, current_user=current_user)
    return payment_schemas.PaymentResponse(
        message="Payment submitted successfully",
        payment=payment_schemas.PaymentRead.model_validate(payment),
    )

@router.post("/verify-payment", response_model=payment_schemas.PaymentResponse)
async def verify_payment_endpoint(
    verify_in: payment_schemas.PaymentVerify,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    payment = payment_service.verify_payment(db=db, verify_in=verify_in, current_user=current_user)
    return payment_schemas.PaymentResponse(
        message=f"Payment {payment.status.value} successfully",
        payment=payment_schemas.PaymentRead.model_validate(payment),
    )

@router.get("/payments/mine", response_model=List[payment_schemas.PaymentRead])
async def list_my_payments_endpoint(
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return payment_service.list_user_payments(db=db, user_id=current_user.id)

"""
app/api/payments.py

Purpose: Payment endpoints

- PaymentIntent creation for the checkout page
- Recording a completed payment (grants the badge)
- Caller's payment history
"""

from fastapi import APIRouter, Depends

from app.api.deps import CurrentUser, get_current_user, get_database
from app.db.mongo import MealDatabase
from app.schemas.payment import (
    PaymentCreate,
    PaymentIntentRequest,
    PaymentIntentResponse,
    PaymentRecordResponse,
)
from app.services import payment_service
from app.services.payment_service import StripeGateway, get_payment_gateway
from utils.serialization_utils import serialize_docs

router = APIRouter()


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    body: PaymentIntentRequest,
    _: CurrentUser = Depends(get_current_user),
    gateway: StripeGateway = Depends(get_payment_gateway),
):
    client_secret = await payment_service.create_payment_intent(gateway, body.price)
    return PaymentIntentResponse(clientSecret=client_secret)


@router.post("/payments", response_model=PaymentRecordResponse)
async def record_payment(
    body: PaymentCreate,
    current_user: CurrentUser = Depends(get_current_user),
    database: MealDatabase = Depends(get_database),
    gateway: StripeGateway = Depends(get_payment_gateway),
):
    result, result2 = await payment_service.record_payment(
        database,
        gateway,
        email=current_user.email,
        amount=body.amount,
        badge=body.badge,
        transaction_id=body.transactionId,
    )
    return PaymentRecordResponse(
        result={"acknowledged": True, "insertedId": str(result.inserted_id)},
        result2={
            "acknowledged": True,
            "matchedCount": result2.matched_count,
            "modifiedCount": result2.modified_count,
        },
    )


@router.get("/payment/history")
async def payment_history(
    current_user: CurrentUser = Depends(get_current_user),
    database: MealDatabase = Depends(get_database),
):
    return serialize_docs(await payment_service.payment_history(database, current_user.email))

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional

from app.models.user import Badge


class PaymentIntentRequest(BaseModel):
    # Smallest currency unit (cents for usd)
    price: int = Field(..., gt=0)


class PaymentIntentResponse(BaseModel):
    clientSecret: str


class PaymentCreate(BaseModel):
    amount: int = Field(..., gt=0)
    badge: Badge
    transactionId: Optional[str] = None


class PaymentRecordResponse(BaseModel):
    result: Dict[str, Any]
    result2: Dict[str, Any]

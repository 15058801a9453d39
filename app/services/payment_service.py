"""
app/services/payment_service.py

Purpose: Payment bridge (Stripe)

- Creates PaymentIntents through the Stripe REST API
- Verifies a reported payment against the PaymentIntent before a badge
  is granted (VERIFY_PAYMENTS)
- Records the payment log and overwrites the user's badge
"""

import httpx
from datetime import datetime, timezone

from app.db.mongo import MealDatabase
from app.core.config import settings
from app.core.exceptions import (
    DuplicateActionError,
    ExternalServiceError,
    ValidationError,
)
from app.core.logging import get_logger, LogContext
from app.models.user import Badge
from utils.constants import MSG_PAYMENT_NOT_VERIFIED, MSG_PAYMENT_UNAVAILABLE
from typing import Optional, Dict, Any, List

logger = get_logger(__name__)


class StripeGateway:
    """Thin async client for the PaymentIntents endpoints"""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.secret_key = secret_key or settings.STRIPE_SK_KEY
        self.base_url = (base_url or settings.STRIPE_API_BASE).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.STRIPE_TIMEOUT_SECONDS,
            transport=transport,
        )

    def is_configured(self) -> bool:
        return bool(self.secret_key)

    async def _request(self, method: str, path: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.is_configured():
            logger.error("Stripe secret key is not configured")
            raise ExternalServiceError(MSG_PAYMENT_UNAVAILABLE)

        try:
            response = await self._client.request(
                method,
                path,
                data=data,
                auth=(self.secret_key, ""),
            )
        except httpx.TimeoutException:
            logger.error(f"Stripe API timeout: {method} {path}")
            raise ExternalServiceError(MSG_PAYMENT_UNAVAILABLE)
        except httpx.RequestError as e:
            logger.error(f"Stripe API request failed: {e}")
            raise ExternalServiceError(MSG_PAYMENT_UNAVAILABLE)

        if response.status_code != 200:
            try:
                error = response.json().get("error", {})
            except ValueError:
                error = {}
            logger.error(f"❌ Stripe API error: {response.status_code} - {error.get('message')}")
            raise ExternalServiceError(
                MSG_PAYMENT_UNAVAILABLE,
                details={"stripe_error": error.get("code") or error.get("type")}
            )

        return response.json()

    async def create_payment_intent(self, amount: int, currency: Optional[str] = None) -> Dict[str, Any]:
        """
        Creates a card PaymentIntent.

        Args:
            amount: Smallest currency unit (cents)
            currency: ISO code, defaults to PAYMENT_CURRENCY

        Returns:
            Stripe PaymentIntent object
        """
        intent = await self._request(
            "POST",
            "/payment_intents",
            data={
                "amount": amount,
                "currency": currency or settings.PAYMENT_CURRENCY,
                "payment_method_types[]": "card",
            },
        )
        logger.info(f"💳 PaymentIntent created: {intent.get('id')} for {amount}")
        return intent

    async def retrieve_payment_intent(self, intent_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/payment_intents/{intent_id}")

    async def close(self):
        await self._client.aclose()


_gateway: Optional[StripeGateway] = None


def get_payment_gateway() -> StripeGateway:
    """Get or create the global Stripe gateway."""
    global _gateway
    if _gateway is None:
        _gateway = StripeGateway()
    return _gateway


async def close_payment_gateway():
    global _gateway
    if _gateway is not None:
        await _gateway.close()
        _gateway = None


async def create_payment_intent(gateway: StripeGateway, amount: int) -> str:
    """
    Returns:
        The client secret the browser uses to confirm the card payment
    """
    intent = await gateway.create_payment_intent(amount)
    return intent["client_secret"]


async def verify_payment(gateway: StripeGateway, transaction_id: Optional[str], amount: int):
    """
    Confirms with Stripe that the reported PaymentIntent succeeded for this amount.

    Raises:
        ValidationError: If the intent is missing, unpaid or for another amount
    """
    if not transaction_id:
        raise ValidationError(MSG_PAYMENT_NOT_VERIFIED, details={"reason": "missing_transaction_id"})

    intent = await gateway.retrieve_payment_intent(transaction_id)

    if intent.get("status") != "succeeded":
        raise ValidationError(
            MSG_PAYMENT_NOT_VERIFIED,
            details={"reason": "not_succeeded", "status": intent.get("status")}
        )
    if intent.get("amount") != amount:
        raise ValidationError(MSG_PAYMENT_NOT_VERIFIED, details={"reason": "amount_mismatch"})


async def record_payment(
    database: MealDatabase,
    gateway: StripeGateway,
    email: str,
    amount: int,
    badge: Badge,
    transaction_id: Optional[str] = None,
    verify: Optional[bool] = None
):
    """
    Logs a completed payment and grants the purchased badge.

    The badge overwrite is last-write-wins; the payments collection is
    the only history.

    Returns:
        (insert result, user update result)
    """
    verify = settings.VERIFY_PAYMENTS if verify is None else verify

    with LogContext(email=email, badge=badge.value):
        if not badge.is_paid:
            raise ValidationError("Badge must be a paid tier", details={"badge": badge.value})

        if transaction_id and await database.payments.find_one({"transactionId": transaction_id}):
            raise DuplicateActionError("Payment already recorded")

        if verify:
            await verify_payment(gateway, transaction_id, amount)
        else:
            logger.warning("Recording payment without processor verification")

        payment = {
            "email": email,
            "amount": amount,
            "badge": badge.value,
            "verified": bool(verify),
            "createdAt": datetime.now(timezone.utc),
        }
        if transaction_id:
            payment["transactionId"] = transaction_id

        result = await database.payments.insert_one(payment)
        result2 = await database.users.update_one(
            {"email": email},
            {"$set": {"badge": badge.value}}
        )

        logger.info(f"Payment recorded, badge set to {badge.value}")
        return result, result2


async def payment_history(database: MealDatabase, email: str) -> List[Dict[str, Any]]:
    return await database.payments.find(
        {"email": email},
        sort=[("createdAt", -1)]
    ).to_list(length=None)

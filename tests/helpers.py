"""
Shared test helpers: identities, payloads and a fake Stripe API.
"""

import asyncio
from datetime import datetime, timezone
from urllib.parse import parse_qs

import httpx

from app.core.security import create_access_token

ADMIN = "admin@mealmate.io"
GOLD_USER = "gold@mealmate.io"
BRONZE_USER = "bronze@mealmate.io"


class FakeStripe:
    """
    httpx.MockTransport handler imitating the PaymentIntents endpoints.
    """

    def __init__(self):
        self.intents = {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path == "/v1/payment_intents":
            form = parse_qs(request.content.decode())
            intent_id = f"pi_test_{len(self.intents) + 1}"
            intent = {
                "id": intent_id,
                "object": "payment_intent",
                "amount": int(form["amount"][0]),
                "currency": form["currency"][0],
                "payment_method_types": form["payment_method_types[]"],
                "status": "requires_payment_method",
                "client_secret": f"{intent_id}_secret_abc",
            }
            self.intents[intent_id] = intent
            return httpx.Response(200, json=intent)

        if request.method == "GET" and path.startswith("/v1/payment_intents/"):
            intent = self.intents.get(path.rsplit("/", 1)[-1])
            if intent is None:
                return httpx.Response(
                    404,
                    json={"error": {"code": "resource_missing", "message": "No such payment_intent"}},
                )
            return httpx.Response(200, json=intent)

        return httpx.Response(404, json={"error": {"type": "invalid_request_error"}})

    def succeed(self, intent_id: str):
        self.intents[intent_id]["status"] = "succeeded"


def run(coro):
    """Runs a database coroutine from a synchronous test."""
    return asyncio.run(coro)


def auth_headers(email: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(email)}"}


def user_document(email: str, role: str = "member", badge: str = "Bronze") -> dict:
    return {
        "email": email,
        "username": email.split("@")[0],
        "role": role,
        "badge": badge,
        "createdAt": datetime.now(timezone.utc),
    }


def meal_payload(**overrides) -> dict:
    payload = {
        "title": "Chicken Biryani",
        "category": "Lunch",
        "price": 12,
        "image": "https://img.mealmate.io/biryani.jpg",
        "ingredients": ["rice", "chicken"],
        "description": "Slow cooked rice and chicken",
        "distributorName": "Admin",
        "email": ADMIN,
    }
    payload.update(overrides)
    return payload


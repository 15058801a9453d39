from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.core.config import settings
from app.core.exceptions import AuthenticationError
from app.core.security import create_access_token, decode_access_token
from helpers import ADMIN, BRONZE_USER, GOLD_USER, auth_headers, meal_payload, run


def test_issued_token_round_trips_email(client):
    response = client.post("/jwt", json={"email": GOLD_USER})
    assert response.status_code == 200

    token = response.json()["token"]
    assert decode_access_token(token) == GOLD_USER


def test_tokens_have_no_expiry_by_default():
    token = create_access_token(GOLD_USER)
    payload = jwt.decode(token, settings.ACCESS_TOKEN_SECRET, algorithms=["HS256"])
    assert "exp" not in payload


def test_expired_token_is_rejected():
    token = jwt.encode(
        {"email": GOLD_USER, "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        settings.ACCESS_TOKEN_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(AuthenticationError):
        decode_access_token(token)


def test_token_signed_with_another_secret_is_rejected():
    token = jwt.encode({"email": GOLD_USER}, "not-the-server-secret", algorithm="HS256")
    with pytest.raises(AuthenticationError):
        decode_access_token(token)


def test_missing_token_returns_401(client):
    response = client.get("/users/profile")
    assert response.status_code == 401
    assert response.json()["code"] == "AUTHENTICATION_FAILED"


def test_garbage_token_returns_401(client):
    response = client.get("/users/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_token_cookie_is_accepted(client):
    client.cookies.set("token", create_access_token(GOLD_USER))
    response = client.get("/users/admin")
    assert response.status_code == 200
    assert response.json() == {"admin": False}


def test_non_admin_cannot_create_meal_and_nothing_is_written(client, seeded_database):
    response = client.post("/meals", json=meal_payload(), headers=auth_headers(GOLD_USER))

    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"
    assert run(seeded_database.meals.count_documents({})) == 0


def test_non_admin_cannot_promote_users(client, seeded_database):
    response = client.put(f"/users/admin/{BRONZE_USER}", headers=auth_headers(GOLD_USER))

    assert response.status_code == 403
    user = run(seeded_database.users.find_one({"email": BRONZE_USER}))
    assert user["role"] == "member"


def test_unknown_user_is_rejected_by_admin_gate(client):
    response = client.get("/meals/admin", headers=auth_headers("ghost@mealmate.io"))
    assert response.status_code == 403


def test_unknown_user_is_rejected_by_tier_gate(client):
    response = client.get("/meals/request", headers=auth_headers("ghost@mealmate.io"))
    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"


def test_bronze_user_gets_payment_required(client):
    response = client.get("/meals/request", headers=auth_headers(BRONZE_USER))
    assert response.status_code == 402
    assert response.json()["code"] == "PAYMENT_REQUIRED"


def test_admin_passes_admin_gate(client):
    response = client.get("/meals/admin", headers=auth_headers(ADMIN))
    assert response.status_code == 200
    assert response.json() == {"meals": [], "mealsCount": 0}

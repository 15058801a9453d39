import asyncio

import pytest
from bson import ObjectId

from app.core.exceptions import DuplicateActionError, ResourceNotFoundError
from app.models.meal import PROMOTION_MARKER
from app.services import meal_service, promotion_service
from helpers import ADMIN, BRONZE_USER, GOLD_USER, auth_headers, meal_payload, run

THRESHOLD = 10


async def stage_meal(database, **overrides):
    return await meal_service.create_upcoming_meal(database, meal_payload(**overrides))


async def add_likes(database, meal_id, count):
    outcome = None
    for i in range(count):
        outcome = await promotion_service.like_upcoming_meal(
            database, str(meal_id), f"fan{i}@mealmate.io", threshold=THRESHOLD
        )
    return outcome


@pytest.mark.asyncio
async def test_nine_likes_stay_in_staging(database):
    meal_id = await stage_meal(database)

    outcome = await add_likes(database, meal_id, THRESHOLD - 1)

    assert outcome == {"likes": 9, "promoted": False, "mealId": meal_id}
    assert await database.upcoming_meals.count_documents({}) == 1
    assert await database.meals.count_documents({}) == 0


@pytest.mark.asyncio
async def test_tenth_like_promotes_with_same_id(database):
    meal_id = await stage_meal(database, title="Paneer Tikka")

    outcome = await add_likes(database, meal_id, THRESHOLD)

    assert outcome["promoted"] is True
    assert outcome["likes"] == THRESHOLD
    assert await database.upcoming_meals.find_one({"_id": meal_id}) is None

    meal = await database.meals.find_one({"_id": meal_id})
    assert meal["title"] == "Paneer Tikka"
    assert meal["likes"] == THRESHOLD
    assert len(meal["likedBy"]) == THRESHOLD
    assert PROMOTION_MARKER not in meal
    assert "publishedAt" in meal


@pytest.mark.asyncio
async def test_concurrent_threshold_likes_both_succeed(database, monkeypatch):
    meal_id = await stage_meal(database)
    await add_likes(database, meal_id, THRESHOLD - 1)

    original_add_like = promotion_service.add_like

    async def add_like_then_yield(*args, **kwargs):
        meal = await original_add_like(*args, **kwargs)
        # Both likes land before either request promotes
        await asyncio.sleep(0)
        return meal

    monkeypatch.setattr(promotion_service, "add_like", add_like_then_yield)

    outcomes = await asyncio.gather(
        promotion_service.like_upcoming_meal(database, str(meal_id), "late1@mealmate.io", threshold=THRESHOLD),
        promotion_service.like_upcoming_meal(database, str(meal_id), "late2@mealmate.io", threshold=THRESHOLD),
    )

    assert [o["promoted"] for o in outcomes] == [True, True]
    assert await database.upcoming_meals.count_documents({}) == 0
    meal = await database.meals.find_one({"_id": meal_id})
    assert meal["likes"] == THRESHOLD + 1
    assert meal["likedBy"][-2:] == ["late1@mealmate.io", "late2@mealmate.io"]


@pytest.mark.asyncio
async def test_promoting_already_promoted_meal_returns_its_id(database):
    meal_id = await stage_meal(database)
    await promotion_service.promote_upcoming_meal(database, meal_id)

    assert await promotion_service.promote_upcoming_meal(database, meal_id) == meal_id
    assert await database.meals.count_documents({"_id": meal_id}) == 1


@pytest.mark.asyncio
async def test_duplicate_upcoming_like_rejected(database):
    meal_id = await stage_meal(database)
    await promotion_service.like_upcoming_meal(database, str(meal_id), GOLD_USER)

    with pytest.raises(DuplicateActionError):
        await promotion_service.like_upcoming_meal(database, str(meal_id), GOLD_USER)

    staged = await database.upcoming_meals.find_one({"_id": meal_id})
    assert staged["likes"] == 1


@pytest.mark.asyncio
async def test_like_on_promoted_meal_is_404(database):
    meal_id = await stage_meal(database)
    await promotion_service.publish_upcoming_meal(database, str(meal_id))

    with pytest.raises(ResourceNotFoundError):
        await promotion_service.like_upcoming_meal(database, str(meal_id), GOLD_USER)


@pytest.mark.asyncio
async def test_publish_promotes_regardless_of_likes(database):
    meal_id = await stage_meal(database)

    promoted_id = await promotion_service.publish_upcoming_meal(database, str(meal_id))

    assert promoted_id == meal_id
    meal = await database.meals.find_one({"_id": meal_id})
    assert meal["likes"] == 0
    assert await database.upcoming_meals.count_documents({}) == 0


@pytest.mark.asyncio
async def test_publish_unknown_meal_is_404(database):
    with pytest.raises(ResourceNotFoundError):
        await promotion_service.publish_upcoming_meal(database, str(ObjectId()))

    with pytest.raises(ResourceNotFoundError):
        await promotion_service.publish_upcoming_meal(database, "garbage")


@pytest.mark.asyncio
async def test_resume_finishes_marked_promotion(database):
    meal_id = await stage_meal(database)
    await database.upcoming_meals.update_one({"_id": meal_id}, {"$set": {PROMOTION_MARKER: True}})

    completed = await promotion_service.resume_pending_promotions(database)

    assert completed == 1
    assert await database.upcoming_meals.count_documents({}) == 0
    assert await database.meals.count_documents({"_id": meal_id}) == 1


@pytest.mark.asyncio
async def test_resume_after_copy_leaves_one_catalog_meal(database):
    meal_id = await stage_meal(database)
    await database.upcoming_meals.update_one({"_id": meal_id}, {"$set": {PROMOTION_MARKER: True}})
    staged = await database.upcoming_meals.find_one({"_id": meal_id})
    # Interrupted after the catalog write but before the staging delete
    await database.meals.insert_one({k: v for k, v in staged.items() if k != PROMOTION_MARKER})

    await promotion_service.resume_pending_promotions(database)

    assert await database.meals.count_documents({"_id": meal_id}) == 1
    assert await database.upcoming_meals.count_documents({}) == 0


@pytest.mark.asyncio
async def test_resume_ignores_unmarked_meals(database):
    await stage_meal(database)

    assert await promotion_service.resume_pending_promotions(database) == 0
    assert await database.upcoming_meals.count_documents({}) == 1


# ============================================================
# HTTP
# ============================================================

def test_bronze_user_cannot_like_upcoming_meal(client, seeded_database):
    meal_id = run(stage_meal(seeded_database))

    response = client.put(f"/meals/upcoming/{meal_id}/like", headers=auth_headers(BRONZE_USER))

    assert response.status_code == 402
    assert run(seeded_database.upcoming_meals.find_one({"_id": meal_id}))["likes"] == 0


def test_paid_user_likes_upcoming_meal(client, seeded_database):
    meal_id = run(stage_meal(seeded_database))

    response = client.put(f"/meals/upcoming/{meal_id}/like", headers=auth_headers(GOLD_USER))

    assert response.status_code == 200
    assert response.json() == {"acknowledged": True, "likes": 1, "promoted": False}


def test_admin_publish_endpoint_moves_meal(client, seeded_database):
    meal_id = run(stage_meal(seeded_database))

    response = client.put(f"/meals/upcoming/{meal_id}/publish", headers=auth_headers(ADMIN))

    assert response.status_code == 200
    assert response.json()["insertedId"] == str(meal_id)
    assert client.get("/meals/upcoming").json() == []
    assert client.get(f"/meals/{meal_id}").status_code == 200


def test_admin_creates_and_reads_upcoming_meal(client):
    response = client.post("/meals/upcoming", json=meal_payload(title="Ramen"), headers=auth_headers(ADMIN))
    assert response.status_code == 200
    meal_id = response.json()["insertedId"]

    meal = client.get(f"/meals/upcoming/{meal_id}").json()
    assert meal["title"] == "Ramen"
    assert meal["likes"] == 0
    assert [m["_id"] for m in client.get("/meals/upcoming").json()] == [meal_id]
    # Staged meals are not in the catalog yet
    assert client.get(f"/meals/{meal_id}").status_code == 404


def test_non_admin_cannot_create_upcoming_meal(client, seeded_database):
    response = client.post("/meals/upcoming", json=meal_payload(), headers=auth_headers(GOLD_USER))

    assert response.status_code == 403
    assert run(seeded_database.upcoming_meals.count_documents({})) == 0


def test_get_upcoming_meal_with_bad_or_unknown_id_is_404(client):
    assert client.get("/meals/upcoming/not-an-object-id").status_code == 404

    response = client.get(f"/meals/upcoming/{ObjectId()}")
    assert response.status_code == 404
    assert response.json()["error"] == "Upcoming meal not found"


def test_admin_deletes_upcoming_meal(client, seeded_database):
    meal_id = run(stage_meal(seeded_database))

    response = client.delete(f"/meals/upcoming/{meal_id}", headers=auth_headers(ADMIN))

    assert response.json()["deletedCount"] == 1
    assert client.get(f"/meals/upcoming/{meal_id}").status_code == 404


def test_non_admin_cannot_delete_upcoming_meal(client, seeded_database):
    meal_id = run(stage_meal(seeded_database))

    response = client.delete(f"/meals/upcoming/{meal_id}", headers=auth_headers(GOLD_USER))

    assert response.status_code == 403
    assert run(seeded_database.upcoming_meals.count_documents({})) == 1


def test_delete_upcoming_meal_with_bad_id_is_404(client):
    response = client.delete("/meals/upcoming/garbage", headers=auth_headers(ADMIN))
    assert response.status_code == 404

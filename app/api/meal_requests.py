"""
app/api/meal_requests.py

Purpose: Meal request / serve endpoints

- Paid-tier users request meals and list their requests
- Admin serve dashboard and delivery
- Requester or admin cancels

Included before the meals router so /meals/request and /meals/serve
are not captured by /meals/{meal_id}.
"""

from fastapi import APIRouter, Depends

from app.api.deps import (
    CurrentUser,
    get_current_user,
    get_database,
    require_admin,
    require_paid_tier,
)
from app.db.mongo import MealDatabase
from app.schemas.meal_request import MealRequestCreate
from app.schemas.response import DeleteResult, InsertResult, UpdateResult
from app.services import request_service, user_service
from utils.serialization_utils import serialize_docs

router = APIRouter(prefix="/meals")


@router.get("/request")
async def my_requests(
    current_user: CurrentUser = Depends(require_paid_tier),
    database: MealDatabase = Depends(get_database),
):
    return serialize_docs(await request_service.list_user_requests(database, current_user.email))


@router.post("/request", response_model=InsertResult)
async def request_meal(
    body: MealRequestCreate,
    current_user: CurrentUser = Depends(require_paid_tier),
    database: MealDatabase = Depends(get_database),
):
    request_id = await request_service.create_request(
        database, current_user.email, body.mealId, body.username
    )
    return InsertResult(insertedId=str(request_id))


@router.delete("/request/{request_id}", response_model=DeleteResult)
async def cancel_request(
    request_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    database: MealDatabase = Depends(get_database),
):
    deleted = await request_service.cancel_request(
        database,
        request_id,
        current_user.email,
        is_admin=await user_service.is_admin(database, current_user.email),
    )
    return DeleteResult(deletedCount=deleted)


@router.get("/serve")
async def serve_queue(
    _: CurrentUser = Depends(require_admin),
    database: MealDatabase = Depends(get_database),
):
    return serialize_docs(await request_service.list_all_requests(database))


@router.put("/serve/{request_id}", response_model=UpdateResult)
async def serve_request(
    request_id: str,
    _: CurrentUser = Depends(require_admin),
    database: MealDatabase = Depends(get_database),
):
    matched, modified = await request_service.serve_request(database, request_id)
    return UpdateResult(matchedCount=matched, modifiedCount=modified)

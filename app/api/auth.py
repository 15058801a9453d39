"""
app/api/auth.py

Purpose: Access token issuance

- POST /jwt exchanges an email for a signed token
"""

from fastapi import APIRouter

from app.core.logging import get_logger
from app.core.security import create_access_token
from app.schemas.user import TokenRequest, TokenResponse

logger = get_logger(__name__)
router = APIRouter()


@router.post("/jwt", response_model=TokenResponse)
async def issue_token(body: TokenRequest):
    token = create_access_token(body.email)
    logger.debug("Access token issued", extra={"email": body.email})
    return TokenResponse(token=token)

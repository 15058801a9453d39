from pydantic import BaseModel
from typing import Optional, Any


class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    error: str
    code: str
    details: Optional[Any] = None


class InsertResult(BaseModel):
    acknowledged: bool = True
    insertedId: str


class UpdateResult(BaseModel):
    acknowledged: bool = True
    matchedCount: int
    modifiedCount: int


class DeleteResult(BaseModel):
    acknowledged: bool = True
    deletedCount: int

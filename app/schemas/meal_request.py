from pydantic import BaseModel, Field
from typing import Optional


class MealRequestCreate(BaseModel):
    mealId: str = Field(..., min_length=1)
    username: Optional[str] = None

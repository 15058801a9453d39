"""
app/schemas/meal.py

Purpose: Meal request bodies and list responses
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class MealCreate(BaseModel):
    """
    Body for POST /meals and POST /meals/upcoming.

    Extra descriptive keys sent by the dashboard are stored as-is.
    """
    model_config = ConfigDict(extra="allow")

    title: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    image: Optional[str] = None
    ingredients: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    rating: float = Field(default=0, ge=0, le=5)
    postTime: Optional[str] = None
    distributorName: Optional[str] = None
    email: Optional[str] = None


class MealUpdate(BaseModel):
    title: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    image: Optional[str] = None
    ingredients: Optional[List[str]] = None
    description: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    postTime: Optional[str] = None
    distributorName: Optional[str] = None


class ReviewIn(BaseModel):
    review: str = Field(..., min_length=1)


class MealListResponse(BaseModel):
    meals: List[Dict[str, Any]]
    mealsCount: int

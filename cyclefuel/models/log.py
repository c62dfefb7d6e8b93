"""
Daily food log model.
"""
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field


class DailyLogEntry(BaseModel):
    """
    One logged food. ``servings`` is a multiplier of the per-100g catalog
    values.
    """
    id: str
    user_id: str
    food_id: str
    date: date
    servings: float = Field(1.0, gt=0)
    meal_type: Optional[str] = Field(None, pattern="^(BREAKFAST|LUNCH|DINNER|SNACK)$")
    logged_at: Optional[datetime] = None

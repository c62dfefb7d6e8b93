"""
Engagement statistics model.
"""
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field


class Achievement(BaseModel):
    id: str
    name: str
    category: str
    rarity: str = Field("COMMON", pattern="^(COMMON|RARE|EPIC|LEGENDARY)$")
    xp: int = Field(0, ge=0)
    unlocked_on: date


class UserStats(BaseModel):
    """
    Per-user engagement counters. ``last_log_date`` drives the activity
    gap check and the streak logic.
    """
    user_id: str
    last_log_date: Optional[date] = None
    current_streak: int = 0
    longest_streak: int = 0
    total_logs: int = 0
    xp: int = 0
    level: int = 1
    achievements: List[Achievement] = Field(default_factory=list)

    def has_achievement(self, achievement_id: str) -> bool:
        return any(a.id == achievement_id for a in self.achievements)

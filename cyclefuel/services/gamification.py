"""
Streaks, XP and achievements driven by food logging.
"""
from datetime import timedelta
from typing import Optional

from aws_lambda_powertools import Logger

from cyclefuel.models.events import AchievementUnlocked, EventType, FoodLogged, GoalReached
from cyclefuel.models.stats import Achievement, UserStats
from cyclefuel.repositories.memory import StatsStore
from cyclefuel.services.constants import (
    FIRST_LOG_XP,
    GOAL_REACHED_XP,
    LOG_XP,
    STREAK_MILESTONES,
    XP_PER_LEVEL,
)
from cyclefuel.services.events import EventBus

logger = Logger()

def level_for(xp: int) -> int:
    return xp // XP_PER_LEVEL + 1

def streak_rarity(days: int) -> str:
    if days >= 30:
        return "EPIC"
    if days >= 14:
        return "RARE"
    return "COMMON"

class GamificationListener:
    """Keeps UserStats current and announces unlocked achievements."""

    def __init__(self, stats: StatsStore, bus: EventBus):
        self.stats = stats
        self.bus = bus

    def register(self) -> None:
        self.bus.subscribe(EventType.FOOD_LOGGED, self.on_food_logged)
        self.bus.subscribe(EventType.GOAL_REACHED, self.on_goal_reached)

    def _load(self, user_id: str) -> UserStats:
        return self.stats.get(user_id) or UserStats(user_id=user_id)

    async def on_food_logged(self, event: FoodLogged) -> UserStats:
        stats = self._load(event.user_id)
        today = event.occurred_at.date()

        if stats.last_log_date == today:
            streak = max(stats.current_streak, 1)
        elif stats.last_log_date == today - timedelta(days=1):
            streak = stats.current_streak + 1
        else:
            streak = 1

        xp = stats.xp + (FIRST_LOG_XP if stats.total_logs == 0 else LOG_XP)
        stats = stats.model_copy(update={
            "last_log_date": today,
            "current_streak": streak,
            "longest_streak": max(stats.longest_streak, streak),
            "total_logs": stats.total_logs + 1,
            "xp": xp,
            "level": level_for(xp)
        })

        achievement = self._streak_achievement(stats)
        if achievement is not None:
            stats = stats.model_copy(update={
                "achievements": stats.achievements + [achievement],
                "xp": stats.xp + achievement.xp,
                "level": level_for(stats.xp + achievement.xp)
            })
        self.stats.save(stats)

        logger.info("Updated stats from food log", extra={
            "user_id": event.user_id,
            "streak": stats.current_streak,
            "xp": stats.xp,
            "level": stats.level
        })

        if achievement is not None:
            await self.bus.publish(AchievementUnlocked(
                user_id=event.user_id,
                achievement_id=achievement.id,
                name=achievement.name,
                category=achievement.category,
                rarity=achievement.rarity,
                xp_earned=achievement.xp
            ))
        return stats

    def _streak_achievement(self, stats: UserStats) -> Optional[Achievement]:
        days = stats.current_streak
        achievement_id = f"streak_{days}"
        if days not in STREAK_MILESTONES or stats.has_achievement(achievement_id):
            return None
        return Achievement(
            id=achievement_id,
            name=f"{days}-Day Streak",
            category="STREAK",
            rarity=streak_rarity(days),
            xp=days * 10,
            unlocked_on=stats.last_log_date
        )

    async def on_goal_reached(self, event: GoalReached) -> UserStats:
        stats = self._load(event.user_id)
        xp = stats.xp + GOAL_REACHED_XP
        stats = stats.model_copy(update={"xp": xp, "level": level_for(xp)})
        self.stats.save(stats)
        logger.info("Awarded goal XP", extra={
            "user_id": event.user_id,
            "goal": event.goal,
            "xp": xp
        })
        return stats

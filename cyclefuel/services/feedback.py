"""
Recording of recommendation feedback and analytics over it.

Typical usage:
    service = FeedbackService(feedback_store, preference_store, bus)
    await service.record_feedback(user_id, tracking_id, food_id, "ACCEPTED")
    analysis = service.analyze_feedback(user_id)
"""
from collections import Counter
from datetime import datetime, timezone
from typing import Callable, List, Optional, Union

from aws_lambda_powertools import Logger

from cyclefuel.models.events import RecommendationFeedback
from cyclefuel.models.feedback import FeedbackAnalysis, FeedbackReason, FeedbackRecord
from cyclefuel.models.preference import FeedbackAction, UserFoodPreference
from cyclefuel.repositories.memory import FeedbackStore, PreferenceStore
from cyclefuel.services.events import EventBus
from cyclefuel.services.exceptions import InvalidInputError

logger = Logger()

ANALYSIS_WINDOW = 100

IMPROVEMENT_TIPS = {
    FeedbackReason.TOO_EXPENSIVE: "We'll prioritize more budget-friendly options in future recommendations.",
    FeedbackReason.NOT_AVAILABLE: "Consider updating your preferred stores in settings to get more available options.",
    FeedbackReason.TOO_COMPLEX: "We'll focus on simpler, quicker meal options for you.",
    FeedbackReason.DONT_LIKE_TASTE: "Taste preferences updated. We'll avoid similar foods in the future.",
}

def _parse_action(action: Union[str, FeedbackAction]) -> FeedbackAction:
    if isinstance(action, FeedbackAction):
        return action
    try:
        return FeedbackAction(str(action).upper())
    except ValueError:
        raise InvalidInputError(f"Unknown feedback action: {action}")

def _parse_reason(reason: Optional[Union[str, FeedbackReason]]) -> Optional[FeedbackReason]:
    if reason is None:
        return None
    try:
        return FeedbackReason(reason)
    except ValueError:
        raise InvalidInputError(f"Unknown feedback reason: {reason}")

def _rate(pref: UserFoodPreference) -> float:
    total = pref.accept_count + pref.reject_count
    return pref.accept_count / total if total else 0.0

class FeedbackService:
    """Writes feedback records and publishes them for the preference updater."""

    def __init__(
        self,
        feedback: FeedbackStore,
        preferences: PreferenceStore,
        bus: EventBus,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    ):
        self.feedback = feedback
        self.preferences = preferences
        self.bus = bus
        self.clock = clock

    async def record_feedback(
        self,
        user_id: str,
        tracking_id: str,
        food_id: str,
        action: Union[str, FeedbackAction],
        reason: Optional[Union[str, FeedbackReason]] = None
    ) -> FeedbackRecord:
        """
        Store a feedback record, then publish it.

        Args:
            user_id: User giving feedback
            tracking_id: Tracking id of the suggestion being rated
            food_id: Suggested food
            action: ACCEPTED, REJECTED or SAVED (case-insensitive)
            reason: Optional FeedbackReason value

        Returns:
            The stored record

        Raises:
            InvalidInputError: If action or reason is not recognized
        """
        record = FeedbackRecord(
            user_id=user_id,
            tracking_id=tracking_id,
            food_id=food_id,
            action=_parse_action(action),
            reason=_parse_reason(reason),
            created_at=self.clock()
        )
        self.feedback.add(record)
        logger.info("Feedback recorded", extra={
            "user_id": user_id,
            "tracking_id": tracking_id,
            "food_id": food_id,
            "action": record.action.value,
            "reason": record.reason.value if record.reason else None
        })

        await self.bus.publish(RecommendationFeedback(
            user_id=user_id,
            tracking_id=tracking_id,
            food_id=food_id,
            action=record.action,
            reason=record.reason,
            occurred_at=record.created_at
        ))
        return record

    def analyze_feedback(self, user_id: str) -> FeedbackAnalysis:
        """
        Summarize the user's last 100 feedback records and preference state.
        """
        records = self.feedback.recent(user_id, limit=ANALYSIS_WINDOW)
        total = len(records)
        accepted = sum(1 for r in records if r.action == FeedbackAction.ACCEPTED)
        acceptance_rate = accepted / total if total else 0.0

        reasons = Counter(
            r.reason for r in records
            if r.action == FeedbackAction.REJECTED and r.reason is not None
        )
        top_reasons = [
            {"reason": reason.value, "count": count}
            for reason, count in reasons.most_common(3)
        ]

        rated = [
            {"food_id": p.food_id, "acceptance_rate": _rate(p)}
            for p in self.preferences.list(user_id)
            if p.accept_count > 0
        ]
        most_accepted = sorted(
            (f for f in rated if f["acceptance_rate"] > 0.7),
            key=lambda f: f["acceptance_rate"], reverse=True
        )[:5]
        least_accepted = sorted(
            (f for f in rated if f["acceptance_rate"] < 0.3),
            key=lambda f: f["acceptance_rate"]
        )[:5]

        return FeedbackAnalysis(
            total_feedback=total,
            acceptance_rate=acceptance_rate,
            top_rejection_reasons=top_reasons,
            most_accepted_foods=most_accepted,
            least_accepted_foods=least_accepted,
            improvement_suggestions=self._improvement_tips(acceptance_rate, reasons.most_common(3))
        )

    @staticmethod
    def _improvement_tips(acceptance_rate: float, top_reasons) -> List[str]:
        tips = []
        if acceptance_rate < 0.3:
            tips.append(
                "Your acceptance rate is low. We're learning your preferences - keep "
                "giving feedback to improve recommendations!"
            )
        elif acceptance_rate > 0.6:
            tips.append("Great! Our recommendations match your preferences well. Keep it up!")

        for reason, _ in top_reasons:
            if reason in IMPROVEMENT_TIPS:
                tips.append(IMPROVEMENT_TIPS[reason])

        if not tips:
            tips.append(
                "Keep logging and giving feedback - your recommendations will get "
                "better every day!"
            )
        return tips

    def foods_to_avoid(self, user_id: str) -> List[str]:
        """Foods rejected more than twice and in over 70% of reactions."""
        return [
            p.food_id for p in self.preferences.list(user_id)
            if p.reject_count > 2 and 1 - _rate(p) > 0.7
        ]

    def recommended_foods(self, user_id: str) -> List[str]:
        """Foods accepted more than once and in over 60% of reactions."""
        return [
            p.food_id for p in self.preferences.list(user_id)
            if p.accept_count > 1 and _rate(p) > 0.6
        ]

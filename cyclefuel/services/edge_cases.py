"""
Edge case detection for recommendation requests.

Each check inspects one aspect of the user's data and returns at most one
warning. ``check_all`` runs them in a fixed order and keeps going when a
single check fails.

Typical usage:
    detector = EdgeCaseDetector(profiles, cycles, stats)
    warnings = detector.check_all(user_id, date.today())
"""
from datetime import date
from typing import Callable, List, Optional

from aws_lambda_powertools import Logger

from cyclefuel.models.cycle import CycleHealthStatus, CycleRecord
from cyclefuel.models.user import UserProfile
from cyclefuel.models.warning import EdgeCaseWarning, SuggestedAction, WarningSeverity
from cyclefuel.repositories.memory import CycleStore, ProfileStore, StatsStore
from cyclefuel.services.cycle import assess_health, days_since_start, is_stale

logger = Logger()

CYCLE_LINK = "/menstrual-cycle"
FOOD_LOG_LINK = "/food-log"

NO_CYCLE_MESSAGE = (
    "You haven't logged your menstrual cycle yet. Add cycle data to unlock "
    "personalized recommendations based on your hormonal phases."
)

class EdgeCaseDetector:
    """Runs the edge case checks for one user."""

    def __init__(self, profiles: ProfileStore, cycles: CycleStore, stats: StatsStore):
        self.profiles = profiles
        self.cycles = cycles
        self.stats = stats

    def check_profile_completeness(self, profile: UserProfile) -> Optional[EdgeCaseWarning]:
        missing = []
        if not profile.weight:
            missing.append("weight")
        if not profile.height:
            missing.append("height")
        if not profile.activity_level:
            missing.append("activity level")

        if not missing:
            return None
        return EdgeCaseWarning(
            severity=WarningSeverity.WARNING,
            message=(
                f"Complete your profile (missing: {', '.join(missing)}) "
                "for more accurate nutrition recommendations."
            ),
            action=SuggestedAction(text="Complete Profile", link="/profile")
        )

    def check_cycle_availability(self, cycle: Optional[CycleRecord]) -> Optional[EdgeCaseWarning]:
        if cycle is not None:
            return None
        return EdgeCaseWarning(
            severity=WarningSeverity.INFO,
            message=NO_CYCLE_MESSAGE,
            action=SuggestedAction(text="Add Cycle Data", link=CYCLE_LINK)
        )

    def check_cycle_freshness(self, cycle: CycleRecord, today: date) -> Optional[EdgeCaseWarning]:
        """Warn when two or more full cycles have elapsed since the last record."""
        if days_since_start(cycle, today) // cycle.cycle_length < 2:
            return None
        return EdgeCaseWarning(
            severity=WarningSeverity.WARNING,
            message=(
                "Your cycle data hasn't been updated in over 2 cycles. Update your "
                "cycle information for more accurate recommendations."
            ),
            action=SuggestedAction(text="Update Cycle", link=CYCLE_LINK)
        )

    def check_cycle_abnormality(self, cycle: CycleRecord) -> Optional[EdgeCaseWarning]:
        health = assess_health(cycle)
        if health.status == CycleHealthStatus.NORMAL:
            return None
        message = health.message
        if health.should_consult_doctor:
            message += " If this persists, consider consulting a healthcare provider."
        return EdgeCaseWarning(severity=WarningSeverity.HEALTH_NOTE, message=message)

    def check_life_stage(self, cycle: CycleRecord, today: date) -> Optional[EdgeCaseWarning]:
        """Suggest switching modes when the period is long overdue."""
        if not is_stale(cycle, today):
            return None
        return EdgeCaseWarning(
            severity=WarningSeverity.INFO,
            message=(
                "It's been longer than usual since your last period. If you're pregnant "
                "or experiencing cycle changes, you can switch to non-cycle-based "
                "recommendations."
            ),
            action=SuggestedAction(text="Switch Mode", link="/settings")
        )

    def check_activity_gap(self, user_id: str, today: date) -> Optional[EdgeCaseWarning]:
        stats = self.stats.get(user_id)
        if stats is None or stats.last_log_date is None:
            return EdgeCaseWarning(
                severity=WarningSeverity.INFO,
                message="Welcome back! Log a meal to continue tracking your nutrition.",
                action=SuggestedAction(text="Log a Meal", link=FOOD_LOG_LINK)
            )

        days = (today - stats.last_log_date).days
        if 7 < days < 30:
            return EdgeCaseWarning(
                severity=WarningSeverity.INFO,
                message=(
                    "It's been a while since your last log. Don't worry - your data "
                    "is still here. Pick up where you left off!"
                ),
                action=SuggestedAction(text="Continue Tracking", link=FOOD_LOG_LINK)
            )
        if days >= 30:
            return EdgeCaseWarning(
                severity=WarningSeverity.WARNING,
                message=(
                    "Your data is over a month old. Recommendations may be less "
                    "accurate. Start logging again to get fresh insights."
                ),
                action=SuggestedAction(text="Start Fresh", link=FOOD_LOG_LINK)
            )
        return None

    def _run_check(
        self,
        name: str,
        user_id: str,
        check: Callable[[], Optional[EdgeCaseWarning]],
        warnings: List[EdgeCaseWarning]
    ) -> None:
        try:
            warning = check()
        except Exception:
            logger.exception("Edge case check failed", extra={
                "user_id": user_id,
                "check": name
            })
            warning = EdgeCaseWarning(
                severity=WarningSeverity.HEALTH_NOTE,
                message=f"We couldn't complete the {name.replace('_', ' ')} check. "
                        "Recommendations may be less accurate."
            )
        if warning is not None:
            warnings.append(warning)

    def check_all(self, user_id: str, today: Optional[date] = None) -> List[EdgeCaseWarning]:
        """
        Run every check in order for a user.

        Without cycle data only the profile check runs before the
        availability warning is returned.
        A failing check is logged and reported as a HEALTH_NOTE.

        Args:
            user_id: User to check
            today: Reference date, defaults to today

        Returns:
            Ordered warnings, empty if the user does not exist
        """
        today = today or date.today()
        try:
            profile = self.profiles.get(user_id)
        except Exception:
            logger.exception("Failed to load profile for edge case checks", extra={"user_id": user_id})
            return []
        if profile is None:
            logger.info("Skipping edge case checks for unknown user", extra={"user_id": user_id})
            return []

        warnings: List[EdgeCaseWarning] = []
        self._run_check("profile", user_id,
                        lambda: self.check_profile_completeness(profile), warnings)

        try:
            cycle = self.cycles.latest(user_id)
        except Exception:
            logger.exception("Failed to load cycle for edge case checks", extra={"user_id": user_id})
            cycle = None
        availability = self.check_cycle_availability(cycle)
        if availability is not None:
            warnings.append(availability)
            logger.info("No cycle data, skipping remaining checks", extra={"user_id": user_id})
            return warnings

        self._run_check("cycle_freshness", user_id,
                        lambda: self.check_cycle_freshness(cycle, today), warnings)
        self._run_check("cycle_abnormality", user_id,
                        lambda: self.check_cycle_abnormality(cycle), warnings)
        self._run_check("life_stage", user_id,
                        lambda: self.check_life_stage(cycle, today), warnings)

        self._run_check("activity", user_id,
                        lambda: self.check_activity_gap(user_id, today), warnings)

        logger.info("Edge case checks complete", extra={
            "user_id": user_id,
            "warning_count": len(warnings)
        })
        return warnings

"""
Notification listener. Delivery is delegated to a sink; the default sink
only logs.
"""
from typing import Protocol

from aws_lambda_powertools import Logger

from cyclefuel.models.cycle import CyclePhase
from cyclefuel.models.events import AchievementUnlocked, CyclePhaseChanged, EventType
from cyclefuel.services.events import EventBus

logger = Logger()

PHASE_MESSAGES = {
    CyclePhase.MENSTRUAL: "Your period has started. Focus on iron-rich foods and rest.",
    CyclePhase.FOLLICULAR: "Energy is rising! A great time for new challenges.",
    CyclePhase.OVULATION: "You're at peak energy. Make the most of it!",
    CyclePhase.EARLY_LUTEAL: "Metabolism is increasing. Add protein and healthy fats.",
    CyclePhase.LATE_LUTEAL: "PMS may appear. Prioritize magnesium and self-care.",
}

class NotificationSink(Protocol):
    def send(self, user_id: str, title: str, body: str) -> None: ...

class LoggingNotificationSink:
    def send(self, user_id: str, title: str, body: str) -> None:
        logger.info("Notification", extra={
            "user_id": user_id,
            "title": title,
            "body": body
        })

class NotificationListener:
    def __init__(self, sink: NotificationSink = None):
        self.sink = sink or LoggingNotificationSink()

    def register(self, bus: EventBus) -> None:
        bus.subscribe(EventType.ACHIEVEMENT_UNLOCKED, self.on_achievement_unlocked)
        bus.subscribe(EventType.CYCLE_PHASE_CHANGED, self.on_phase_changed)

    def on_achievement_unlocked(self, event: AchievementUnlocked) -> None:
        self.sink.send(
            event.user_id,
            "Achievement unlocked!",
            f"{event.name} (+{event.xp_earned} XP)"
        )

    def on_phase_changed(self, event: CyclePhaseChanged) -> None:
        self.sink.send(
            event.user_id,
            f"Day {event.day_in_cycle}: {event.new_phase.value.replace('_', ' ').title()} phase",
            PHASE_MESSAGES[event.new_phase]
        )

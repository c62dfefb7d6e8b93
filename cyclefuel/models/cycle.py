"""
Cycle model definitions for menstrual cycle records and derived phases.
"""
from enum import Enum
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class CyclePhase(str, Enum):
    """
    Five-phase model of a menstrual cycle.
    """
    MENSTRUAL = "MENSTRUAL"
    FOLLICULAR = "FOLLICULAR"
    OVULATION = "OVULATION"
    EARLY_LUTEAL = "EARLY_LUTEAL"
    LATE_LUTEAL = "LATE_LUTEAL"


class CycleHealthStatus(str, Enum):
    NORMAL = "NORMAL"
    SHORT = "SHORT"
    LONG = "LONG"
    IRREGULAR = "IRREGULAR"


class CycleRecord(BaseModel):
    """
    A logged cycle anchor: the day a period started plus the user's typical
    cycle and period lengths. Immutable once stored.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    start_date: date
    cycle_length: int = Field(28, gt=0)
    period_length: int = Field(5, gt=0)

    @model_validator(mode="after")
    def check_lengths(self) -> "CycleRecord":
        if self.period_length >= self.cycle_length:
            raise ValueError(
                f"period_length ({self.period_length}) must be shorter than "
                f"cycle_length ({self.cycle_length})"
            )
        return self


class CycleHealth(BaseModel):
    """Result of a rule-based cycle health assessment."""
    status: CycleHealthStatus
    message: Optional[str] = None
    should_consult_doctor: bool = False


class CycleSummary(BaseModel):
    """
    Derived view of a cycle at a reference date.
    """
    cycle_id: str
    phase: CyclePhase
    day_in_cycle: int
    next_period: date
    ovulation_date: date
    in_fertile_window: bool
    is_stale: bool
    health: CycleHealth
    advice: str
    expected_symptoms: List[str]

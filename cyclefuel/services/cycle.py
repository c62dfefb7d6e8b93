"""
Service module for menstrual cycle calculations and predictions.

All functions are pure over a CycleRecord and a reference date; the phase
is always derived, never stored.

Typical usage:
    cycle = create_cycle(store, user_id, start_date=date(2024, 1, 1))
    phase = current_phase(cycle, date.today())
    summary = summarize_cycle(cycle, date.today())
"""
import uuid
from typing import Dict, List, Optional
from datetime import date, timedelta

from aws_lambda_powertools import Logger
from pydantic import ValidationError

from cyclefuel.models.cycle import (
    CycleHealth,
    CycleHealthStatus,
    CyclePhase,
    CycleRecord,
    CycleSummary,
)
from cyclefuel.services.constants import (
    EXPECTED_SYMPTOMS,
    LUTEAL_LENGTH,
    NORMAL_CYCLE_RANGE,
    NORMAL_PERIOD_RANGE,
    OVULATION_WINDOW,
    PHASE_ADVICE,
    PHASE_NUTRIENT_MULTIPLIERS,
)
from cyclefuel.services.exceptions import InvalidInputError

logger = Logger()

def days_since_start(cycle: CycleRecord, reference_date: date) -> int:
    return (reference_date - cycle.start_date).days

def phase_for_day(cycle_length: int, period_length: int, day: int) -> CyclePhase:
    """
    Map a 1-based cycle day to its phase.

    Boundaries are checked in order, so the menstrual window wins over
    the follicular window, which wins over the ovulation window.

    Args:
        cycle_length: Cycle length in days
        period_length: Period length in days
        day: Day in cycle, 1..cycle_length

    Returns:
        Phase the day falls in
    """
    ovulation_day = cycle_length - LUTEAL_LENGTH
    if day <= period_length:
        return CyclePhase.MENSTRUAL
    if day <= int(cycle_length * 0.4):
        return CyclePhase.FOLLICULAR
    if abs(day - ovulation_day) <= OVULATION_WINDOW:
        return CyclePhase.OVULATION
    if day <= int(cycle_length * 0.75):
        return CyclePhase.EARLY_LUTEAL
    return CyclePhase.LATE_LUTEAL

def day_in_cycle(cycle: CycleRecord, reference_date: date) -> int:
    """
    Calculate the 1-based day of the current repetition of the cycle.

    Python's floor modulo keeps the result in 1..cycle_length even when
    the reference date precedes the start date.

    Example:
        >>> cycle = CycleRecord(id="c1", user_id="u1", start_date=date(2024, 1, 1))
        >>> day_in_cycle(cycle, date(2024, 1, 29))
        1
    """
    return days_since_start(cycle, reference_date) % cycle.cycle_length + 1

def current_phase(cycle: CycleRecord, reference_date: date) -> CyclePhase:
    """Get the phase of the cycle on the reference date."""
    return phase_for_day(
        cycle.cycle_length,
        cycle.period_length,
        day_in_cycle(cycle, reference_date)
    )

def predict_next_period(cycle: CycleRecord) -> date:
    """Next period start, one cycle length after the recorded start."""
    return cycle.start_date + timedelta(days=cycle.cycle_length)

def predict_ovulation(cycle: CycleRecord) -> date:
    """Ovulation falls a fixed luteal length before the next period."""
    return cycle.start_date + timedelta(days=cycle.cycle_length - LUTEAL_LENGTH)

def is_in_fertile_window(cycle: CycleRecord, reference_date: date) -> bool:
    return current_phase(cycle, reference_date) == CyclePhase.OVULATION

def is_stale(cycle: CycleRecord, reference_date: date) -> bool:
    """Cycle data is stale once more than two cycles have elapsed."""
    return days_since_start(cycle, reference_date) > cycle.cycle_length * 2

def assess_health(cycle: CycleRecord) -> CycleHealth:
    """
    Rule-based normality check of cycle and period lengths.

    Args:
        cycle: Cycle record to assess

    Returns:
        CycleHealth with status, explanatory message and whether the user
        should consult a doctor
    """
    min_cycle, max_cycle = NORMAL_CYCLE_RANGE
    min_period, max_period = NORMAL_PERIOD_RANGE

    if cycle.cycle_length < min_cycle:
        return CycleHealth(
            status=CycleHealthStatus.SHORT,
            message=(
                f"Your cycle length ({cycle.cycle_length} days) is shorter than typical. "
                "This could indicate hormonal imbalance."
            ),
            should_consult_doctor=True
        )

    if cycle.cycle_length > max_cycle:
        return CycleHealth(
            status=CycleHealthStatus.LONG,
            message=(
                f"Your cycle length ({cycle.cycle_length} days) is longer than typical. "
                "Consider tracking for 3 cycles to identify patterns."
            ),
            should_consult_doctor=cycle.cycle_length > 40
        )

    if cycle.period_length < min_period or cycle.period_length > max_period:
        return CycleHealth(
            status=CycleHealthStatus.IRREGULAR,
            message=(
                f"Your period length ({cycle.period_length} days) is outside normal range. "
                "This is common but worth monitoring."
            ),
            should_consult_doctor=cycle.period_length > 8
        )

    return CycleHealth(status=CycleHealthStatus.NORMAL)

def nutrient_multipliers(phase: CyclePhase) -> Dict[str, float]:
    return dict(PHASE_NUTRIENT_MULTIPLIERS[phase])

def phase_advice(cycle: CycleRecord, reference_date: date) -> str:
    phase = current_phase(cycle, reference_date)
    return PHASE_ADVICE[phase].format(day=day_in_cycle(cycle, reference_date))

def expected_symptoms(phase: CyclePhase) -> List[str]:
    return list(EXPECTED_SYMPTOMS[phase])

def summarize_cycle(cycle: CycleRecord, reference_date: date) -> CycleSummary:
    """
    Build the derived view of a cycle used by the current-phase endpoint.

    Args:
        cycle: Cycle record
        reference_date: Date to evaluate the cycle at

    Returns:
        CycleSummary with phase, day, predictions, health and advice
    """
    phase = current_phase(cycle, reference_date)
    return CycleSummary(
        cycle_id=cycle.id,
        phase=phase,
        day_in_cycle=day_in_cycle(cycle, reference_date),
        next_period=predict_next_period(cycle),
        ovulation_date=predict_ovulation(cycle),
        in_fertile_window=phase == CyclePhase.OVULATION,
        is_stale=is_stale(cycle, reference_date),
        health=assess_health(cycle),
        advice=phase_advice(cycle, reference_date),
        expected_symptoms=expected_symptoms(phase)
    )

def build_cycle(
    user_id: str,
    start_date: date,
    cycle_length: Optional[int] = None,
    period_length: Optional[int] = None,
    cycle_id: Optional[str] = None
) -> CycleRecord:
    """
    Validate inputs and build a new CycleRecord.

    Missing lengths default to a 28 day cycle with a 5 day period.

    Raises:
        InvalidInputError: If lengths are non-positive or the period is
            not shorter than the cycle
    """
    try:
        return CycleRecord(
            id=cycle_id or str(uuid.uuid4()),
            user_id=user_id,
            start_date=start_date,
            cycle_length=28 if cycle_length is None else cycle_length,
            period_length=5 if period_length is None else period_length
        )
    except ValidationError as e:
        logger.warning("Rejected cycle record", extra={
            "user_id": user_id,
            "errors": e.errors(include_url=False, include_context=False)
        })
        raise InvalidInputError(f"Invalid cycle data: {e.errors()[0]['msg']}") from e

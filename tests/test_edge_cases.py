"""
Tests for edge case detection.
"""
from datetime import date, timedelta
from unittest.mock import patch

import pytest

from cyclefuel.models.cycle import CycleRecord
from cyclefuel.models.stats import UserStats
from cyclefuel.models.user import UserProfile
from cyclefuel.models.warning import WarningSeverity
from cyclefuel.services.edge_cases import EdgeCaseDetector

TODAY = date(2024, 3, 10)

@pytest.fixture
def detector(stores):
    return EdgeCaseDetector(stores.profiles, stores.cycles, stores.stats)

def add_cycle(stores, start, length=28, period=5):
    stores.cycles.add(CycleRecord(id=f"c-{start}", user_id="user-1", start_date=start,
                                  cycle_length=length, period_length=period))

def log_on(stores, day):
    stores.stats.save(UserStats(user_id="user-1", last_log_date=day))

def test_unknown_user_returns_empty(detector):
    assert detector.check_all("nobody", TODAY) == []

def test_no_cycle_short_circuits_cycle_checks(detector, stores):
    log_on(stores, TODAY - timedelta(days=40))
    warnings = detector.check_all("user-1", TODAY)
    assert len(warnings) == 1
    assert warnings[0].severity == WarningSeverity.INFO
    assert warnings[0].action.link == "/menstrual-cycle"

def test_no_cycle_and_never_logged_has_single_warning(detector, stores):
    warnings = detector.check_all("user-1", TODAY)
    assert [w.action.text for w in warnings] == ["Add Cycle Data"]

def test_incomplete_profile_comes_first(detector, stores):
    stores.profiles.save(UserProfile(user_id="user-1", weight=60))
    warnings = detector.check_all("user-1", TODAY)
    assert warnings[0].severity == WarningSeverity.WARNING
    assert "missing: height, activity level" in warnings[0].message
    assert warnings[0].action.link == "/profile"

def test_healthy_recent_user_has_no_warnings(detector, stores):
    add_cycle(stores, TODAY - timedelta(days=3))
    log_on(stores, TODAY - timedelta(days=1))
    assert detector.check_all("user-1", TODAY) == []

def test_stale_cycle_warns_freshness_and_life_stage(detector, stores):
    add_cycle(stores, TODAY - timedelta(days=60))
    log_on(stores, TODAY)
    warnings = detector.check_all("user-1", TODAY)
    assert [w.severity for w in warnings] == [WarningSeverity.WARNING, WarningSeverity.INFO]
    assert warnings[0].action.text == "Update Cycle"
    assert warnings[1].action.link == "/settings"

def test_freshness_without_life_stage_at_exactly_two_cycles(detector, stores):
    add_cycle(stores, TODAY - timedelta(days=56))
    log_on(stores, TODAY)
    warnings = detector.check_all("user-1", TODAY)
    assert [w.action.text for w in warnings] == ["Update Cycle"]

def test_abnormal_cycle_reports_health_note(detector, stores):
    add_cycle(stores, TODAY - timedelta(days=3), length=19, period=5)
    log_on(stores, TODAY)
    warnings = detector.check_all("user-1", TODAY)
    assert len(warnings) == 1
    assert warnings[0].severity == WarningSeverity.HEALTH_NOTE
    assert "19 days" in warnings[0].message
    assert "healthcare provider" in warnings[0].message

@pytest.mark.parametrize("days_ago,severity,text", [
    (3, None, None),
    (7, None, None),
    (8, WarningSeverity.INFO, "Continue Tracking"),
    (29, WarningSeverity.INFO, "Continue Tracking"),
    (30, WarningSeverity.WARNING, "Start Fresh"),
])
def test_activity_gap(detector, stores, days_ago, severity, text):
    add_cycle(stores, TODAY - timedelta(days=3))
    log_on(stores, TODAY - timedelta(days=days_ago))
    warnings = detector.check_all("user-1", TODAY)
    if severity is None:
        assert warnings == []
    else:
        assert [(w.severity, w.action.text) for w in warnings] == [(severity, text)]

def test_never_logged_gets_welcome(detector, stores):
    add_cycle(stores, TODAY - timedelta(days=3))
    warnings = detector.check_all("user-1", TODAY)
    assert [w.action.text for w in warnings] == ["Log a Meal"]

def test_failing_check_is_reported_and_others_continue(detector, stores):
    add_cycle(stores, TODAY - timedelta(days=60))
    with patch.object(detector, "check_cycle_freshness", side_effect=RuntimeError("boom")):
        warnings = detector.check_all("user-1", TODAY)
    assert warnings[0].severity == WarningSeverity.HEALTH_NOTE
    assert "cycle freshness" in warnings[0].message
    assert warnings[1].action.link == "/settings"
    assert warnings[2].action.text == "Log a Meal"

"""Settings validation."""

import pytest
from pydantic import ValidationError

from bookline.config import Settings
from bookline.scheduling.slots import SlotPolicy


def test_defaults_describe_business_calendar():
    s = Settings()
    assert s.business_open_hour == 8
    assert s.business_close_hour == 20
    assert s.minute_steps == (0, 15, 30, 45)


def test_minute_steps_are_parsed_and_sorted():
    s = Settings(slot_minute_steps="30, 0,30")
    assert s.minute_steps == (0, 30)


@pytest.mark.parametrize("overrides", [
    {"business_open_hour": 21, "business_close_hour": 8},
    {"business_close_hour": 24},
    {"slot_minute_steps": "0,60"},
    {"default_duration_minutes": 10},
    {"log_format": "xml"},
])
def test_invalid_settings_rejected(overrides):
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_production_requires_real_secret_and_backend():
    with pytest.raises(ValidationError):
        Settings(environment="production")
    with pytest.raises(ValidationError):
        Settings(environment="production", secret_key="s3cr3t")
    s = Settings(environment="production", secret_key="s3cr3t",
                 booking_backend_url="https://booking.internal")
    assert s.environment == "production"


def test_slot_policy_from_settings():
    s = Settings(business_open_hour=9, business_close_hour=17, slot_minute_steps="0,30",
                 business_timezone="Europe/London")
    policy = SlotPolicy.from_settings(s)
    assert (policy.open_hour, policy.close_hour) == (9, 17)
    assert policy.minute_steps == (0, 30)
    assert policy.timezone == "Europe/London"


def test_json_log_lines_carry_actor_and_decision():
    import json
    import logging

    from bookline.middleware.logging_config import JSONFormatter

    record = logging.LogRecord("bookline.auth.gate", logging.INFO, __file__, 1,
                               "Access denied: %s lacks %s", ("staff:team_99", "team.view"), None)
    record.actor = "staff:team_99"
    record.permission = "team.view"
    record.decision = "denied"
    entry = json.loads(JSONFormatter().format(record))
    assert entry["message"] == "Access denied: staff:team_99 lacks team.view"
    assert entry["actor"] == "staff:team_99"
    assert entry["decision"] == "denied"
    assert entry["request_id"] == ""

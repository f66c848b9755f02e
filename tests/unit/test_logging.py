"""structlog setup."""

import logging

from cibersensei.config import Settings
from cibersensei.middleware.logging import _service_stamp, setup_logging


def test_events_carry_service_and_environment():
    stamp = _service_stamp("staging")
    event = stamp(None, "info", {"event": "attempt_started"})
    assert event["service"] == "cibersensei-api"
    assert event["environment"] == "staging"


def test_stamp_keeps_explicit_values():
    event = _service_stamp("staging")(None, "info", {"event": "x", "environment": "ci"})
    assert event["environment"] == "ci"


def test_noisy_libraries_held_at_warning():
    setup_logging(Settings(log_level="DEBUG", log_format="console"))
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

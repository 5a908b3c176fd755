"""Serializers and logging helpers shared by the routers."""
import logging

from termserve.api.common import serialize_validation
from termserve.core.logging import get_logger, setup_logging
from termserve.domain.terminology.models import ValidateCodeResult


def test_serialize_validation():
    assert serialize_validation(ValidateCodeResult(ok=True)) == {"result": True}
    assert serialize_validation(ValidateCodeResult(ok=False, message="Invalid display.")) == {
        "result": False, "message": "Invalid display.",
    }


def test_setup_logging_level(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    setup_logging("debug")
    setup_logging("nonsense")
    assert [c["level"] for c in calls] == [logging.DEBUG, logging.INFO]
    assert get_logger("termserve.api").name == "termserve.api"

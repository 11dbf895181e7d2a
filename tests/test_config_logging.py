import json
import logging

import pytest
from pydantic import ValidationError

from livetimers.core.config import Settings
from livetimers.core.logging import JsonLogFormatter
from livetimers.middlewares import principal_ctx_var, request_id_ctx_var


def test_allowed_origins_accepts_comma_separated_string():
    settings = Settings(ALLOWED_ORIGINS="https://a.example, https://b.example,")

    assert settings.ALLOWED_ORIGINS == ["https://a.example", "https://b.example"]


def test_cookie_samesite_is_validated():
    assert Settings(COOKIE_SAMESITE="Strict").COOKIE_SAMESITE == "strict"
    with pytest.raises(ValidationError):
        Settings(COOKIE_SAMESITE="sometimes")


def test_zero_interval_disables_broadcast():
    assert Settings(TICK_INTERVAL_SECONDS=1.0).broadcast_enabled
    assert not Settings(TICK_INTERVAL_SECONDS=0).broadcast_enabled


def test_json_formatter_includes_context_and_extra_data():
    record = logging.LogRecord("livetimers.test", logging.INFO, __file__, 1, "ws.connected", None, None)
    record.extra_data = {"connection": "c-1"}
    request_token = request_id_ctx_var.set("req-7")
    principal_token = principal_ctx_var.set("user:abc")
    try:
        payload = json.loads(JsonLogFormatter().format(record))
    finally:
        request_id_ctx_var.reset(request_token)
        principal_ctx_var.reset(principal_token)

    assert payload["message"] == "ws.connected"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "livetimers.test"
    assert payload["request_id"] == "req-7"
    assert payload["principal"] == "user:abc"
    assert payload["connection"] == "c-1"
    assert payload["timestamp"].endswith("Z")

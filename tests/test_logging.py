import json
import logging
import sys
from shared.core import redact, set_request_context
from shared.core.logging_config import StructuredFormatter, request_id_var, user_id_var

def test_redact_masks_credentials_and_bearer_tokens():
    assert redact("login password=hunter2 ok") == "login password=*** ok"
    assert redact("JWT_SECRET: abc123") == "JWT_SECRET: ***"
    assert redact("header Bearer eyJhbGciOi.abc.def") == "header Bearer ***"
    assert redact("shipment ECO-ABCD1234 created") == "shipment ECO-ABCD1234 created"

def test_formatter_emits_json_with_trace_context():
    request_token = request_id_var.set(None)
    user_token = user_id_var.set(None)
    try:
        set_request_context(request_id="req-1", user_id="user-9")
        record = logging.LogRecord("ecofreight.test", logging.INFO, __file__, 10, "hello %s", ("world",), None)
        record.extra_fields = {"shipment_id": "s-1"}
        entry = json.loads(StructuredFormatter("ecofreight-api").format(record))
    finally:
        request_id_var.reset(request_token)
        user_id_var.reset(user_token)

    assert entry["message"] == "hello world"
    assert entry["service"] == "ecofreight-api"
    assert entry["trace"] == {"request_id": "req-1", "user_id": "user-9"}
    assert entry["custom"] == {"shipment_id": "s-1"}

def test_formatter_includes_exception_details():
    try:
        raise ValueError("bad weight")
    except ValueError:
        record = logging.LogRecord("ecofreight.test", logging.ERROR, __file__, 20, "failed", (), sys.exc_info())
    entry = json.loads(StructuredFormatter("ecofreight-api").format(record))
    assert entry["error"]["type"] == "ValueError"
    assert entry["error"]["message"] == "bad weight"

"""
Tests for logging configuration
"""

import json
import logging

from simengine.utils.logging_config import (
    HumanReadableFormatter,
    JSONFormatter,
    get_request_id,
    request_id_context,
    set_request_id,
)


def make_record(message="Simulation completed", **extra):
    record = logging.LogRecord(
        "simengine.tools", logging.INFO, __file__, 1, message, (), None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_set_request_id_generates_uuid():
    """Test a request ID is generated when none is given"""
    token = request_id_context.set(None)
    try:
        request_id = set_request_id()
        assert len(request_id) == 36
        assert get_request_id() == request_id
    finally:
        request_id_context.reset(token)


def test_json_formatter_fields():
    """Test JSON output carries the standard fields, request ID and extras"""
    token = request_id_context.set("req-1")
    try:
        output = JSONFormatter().format(make_record(code="invalid_spec"))
    finally:
        request_id_context.reset(token)

    data = json.loads(output)
    assert data["level"] == "INFO"
    assert data["logger"] == "simengine.tools"
    assert data["message"] == "Simulation completed"
    assert data["request_id"] == "req-1"
    assert data["code"] == "invalid_spec"
    assert "args" not in data


def test_human_readable_formatter():
    """Test the development format includes the request ID when present"""
    token = request_id_context.set("req-2")
    try:
        output = HumanReadableFormatter().format(make_record())
    finally:
        request_id_context.reset(token)

    assert "[request_id=req-2]" in output
    assert output.endswith("Simulation completed")


def test_human_readable_formatter_without_request_id():
    """Test the request ID segment is omitted outside a request"""
    token = request_id_context.set(None)
    try:
        output = HumanReadableFormatter().format(make_record())
    finally:
        request_id_context.reset(token)

    assert "request_id" not in output

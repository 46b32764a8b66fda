from __future__ import annotations

import pytest

from src.core.errors import (
    InvalidEnumValue,
    MissingRequiredField,
    NotFound,
    TypeMismatch,
    UnknownOperation,
    ValueOutOfRange,
)
from src.replit.catalog import OPERATIONS
from src.replit.validation import validate


def test_missing_language_is_reported():
    with pytest.raises(MissingRequiredField) as exc_info:
        validate("createReplitProject", {"title": "Test"})
    assert exc_info.value.field == "language"
    assert str(exc_info.value) == "Missing required parameter: language"


def test_first_missing_field_follows_schema_order():
    # input order puts content first, schema order starts with replId
    with pytest.raises(MissingRequiredField) as exc_info:
        validate("updateFile", {"content": "x"})
    assert exc_info.value.field == "replId"


def test_every_required_field_is_enforced():
    for op in OPERATIONS.values():
        complete = {field: ("x" if op.properties[field]["type"] == "string" else 1) for field in op.required}
        validate(op.name.value, complete)
        for field in op.required:
            partial = {k: v for k, v in complete.items() if k != field}
            with pytest.raises(MissingRequiredField) as exc_info:
                validate(op.name.value, partial)
            assert exc_info.value.field == field


def test_defaults_are_applied():
    args = validate("createReplitProject", {"title": "App", "language": "python"})
    assert args["visibility"] == "private"

    args = validate("reviewCommits", {"replId": "r1"})
    assert args["limit"] == 5


def test_deploy_command_has_no_static_default():
    args = validate("deployReplitProject", {"replId": "r1"})
    assert "command" not in args


def test_input_is_not_mutated():
    raw = {"title": "App", "language": "python"}
    args = validate("createReplitProject", raw)
    assert raw == {"title": "App", "language": "python"}
    assert args is not raw


def test_type_mismatch():
    with pytest.raises(TypeMismatch) as exc_info:
        validate("reviewCommits", {"replId": "r1", "limit": "3"})
    assert str(exc_info.value) == "Parameter limit must be an integer"

    with pytest.raises(TypeMismatch):
        validate("createReplitProject", {"title": 5, "language": "python"})


def test_booleans_are_not_numbers():
    with pytest.raises(TypeMismatch):
        validate("reviewCommits", {"replId": "r1", "limit": True})


def test_limit_must_be_integral():
    with pytest.raises(TypeMismatch) as exc_info:
        validate("reviewCommits", {"replId": "r1", "limit": 2.5})
    assert exc_info.value.expected == "integer"

    args = validate("reviewCommits", {"replId": "r1", "limit": 3.0})
    assert args["limit"] == 3
    assert isinstance(args["limit"], int)


def test_invalid_enum_value():
    with pytest.raises(InvalidEnumValue) as exc_info:
        validate("createReplitProject", {"title": "App", "language": "python", "visibility": "secret"})
    assert str(exc_info.value) == "Parameter visibility must be one of: public, private"


def test_limit_out_of_range():
    with pytest.raises(ValueOutOfRange):
        validate("reviewCommits", {"replId": "r1", "limit": 0})
    with pytest.raises(ValueOutOfRange):
        validate("reviewCommits", {"replId": "r1", "limit": 51})


def test_unknown_operation():
    with pytest.raises(UnknownOperation) as exc_info:
        validate("doesNotExist", {})
    assert str(exc_info.value) == "Unknown tool: doesNotExist"
    assert isinstance(exc_info.value, NotFound)


def test_extra_arguments_pass_through():
    args = validate("getDeploymentStatus", {"replId": "r1", "note": "hi"})
    assert args == {"replId": "r1", "note": "hi"}

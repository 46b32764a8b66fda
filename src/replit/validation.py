"""Argument validation for tool calls against the static catalog."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from src.core.errors import (
    InvalidEnumValue,
    MissingRequiredField,
    TypeMismatch,
    UnknownOperation,
    ValueOutOfRange,
)
from src.replit.catalog import OPERATIONS, Operation, OperationName


def _matches_type(value: Any, declared: str) -> bool:
    if declared == "string":
        return isinstance(value, str)
    if declared == "integer":
        if isinstance(value, float):
            return value.is_integer()
        return isinstance(value, int) and not isinstance(value, bool)
    if declared == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return True


def resolve_operation(name: str) -> Operation:
    op_name = OperationName.lookup(name)
    if op_name is None:
        raise UnknownOperation(name)
    return OPERATIONS[op_name]


def validate(name: str, raw_args: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Check `raw_args` against the schema of operation `name`.

    Required fields are checked in schema order, defaults are applied before
    type checks, and the input mapping is never modified.

    Raises:
        UnknownOperation, MissingRequiredField, TypeMismatch,
        InvalidEnumValue, ValueOutOfRange
    """
    op = resolve_operation(name)
    args: Dict[str, Any] = dict(raw_args or {})

    for field in op.required:
        if field not in args:
            raise MissingRequiredField(field)

    for field, prop in op.properties.items():
        if field not in args and "default" in prop:
            args[field] = prop["default"]
        if field not in args:
            continue

        value = args[field]
        declared = prop.get("type", "string")
        if not _matches_type(value, declared):
            raise TypeMismatch(field, declared)
        if declared == "integer":
            value = args[field] = int(value)
        if "enum" in prop and value not in prop["enum"]:
            raise InvalidEnumValue(field, prop["enum"])
        minimum, maximum = prop.get("minimum"), prop.get("maximum")
        if (minimum is not None and value < minimum) or (maximum is not None and value > maximum):
            raise ValueOutOfRange(field, minimum, maximum)

    return args

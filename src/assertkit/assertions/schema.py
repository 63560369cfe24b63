"""Structural validation of JSON-like data against a declarative schema."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from assertkit.config import SchemaNode


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


def coerce_schema(schema: SchemaNode | Mapping[str, Any]) -> SchemaNode:
    """Accept either a ``SchemaNode`` or its plain-dict form.

    Raises ValueError (pydantic ``ValidationError``) for malformed schemas.
    """
    if isinstance(schema, SchemaNode):
        return schema
    return SchemaNode.model_validate(schema)


def validate_schema(data: Any, schema: SchemaNode | Mapping[str, Any]) -> ValidationResult:
    """Validate ``data`` against ``schema``, collecting every violation.

    Errors are path-qualified, e.g. ``"address.zipCode: String does not match
    pattern: ^\\d{5}$"``. Properties not declared in the schema are ignored.
    """
    node = coerce_schema(schema)
    errors = [_render(path, message) for path, message in _check(data, node)]
    return ValidationResult(is_valid=not errors, errors=errors)


def _render(path: str, message: str) -> str:
    return f"{path}: {message}" if path else message


def _join(prefix: str, path: str) -> str:
    return f"{prefix}.{path}" if path else prefix


def _check(data: Any, node: SchemaNode) -> list[tuple[str, str]]:
    if node.type == "object":
        return _check_object(data, node)
    if node.type == "array":
        return _check_array(data, node)
    if node.type == "string":
        return _check_string(data, node)
    if node.type == "number":
        return _check_number(data, node)
    if not isinstance(data, bool):
        return [("", "Expected boolean type")]
    return []


def _check_object(data: Any, node: SchemaNode) -> list[tuple[str, str]]:
    if not isinstance(data, Mapping):
        return [("", "Expected object type")]

    errors: list[tuple[str, str]] = []
    for key, child in node.properties.items():
        if key not in data:
            if key in node.required:
                errors.append(("", f"Missing required property: {key}"))
            continue
        errors.extend((_join(key, path), msg) for path, msg in _check(data[key], child))
    return errors


def _check_array(data: Any, node: SchemaNode) -> list[tuple[str, str]]:
    if not isinstance(data, (list, tuple)):
        return [("", "Expected array type")]
    if node.items is None:
        return []

    errors: list[tuple[str, str]] = []
    for index, item in enumerate(data):
        errors.extend(
            (_join(f"[{index}]", path), msg) for path, msg in _check(item, node.items)
        )
    return errors


def _check_string(data: Any, node: SchemaNode) -> list[tuple[str, str]]:
    if not isinstance(data, str):
        return [("", "Expected string type")]

    errors: list[tuple[str, str]] = []
    if node.min_length is not None and len(data) < node.min_length:
        errors.append(("", f"String length {len(data)} is less than minimum {node.min_length}"))
    if node.max_length is not None and len(data) > node.max_length:
        errors.append(("", f"String length {len(data)} is greater than maximum {node.max_length}"))
    if node.pattern is not None and re.search(node.pattern, data) is None:
        errors.append(("", f"String does not match pattern: {node.pattern}"))
    if node.enum is not None and data not in node.enum:
        allowed = ", ".join(str(v) for v in node.enum)
        errors.append(("", f'String value "{data}" is not in enum: [{allowed}]'))
    return errors


def _check_number(data: Any, node: SchemaNode) -> list[tuple[str, str]]:
    # bool is an int subclass but never a JSON number
    if isinstance(data, bool) or not isinstance(data, (int, float)):
        return [("", "Expected number type")]

    errors: list[tuple[str, str]] = []
    if node.minimum is not None and data < node.minimum:
        errors.append(("", f"Number {data} is less than minimum {_fmt(node.minimum)}"))
    if node.maximum is not None and data > node.maximum:
        errors.append(("", f"Number {data} is greater than maximum {_fmt(node.maximum)}"))
    return errors


def _fmt(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)

"""
Lightweight schema validation for tool arguments.

Supports a small, fixed vocabulary of JSON Schema:

    type:        string | integer | number | boolean | object
    minimum/maximum (inclusive, integer/number only)
    properties + required (object only)

Objects are open: keys without a declared property schema are accepted as-is.
Validation stops at the first violation.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

ROOT_PATH = "root"


class ViolationKind(str, Enum):
    TYPE_MISMATCH = "type_mismatch"
    MISSING_REQUIRED = "missing_required"
    OUT_OF_RANGE = "out_of_range"
    UNKNOWN_PROPERTY = "unknown_property"
    INVALID_FORMAT = "invalid_format"
    INVALID_SCHEMA = "invalid_schema"


@dataclass(frozen=True)
class SchemaViolation:
    """The first problem found while validating a value."""

    kind: ViolationKind
    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "path": self.path, "message": self.message}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate(value: Any, schema: dict[str, Any], path: str = ROOT_PATH) -> Optional[SchemaViolation]:
    """Validate *value* against *schema*; ``None`` means the value is valid."""
    expected = schema.get("type") if isinstance(schema, dict) else None
    if not isinstance(expected, str):
        return SchemaViolation(ViolationKind.INVALID_SCHEMA, path, "Schema missing or invalid type")

    if expected == "string":
        if not isinstance(value, str):
            return SchemaViolation(ViolationKind.TYPE_MISMATCH, path, "Expected string")
        return None

    if expected in ("integer", "number"):
        if not _is_number(value):
            return SchemaViolation(ViolationKind.TYPE_MISMATCH, path, "Expected number")
        minimum = schema.get("minimum")
        maximum = schema.get("maximum")
        # Negated so NaN fails any declared bound.
        if _is_number(minimum) and not value >= minimum:
            return SchemaViolation(ViolationKind.OUT_OF_RANGE, path, "Value below minimum")
        if _is_number(maximum) and not value <= maximum:
            return SchemaViolation(ViolationKind.OUT_OF_RANGE, path, "Value above maximum")
        return None

    if expected == "boolean":
        if not isinstance(value, bool):
            return SchemaViolation(ViolationKind.TYPE_MISMATCH, path, "Expected boolean")
        return None

    if expected == "object":
        if not isinstance(value, dict):
            return SchemaViolation(ViolationKind.TYPE_MISMATCH, path, "Expected object")
        return _validate_object(value, schema, path)

    return SchemaViolation(
        ViolationKind.INVALID_SCHEMA, path, f"Unsupported type in schema: {expected}"
    )


def _validate_object(value: dict[str, Any], schema: dict[str, Any], path: str) -> Optional[SchemaViolation]:
    required = schema.get("required")
    if isinstance(required, list):
        for field_name in required:
            if isinstance(field_name, str) and field_name not in value:
                return SchemaViolation(
                    ViolationKind.MISSING_REQUIRED,
                    path,
                    f"Missing required field: {field_name}",
                )

    properties = schema.get("properties")
    if not isinstance(properties, dict):
        return None

    for key, item in value.items():
        property_schema = properties.get(key)
        if property_schema is None:
            continue
        violation = validate(item, property_schema, f"{path}.{key}")
        if violation is not None:
            return violation

    return None


def validate_tool_arguments(
    arguments: Any, input_schema: Optional[dict[str, Any]]
) -> Optional[SchemaViolation]:
    """Validate tool arguments; absent arguments are checked as ``{}``."""
    if input_schema is None:
        return None
    if arguments is None:
        arguments = {}
    return validate(arguments, input_schema)


# ── Builders ──────────────────────────────────────────────────────


def string_schema(description: str | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "string"}
    if description:
        schema["description"] = description
    return schema


def _numeric_schema(kind: str, description, minimum, maximum) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": kind}
    if description:
        schema["description"] = description
    if minimum is not None:
        schema["minimum"] = minimum
    if maximum is not None:
        schema["maximum"] = maximum
    return schema


def integer_schema(
    description: str | None = None, minimum: int | None = None, maximum: int | None = None
) -> dict[str, Any]:
    return _numeric_schema("integer", description, minimum, maximum)


def number_schema(
    description: str | None = None,
    minimum: float | None = None,
    maximum: float | None = None,
) -> dict[str, Any]:
    return _numeric_schema("number", description, minimum, maximum)


def boolean_schema(description: str | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "boolean"}
    if description:
        schema["description"] = description
    return schema


def object_schema(
    properties: dict[str, Any] | None = None, required: list[str] | None = None
) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object"}
    if properties is not None:
        schema["properties"] = properties
    if required:
        schema["required"] = list(required)
    return schema


class ObjectSchemaBuilder:
    """Fluent builder for flat object schemas.

    Usage::

        schema = (
            ObjectSchemaBuilder()
            .add_integer("pin", "GPIO pin", minimum=0, maximum=39, required=True)
            .add_boolean("state", "Pin level", required=True)
            .build()
        )
    """

    def __init__(self):
        self._schema: dict[str, Any] = {"type": "object", "properties": {}, "required": []}

    def _add(self, name: str, property_schema: dict[str, Any], required: bool) -> ObjectSchemaBuilder:
        if not name:
            raise ValueError("Property name is required")
        self._schema["properties"][name] = property_schema
        if required and name not in self._schema["required"]:
            self._schema["required"].append(name)
        return self

    def add_string(self, name: str, description: str | None = None, required: bool = False):
        return self._add(name, string_schema(description), required)

    def add_integer(
        self,
        name: str,
        description: str | None = None,
        minimum: int | None = None,
        maximum: int | None = None,
        required: bool = False,
    ):
        return self._add(name, integer_schema(description, minimum, maximum), required)

    def add_number(
        self,
        name: str,
        description: str | None = None,
        minimum: float | None = None,
        maximum: float | None = None,
        required: bool = False,
    ):
        return self._add(name, number_schema(description, minimum, maximum), required)

    def add_boolean(self, name: str, description: str | None = None, required: bool = False):
        return self._add(name, boolean_schema(description), required)

    def build(self) -> dict[str, Any]:
        return copy.deepcopy(self._schema)

"""Schema Validation Issues

Structured issues with a path locating the offending field, the constraint
that failed, the actual value (redacted if sensitive) and a suggested fix.

Serialized form:
{
    "path": ["user", "addresses", 0, "street"],
    "field": "user.addresses[0].street",
    "constraint": "string_too_short",
    "message": "String should have at least 2 characters",
    "value": "",
    "suggested_fix": "Value must be at least 2 characters"
}
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

REDACTED = "[REDACTED]"


@dataclass(frozen=True, slots=True)
class SchemaIssue:
    """One problem reported by the schema engine.

    - path: location of the offending field (e.g. ("user", "addresses", 0, "street"))
    - message: human-readable error message
    - constraint: type of constraint violated (e.g. "string_too_short")
    - actual_value: the value that failed (may be redacted)
    - suggested_fix: actionable suggestion to fix the error
    """
    path: tuple[str | int, ...]
    message: str
    constraint: str = "validation_error"
    actual_value: Any = None
    suggested_fix: str | None = None

    @property
    def field_path(self) -> str:
        return format_path(self.path)

    def to_dict(self) -> dict[str, Any]:
        result = {"path": list(self.path), "field": self.field_path,
            "constraint": self.constraint, "message": self.message}
        if self.actual_value is not None: result["value"] = self.actual_value
        if self.suggested_fix: result["suggested_fix"] = self.suggested_fix
        return result

    @classmethod
    def from_pydantic_error(cls, error: dict[str, Any], *, sensitive_fields: frozenset[str] | None = None) -> SchemaIssue:
        """Create from a pydantic error dict (an item of ValidationError.errors())."""
        loc = tuple(error.get("loc", ()))
        actual = error.get("input")
        if sensitive_fields and {str(p) for p in loc} & sensitive_fields: actual = REDACTED
        return cls(path=loc, message=error.get("msg", "Validation failed"),
            constraint=error.get("type", "validation_error"), actual_value=actual,
            suggested_fix=suggest_fix(error))


@dataclass(frozen=True, slots=True)
class SchemaValidationPayload:
    """Payload of the schema validation failure code: the engine's issues, in order."""
    issues: tuple[SchemaIssue, ...] = field(default_factory=tuple)

    def __len__(self) -> int: return len(self.issues)

    def __iter__(self): return iter(self.issues)

    @property
    def field_paths(self) -> list[str]: return [issue.field_path for issue in self.issues]

    def for_field(self, field_path: str) -> list[SchemaIssue]:
        return [i for i in self.issues if i.field_path == field_path]

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses, one dict per issue in engine order."""
        return {"issues": [issue.to_dict() for issue in self.issues]}


def format_path(loc: Sequence[str | int]) -> str:
    """Format a pydantic location tuple as a JSON path."""
    if not loc: return "$"
    parts = []
    for segment in loc:
        if isinstance(segment, int): parts.append(f"[{segment}]")
        elif parts: parts.append(f".{segment}")
        else: parts.append(str(segment))
    return "".join(parts)


def suggest_fix(error: dict[str, Any]) -> str | None:
    """Generate a suggested fix from the pydantic error type and context."""
    err_type = error.get("type", "")
    ctx = error.get("ctx") or {}

    fix_generators = {
        "string_too_short": lambda: f"Value must be at least {ctx.get('min_length', '?')} characters",
        "string_too_long": lambda: f"Truncate to {ctx.get('max_length', '?')} characters or less",
        "string_pattern_mismatch": lambda: f"Value must match pattern: {ctx.get('pattern', '?')}",
        "greater_than": lambda: f"Use a value greater than {ctx.get('gt', '?')}",
        "greater_than_equal": lambda: f"Use a value of {ctx.get('ge', '?')} or more",
        "less_than": lambda: f"Use a value less than {ctx.get('lt', '?')}",
        "less_than_equal": lambda: f"Use a value of {ctx.get('le', '?')} or less",
        "missing": lambda: "This field is required - provide a value",
        "extra_forbidden": lambda: "Remove this field - it is not allowed",
        "enum": lambda: f"Valid options: {ctx.get('expected', '?')}",
        "literal_error": lambda: f"Valid options: {ctx.get('expected', '?')}",
        "uuid_parsing": lambda: "Provide a valid UUID (e.g., '550e8400-e29b-41d4-a716-446655440000')",
        "datetime_parsing": lambda: "Provide ISO8601 datetime (e.g., '2024-01-15T10:30:00Z')",
        "date_parsing": lambda: "Provide ISO8601 date (e.g., '2024-01-15')",
        "int_parsing": lambda: "Provide a valid integer number",
        "int_from_float": lambda: "Provide an integer, not a decimal",
        "float_parsing": lambda: "Provide a valid decimal number",
        "bool_parsing": lambda: "Provide true or false",
        "url_parsing": lambda: "Provide a valid URL (e.g., 'https://example.com')",
        "list_type": lambda: "Provide an array/list of values",
        "dict_type": lambda: "Provide an object with key-value pairs",
        "model_type": lambda: "Provide an object with key-value pairs",
        "string_type": lambda: "Provide a string value",
        "int_type": lambda: "Provide an integer value",
        "float_type": lambda: "Provide a number value",
        "bool_type": lambda: "Provide a boolean (true/false) value",
        "value_error": lambda: str(ctx.get("error", "Invalid value")),
    }

    if err_type in fix_generators: return fix_generators[err_type]()
    return None

"""Validator steps bundled with actionkit."""

from .issues import SchemaIssue, SchemaValidationPayload, format_path
from .schema import (
    PYDANTIC_INVALID_PARAMS,
    input_validation_step,
    pydantic_validator,
    sensitive_fields_for,
    validate_input,
)

__all__ = [
    "PYDANTIC_INVALID_PARAMS",
    "SchemaIssue",
    "SchemaValidationPayload",
    "format_path",
    "input_validation_step",
    "pydantic_validator",
    "sensitive_fields_for",
    "validate_input",
]

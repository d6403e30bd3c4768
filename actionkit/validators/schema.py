"""Pydantic Schema Validator

Adapts pydantic validation to a validator step: a pass contributes no context
(the params are already held by the pipeline), a failure carries
PYDANTIC_INVALID_PARAMS with the ordered list of issues.

Usage:
    action = (
        Action("create_user")
        .set_input_schema(UserCreate)
        .add_validator(input_validation_step())
        .set_action_fn(create_user)
    )

    # or, against an explicit schema
    outcome = await pydantic_validator(UserCreate, params)
"""
from __future__ import annotations

from functools import partial
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..action import INPUT_SCHEMA_KEY, ValidatorStep
from ..errors import InputSchemaMissingError
from ..logging import validation_logger
from ..results import Failed, Passed, ValidationOutcome
from .issues import SchemaIssue, SchemaValidationPayload

log = validation_logger()

PYDANTIC_INVALID_PARAMS = "pydantic_validator_invalid_params"


def _adapter_for(schema: Any) -> TypeAdapter:
    if isinstance(schema, TypeAdapter):
        return schema
    return TypeAdapter(schema)


async def pydantic_validator(
    schema: Any,
    params: Any,
    *,
    strict: bool | None = None,
    sensitive_fields: frozenset[str] | None = None,
) -> ValidationOutcome[SchemaValidationPayload]:
    """Validate params against schema.

    Args:
        schema: BaseModel subclass, any type pydantic can adapt, or a TypeAdapter
        params: Candidate value
        strict: Forwarded to pydantic; None keeps the schema's own setting
        sensitive_fields: Field names whose values are redacted in issues
    """
    try:
        _adapter_for(schema).validate_python(params, strict=strict)
    except PydanticValidationError as e:
        issues = tuple(
            SchemaIssue.from_pydantic_error(err, sensitive_fields=sensitive_fields)
            for err in e.errors()
        )
        log.debug("schema_validation_failed", schema=e.title, issue_count=len(issues))
        return Failed(PYDANTIC_INVALID_PARAMS, SchemaValidationPayload(issues=issues))
    return Passed()


def sensitive_fields_for(schema: Any) -> frozenset[str]:
    """Field names whose values must be redacted from issues.

    Taken from a `_sensitive_fields` attribute on the schema when present,
    otherwise from BaseModel fields marked with `json_schema_extra={"x-sensitive": True}`.
    """
    declared = getattr(schema, "_sensitive_fields", None)
    if declared is not None:
        # pydantic wraps underscore class attributes as private attributes
        return frozenset(getattr(declared, "default", declared))
    if not (isinstance(schema, type) and issubclass(schema, BaseModel)):
        return frozenset()
    return frozenset(
        name for name, info in schema.model_fields.items()
        if isinstance(info.json_schema_extra, dict) and info.json_schema_extra.get("x-sensitive")
    )


async def validate_input(
    params: Any,
    context: Mapping[str, Any],
    *,
    sensitive_fields: frozenset[str] | None = None,
) -> ValidationOutcome[SchemaValidationPayload]:
    """Validator step checking params against the action's declared input schema.

    Sensitive fields default to those declared on the schema.
    """
    schema = context.get(INPUT_SCHEMA_KEY)
    if schema is None:
        raise InputSchemaMissingError()
    if sensitive_fields is None:
        sensitive_fields = sensitive_fields_for(schema)
    return await pydantic_validator(schema, params, sensitive_fields=sensitive_fields)


def input_validation_step(
    name: str = "validate_input",
    *,
    sensitive_fields: Iterable[str] | None = None,
) -> ValidatorStep:
    """validate_input as a step that declares PYDANTIC_INVALID_PARAMS.

    sensitive_fields replaces the fields the schema marks as sensitive.
    """
    fn = validate_input
    if sensitive_fields is not None:
        fn = partial(validate_input, sensitive_fields=frozenset(sensitive_fields))
    return ValidatorStep(
        fn=fn,
        name=name,
        error_codes=frozenset({PYDANTIC_INVALID_PARAMS}),
    )

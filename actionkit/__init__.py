"""Composable Action Pipelines

An action runs ordered validator steps that may enrich a shared context or
abort with a structured error, then a terminal handler that produces the
result. Outcomes are tagged unions that keep the failing step's error code
and payload.

Usage:
    from actionkit import Action, failed, passed, success

    async def first(params, context):
        return failed("firstInvalid", {"data": "Data 1"}) if params["num"] == 1 else passed()

    async def handle(params, context):
        return success("Hello", {"post": "Post"})

    action = Action().add_validator(first).set_action_fn(handle)
    outcome = await action({"num": 3})
"""
from .action import INPUT_SCHEMA_KEY, Action, ActionHandler, ValidatorStep
from .errors import (
    ActionError,
    ActionFailedError,
    ActionNotConfiguredError,
    InputSchemaMissingError,
    InvalidOutcomeError,
    raise_for_failure,
)
from .results import (
    ActionOutcome,
    Failed,
    Failure,
    Passed,
    Success,
    ValidationOutcome,
    ensure,
    failed,
    failure,
    passed,
    require,
    success,
)
from .validators import (
    PYDANTIC_INVALID_PARAMS,
    SchemaIssue,
    SchemaValidationPayload,
    input_validation_step,
    pydantic_validator,
    validate_input,
)

__version__ = "0.1.0"

__all__ = [
    # Builder
    "INPUT_SCHEMA_KEY",
    "Action",
    "ActionHandler",
    "ValidatorStep",
    # Outcomes
    "ActionOutcome",
    "Failed",
    "Failure",
    "Passed",
    "Success",
    "ValidationOutcome",
    "ensure",
    "failed",
    "failure",
    "passed",
    "require",
    "success",
    # Errors
    "ActionError",
    "ActionFailedError",
    "ActionNotConfiguredError",
    "InputSchemaMissingError",
    "InvalidOutcomeError",
    "raise_for_failure",
    # Validators
    "PYDANTIC_INVALID_PARAMS",
    "SchemaIssue",
    "SchemaValidationPayload",
    "input_validation_step",
    "pydantic_validator",
    "validate_input",
]

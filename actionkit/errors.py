"""Action Exceptions

Domain failures are returned as Failure outcomes and never raised. The
exceptions here signal misuse of the builder or of a step, which is a bug in
the calling code rather than a runtime condition.
"""
from __future__ import annotations

from typing import Any

from .results import ActionOutcome, Failure


class ActionError(Exception):
    """Base class for actionkit exceptions."""


class ActionNotConfiguredError(ActionError):
    """Raised when an action is invoked without a terminal handler."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Action function is undefined for action '{action}'")


class InputSchemaMissingError(ActionError):
    """Raised when input validation runs but no input schema was declared."""

    def __init__(self):
        super().__init__("No input schema declared; call set_input_schema() first")


class InvalidOutcomeError(ActionError, TypeError):
    """Raised when a validator returns something other than Passed or Failed."""

    def __init__(self, step: str, value: Any):
        self.step = step
        self.value = value
        super().__init__(
            f"Validator '{step}' returned {type(value).__name__}, expected Passed or Failed"
        )


class ActionFailedError(ActionError):
    """Exception wrapper for a Failure outcome.

    Use this when host code prefers exceptions over branching on the outcome
    (e.g. a framework dependency that must abort the request).
    """

    def __init__(self, outcome: Failure):
        self.outcome = outcome
        super().__init__(f"[{outcome.error_code}] {outcome.message}")

    @property
    def error_code(self) -> str:
        return self.outcome.error_code

    @property
    def error_payload(self) -> Any:
        return self.outcome.error_payload


def raise_for_failure(outcome: ActionOutcome) -> Any:
    """Raise ActionFailedError if outcome is a Failure, otherwise return its payload.

    Usage:
        post = raise_for_failure(await create_post(params))
    """
    if isinstance(outcome, Failure):
        raise ActionFailedError(outcome)
    return outcome.payload

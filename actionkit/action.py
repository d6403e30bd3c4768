"""Action Pipeline Builder and Executor

An action is an optional input schema, an ordered list of validator steps and
one terminal handler. Validators run strictly in append order; each either
passes (optionally contributing context for later steps) or fails, which
short-circuits the pipeline with a Failure carrying that validator's error
code and payload.

Usage:
    create_post = (
        Action("create_post")
        .set_input_schema(PostCreate)
        .add_validator(validate_input)
        .add_validator(user_session_validator, context_keys={"user_id"})
        .set_action_fn(save_post)
    )

    outcome = await create_post({"title": "Hello"})
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Iterable, Mapping, Protocol

from .config import get_settings
from .errors import ActionNotConfiguredError, InvalidOutcomeError
from .logging import action_logger, bound_context, generate_correlation_id
from .results import ActionOutcome, Failed, Failure, Passed, ValidationOutcome

log = action_logger()

# Context key under which the declared input schema is stored
INPUT_SCHEMA_KEY = "input_schema"


class ValidatorFn(Protocol):
    def __call__(self, *, params: Any, context: Mapping[str, Any]) -> Awaitable[ValidationOutcome]: ...


class ActionFn(Protocol):
    def __call__(self, *, params: Any, context: Mapping[str, Any]) -> Awaitable[ActionOutcome]: ...


@dataclass(frozen=True, slots=True)
class ValidatorStep:
    """One validator in a pipeline.

    error_codes and context_keys describe what the step may produce. They are
    reported by ActionHandler but never enforced.
    """
    fn: ValidatorFn
    name: str
    error_codes: frozenset[str] = frozenset()
    context_keys: frozenset[str] = frozenset()

    async def run(self, params: Any, context: Mapping[str, Any]) -> ValidationOutcome:
        return await self.fn(params=params, context=context)


class ActionHandler:
    """Invocable entry point produced by Action.set_action_fn().

    Holds an immutable snapshot of the pipeline, so one handler may be invoked
    concurrently; every invocation allocates its own context.
    """

    __slots__ = ("name", "input_schema", "steps", "action_fn", "failure_message")

    def __init__(
        self,
        name: str,
        input_schema: Any,
        steps: tuple[ValidatorStep, ...],
        action_fn: ActionFn | None,
        failure_message: str | None = None,
    ):
        self.name = name
        self.input_schema = input_schema
        self.steps = steps
        self.action_fn = action_fn
        self.failure_message = failure_message

    @property
    def known_error_codes(self) -> frozenset[str]:
        """Error codes declared by the pipeline's validators."""
        return frozenset().union(*(step.error_codes for step in self.steps))

    @property
    def known_context_keys(self) -> frozenset[str]:
        """Context keys available to the terminal handler when every validator passes."""
        keys = frozenset().union(*(step.context_keys for step in self.steps))
        if self.input_schema is not None:
            keys |= {INPUT_SCHEMA_KEY}
        return keys

    def _new_context(self) -> dict[str, Any]:
        if self.input_schema is None:
            return {}
        return {INPUT_SCHEMA_KEY: self.input_schema}

    async def __call__(self, params: Any) -> ActionOutcome:
        if self.action_fn is None:
            log.error("action_not_configured", action=self.name)
            raise ActionNotConfiguredError(self.name)

        context = self._new_context()
        view = MappingProxyType(context)

        with bound_context(action=self.name, invocation_id=generate_correlation_id()):
            log.debug("action_started", steps=len(self.steps))

            for step in self.steps:
                outcome = await step.run(params, view)
                match outcome:
                    case Failed(error_code=code, payload=payload, message=message):
                        log.info("validator_failed", step=step.name, error_code=code)
                        return Failure(
                            message=message or self.failure_message or get_settings().DEFAULT_FAILURE_MESSAGE,
                            error_code=code,
                            error_payload=payload,
                        )
                    case Passed(context=fragment):
                        if fragment:
                            context.update(fragment)
                        log.debug("validator_passed", step=step.name, contributed=sorted(fragment or ()))
                    case _:
                        raise InvalidOutcomeError(step.name, outcome)

            result = await self.action_fn(params=params, context=view)
            log.debug("action_completed", success=getattr(result, "success", None))
            return result

    def __repr__(self) -> str:
        steps = ", ".join(step.name for step in self.steps)
        return f"ActionHandler({self.name!r}, steps=[{steps}])"


class Action:
    """Fluent builder for an action pipeline.

    Composition methods return the builder; set_action_fn() returns the
    ActionHandler to invoke.
    """

    def __init__(self, name: str = "action", *, failure_message: str | None = None):
        self.name = name
        self.failure_message = failure_message
        self._input_schema: Any = None
        self._steps: list[ValidatorStep] = []
        self._action_fn: ActionFn | None = None

    @property
    def input_schema(self) -> Any:
        return self._input_schema

    @property
    def steps(self) -> tuple[ValidatorStep, ...]:
        return tuple(self._steps)

    def set_input_schema(self, schema: Any) -> Action:
        """Record the input schema under INPUT_SCHEMA_KEY. Does not validate anything."""
        self._input_schema = schema
        return self

    def add_validator(
        self,
        validator: ValidatorFn | ValidatorStep,
        *,
        name: str | None = None,
        error_codes: Iterable[str] = (),
        context_keys: Iterable[str] = (),
    ) -> Action:
        """Append a validator to the end of the pipeline."""
        if isinstance(validator, ValidatorStep):
            step = validator
        else:
            step = ValidatorStep(
                fn=validator,
                name=name or getattr(validator, "__name__", f"validator_{len(self._steps) + 1}"),
                error_codes=frozenset(error_codes),
                context_keys=frozenset(context_keys),
            )
        self._steps.append(step)
        return self

    def set_action_fn(self, action_fn: ActionFn | None) -> ActionHandler:
        """Record the terminal handler and return the invocable action."""
        self._action_fn = action_fn
        return ActionHandler(
            name=self.name,
            input_schema=self._input_schema,
            steps=tuple(self._steps),
            action_fn=action_fn,
            failure_message=self.failure_message,
        )

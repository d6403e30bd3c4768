"""Tests for the action builder and executor."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from actionkit import (
    INPUT_SCHEMA_KEY,
    Action,
    ActionHandler,
    ActionNotConfiguredError,
    Failed,
    Failure,
    InvalidOutcomeError,
    Passed,
    Success,
    ValidatorStep,
    failed,
    passed,
    success,
)
from actionkit.config import get_settings


def recording_validator(calls: list, name: str, outcome=None):
    """Validator that records its call and the context it observed."""
    async def validator(params, context):
        calls.append((name, dict(context)))
        return outcome if outcome is not None else passed()
    validator.__name__ = name
    return validator


class TestNumericPipeline:
    """End-to-end example with two numeric validators."""

    async def test_all_validators_pass(self, numeric_action):
        result = await numeric_action({"num": 3})
        assert isinstance(result, Success)
        assert result.payload == {"post": "Post"}

    async def test_first_validator_fails(self, numeric_action):
        result = await numeric_action({"num": 1})
        assert isinstance(result, Failure)
        assert result.error_code == "firstInvalid"
        assert result.error_payload == {"data": "Data 1"}

    async def test_second_validator_fails(self, numeric_action):
        result = await numeric_action({"num": 2})
        assert result.success is False
        assert result.error_code == "secondInvalid"
        assert result.error_payload == {"data": "Data 2"}

    def test_known_error_codes(self, numeric_action):
        assert numeric_action.known_error_codes == {"firstInvalid", "secondInvalid"}


class TestExecution:
    """Tests for ordering, short-circuit and context accumulation."""

    async def test_no_validators_returns_handler_outcome_unmodified(self):
        expected = success("Successfully submitted", {"id": 7})
        handler = AsyncMock(return_value=expected)

        action = Action().set_action_fn(handler)
        result = await action({"name": "Dave"})

        assert result is expected
        handler.assert_awaited_once_with(params={"name": "Dave"}, context={})

    async def test_handler_failure_returned_unmodified(self):
        expected = Failure("Post limit reached", "quota", {"limit": 3})
        action = Action().set_action_fn(AsyncMock(return_value=expected))
        assert await action({}) is expected

    async def test_validators_run_in_append_order(self):
        calls = []
        action = (
            Action()
            .add_validator(recording_validator(calls, "a"))
            .add_validator(recording_validator(calls, "b"))
            .add_validator(recording_validator(calls, "c"))
            .set_action_fn(AsyncMock(return_value=success("ok")))
        )
        await action({})
        assert [name for name, _ in calls] == ["a", "b", "c"]

    async def test_first_failure_short_circuits(self):
        calls = []
        handler = AsyncMock(return_value=success("ok"))
        action = (
            Action()
            .add_validator(recording_validator(calls, "a"))
            .add_validator(recording_validator(calls, "b", failed("b_failed", {"why": "b"})))
            .add_validator(recording_validator(calls, "c", failed("c_failed")))
            .set_action_fn(handler)
        )

        result = await action({})

        assert [name for name, _ in calls] == ["a", "b"]
        handler.assert_not_awaited()
        assert result == Failure(
            message=get_settings().DEFAULT_FAILURE_MESSAGE,
            error_code="b_failed",
            error_payload={"why": "b"},
        )

    async def test_later_validators_observe_earlier_context(self):
        calls = []
        action = (
            Action()
            .add_validator(recording_validator(calls, "session", passed(user_id="user_123")))
            .add_validator(recording_validator(calls, "role", passed(role="admin")))
            .add_validator(recording_validator(calls, "last"))
            .set_action_fn(AsyncMock(return_value=success("ok")))
        )
        await action({})
        assert calls == [
            ("session", {}),
            ("role", {"user_id": "user_123"}),
            ("last", {"user_id": "user_123", "role": "admin"}),
        ]

    async def test_handler_receives_schema_and_all_fragments(self, name_schema):
        seen = {}

        async def handler(params, context):
            seen.update(context)
            return success("ok")

        action = (
            Action()
            .set_input_schema(name_schema)
            .add_validator(AsyncMock(return_value=passed(a=1)), name="first")
            .add_validator(AsyncMock(return_value=passed()), name="second")
            .add_validator(AsyncMock(return_value=passed(b=2)), name="third")
            .set_action_fn(handler)
        )
        await action({"name": "Dave"})
        assert seen == {INPUT_SCHEMA_KEY: name_schema, "a": 1, "b": 2}

    async def test_colliding_keys_last_write_wins(self):
        seen = {}

        async def handler(params, context):
            seen.update(context)
            return success("ok")

        action = (
            Action()
            .add_validator(AsyncMock(return_value=passed(role="user", user_id="u1")), name="first")
            .add_validator(AsyncMock(return_value=passed(role="admin")), name="second")
            .set_action_fn(handler)
        )
        await action({})
        assert seen == {"role": "admin", "user_id": "u1"}

    async def test_context_is_read_only_for_steps(self):
        async def mutating(params, context):
            context["sneaky"] = True
            return passed()

        action = Action().add_validator(mutating).set_action_fn(AsyncMock(return_value=success("ok")))
        with pytest.raises(TypeError):
            await action({})

    async def test_failed_message_overrides_default(self):
        action = (
            Action(failure_message="Request rejected")
            .add_validator(AsyncMock(return_value=failed("not_admin", message="Admins only")), name="role")
            .set_action_fn(AsyncMock(return_value=success("ok")))
        )
        result = await action({})
        assert result.message == "Admins only"

    async def test_action_failure_message_used_when_step_has_none(self):
        action = (
            Action(failure_message="Request rejected")
            .add_validator(AsyncMock(return_value=failed("not_admin")), name="role")
            .set_action_fn(AsyncMock(return_value=success("ok")))
        )
        result = await action({})
        assert result.message == "Request rejected"

    async def test_invalid_validator_return_raises(self):
        action = (
            Action()
            .add_validator(AsyncMock(return_value={"ok": True}), name="legacy")
            .set_action_fn(AsyncMock(return_value=success("ok")))
        )
        with pytest.raises(InvalidOutcomeError, match="legacy"):
            await action({})

    async def test_step_exceptions_propagate(self):
        action = (
            Action()
            .add_validator(AsyncMock(side_effect=ConnectionError("session store down")), name="session")
            .set_action_fn(AsyncMock(return_value=success("ok")))
        )
        with pytest.raises(ConnectionError):
            await action({})


class TestIsolation:
    """Tests for per-invocation context."""

    async def test_reinvocation_does_not_see_previous_context(self):
        async def contribute(params, context):
            assert "num" not in context
            return passed(num=params["num"])

        async def handler(params, context):
            return success("ok", dict(context))

        action = Action().add_validator(contribute).set_action_fn(handler)
        first = await action({"num": 1})
        second = await action({"num": 2})
        assert first.payload == {"num": 1}
        assert second.payload == {"num": 2}

    async def test_concurrent_invocations_are_isolated(self):
        async def contribute(params, context):
            await asyncio.sleep(0.01 * params["delay"])
            return passed(owner=params["owner"])

        async def slow_check(params, context):
            await asyncio.sleep(0.01 * (3 - params["delay"]))
            return passed(checked_by=context["owner"])

        async def handler(params, context):
            await asyncio.sleep(0)
            return success("ok", dict(context))

        action = (
            Action()
            .add_validator(contribute)
            .add_validator(slow_check)
            .set_action_fn(handler)
        )

        results = await asyncio.gather(
            action({"owner": "alice", "delay": 2}),
            action({"owner": "bob", "delay": 1}),
        )

        assert results[0].payload == {"owner": "alice", "checked_by": "alice"}
        assert results[1].payload == {"owner": "bob", "checked_by": "bob"}


class TestBuilder:
    """Tests for the fluent builder."""

    def test_composition_methods_return_builder(self, name_schema):
        action = Action()
        assert action.set_input_schema(name_schema) is action
        assert action.add_validator(AsyncMock(return_value=passed()), name="v") is action

    def test_set_action_fn_returns_handler(self):
        handler = Action("create_post").set_action_fn(AsyncMock(return_value=success("ok")))
        assert isinstance(handler, ActionHandler)
        assert handler.name == "create_post"

    def test_set_input_schema_replaces_previous(self, name_schema):
        action = Action().set_input_schema(dict).set_input_schema(name_schema)
        assert action.input_schema is name_schema

    def test_step_name_defaults_to_function_name(self):
        async def user_session_validator(params, context):
            return passed()

        action = Action().add_validator(user_session_validator)
        assert action.steps[0].name == "user_session_validator"

    def test_prebuilt_step_is_appended_as_is(self):
        step = ValidatorStep(fn=AsyncMock(return_value=passed()), name="prebuilt", error_codes=frozenset({"x"}))
        action = Action().add_validator(step)
        assert action.steps == (step,)

    def test_known_context_keys(self, name_schema):
        handler = (
            Action()
            .set_input_schema(name_schema)
            .add_validator(AsyncMock(return_value=passed()), name="session", context_keys={"user_id"})
            .set_action_fn(AsyncMock(return_value=success("ok")))
        )
        assert handler.known_context_keys == {INPUT_SCHEMA_KEY, "user_id"}

    async def test_handler_is_a_snapshot(self):
        action = Action()
        handler = action.set_action_fn(AsyncMock(return_value=success("ok")))
        action.add_validator(AsyncMock(return_value=failed("late")), name="late")

        assert handler.steps == ()
        assert (await handler({})).success is True

    def test_repr_lists_steps(self):
        handler = (
            Action("numeric")
            .add_validator(AsyncMock(return_value=passed()), name="first")
            .set_action_fn(AsyncMock(return_value=success("ok")))
        )
        assert repr(handler) == "ActionHandler('numeric', steps=[first])"


class TestNotConfigured:
    """Tests for invoking an action without a terminal handler."""

    async def test_raises_instead_of_returning_failure(self, name_schema):
        action = Action().set_input_schema(name_schema).set_action_fn(None)
        with pytest.raises(ActionNotConfiguredError, match="Action function is undefined"):
            await action({"name": "Dave"})

    async def test_validators_do_not_run(self):
        validator = AsyncMock(return_value=passed())
        action = Action().add_validator(validator, name="v").set_action_fn(None)
        with pytest.raises(ActionNotConfiguredError):
            await action({})
        validator.assert_not_awaited()

    def test_outcome_types_cannot_represent_it(self):
        assert not issubclass(ActionNotConfiguredError, (Failed, Failure, Passed, Success))

"""Shared test fixtures for actionkit."""

import pytest
from pydantic import BaseModel, Field

from actionkit import Action, ActionHandler, failed, passed, success


class NameInput(BaseModel):
    name: str = Field(min_length=2, description="Name must contain at least 2 character(s)")


async def first_validator(params, context):
    if params["num"] == 1:
        return failed("firstInvalid", {"data": "Data 1"})
    return passed()


async def second_validator(params, context):
    if params["num"] == 2:
        return failed("secondInvalid", {"data": "Data 2"})
    return passed()


async def post_action(params, context):
    return success("Hello", {"post": "Post"})


@pytest.fixture
def name_schema() -> type[NameInput]:
    return NameInput


@pytest.fixture
def numeric_action() -> ActionHandler:
    """Two numeric validators followed by a handler returning {"post": "Post"}."""
    return (
        Action("numeric")
        .add_validator(first_validator, error_codes={"firstInvalid"})
        .add_validator(second_validator, error_codes={"secondInvalid"})
        .set_action_fn(post_action)
    )

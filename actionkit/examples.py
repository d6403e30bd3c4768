"""Example Action with Session and Role Validators

Shows validators that suspend on lookups, contribute context for later steps
and fail with their own error codes. Run with:

    python -m actionkit.examples
"""
from __future__ import annotations

import asyncio
from typing import Any, Mapping

from pydantic import BaseModel, Field

from .action import Action
from .config import settings
from .logging import configure_logging, get_logger
from .results import Passed, ValidationOutcome, ensure, failed, failure, require, success
from .validators import input_validation_step

log = get_logger(__name__)

# In-memory stand-ins for a session store, a role service and a post table
SESSIONS: dict[str, str] = {"tok_admin": "user_123", "tok_reader": "user_456"}
ROLES: dict[str, str] = {"user_123": "admin", "user_456": "user"}
POSTS: dict[int, str] = {1: "Hello", 2: "World"}


class DeletePost(BaseModel):
    session_token: str = Field(min_length=1)
    post_id: int = Field(ge=1)


async def get_session(token: str) -> str | None:
    await asyncio.sleep(0)
    return SESSIONS.get(token)


async def get_user_role(user_id: str) -> str:
    await asyncio.sleep(0)
    return ROLES.get(user_id, "user")


async def user_session_validator(params: Mapping[str, Any], context: Mapping[str, Any]) -> ValidationOutcome:
    """Ensure the caller has a session; contributes user_id."""
    user_id = await get_session(params.get("session_token", ""))
    return require(user_id, "user_id", "no_session", {"reason": "You must be logged in."})


async def admin_role_validator(params: Mapping[str, Any], context: Mapping[str, Any]) -> ValidationOutcome:
    """Ensure the session user is an admin."""
    role = await get_user_role(context["user_id"])
    return ensure(role == "admin", "not_admin", {"reason": "Only admins can perform this action."})


async def post_exists_validator(params: Mapping[str, Any], context: Mapping[str, Any]) -> ValidationOutcome:
    post_id = params["post_id"]
    if post_id not in POSTS:
        return failed("post_not_found", {"post_id": post_id}, message=f"Post {post_id} does not exist")
    return Passed({"post_title": POSTS[post_id]})


async def delete_post_fn(params: Mapping[str, Any], context: Mapping[str, Any]):
    title = POSTS.pop(params["post_id"], None)
    if title is None:
        # Deleted concurrently after post_exists_validator ran
        return failure("Post already deleted", "post_not_found", {"post_id": params["post_id"]})
    return success("Post deleted", {"post_id": params["post_id"], "title": title, "deleted_by": context["user_id"]})


delete_post = (
    Action("delete_post")
    .set_input_schema(DeletePost)
    .add_validator(input_validation_step())
    .add_validator(user_session_validator, error_codes={"no_session"}, context_keys={"user_id"})
    .add_validator(admin_role_validator, error_codes={"not_admin"})
    .add_validator(post_exists_validator, error_codes={"post_not_found"}, context_keys={"post_title"})
    .set_action_fn(delete_post_fn)
)


async def run_examples() -> list[dict[str, Any]]:
    requests = [
        {"session_token": "tok_admin", "post_id": 1},
        {"session_token": "tok_reader", "post_id": 2},
        {"session_token": "expired", "post_id": 2},
        {"session_token": "tok_admin", "post_id": 0},
    ]
    results = []
    for params in requests:
        outcome = await delete_post(params)
        log.info("example_outcome", post_id=params["post_id"], outcome=outcome.to_dict())
        results.append(outcome.to_dict())
    return results


def main() -> None:
    configure_logging(level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
    asyncio.run(run_examples())


if __name__ == "__main__":
    main()

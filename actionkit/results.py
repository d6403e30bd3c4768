"""Outcome Types for Validators and Actions

Two tagged unions with the same shape:

- ValidationOutcome = Passed | Failed, returned by each validator step
- ActionOutcome = Success | Failure, returned by an assembled action

A failure always carries an error code together with that code's payload, so
callers can branch on the code and read the payload it implies:

    match await create_post(params):
        case Success(payload=post):
            ...
        case Failure(error_code="no_session", error_payload=payload):
            ...
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, is_dataclass
from typing import Any, Callable, Generic, Mapping, NoReturn, TypeVar, Union, final

T = TypeVar("T")
P = TypeVar("P")
U = TypeVar("U")


def _serialize(payload: Any) -> Any:
    # Payloads that define their own wire form take precedence over asdict
    if callable(getattr(payload, "to_dict", None)) and not isinstance(payload, type):
        return payload.to_dict()
    if is_dataclass(payload) and not isinstance(payload, type):
        return asdict(payload)
    if hasattr(payload, "model_dump"):
        return payload.model_dump()
    return payload


# =============================================================================
# Validation outcomes
# =============================================================================

@final
@dataclass(frozen=True, slots=True)
class Passed:
    """Validator passed, optionally contributing a context fragment."""
    context: Mapping[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return True

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> Mapping[str, Any]:
        """Return the contributed fragment (empty if none)."""
        return self.context or {}

    def match(self, passed: Callable[[Passed], U], failed: Callable[[Failed], U]) -> U:
        return passed(self)


@final
@dataclass(frozen=True, slots=True)
class Failed(Generic[P]):
    """Validator failed with an error code and the payload paired with it."""
    error_code: str
    payload: P | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return False

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise ValueError(f"Called unwrap on Failed: {self.error_code}")

    def match(self, passed: Callable[[Passed], U], failed: Callable[[Failed[P]], U]) -> U:
        return failed(self)


ValidationOutcome = Union[Passed, Failed[P]]


# =============================================================================
# Action outcomes
# =============================================================================

@final
@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """Action completed; carries a message and an optional result payload."""
    message: str
    payload: T | None = None

    @property
    def success(self) -> bool:
        return True

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T | None:
        return self.payload

    def unwrap_or(self, default: T) -> T | None:
        return self.payload

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": True, "message": self.message}
        if self.payload is not None:
            result["payload"] = _serialize(self.payload)
        return result


@final
@dataclass(frozen=True, slots=True)
class Failure(Generic[P]):
    """Action failed; carries a message, an error code and that code's payload."""
    message: str
    error_code: str
    error_payload: P | None = None

    @property
    def success(self) -> bool:
        return False

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise ValueError(f"Called unwrap on Failure: [{self.error_code}] {self.message}")

    def unwrap_or(self, default: T) -> T:
        return default

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "message": self.message,
            "error_code": self.error_code,
            "error_payload": _serialize(self.error_payload),
        }


ActionOutcome = Union[Success[T], Failure[P]]


# =============================================================================
# Constructors
# =============================================================================

def passed(**context: Any) -> Passed:
    """Construct Passed, contributing the keyword arguments as context."""
    return Passed(context or None)


def failed(error_code: str, payload: P | None = None, *, message: str | None = None) -> Failed[P]:
    """Construct Failed."""
    return Failed(error_code=error_code, payload=payload, message=message)


def success(message: str, payload: T | None = None) -> Success[T]:
    """Construct Success."""
    return Success(message=message, payload=payload)


def failure(message: str, error_code: str, payload: P | None = None) -> Failure[P]:
    """Construct Failure."""
    return Failure(message=message, error_code=error_code, error_payload=payload)


# =============================================================================
# Guards for validator authors
# =============================================================================

def ensure(
    condition: bool,
    error_code: str,
    payload: P | None = None,
    *,
    message: str | None = None,
) -> ValidationOutcome[P]:
    """Pass if condition holds, fail with the given code otherwise."""
    return Passed() if condition else Failed(error_code, payload, message)


def require(
    value: T | None,
    key: str,
    error_code: str,
    payload: P | None = None,
    *,
    message: str | None = None,
) -> ValidationOutcome[P]:
    """Contribute value under key, or fail if value is None."""
    if value is None:
        return Failed(error_code, payload, message)
    return Passed({key: value})

"""Ok / Err results returned by the verification services.

Routes inspect ``result.ok`` and turn an ``Err`` into an ``api_response``;
services never raise for expected outcomes such as a wrong code.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    GENERATION_FAILURE = "generation_failure"
    STORAGE_FAILURE = "storage_failure"
    DELIVERY_FAILURE = "delivery_failure"
    NOT_FOUND_OR_EXPIRED = "not_found_or_expired"
    MISMATCH = "mismatch"
    INVALID_FORMAT = "invalid_format"
    ALREADY_ENABLED = "already_enabled"

    @property
    def retryable(self) -> bool:
        return self in (
            ErrorKind.GENERATION_FAILURE,
            ErrorKind.STORAGE_FAILURE,
            ErrorKind.DELIVERY_FAILURE,
        )


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    ok: bool = True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str = ""
    ok: bool = False


Result = Union[Ok[T], Err]


def ok(value: Optional[T] = None) -> Ok[Optional[T]]:
    return Ok(value)


def err(kind: ErrorKind, message: str = "") -> Err:
    return Err(kind=kind, message=message)

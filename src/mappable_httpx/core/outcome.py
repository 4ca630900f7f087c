"""Two-variant result delivered for every mapped exchange."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar, Union

from .errors import ErrorKind, MappableError

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def is_success(self) -> bool:
        return True

    @property
    def error(self) -> None:
        return None

    def unwrap(self) -> T:
        return self.value


@dataclass(slots=True, frozen=True)
class Failure:
    error: MappableError

    @property
    def is_success(self) -> bool:
        return False

    @property
    def value(self) -> None:
        return None

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @property
    def message(self) -> str:
        return self.error.failure_reason

    def unwrap(self) -> NoReturn:
        raise self.error


Outcome = Union[Success[T], Failure]


__all__ = [
    "Success",
    "Failure",
    "Outcome",
]

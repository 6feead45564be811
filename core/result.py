"""Result type for collecting outcomes without raising immediately."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Iterable, List, TypeVar, Union

T = TypeVar('T')
E = TypeVar('E')


@dataclass(frozen=True)
class Success(Generic[T]):
    """Represents a successful result."""
    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure(Generic[E]):
    """Represents a failed result."""
    error: E

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def unwrap(self):
        """Raise the wrapped error."""
        if isinstance(self.error, Exception):
            raise self.error
        raise Exception(str(self.error))


Result = Union[Success[T], Failure[E]]


def partition(results: Iterable[Result]) -> tuple[List[Any], List[Any]]:
    """Split results into (values, errors), preserving order."""
    values: List[Any] = []
    errors: List[Any] = []
    for result in results:
        if result.is_success():
            values.append(result.value)
        else:
            errors.append(result.error)
    return values, errors

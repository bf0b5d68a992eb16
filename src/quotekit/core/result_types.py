"""Ok/Err results for expected service failures.

Services return ``Result[T, str]``; the API layer turns ``Err`` into an
HTTP error and conditions that must fail loudly are raised instead.
"""

from typing import TYPE_CHECKING, Any, Generic, NoReturn, TypeVar

from attrs import frozen
from beartype import beartype

T = TypeVar("T")
E = TypeVar("E")


@frozen
class Ok(Generic[T]):
    """A successful outcome."""

    value: T

    @beartype
    def is_ok(self) -> bool:
        return True

    @beartype
    def is_err(self) -> bool:
        return False

    @property
    def err_value(self) -> None:
        return None

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> NoReturn:
        raise ValueError("Called unwrap_err on Ok value")


@frozen
class Err(Generic[E]):
    """An expected failure, usually a user-facing message."""

    error: E

    @beartype
    def is_ok(self) -> bool:
        return False

    @beartype
    def is_err(self) -> bool:
        return True

    @property
    def err_value(self) -> E:
        return self.error

    def unwrap(self) -> NoReturn:
        raise ValueError(f"Called unwrap on Err value: {self.error}")

    def unwrap_err(self) -> E:
        return self.error


if TYPE_CHECKING:
    Result = Ok[T] | Err[E]
else:

    class Result(Generic[T, E]):
        """Runtime stand-in so ``Result[T, E]`` annotations resolve."""

        def __class_getitem__(cls, params: Any) -> Any:
            return Ok[Any] | Err[Any]

"""
Success/error result wrapper returned by every AI operation.

Callers branch on the variant instead of catching exceptions:

    result = await service.get_key_takeaway("John 3:16")
    if isinstance(result, Success):
        show(result.payload)
    else:
        warn(result.message)
"""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Operation completed; `payload` holds the typed value."""

    payload: T

    @property
    def is_success(self) -> bool:
        return True


@dataclass(frozen=True)
class Error:
    """Operation failed; `message` is human readable, `cause` is the original exception if any."""

    message: str
    cause: Optional[BaseException] = None

    @property
    def is_success(self) -> bool:
        return False

    def __str__(self) -> str:
        return self.message


OperationResult = Union[Success[T], Error]

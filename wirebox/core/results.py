"""
Result objects for non-raising lookups.

Lets bootstrap code probe optional services without try/except blocks.
"""

from typing import Optional, Any, Generic, TypeVar
from dataclasses import dataclass

from .exceptions import ContainerError

T = TypeVar('T')


@dataclass
class Result(Generic[T]):
    """Outcome of a container lookup."""

    success: bool
    value: Optional[T] = None
    exception: Optional[ContainerError] = None

    @classmethod
    def success_result(cls, value: T) -> 'Result[T]':
        """Create a success result."""
        return cls(success=True, value=value)

    @classmethod
    def failure_result(cls, exception: ContainerError) -> 'Result[T]':
        """Create a failure result from the error that was raised."""
        return cls(success=False, exception=exception)

    def is_success(self) -> bool:
        """Check if result is successful."""
        return self.success

    def is_failure(self) -> bool:
        """Check if result is a failure."""
        return not self.success

    def get_value(self) -> T:
        """Get the value, re-raising the original error if failure."""
        if not self.success:
            raise self.exception
        return self.value

    def get_error(self) -> Optional[str]:
        """Get the error message."""
        return str(self.exception) if self.exception is not None else None

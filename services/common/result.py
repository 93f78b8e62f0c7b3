"""
Result Pattern Implementation
Provides a standardized way for services to return results with success/failure status
"""

from typing import TypeVar, Generic, Optional, Any, Dict
from dataclasses import dataclass

T = TypeVar('T')


@dataclass
class Result(Generic[T]):
    """
    A generic Result class for service method returns.

    A failed Result is falsy, so callers that only care whether state
    changed can write ``if not result:``; the error code tells the
    failure kinds apart.

    Examples:
        result = message_cache_service.save(message, contact)
        if result:
            contact_view = result.data.contact
        elif result.code == SaveOutcome.DUPLICATE:
            ...
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def success(cls, data: T, metadata: Optional[Dict[str, Any]] = None) -> 'Result[T]':
        """
        Create a successful result.

        Args:
            data: The successful result data
            metadata: Optional metadata about the operation

        Returns:
            A Result instance representing success
        """
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def failure(cls,
                error: str,
                code: Optional[str] = None,
                metadata: Optional[Dict[str, Any]] = None) -> 'Result[T]':
        """
        Create a failure result.

        Args:
            error: Error message describing the failure
            code: Optional error code for programmatic handling
            metadata: Optional metadata about the failure

        Returns:
            A Result instance representing failure
        """
        return cls(success=False, error=error, error_code=code, metadata=metadata)

    @property
    def is_success(self) -> bool:
        """Check if the result represents a success."""
        return self.success

    @property
    def code(self) -> Optional[str]:
        """Alias for error_code"""
        return self.error_code

    def __bool__(self) -> bool:
        """Allow Result to be used in boolean context."""
        return self.is_success

    def __repr__(self) -> str:
        if self.is_success:
            return f"Result.success(data={self.data!r})"
        return f"Result.failure(error={self.error!r}, code={self.error_code!r})"

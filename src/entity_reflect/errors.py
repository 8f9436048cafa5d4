"""
Error types for entity reflection, identifier resolution, and coercion.
"""

from dataclasses import dataclass
from typing import Any, Optional

from entity_reflect.scalars import target_name


class EntityReflectError(Exception):
    """Base exception for all entity-reflect errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class ReflectionError(EntityReflectError):
    """
    Raised when the metadata of a class cannot be read.

    Examples:
    - ``Annotated[...]`` string annotation that cannot be evaluated
    - Broken ``__slots__`` declaration
    """

    pass


class NoIdentifierFound(EntityReflectError):
    """
    Raised when neither an accessor nor a data member carries the ``Id`` marker
    anywhere in the ancestor chain.
    """

    pass


class AccessError(EntityReflectError):
    """
    Raised when the identifier member cannot be read directly from an instance.

    Examples:
    - Annotated member that was never assigned
    - Unset ``__slots__`` entry
    - ``__getattribute__`` override rejecting the read
    """

    pass


class InvocationError(EntityReflectError):
    """
    Raised when an identifier accessor exists but its getter raised.

    The original exception is available as ``cause`` and is chained as
    ``__cause__`` by the raising code.
    """

    def __init__(
        self,
        message: str,
        cause: BaseException,
        context: Optional["ErrorContext"] = None,
    ):
        self.cause = cause
        super().__init__(message, context)


class ParseError(EntityReflectError):
    """
    Raised when a raw string cannot be coerced to its target type.

    Examples:
    - ``"abc"`` to ``int``
    - ``"300"`` to ``Byte``
    - ``"not-a-uuid"`` to ``UUID``
    - unknown member name to an enum, when strict enums are enabled
    """

    def __init__(self, value: str, target_type: Any, reason: str | None = None):
        self.value = value
        self.target_type = target_type
        message = f"Cannot coerce {value!r} to {target_name(target_type)}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


@dataclass
class ErrorContext:
    """
    Context information for an error, naming the entity and member involved.

    Attributes:
        entity: Class being inspected
        member: Optional member or accessor name
    """

    entity: type
    member: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "Order.id" or "Order"
        """
        location = self.entity.__qualname__
        if self.member:
            location += f".{self.member}"
        return location


def make_no_identifier_error(entity: type) -> NoIdentifierFound:
    """
    Helper to create a NoIdentifierFound for an entity class.

    Args:
        entity: Class without any ``Id`` marker

    Returns:
        NoIdentifierFound with context attached
    """
    return NoIdentifierFound(
        "No Id marker found on accessors or members",
        ErrorContext(entity=entity),
    )


def make_access_error(entity: type, member: str) -> AccessError:
    """
    Helper to create an AccessError for a member read.

    Args:
        entity: Class of the inspected instance
        member: Member name that could not be read

    Returns:
        AccessError with context attached
    """
    return AccessError(
        "Could not read identifier from member",
        ErrorContext(entity=entity, member=member),
    )


def make_invocation_error(entity: type, accessor: str, cause: BaseException) -> InvocationError:
    """
    Helper to create an InvocationError for a failing getter.

    Args:
        entity: Class of the inspected instance
        accessor: Accessor name whose getter raised
        cause: Exception raised by the getter

    Returns:
        InvocationError with context and cause attached
    """
    return InvocationError(
        f"Could not read identifier from accessor: {type(cause).__name__}: {cause}",
        cause,
        ErrorContext(entity=entity, member=accessor),
    )


def make_reflection_error(entity: type, cause: BaseException) -> ReflectionError:
    """
    Helper to create a ReflectionError for unreadable class metadata.

    Args:
        entity: Class whose metadata failed to evaluate
        cause: Underlying exception

    Returns:
        ReflectionError with context attached
    """
    return ReflectionError(
        f"Could not read class metadata: {type(cause).__name__}: {cause}",
        ErrorContext(entity=entity),
    )

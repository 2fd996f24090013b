"""domagent error taxonomy.

Every failure that reaches a caller is reduced to a :class:`StructuredError`
(kind + message + details).  The exception classes below carry the kind with
them so the two capture seams (batch items and sequencer tasks) can convert
them without inspecting message text.
"""

from __future__ import annotations

import dataclasses
import enum
from typing import Any


class ErrorKind(str, enum.Enum):
    """Stable, serializable failure categories."""

    ELEMENT_INTERACTION = "ElementInteractionFailure"
    LANGUAGE_MODEL_CALL = "LanguageModelCallFailure"
    INVALID_MODEL_RESPONSE = "InvalidModelResponse"
    COMMAND_VALIDATION = "CommandValidationFailure"
    RESULT_SERIALIZATION = "ResultSerializationFailure"


class InteractionErrorKind(str, enum.Enum):
    """Sub-kinds reported by the element interaction service."""

    ELEMENT_NOT_FOUND = "ElementNotFound"
    INVALID_SELECTOR = "InvalidSelector"
    ELEMENT_TYPE = "ElementTypeError"
    ATTRIBUTE_NOT_FOUND = "AttributeNotFound"
    SET_ATTRIBUTE = "SetAttributeError"
    PLATFORM_ERROR = "PlatformError"


@dataclasses.dataclass(frozen=True)
class StructuredError:
    """Caller-facing error record."""

    kind: ErrorKind
    message: str
    details: dict[str, Any] = dataclasses.field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.details:
            data["details"] = self.details
        return data

    def with_prefix(self, prefix: str) -> StructuredError:
        """Return a copy whose message starts with *prefix*."""
        return dataclasses.replace(self, message=f"{prefix}{self.message}")


class DomAgentError(Exception):
    """Base class for failures that are captured and returned, not raised to callers."""

    kind: ErrorKind

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_structured(self) -> StructuredError:
        return StructuredError(kind=self.kind, message=self.message, details=dict(self.details))


class ElementInteractionError(DomAgentError):
    """The element interaction service could not complete a primitive.

    The message is the service's own text, e.g.
    ``ElementNotFound: No element found for CSS selector '#go'``.
    """

    kind = ErrorKind.ELEMENT_INTERACTION

    def __init__(
        self,
        sub_kind: InteractionErrorKind,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.sub_kind = sub_kind

    def to_structured(self) -> StructuredError:
        details = {"sub_kind": self.sub_kind.value, **self.details}
        return StructuredError(kind=self.kind, message=self.message, details=details)


class LanguageModelCallError(DomAgentError):
    """Transport, authentication or availability failure calling the model."""

    kind = ErrorKind.LANGUAGE_MODEL_CALL


class InvalidModelResponseError(DomAgentError):
    """The model returned structured-looking data with the wrong shape."""

    kind = ErrorKind.INVALID_MODEL_RESPONSE


class CommandValidationError(DomAgentError):
    """A well-formed command is missing a required field or names an unknown verb."""

    kind = ErrorKind.COMMAND_VALIDATION


class ResultSerializationError(DomAgentError):
    """Results could not be encoded into the wire format."""

    kind = ErrorKind.RESULT_SERIALIZATION


class TaskListError(ValueError):
    """The task list itself is malformed; raised before any task runs."""

    pass

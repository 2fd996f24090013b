"""Execution results and the JSON wire format."""

from __future__ import annotations

import dataclasses
import json
from typing import Any, Union

from domagent.errors import DomAgentError, ResultSerializationError, StructuredError

# A task's success payload: a plain message, or the per-command results of a batch.
Output = Union[str, "list[ExecutionResult]"]


@dataclasses.dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one command or one task."""

    success: bool
    output: Output | None = None
    error: StructuredError | None = None

    @classmethod
    def ok(cls, output: Output) -> ExecutionResult:
        return cls(success=True, output=output)

    @classmethod
    def fail(cls, error: StructuredError | DomAgentError) -> ExecutionResult:
        if isinstance(error, DomAgentError):
            error = error.to_structured()
        return cls(success=False, error=error)

    @property
    def message(self) -> str:
        """Human-readable summary regardless of outcome."""
        if not self.success:
            return self.error.message if self.error else ""
        if isinstance(self.output, list):
            return "\n".join(item.message for item in self.output)
        return self.output or ""

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {"status": "error", "error": self.error.to_dict()}
        if isinstance(self.output, list):
            return {"status": "success", "output": [item.to_dict() for item in self.output]}
        return {"status": "success", "output": self.output}


def serialize_results(results: list[ExecutionResult]) -> str:
    """Encode *results* as the JSON wire array.

    Raises ResultSerializationError if any payload cannot be encoded.
    """
    try:
        return json.dumps([result.to_dict() for result in results], ensure_ascii=False)
    except (TypeError, ValueError, AttributeError) as exc:
        raise ResultSerializationError(f"Failed to serialize results: {exc}") from exc

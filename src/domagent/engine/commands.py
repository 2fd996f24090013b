"""Command model -- the closed verb set and the two command shapes.

``StructuredCommand`` is the only shape the executor accepts; it validates its
own required fields on construction.  ``ProposedCommand`` is the loose shape
decoded from model output and must be promoted through :meth:`to_command`.
"""

from __future__ import annotations

import dataclasses
import enum
import re
from typing import Any

from domagent.errors import CommandValidationError, InvalidModelResponseError


class Verb(str, enum.Enum):
    """Element-interaction actions understood by the executor."""

    CLICK = "CLICK"
    TYPE = "TYPE"
    READ = "READ"
    GETVALUE = "GETVALUE"
    GETATTRIBUTE = "GETATTRIBUTE"
    SETATTRIBUTE = "SETATTRIBUTE"
    SELECTOPTION = "SELECTOPTION"
    GET_ALL_ATTRIBUTES = "GET_ALL_ATTRIBUTES"
    GET_URL = "GET_URL"
    ELEMENT_EXISTS = "ELEMENT_EXISTS"
    IS_VISIBLE = "IS_VISIBLE"
    SCROLL_TO = "SCROLL_TO"
    HOVER = "HOVER"
    WAIT_FOR_ELEMENT = "WAIT_FOR_ELEMENT"
    GET_ALL_TEXT = "GET_ALL_TEXT"

    @classmethod
    def lookup(cls, name: str) -> Verb | None:
        """Case-insensitive lookup; None for unknown names."""
        try:
            return cls(name.strip().upper())
        except ValueError:
            return None

    @property
    def requires_selector(self) -> bool:
        return self is not Verb.GET_URL

    @property
    def requires_value(self) -> bool:
        return self in _VALUE_REQUIRED

    @property
    def requires_attribute(self) -> bool:
        return self in _ATTRIBUTE_REQUIRED


_VALUE_REQUIRED = frozenset({Verb.TYPE, Verb.SETATTRIBUTE, Verb.SELECTOPTION})
_ATTRIBUTE_REQUIRED = frozenset({Verb.GETATTRIBUTE, Verb.SETATTRIBUTE, Verb.GET_ALL_ATTRIBUTES})

_TIMEOUT_RE = re.compile(r"[0-9]+")


def parse_timeout_ms(token: str | None) -> int | None:
    """Return *token* as milliseconds if it is plain ASCII digits, else None."""
    if token is None:
        return None
    token = token.strip()
    if not _TIMEOUT_RE.fullmatch(token):
        return None
    return int(token)


@dataclasses.dataclass(frozen=True)
class StructuredCommand:
    """A validated command ready for execution."""

    verb: Verb
    selector: str = ""
    value: str | None = None
    attribute_name: str | None = None
    timeout_ms: int | None = None  # WAIT_FOR_ELEMENT only
    separator: str | None = None  # GET_ALL_TEXT only

    def __post_init__(self) -> None:
        verb = self.verb.value
        if self.verb.requires_selector and not self.selector:
            raise CommandValidationError(
                f"{verb} requires a selector",
                {"verb": verb, "missing": "selector"},
            )
        if self.verb.requires_value and not self.value:
            raise CommandValidationError(
                f"{verb} requires a value",
                {"verb": verb, "missing": "value"},
            )
        if self.verb.requires_attribute and not self.attribute_name:
            raise CommandValidationError(
                f"{verb} requires an attribute name",
                {"verb": verb, "missing": "attribute_name"},
            )
        if self.timeout_ms is not None and self.timeout_ms < 0:
            raise CommandValidationError(
                f"{verb} timeout must be non-negative, got {self.timeout_ms}",
                {"verb": verb, "timeout_ms": self.timeout_ms},
            )

    def describe(self) -> str:
        """Reconstruct the command in direct-grammar form, e.g. ``TYPE #name Ada``."""
        parts = [self.verb.value]
        if self.selector:
            parts.append(self.selector)
        if self.attribute_name:
            parts.append(self.attribute_name)
        if self.value:
            parts.append(self.value)
        if self.timeout_ms is not None:
            parts.append(str(self.timeout_ms))
        if self.separator is not None:
            parts.append(f'"{self.separator}"')
        return " ".join(parts)


@dataclasses.dataclass
class ProposedCommand:
    """Untrusted command as proposed by the language model.

    Wire shape: ``{"action": str, "selector": str, "value"?: str, "attribute_name"?: str}``.
    """

    action: str
    selector: str
    value: str | None = None
    attribute_name: str | None = None

    @staticmethod
    def _optional_str(val: Any) -> str | None:
        """Coerce an optional scalar to str; None and "" stay None."""
        if val is None or val == "":
            return None
        if isinstance(val, (str, int, float)) and not isinstance(val, bool):
            return str(val)
        raise TypeError(f"expected a string, got {type(val).__name__}")

    @classmethod
    def from_dict(cls, data: Any, index: int) -> ProposedCommand:
        """Decode one batch item; raises InvalidModelResponseError on a structural mismatch."""
        if not isinstance(data, dict):
            raise InvalidModelResponseError(
                f"Item {index} is not a command object: {data!r}",
                {"index": index, "value": data},
            )
        action = data.get("action")
        selector = data.get("selector", "")
        if not isinstance(action, str) or not isinstance(selector, str):
            raise InvalidModelResponseError(
                f"Item {index} must have string 'action' and 'selector' fields: {data!r}",
                {"index": index, "value": data},
            )
        try:
            value = cls._optional_str(data.get("value"))
            attribute_name = cls._optional_str(data.get("attribute_name"))
        except TypeError as exc:
            raise InvalidModelResponseError(
                f"Item {index} has a malformed optional field ({exc}): {data!r}",
                {"index": index, "value": data},
            ) from exc
        return cls(action=action, selector=selector, value=value, attribute_name=attribute_name)

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    def to_command(self, index: int) -> StructuredCommand:
        """Promote to a StructuredCommand or raise CommandValidationError."""
        verb = Verb.lookup(self.action)
        if verb is None:
            raise CommandValidationError(
                f"Item {index} uses unknown verb '{self.action}'",
                {"index": index, "verb": self.action},
            )

        missing = []
        if verb.requires_value and not self.value:
            missing.append("value")
        if verb.requires_attribute and not self.attribute_name:
            missing.append("attribute_name")
        if verb.requires_selector and not self.selector.strip():
            missing.append("selector")
        if missing:
            raise CommandValidationError(
                f"Item {index} ({verb.value}) is missing required field(s): {', '.join(missing)}",
                {"index": index, "verb": verb.value, "missing": missing, "command": self.to_dict()},
            )

        timeout_ms = None
        separator = None
        value = self.value
        if verb is Verb.WAIT_FOR_ELEMENT:
            # The wire shape has no timeout field; a numeric value stands in for it.
            timeout_ms = parse_timeout_ms(value)
            value = None
        elif verb is Verb.GET_ALL_TEXT:
            separator = value
            value = None

        return StructuredCommand(
            verb=verb,
            selector=self.selector.strip() if verb.requires_selector else "",
            value=value if verb.requires_value else None,
            attribute_name=self.attribute_name if verb.requires_attribute else None,
            timeout_ms=timeout_ms,
            separator=separator,
        )

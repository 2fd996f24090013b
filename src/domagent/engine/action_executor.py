"""domagent Command Executor -- runs one StructuredCommand against the page.

Each verb maps to exactly one element interaction service call and a
human-readable success message.  Service failures propagate unchanged as
``ElementInteractionError``; anything else the service raises is wrapped as a
``PlatformError`` sub-kind so callers only ever see the taxonomy.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable

from domagent.engine.commands import StructuredCommand, Verb
from domagent.engine.protocols import ElementInteractionService
from domagent.errors import ElementInteractionError, InteractionErrorKind
from domagent.models import DEFAULT_TEXT_SEPARATOR, DEFAULT_WAIT_TIMEOUT_MS

logger = logging.getLogger("domagent.engine.action_executor")

Handler = Callable[[StructuredCommand], Awaitable[str]]


def _escape_separator(separator: str) -> str:
    """Render a separator with control characters visible (newline -> ``\\n``)."""
    return separator.encode("unicode_escape").decode("ascii")


def _bool_text(flag: bool) -> str:
    return "true" if flag else "false"


class CommandExecutor:
    """Executes StructuredCommand objects against an ElementInteractionService."""

    def __init__(
        self,
        service: ElementInteractionService,
        default_timeout_ms: int = DEFAULT_WAIT_TIMEOUT_MS,
        default_separator: str = DEFAULT_TEXT_SEPARATOR,
    ) -> None:
        self._service = service
        self._default_timeout_ms = default_timeout_ms
        self._default_separator = default_separator
        self._handlers: dict[Verb, Handler] = {
            Verb.CLICK: self._do_click,
            Verb.TYPE: self._do_type,
            Verb.READ: self._do_read,
            Verb.GETVALUE: self._do_get_value,
            Verb.GETATTRIBUTE: self._do_get_attribute,
            Verb.SETATTRIBUTE: self._do_set_attribute,
            Verb.SELECTOPTION: self._do_select_option,
            Verb.GET_ALL_ATTRIBUTES: self._do_get_all_attributes,
            Verb.GET_URL: self._do_get_url,
            Verb.ELEMENT_EXISTS: self._do_element_exists,
            Verb.IS_VISIBLE: self._do_is_visible,
            Verb.SCROLL_TO: self._do_scroll_to,
            Verb.HOVER: self._do_hover,
            Verb.WAIT_FOR_ELEMENT: self._do_wait_for_element,
            Verb.GET_ALL_TEXT: self._do_get_all_text,
        }
        missing = set(Verb) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No executor handler for verb(s): {sorted(v.value for v in missing)}")

    @property
    def handled_verbs(self) -> frozenset[Verb]:
        return frozenset(self._handlers)

    async def execute(self, command: StructuredCommand) -> str:
        """Execute *command* and return its success message.

        Raises:
            ElementInteractionError: the service failed; sub-kind preserved.
        """
        logger.info("Executing %s", command.describe())
        handler = self._handlers[command.verb]
        try:
            message = await handler(command)
        except ElementInteractionError as exc:
            logger.info("%s failed: %s", command.verb.value, exc.message)
            raise
        except Exception as exc:
            logger.warning("%s raised an unexpected platform error: %s", command.verb.value, exc)
            raise ElementInteractionError(
                InteractionErrorKind.PLATFORM_ERROR,
                f"PlatformError: {exc}",
            ) from exc
        logger.debug("%s -> %s", command.verb.value, message[:200])
        return message

    # -- Actions ---------------------------------------------------------------

    async def _do_click(self, cmd: StructuredCommand) -> str:
        await self._service.click(cmd.selector)
        return f"Successfully clicked element with selector: {cmd.selector}"

    async def _do_type(self, cmd: StructuredCommand) -> str:
        await self._service.type_text(cmd.selector, cmd.value)
        return f"Successfully typed '{cmd.value}' into element with selector: {cmd.selector}"

    async def _do_set_attribute(self, cmd: StructuredCommand) -> str:
        await self._service.set_attribute(cmd.selector, cmd.attribute_name, cmd.value)
        return (
            f"Successfully set attribute '{cmd.attribute_name}' to '{cmd.value}' "
            f"on element with selector: {cmd.selector}"
        )

    async def _do_select_option(self, cmd: StructuredCommand) -> str:
        await self._service.select_option(cmd.selector, cmd.value)
        return f"Successfully selected option '{cmd.value}' in element with selector: {cmd.selector}"

    async def _do_scroll_to(self, cmd: StructuredCommand) -> str:
        await self._service.scroll_to(cmd.selector)
        return f"Successfully scrolled to element with selector: {cmd.selector}"

    async def _do_hover(self, cmd: StructuredCommand) -> str:
        await self._service.hover(cmd.selector)
        return f"Successfully hovered over element with selector: {cmd.selector}"

    # -- Queries ---------------------------------------------------------------

    async def _do_read(self, cmd: StructuredCommand) -> str:
        text = await self._service.get_text(cmd.selector)
        return f"Text of element '{cmd.selector}': {text}"

    async def _do_get_value(self, cmd: StructuredCommand) -> str:
        value = await self._service.get_value(cmd.selector)
        return f"Value of element '{cmd.selector}': {value}"

    async def _do_get_attribute(self, cmd: StructuredCommand) -> str:
        value = await self._service.get_attribute(cmd.selector, cmd.attribute_name)
        return f"Attribute '{cmd.attribute_name}' of element '{cmd.selector}': {value}"

    async def _do_get_all_attributes(self, cmd: StructuredCommand) -> str:
        values = await self._service.get_all_attributes(cmd.selector, cmd.attribute_name)
        return (
            f"Successfully retrieved attributes '{cmd.attribute_name}' for elements "
            f"matching selector '{cmd.selector}': {json.dumps(values, separators=(',', ':'))}"
        )

    async def _do_get_url(self, cmd: StructuredCommand) -> str:
        url = await self._service.get_url()
        return f"Current URL: {url}"

    async def _do_element_exists(self, cmd: StructuredCommand) -> str:
        exists = await self._service.element_exists(cmd.selector)
        return f"Element '{cmd.selector}' exists: {_bool_text(exists)}"

    async def _do_is_visible(self, cmd: StructuredCommand) -> str:
        visible = await self._service.is_visible(cmd.selector)
        return f"Element '{cmd.selector}' is visible: {_bool_text(visible)}"

    async def _do_wait_for_element(self, cmd: StructuredCommand) -> str:
        timeout_ms = cmd.timeout_ms if cmd.timeout_ms is not None else self._default_timeout_ms
        await self._service.wait_for_element(cmd.selector, timeout_ms)
        return f"Element '{cmd.selector}' appeared within {timeout_ms}ms"

    async def _do_get_all_text(self, cmd: StructuredCommand) -> str:
        separator = cmd.separator if cmd.separator is not None else self._default_separator
        joined = await self._service.get_all_text(cmd.selector, separator)
        return (
            f"Text of elements matching '{cmd.selector}' "
            f"(separator '{_escape_separator(separator)}'): {joined}"
        )

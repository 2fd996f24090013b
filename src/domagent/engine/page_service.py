"""Playwright implementation of the element interaction service.

Selectors use a small prefix convention:

- ``xpath://div[@id='x']`` -- XPath
- ``css:#x`` -- CSS (explicit)
- ``#x`` -- CSS (default)

Single-element primitives act on the first match and fail with
``ElementNotFound`` when nothing matches; multi-element queries return an
empty list instead.  Failures use the ``<SubKind>: <detail>`` message form,
e.g. ``ElementNotFound: No element found for CSS selector '#go'``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from domagent.errors import ElementInteractionError, InteractionErrorKind

if TYPE_CHECKING:
    from playwright.async_api import Locator, Page

logger = logging.getLogger("domagent.engine.page_service")

_TEXT_INPUT_TAGS = frozenset({"input", "textarea"})
_VALUE_TAGS = frozenset({"input", "textarea", "select"})


# Playwright reports selector syntax problems with these phrases; anything
# else (closed page, crashed target) is a platform failure.
_SELECTOR_ERROR_MARKERS = (
    "is not a valid selector",
    "not a valid xpath",
    "unexpected token",
    "failed to parse selector",
    "unknown engine",
    "syntaxerror",
)


def resolve_selector(selector: str) -> tuple[str, str]:
    """Map a prefixed selector to ``(playwright_selector, kind_label)``."""
    if selector.startswith("xpath:"):
        return f"xpath={selector[len('xpath:'):]}", "XPath"
    if selector.startswith("css:"):
        return f"css={selector[len('css:'):]}", "CSS"
    return f"css={selector}", "CSS"


class PlaywrightElementService:
    """ElementInteractionService over a Playwright async ``Page``."""

    # Upper bound for actionability waits on click/fill/hover (ms)
    ACTION_TIMEOUT_MS = 5_000

    def __init__(self, page: Page, action_timeout_ms: int = ACTION_TIMEOUT_MS) -> None:
        self._page = page
        self._action_timeout_ms = action_timeout_ms

    # -- Element lookup --------------------------------------------------------

    @staticmethod
    def _lookup_error(exc: PlaywrightError, selector: str, kind: str) -> ElementInteractionError:
        detail = exc.message or str(exc)
        if any(marker in detail.lower() for marker in _SELECTOR_ERROR_MARKERS):
            return ElementInteractionError(
                InteractionErrorKind.INVALID_SELECTOR,
                f"InvalidSelector: Invalid {kind} selector '{selector}'. Details: {detail}",
            )
        return ElementInteractionError(
            InteractionErrorKind.PLATFORM_ERROR,
            f"PlatformError: {detail}",
        )

    async def _count(self, selector: str) -> tuple[Locator, int]:
        pw_selector, kind = resolve_selector(selector)
        locator = self._page.locator(pw_selector)
        try:
            count = await locator.count()
        except PlaywrightError as exc:
            raise self._lookup_error(exc, selector, kind) from exc
        return locator, count

    async def _find(self, selector: str) -> Locator:
        locator, count = await self._count(selector)
        if count == 0:
            _, kind = resolve_selector(selector)
            raise ElementInteractionError(
                InteractionErrorKind.ELEMENT_NOT_FOUND,
                f"ElementNotFound: No element found for {kind} selector '{selector}'",
            )
        return locator.first

    async def _require_tag(self, element: Locator, selector: str, tags: frozenset[str], noun: str) -> None:
        tag = await element.evaluate("e => e.tagName.toLowerCase()")
        if tag not in tags:
            raise ElementInteractionError(
                InteractionErrorKind.ELEMENT_TYPE,
                f"ElementTypeError: Element for selector '{selector}' is not {noun}.",
            )

    # -- Actions ---------------------------------------------------------------

    async def click(self, selector: str) -> None:
        element = await self._find(selector)
        await element.click(timeout=self._action_timeout_ms)

    async def type_text(self, selector: str, text: str) -> None:
        element = await self._find(selector)
        await self._require_tag(element, selector, _TEXT_INPUT_TAGS, "an input element")
        await element.fill(text, timeout=self._action_timeout_ms)

    async def set_attribute(self, selector: str, attribute_name: str, value: str) -> None:
        element = await self._find(selector)
        try:
            await element.evaluate("(e, [n, v]) => e.setAttribute(n, v)", [attribute_name, value])
        except PlaywrightError as exc:
            raise ElementInteractionError(
                InteractionErrorKind.SET_ATTRIBUTE,
                f"SetAttributeError: Failed to set attribute '{attribute_name}' on element "
                f"with selector '{selector}'. Details: {exc.message}",
            ) from exc

    async def select_option(self, selector: str, value: str) -> None:
        element = await self._find(selector)
        await self._require_tag(element, selector, frozenset({"select"}), "a select element")
        await element.select_option(value=value, timeout=self._action_timeout_ms)

    async def scroll_to(self, selector: str) -> None:
        element = await self._find(selector)
        await element.scroll_into_view_if_needed(timeout=self._action_timeout_ms)

    async def hover(self, selector: str) -> None:
        element = await self._find(selector)
        await element.hover(timeout=self._action_timeout_ms)

    # -- Queries ---------------------------------------------------------------

    async def get_text(self, selector: str) -> str:
        element = await self._find(selector)
        return await element.inner_text()

    async def get_value(self, selector: str) -> str:
        element = await self._find(selector)
        await self._require_tag(element, selector, _VALUE_TAGS, "an input element")
        return await element.input_value()

    async def get_attribute(self, selector: str, attribute_name: str) -> str:
        element = await self._find(selector)
        value = await element.get_attribute(attribute_name)
        if value is None:
            raise ElementInteractionError(
                InteractionErrorKind.ATTRIBUTE_NOT_FOUND,
                f"AttributeNotFound: Attribute '{attribute_name}' not found on element "
                f"with selector '{selector}'",
            )
        return value

    async def get_all_attributes(self, selector: str, attribute_name: str) -> list[str | None]:
        locator, count = await self._count(selector)
        if count == 0:
            logger.info("No elements found for selector '%s'. Returning empty list.", selector)
            return []
        return await locator.evaluate_all("(els, n) => els.map(e => e.getAttribute(n))", attribute_name)

    async def get_url(self) -> str:
        return self._page.url

    async def element_exists(self, selector: str) -> bool:
        _, count = await self._count(selector)
        return count > 0

    async def is_visible(self, selector: str) -> bool:
        locator, count = await self._count(selector)
        if count == 0:
            return False
        return await locator.first.is_visible()

    async def wait_for_element(self, selector: str, timeout_ms: int) -> None:
        pw_selector, kind = resolve_selector(selector)
        try:
            await self._page.locator(pw_selector).first.wait_for(state="attached", timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise ElementInteractionError(
                InteractionErrorKind.ELEMENT_NOT_FOUND,
                f"ElementNotFound: No element found for {kind} selector '{selector}' "
                f"within {timeout_ms}ms",
            ) from exc
        except PlaywrightError as exc:
            raise self._lookup_error(exc, selector, kind) from exc

    async def get_all_text(self, selector: str, separator: str) -> str:
        locator, count = await self._count(selector)
        if count == 0:
            return ""
        texts = await locator.all_inner_texts()
        return separator.join(texts)

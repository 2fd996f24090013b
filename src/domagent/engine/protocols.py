"""Collaborator protocols.

These define the contract between domagent's command pipeline and the two
external capabilities it drives: the element interaction service (the page)
and the language model client.  ``PlaywrightElementService`` and
``AnthropicModelClient`` are the bundled implementations; tests inject fakes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ElementInteractionService(Protocol):
    """Page primitives addressed by selector.

    Selectors prefixed ``xpath:`` are XPath expressions; ``css:`` or no prefix
    means CSS.  Failures are raised as ``ElementInteractionError``.
    """

    async def click(self, selector: str) -> None: ...

    async def type_text(self, selector: str, text: str) -> None: ...

    async def get_text(self, selector: str) -> str: ...

    async def get_value(self, selector: str) -> str: ...

    async def get_attribute(self, selector: str, attribute_name: str) -> str: ...

    async def set_attribute(self, selector: str, attribute_name: str, value: str) -> None: ...

    async def select_option(self, selector: str, value: str) -> None: ...

    async def get_all_attributes(self, selector: str, attribute_name: str) -> list[str | None]: ...

    async def get_url(self) -> str: ...

    async def element_exists(self, selector: str) -> bool: ...

    async def is_visible(self, selector: str) -> bool: ...

    async def scroll_to(self, selector: str) -> None: ...

    async def hover(self, selector: str) -> None: ...

    async def wait_for_element(self, selector: str, timeout_ms: int) -> None: ...

    async def get_all_text(self, selector: str, separator: str) -> str: ...


@runtime_checkable
class LanguageModelClient(Protocol):
    """Single-shot text completion.  Raises ``LanguageModelCallError`` on failure."""

    async def complete(self, prompt: str) -> str: ...

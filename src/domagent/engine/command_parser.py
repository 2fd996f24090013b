"""Direct command grammar.

Recognises task strings that are already commands, e.g.::

    CLICK css:#submit
    TYPE #email ada@example.com
    SETATTRIBUTE #box data-state open
    WAIT_FOR_ELEMENT xpath://div[@id='ready'] 2000
    GET_ALL_TEXT css:li.item " | "

Anything that does not match returns None so the caller can fall back to
model interpretation.
"""

from __future__ import annotations

import logging

from domagent.engine.commands import StructuredCommand, Verb, parse_timeout_ms

logger = logging.getLogger("domagent.engine.command_parser")

_SELECTOR_ONLY = frozenset(
    {
        Verb.CLICK,
        Verb.READ,
        Verb.GETVALUE,
        Verb.ELEMENT_EXISTS,
        Verb.IS_VISIBLE,
        Verb.SCROLL_TO,
        Verb.HOVER,
    }
)

# Two-argument verbs and the StructuredCommand field their second argument fills
_SELECTOR_AND_ARG = {
    Verb.TYPE: "value",
    Verb.SELECTOPTION: "value",
    Verb.GETATTRIBUTE: "attribute_name",
    Verb.GET_ALL_ATTRIBUTES: "attribute_name",
}

_QUOTES = ('"', "'")


def _split_once(text: str) -> tuple[str, str]:
    """Split on the first whitespace run; the second part keeps inner whitespace."""
    parts = text.split(None, 1)
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], parts[1].strip()


def _unquote(text: str) -> str | None:
    """Return the inside of a matching quote pair, or None if *text* is not quoted."""
    if len(text) >= 2 and text[0] in _QUOTES and text[-1] == text[0]:
        return text[1:-1]
    return None


def parse_direct_command(task: str) -> StructuredCommand | None:
    """Parse *task* against the command grammar.

    Returns a StructuredCommand on a match, or None when the first token is not
    a known verb or a required argument is missing.
    """
    head, rest = _split_once(task.strip())
    verb = Verb.lookup(head) if head else None
    if verb is None:
        return None

    if verb is Verb.GET_URL:
        if rest:
            logger.warning("GET_URL takes no arguments; ignoring %r", rest)
        return StructuredCommand(verb=verb)

    if verb in _SELECTOR_ONLY:
        if not rest:
            return None
        return StructuredCommand(verb=verb, selector=rest)

    if verb in _SELECTOR_AND_ARG:
        selector, arg = _split_once(rest)
        if not selector or not arg:
            return None
        return StructuredCommand(verb=verb, selector=selector, **{_SELECTOR_AND_ARG[verb]: arg})

    if verb is Verb.SETATTRIBUTE:
        parts = rest.split(None, 2)
        if len(parts) < 3:
            return None
        selector, attribute_name, value = parts[0], parts[1], parts[2].strip()
        if not value:
            return None
        return StructuredCommand(verb=verb, selector=selector, attribute_name=attribute_name, value=value)

    if verb is Verb.WAIT_FOR_ELEMENT:
        selector, timeout_token = _split_once(rest)
        if not selector:
            return None
        timeout_ms = parse_timeout_ms(timeout_token)
        if timeout_token and timeout_ms is None:
            logger.warning(
                "WAIT_FOR_ELEMENT timeout %r is not a number; using the default timeout",
                timeout_token,
            )
        return StructuredCommand(verb=verb, selector=selector, timeout_ms=timeout_ms)

    if verb is Verb.GET_ALL_TEXT:
        selector, separator_text = _split_once(rest)
        if not selector:
            return None
        separator: str | None = None
        if separator_text:
            quoted = _unquote(separator_text)
            separator = quoted if quoted is not None else separator_text
        return StructuredCommand(verb=verb, selector=selector, separator=separator)

    # Every Verb member is handled above.
    raise AssertionError(f"unhandled verb {verb!r}")

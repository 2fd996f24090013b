"""domagent Command Interpreter -- turns a free-form task into commands via a model.

Builds a deterministic prompt from the persona and task, calls the language
model once, and classifies the reply as either a batch of proposed commands
(a JSON array) or a natural-language answer (anything else that is not
broken JSON).
"""

from __future__ import annotations

import dataclasses
import json
import logging
from typing import Any, Union

from domagent.engine.commands import Verb
from domagent.engine.personas import Persona
from domagent.engine.protocols import LanguageModelClient
from domagent.errors import InvalidModelResponseError, LanguageModelCallError

logger = logging.getLogger("domagent.engine.interpreter")

# One example per verb, embedded in every prompt.
COMMAND_EXAMPLES: dict[Verb, dict[str, str]] = {
    Verb.CLICK: {"action": "CLICK", "selector": "css:#submit"},
    Verb.TYPE: {"action": "TYPE", "selector": "css:#email", "value": "ada@example.com"},
    Verb.READ: {"action": "READ", "selector": "css:h1"},
    Verb.GETVALUE: {"action": "GETVALUE", "selector": "css:#email"},
    Verb.GETATTRIBUTE: {"action": "GETATTRIBUTE", "selector": "css:a.next", "attribute_name": "href"},
    Verb.SETATTRIBUTE: {
        "action": "SETATTRIBUTE",
        "selector": "css:#panel",
        "attribute_name": "data-state",
        "value": "open",
    },
    Verb.SELECTOPTION: {"action": "SELECTOPTION", "selector": "css:#country", "value": "NZ"},
    Verb.GET_ALL_ATTRIBUTES: {
        "action": "GET_ALL_ATTRIBUTES",
        "selector": "css:ul.results a",
        "attribute_name": "href",
    },
    Verb.GET_URL: {"action": "GET_URL", "selector": ""},
    Verb.ELEMENT_EXISTS: {"action": "ELEMENT_EXISTS", "selector": "xpath://div[@id='banner']"},
    Verb.IS_VISIBLE: {"action": "IS_VISIBLE", "selector": "css:.modal"},
    Verb.SCROLL_TO: {"action": "SCROLL_TO", "selector": "css:footer"},
    Verb.HOVER: {"action": "HOVER", "selector": "css:nav .menu"},
    Verb.WAIT_FOR_ELEMENT: {"action": "WAIT_FOR_ELEMENT", "selector": "css:#results", "value": "5000"},
    Verb.GET_ALL_TEXT: {"action": "GET_ALL_TEXT", "selector": "css:li.item", "value": ", "},
}


@dataclasses.dataclass(frozen=True)
class NaturalLanguageAnswer:
    """The model answered in prose (or with non-command JSON); echoed verbatim."""

    text: str


@dataclasses.dataclass(frozen=True)
class CommandBatch:
    """The model proposed commands.  Items are untrusted and validated later."""

    items: list[Any]


Interpretation = Union[NaturalLanguageAnswer, CommandBatch]


def _strip_code_fence(text: str) -> str:
    """Remove one surrounding markdown code fence, if present."""
    if not text.startswith("```"):
        return text
    lines = text.split("\n")
    if lines and lines[0].strip().startswith("```"):
        lines = lines[1:]
    if lines and lines[-1].strip() == "```":
        lines = lines[:-1]
    return "\n".join(lines).strip()


def classify_response(raw_text: str) -> Interpretation:
    """Classify a raw model reply.

    - non-empty JSON array -> CommandBatch
    - empty array, or any other JSON value -> NaturalLanguageAnswer(raw_text)
    - unparseable text starting with ``{`` or ``[`` -> InvalidModelResponseError
    - other unparseable text -> NaturalLanguageAnswer(raw_text)
    """
    text = _strip_code_fence(raw_text.strip())
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        # RecursionError: nesting deeper than the decoder can follow.
        if text.startswith(("{", "[")):
            raise InvalidModelResponseError(
                f"Model response looked like structured data but failed to parse: {exc}",
                {"response": raw_text[:500]},
            ) from exc
        return NaturalLanguageAnswer(raw_text)

    if isinstance(data, list) and data:
        return CommandBatch(data)
    return NaturalLanguageAnswer(raw_text)


class CommandInterpreter:
    """Asks the language model to translate a task into commands."""

    def __init__(self, client: LanguageModelClient) -> None:
        self._client = client

    @staticmethod
    def build_prompt(task: str, persona: Persona) -> str:
        """Build the interpretation prompt.  Same inputs always give the same prompt."""
        verbs = ", ".join(v.value for v in Verb)
        examples = "\n".join(json.dumps(COMMAND_EXAMPLES[v]) for v in Verb)
        lines = [
            f"You are agent {persona.id} ({persona.role.value}), automating a web page.",
            "",
            f"Task: {task}",
            "",
            "If the task can be carried out with page commands, respond with ONLY a JSON array of",
            'command objects: {"action": VERB, "selector": SELECTOR, "value"?: TEXT, "attribute_name"?: NAME}.',
            f"Allowed verbs: {verbs}",
            "Selectors are CSS by default; prefix with 'xpath:' for XPath or 'css:' to be explicit.",
            "TYPE, SETATTRIBUTE and SELECTOPTION require 'value'.",
            "GETATTRIBUTE, SETATTRIBUTE and GET_ALL_ATTRIBUTES require 'attribute_name'.",
            "WAIT_FOR_ELEMENT takes an optional timeout in milliseconds as 'value'.",
            "GET_ALL_TEXT takes an optional separator as 'value'.",
            "",
            "One example per verb:",
            examples,
            "",
            "If the task is a question that needs no page commands, answer in plain text instead.",
        ]
        return "\n".join(lines)

    async def interpret(self, task: str, persona: Persona) -> Interpretation:
        """Interpret *task* for *persona*.

        Raises:
            LanguageModelCallError: the model call failed (no retry).
            InvalidModelResponseError: the reply looked like JSON but did not parse.
        """
        prompt = self.build_prompt(task, persona)
        logger.info("Interpreting task via model (persona %d): %s", persona.id, task[:80])
        try:
            raw_text = await self._client.complete(prompt)
        except LanguageModelCallError:
            raise
        except Exception as exc:
            logger.error("Language model call failed: %s", exc)
            raise LanguageModelCallError(f"Language model call failed: {exc}") from exc

        interpretation = classify_response(raw_text)
        if isinstance(interpretation, CommandBatch):
            logger.info("Model proposed %d command(s)", len(interpretation.items))
        else:
            logger.info("Model answered in natural language")
        return interpretation

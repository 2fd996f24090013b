"""Persona registry and selection.

A persona labels which behaviour "performed" a task.  Selection is keyword
affinity plus priority, with a deterministic tie-break, and never changes
how a command executes.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
from collections.abc import Iterable

from domagent.config import DomAgentConfigError

logger = logging.getLogger("domagent.engine.personas")


class PersonaRole(str, enum.Enum):
    NAVIGATOR = "navigator"
    FORM_FILLER = "form_filler"
    GENERIC = "generic"


@dataclasses.dataclass(frozen=True)
class Persona:
    """An immutable persona definition."""

    id: int
    role: PersonaRole
    keywords: frozenset[str] = frozenset()
    priority: int = 0

    @property
    def is_generic(self) -> bool:
        return self.role is PersonaRole.GENERIC

    def matches(self, lowered_task: str) -> bool:
        return any(keyword in lowered_task for keyword in self.keywords)


class PersonaRegistry:
    """Fixed, ordered set of personas.  Registration order is the tie-break order."""

    def __init__(self, personas: Iterable[Persona]) -> None:
        self._personas: tuple[Persona, ...] = tuple(personas)
        if not self._personas:
            raise DomAgentConfigError("Persona registry is empty")
        ids = [p.id for p in self._personas]
        if len(set(ids)) != len(ids):
            raise DomAgentConfigError(f"Persona ids must be unique, got {ids}")
        # Keywords are matched against the lowercased task.
        for persona in self._personas:
            if any(k != k.lower() or not k for k in persona.keywords):
                raise DomAgentConfigError(
                    f"Persona {persona.id} keywords must be non-empty lowercase strings"
                )

    @property
    def personas(self) -> tuple[Persona, ...]:
        return self._personas

    @property
    def fallback(self) -> Persona | None:
        """The first persona without keywords, used when nothing matches."""
        for persona in self._personas:
            if not persona.keywords:
                return persona
        return None

    def __len__(self) -> int:
        return len(self._personas)

    def select(self, task: str) -> Persona:
        """Pick exactly one persona for *task*.

        1. Collect personas whose keywords appear in the lowercased task.
        2. None match: the first zero-keyword persona (configuration error if absent).
        3. Keep the highest-priority matches; a single one wins.
        4. Tie: the first non-generic persona in registration order, else the
           first tied persona.
        """
        lowered = task.lower()
        matched = [p for p in self._personas if p.matches(lowered)]

        if not matched:
            if self.fallback is not None:
                return self.fallback
            raise DomAgentConfigError(
                "No persona matched the task and no keyword-free fallback persona is registered"
            )

        top = max(p.priority for p in matched)
        tied = [p for p in matched if p.priority == top]
        if len(tied) == 1:
            return tied[0]

        for persona in tied:
            if not persona.is_generic:
                return persona
        return tied[0]


NAVIGATOR = Persona(
    id=1,
    role=PersonaRole.NAVIGATOR,
    keywords=frozenset(
        {"go to", "navigate", "open", "visit", "click", "link", "page", "url", "scroll", "hover"}
    ),
    priority=10,
)

FORM_FILLER = Persona(
    id=2,
    role=PersonaRole.FORM_FILLER,
    keywords=frozenset({"form", "fill", "type", "enter", "input", "select", "submit", "field"}),
    priority=10,
)

GENERIC = Persona(id=3, role=PersonaRole.GENERIC, priority=0)


def default_registry() -> PersonaRegistry:
    """The built-in registry: Navigator, FormFiller, Generic (in that order)."""
    return PersonaRegistry([NAVIGATOR, FORM_FILLER, GENERIC])


def select_persona(task: str, registry: PersonaRegistry) -> Persona:
    """Module-level convenience wrapper around :meth:`PersonaRegistry.select`."""
    persona = registry.select(task)
    logger.debug("Persona %d (%s) selected for task %r", persona.id, persona.role.value, task[:80])
    return persona

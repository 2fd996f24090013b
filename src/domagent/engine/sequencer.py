"""domagent Task Sequencer -- the top-level task loop.

For each task, in order:

1. substitute ``{{PLACEHOLDER}}`` with the previous task's successful output
   (empty string after a failure or on the first task),
2. select a persona,
3. run the task as a direct command if it parses, otherwise through the
   model interpreter and the batch executor,
4. record the outcome and carry the output forward.

A failing task never stops the sequence.  Only an invalid model configuration
or a malformed task list aborts, and both are checked before any task runs.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from domagent.config import DomAgentConfigError, ModelConfig
from domagent.engine.action_executor import CommandExecutor
from domagent.engine.batch_executor import BatchExecutor
from domagent.engine.command_parser import parse_direct_command
from domagent.engine.interpreter import CommandBatch, CommandInterpreter
from domagent.engine.personas import PersonaRegistry, default_registry, select_persona
from domagent.engine.protocols import ElementInteractionService, LanguageModelClient
from domagent.engine.results import ExecutionResult, serialize_results
from domagent.errors import DomAgentError, TaskListError
from domagent.models import DEFAULT_TEXT_SEPARATOR, DEFAULT_WAIT_TIMEOUT_MS, PLACEHOLDER

logger = logging.getLogger("domagent.engine.sequencer")

ClientFactory = Callable[[ModelConfig], LanguageModelClient]


def _default_client_factory(model_config: ModelConfig) -> LanguageModelClient:
    from domagent.engine.llm_client import AnthropicModelClient

    return AnthropicModelClient(model_config)


def _validate_tasks(tasks: Any) -> list[str]:
    if not isinstance(tasks, (list, tuple)):
        raise TaskListError(f"Task list must be a list of strings, got {type(tasks).__name__}")
    for index, task in enumerate(tasks):
        if not isinstance(task, str):
            raise TaskListError(f"Task {index} must be a string, got {type(task).__name__}")
    return list(tasks)


def substitute_placeholder(task: str, previous_output: str | None) -> str:
    """Replace every placeholder marker in *task* in a single pass."""
    return task.replace(PLACEHOLDER, previous_output or "")


def carried_output(result: ExecutionResult) -> str:
    """The text a successful task hands to the next task's placeholder."""
    if isinstance(result.output, list):
        return json.dumps([item.to_dict() for item in result.output], ensure_ascii=False)
    return result.output or ""


class TaskSequencer:
    """Runs task lists strictly in order against one page."""

    def __init__(
        self,
        service: ElementInteractionService,
        registry: PersonaRegistry | None = None,
        client_factory: ClientFactory | None = None,
        default_timeout_ms: int = DEFAULT_WAIT_TIMEOUT_MS,
        default_separator: str = DEFAULT_TEXT_SEPARATOR,
    ) -> None:
        self._registry = registry or default_registry()
        self._client_factory = client_factory or _default_client_factory
        self._executor = CommandExecutor(
            service,
            default_timeout_ms=default_timeout_ms,
            default_separator=default_separator,
        )
        self._batch_executor = BatchExecutor(self._executor)

    async def run_sequence(self, tasks: list[str], model_config: ModelConfig) -> list[ExecutionResult]:
        """Run *tasks* in order and return one result per task.

        Raises:
            DomAgentConfigError: *model_config* is missing or invalid.
            TaskListError: *tasks* is not a list of strings.
        """
        if not isinstance(model_config, ModelConfig):
            raise DomAgentConfigError("Model configuration is missing")
        model_config.validate()
        if self._registry.fallback is None:
            raise DomAgentConfigError("Persona registry has no keyword-free fallback persona")
        tasks = _validate_tasks(tasks)

        interpreter = CommandInterpreter(self._client_factory(model_config))
        results: list[ExecutionResult] = []
        previous_output: str | None = None

        logger.info("Running %d task(s)", len(tasks))
        for index, raw_task in enumerate(tasks):
            task = substitute_placeholder(raw_task, previous_output)
            result = await self._run_task(index, task, interpreter)
            results.append(result)
            previous_output = carried_output(result) if result.success else None

        failed = sum(1 for r in results if not r.success)
        logger.info("Sequence finished: %d task(s), %d failed", len(results), failed)
        return results

    async def _run_task(self, index: int, task: str, interpreter: CommandInterpreter) -> ExecutionResult:
        try:
            persona = select_persona(task, self._registry)
            logger.info("Task %d handled by persona %d (%s)", index, persona.id, persona.role.value)

            command = parse_direct_command(task)
            if command is not None:
                return ExecutionResult.ok(await self._executor.execute(command))

            interpretation = await interpreter.interpret(task, persona)
            if isinstance(interpretation, CommandBatch):
                return ExecutionResult.ok(await self._batch_executor.execute_batch(interpretation.items))
            return ExecutionResult.ok(interpretation.text)
        except DomAgentError as exc:
            logger.warning("Task %d failed: [%s] %s", index, exc.kind.value, exc.message)
            return ExecutionResult.fail(exc)


async def automate(
    tasks_json: str,
    model_config: ModelConfig,
    service: ElementInteractionService,
    registry: PersonaRegistry | None = None,
    client_factory: ClientFactory | None = None,
) -> str:
    """JSON in, JSON out: run a JSON array of task strings and return the wire array.

    Raises:
        TaskListError: *tasks_json* is not a JSON array of strings.
        DomAgentConfigError: *model_config* is invalid.
        ResultSerializationError: the results could not be encoded.
    """
    try:
        tasks = json.loads(tasks_json)
    except (json.JSONDecodeError, TypeError) as exc:
        raise TaskListError(f"Task list is not valid JSON: {exc}") from exc

    sequencer = TaskSequencer(service, registry=registry, client_factory=client_factory)
    results = await sequencer.run_sequence(tasks, model_config)
    return serialize_results(results)

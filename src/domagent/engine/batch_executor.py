"""domagent Batch Executor -- validates and runs model-proposed commands one by one.

Each item is decoded, validated and executed independently.  A bad item
yields a failed result at its index; later items still run.  The returned
list is always index-aligned with the input.
"""

from __future__ import annotations

import logging
from typing import Any

from domagent.engine.action_executor import CommandExecutor
from domagent.engine.commands import ProposedCommand
from domagent.engine.results import ExecutionResult
from domagent.errors import DomAgentError

logger = logging.getLogger("domagent.engine.batch_executor")


class BatchExecutor:
    """Runs an interpreted batch through a CommandExecutor."""

    def __init__(self, executor: CommandExecutor) -> None:
        self._executor = executor

    async def execute_batch(self, items: list[Any]) -> list[ExecutionResult]:
        """Validate and execute every item in order; never short-circuits."""
        results: list[ExecutionResult] = []
        for index, item in enumerate(items):
            results.append(await self._execute_item(index, item))

        failed = sum(1 for r in results if not r.success)
        logger.info("Batch finished: %d command(s), %d failed", len(results), failed)
        return results

    async def _execute_item(self, index: int, item: Any) -> ExecutionResult:
        # Phase 1: loose decode, phase 2: promotion to the strict command.
        try:
            proposed = ProposedCommand.from_dict(item, index)
            command = proposed.to_command(index)
        except DomAgentError as exc:
            logger.warning("Rejected batch item %d: %s", index, exc.message)
            return ExecutionResult.fail(exc)

        prefix = f"Command {index} ({command.describe()}): "
        try:
            message = await self._executor.execute(command)
        except DomAgentError as exc:
            return ExecutionResult.fail(exc.to_structured().with_prefix(prefix))
        return ExecutionResult.ok(f"{prefix}{message}")

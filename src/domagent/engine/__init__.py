"""domagent engine -- command resolution and execution.

Provides the task pipeline:
- parse_direct_command: built-in command grammar
- PersonaRegistry: keyword/priority persona selection
- CommandExecutor: runs one StructuredCommand against the page
- CommandInterpreter: model fallback for free-form tasks
- BatchExecutor: per-item validation and execution of model batches
- TaskSequencer: ordered task loop with placeholder substitution
- PlaywrightElementService / BrowserSession: bundled Playwright page backend
- AnthropicModelClient: bundled language model client
"""

from domagent.engine.action_executor import CommandExecutor
from domagent.engine.batch_executor import BatchExecutor
from domagent.engine.command_parser import parse_direct_command
from domagent.engine.commands import ProposedCommand, StructuredCommand, Verb
from domagent.engine.interpreter import CommandBatch, CommandInterpreter, NaturalLanguageAnswer
from domagent.engine.personas import Persona, PersonaRegistry, PersonaRole, default_registry
from domagent.engine.results import ExecutionResult, serialize_results
from domagent.engine.sequencer import TaskSequencer, automate

# BrowserSession, PlaywrightElementService and AnthropicModelClient are NOT
# eagerly imported here so the pipeline can be used with other backends
# without Playwright or the Anthropic SDK being importable:
#   from domagent.engine.browser_session import BrowserSession
#   from domagent.engine.page_service import PlaywrightElementService
#   from domagent.engine.llm_client import AnthropicModelClient

__all__ = [
    "BatchExecutor",
    "CommandBatch",
    "CommandExecutor",
    "CommandInterpreter",
    "ExecutionResult",
    "NaturalLanguageAnswer",
    "Persona",
    "PersonaRegistry",
    "PersonaRole",
    "ProposedCommand",
    "StructuredCommand",
    "TaskSequencer",
    "Verb",
    "automate",
    "default_registry",
    "parse_direct_command",
    "serialize_results",
]

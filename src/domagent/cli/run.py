"""domagent run -- Execute a task list against a page.

This is the primary command. It resolves config, opens a browser session on
the start URL, runs every task through the sequencer, and prints one result
per task as a Rich table or as the JSON wire array.
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, List, Optional

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from domagent.config import DomAgentConfig, DomAgentConfigError
from domagent.credentials import mask_key, resolve_api_key
from domagent.engine.results import ExecutionResult, serialize_results
from domagent.errors import DomAgentError, TaskListError

console = Console(stderr=True)
output_console = Console()  # stdout for machine-readable output

logger = logging.getLogger("domagent.cli.run")


def _config_error(message: str, title: str = "Config Error") -> typer.Exit:
    console.print(
        Panel(
            f"[red]{message}[/red]",
            title=f"[red]{title}[/red]",
            border_style="red",
        )
    )
    return typer.Exit(code=2)


def _parse_viewport(viewport_str: str) -> tuple[int, int]:
    """Parse a 'WIDTHxHEIGHT' string into a (width, height) tuple."""
    try:
        parts = viewport_str.lower().split("x")
        if len(parts) != 2:
            raise ValueError
        return (int(parts[0]), int(parts[1]))
    except (ValueError, IndexError):
        raise _config_error(
            f"Invalid viewport format: {viewport_str}\n\n"
            "Expected format: WIDTHxHEIGHT (e.g., 1280x720)"
        )


def _resolve_project_dir() -> Path:
    """Find the .domagent/ project directory, searching upward from cwd."""
    current = Path.cwd()
    candidate = current / ".domagent"
    if candidate.is_dir():
        return candidate

    for parent in current.parents:
        candidate = parent / ".domagent"
        if candidate.is_dir():
            return candidate

    return current / ".domagent"


def _load_config(project_dir: Path) -> DomAgentConfig:
    config_path = project_dir / "config.yaml"
    if config_path.is_file():
        return DomAgentConfig.from_file(config_path)
    config = DomAgentConfig()
    config.project_dir = project_dir
    return config


def _load_tasks(tasks: list[str], tasks_file: Path | None) -> list[str]:
    """Collect tasks from the command line and/or a YAML or JSON file.

    The file may hold a plain list of strings or a mapping with a ``tasks``
    list.  File tasks run before command-line tasks.
    """
    loaded: list[Any] = []
    if tasks_file is not None:
        if not tasks_file.is_file():
            raise TaskListError(f"Tasks file not found: {tasks_file}")
        try:
            data = yaml.safe_load(tasks_file.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise TaskListError(f"Tasks file is not valid YAML or JSON: {tasks_file}\n\n{exc}") from exc
        if isinstance(data, dict):
            data = data.get("tasks")
        if not isinstance(data, list):
            raise TaskListError(f"Tasks file must contain a list of task strings: {tasks_file}")
        for index, item in enumerate(data):
            if not isinstance(item, str):
                raise TaskListError(f"Task {index} in {tasks_file} must be a string, got {type(item).__name__}")
        loaded.extend(data)

    loaded.extend(tasks)
    if not loaded:
        raise TaskListError(
            "No tasks given\n\n"
            "Pass tasks as arguments, e.g. [bold]domagent run 'READ h1'[/bold],\n"
            "or point [bold]--tasks-file[/bold] at a YAML/JSON list."
        )
    return loaded


async def _run_tasks(config: DomAgentConfig, tasks: list[str]) -> list[ExecutionResult]:
    """Open a browser session and run *tasks* through the sequencer."""
    from domagent.engine.browser_session import BrowserSession
    from domagent.engine.sequencer import TaskSequencer

    async with BrowserSession(
        start_url=config.start_url,
        headless=config.headless,
        viewport=config.viewport,
    ) as session:
        sequencer = TaskSequencer(
            session.service,
            default_timeout_ms=config.wait_timeout_ms,
            default_separator=config.text_separator,
        )
        return await sequencer.run_sequence(tasks, config.model)


def _print_run_header(config: DomAgentConfig, task_count: int, api_key_display: str) -> None:
    """Print a styled header before the run starts."""
    info_lines = [
        f"[bold]URL:[/bold]       {config.start_url or '(blank page)'}",
        f"[bold]Tasks:[/bold]     {task_count}",
        f"[bold]Model:[/bold]     {config.model.model}",
        f"[bold]Viewport:[/bold]  {config.viewport[0]}x{config.viewport[1]}",
        f"[bold]Headless:[/bold]  {config.headless}",
        f"[bold]API Key:[/bold]   {api_key_display}",
    ]
    console.print()
    console.print(
        Panel(
            "\n".join(info_lines),
            title="[bold cyan]domagent run[/bold cyan]",
            border_style="cyan",
        )
    )
    console.print()


def _print_results(tasks: list[str], results: list[ExecutionResult], duration: float) -> None:
    """Print one table row per task followed by a summary panel."""
    table = Table(title="Results", border_style="cyan")
    table.add_column("#", justify="right")
    table.add_column("Task")
    table.add_column("Status", style="bold")
    table.add_column("Output")

    for index, (task, result) in enumerate(zip(tasks, results)):
        if result.success:
            status = Text("OK", style="green")
        else:
            status = Text(result.error.kind.value if result.error else "error", style="red")
        table.add_row(str(index), Text(task), status, Text(result.message))
    console.print(table)

    failed = sum(1 for r in results if not r.success)
    if failed:
        border = "red"
        verdict = f"[bold red]{failed} TASK(S) FAILED[/bold red]"
    else:
        border = "green"
        verdict = "[bold green]ALL TASKS SUCCEEDED[/bold green]"
    console.print()
    console.print(
        Panel(
            f"{verdict}\n\n  Tasks:     {len(results) - failed}/{len(results)} succeeded\n"
            f"  Duration:  {duration:.1f}s",
            border_style=border,
        )
    )
    console.print()


def run(
    tasks: Optional[List[str]] = typer.Argument(
        None,
        help="Tasks to run in order, e.g. 'CLICK #go' or 'read the page title'.",
    ),
    tasks_file: Optional[Path] = typer.Option(
        None,
        "--tasks-file",
        "-f",
        help="YAML or JSON file holding a list of tasks.",
    ),
    url: Optional[str] = typer.Option(
        None,
        "--url",
        "-u",
        help="Page to open before the first task. Overrides start_url in config.yaml.",
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="Model identifier for free-form tasks. Overrides model.name in config.yaml.",
    ),
    viewport: Optional[str] = typer.Option(
        None,
        "--viewport",
        help="Browser viewport as WIDTHxHEIGHT.",
    ),
    output_format: str = typer.Option(
        "text",
        "--output",
        "-o",
        help="Output format: text or json.",
    ),
    headless: Optional[bool] = typer.Option(
        None,
        "--headless/--no-headless",
        help="Run browser in headless mode (default) or visible.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging.",
    ),
) -> None:
    """Run a list of tasks against a page.

    Each task is either a direct command (CLICK, TYPE, READ, GETATTRIBUTE, ...)
    or free-form text handed to the language model. A task may reference the
    previous task's output with {{PLACEHOLDER}}.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s  %(message)s")

    if output_format not in ("text", "json"):
        raise _config_error(
            f"Invalid output format: {output_format}\n\n"
            "Valid formats: text, json"
        )

    try:
        task_list = _load_tasks(list(tasks or []), tasks_file)
    except TaskListError as exc:
        raise _config_error(str(exc), title="Task List Error")

    project_dir = _resolve_project_dir()

    try:
        config = _load_config(project_dir)
    except DomAgentConfigError as exc:
        raise _config_error(str(exc))

    # CLI options override config file values
    if url is not None:
        config.start_url = url
    if model is not None:
        config.model.model = model
    if viewport is not None:
        config.viewport = _parse_viewport(viewport)
    if headless is not None:
        config.headless = headless

    if not config.model.api_key:
        try:
            config.model.api_key = resolve_api_key()
        except DomAgentConfigError as exc:
            raise _config_error(str(exc), title="API Key Error")

    try:
        config.model.validate()
    except DomAgentConfigError as exc:
        raise _config_error(str(exc))

    if output_format == "text":
        _print_run_header(config, len(task_list), mask_key(config.model.api_key))

    start_time = time.monotonic()
    try:
        results = asyncio.run(_run_tasks(config, task_list))
    except KeyboardInterrupt:
        console.print("\n[yellow]Run interrupted by user.[/yellow]")
        raise typer.Exit(code=1)
    except (DomAgentConfigError, TaskListError) as exc:
        raise _config_error(str(exc))
    except Exception as exc:
        logger.exception("Unexpected error during run")
        console.print(
            Panel(
                f"[red]Unexpected error:[/red] {exc}\n\n"
                "Run with [bold]--verbose[/bold] for full traceback.",
                title="[red]Infrastructure Error[/red]",
                border_style="red",
            )
        )
        raise typer.Exit(code=3)
    duration = time.monotonic() - start_time

    if output_format == "json":
        try:
            payload = serialize_results(results)
        except DomAgentError as exc:
            raise _config_error(str(exc), title="Serialization Error")
        output_console.print(payload, markup=False, highlight=False, soft_wrap=True)
    else:
        _print_results(task_list, results, duration)

    # Exit code: 0 = all succeed, 1 = any fail
    if not all(r.success for r in results):
        raise typer.Exit(code=1)

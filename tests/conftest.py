"""Shared fixtures for domagent unit tests."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest
import yaml

from domagent.config import ModelConfig


def run_async(coro):
    """Run an async coroutine synchronously for testing."""
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# Fake element interaction service
# ---------------------------------------------------------------------------

class FakeElementService:
    """In-memory ElementInteractionService.

    Every call is recorded in ``calls`` as ``(method, args)``.  Return values
    come from ``results[method]`` and ``errors[method]`` is raised instead
    when set.
    """

    _DEFAULTS: dict[str, Any] = {
        "get_text": "Hello",
        "get_value": "typed",
        "get_attribute": "/next",
        "get_all_attributes": ["/a", "/b"],
        "get_url": "https://example.com/",
        "element_exists": True,
        "is_visible": True,
        "get_all_text": "one\ntwo",
    }

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple]] = []
        self.results: dict[str, Any] = dict(self._DEFAULTS)
        self.errors: dict[str, Exception] = {}

    def _record(self, method: str, *args: Any) -> Any:
        self.calls.append((method, args))
        if method in self.errors:
            raise self.errors[method]
        return self.results.get(method)

    def methods_called(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def click(self, selector):
        self._record("click", selector)

    async def type_text(self, selector, text):
        self._record("type_text", selector, text)

    async def get_text(self, selector):
        return self._record("get_text", selector)

    async def get_value(self, selector):
        return self._record("get_value", selector)

    async def get_attribute(self, selector, attribute_name):
        return self._record("get_attribute", selector, attribute_name)

    async def set_attribute(self, selector, attribute_name, value):
        self._record("set_attribute", selector, attribute_name, value)

    async def select_option(self, selector, value):
        self._record("select_option", selector, value)

    async def get_all_attributes(self, selector, attribute_name):
        return self._record("get_all_attributes", selector, attribute_name)

    async def get_url(self):
        return self._record("get_url")

    async def element_exists(self, selector):
        return self._record("element_exists", selector)

    async def is_visible(self, selector):
        return self._record("is_visible", selector)

    async def scroll_to(self, selector):
        self._record("scroll_to", selector)

    async def hover(self, selector):
        self._record("hover", selector)

    async def wait_for_element(self, selector, timeout_ms):
        self._record("wait_for_element", selector, timeout_ms)

    async def get_all_text(self, selector, separator):
        return self._record("get_all_text", selector, separator)


class FakeModelClient:
    """LanguageModelClient returning canned replies in order."""

    def __init__(self, *replies: str | Exception) -> None:
        self.replies = list(replies)
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise AssertionError("FakeModelClient has no more replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def service() -> FakeElementService:
    return FakeElementService()


@pytest.fixture
def model_config() -> ModelConfig:
    """A valid model config that never reaches a real endpoint."""
    return ModelConfig(api_key="sk-ant-test-key-123456")


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Create a temporary .domagent/ project directory with a config.yaml."""
    project_dir = tmp_path / ".domagent"
    project_dir.mkdir()

    config_data = {
        "start_url": "http://localhost:3000",
        "headless": True,
        "viewport": {"width": 1280, "height": 720},
        "wait_timeout_ms": 2000,
        "model": {"name": "claude-haiku-4-5-20251001", "max_tokens": 512},
    }
    (project_dir / "config.yaml").write_text(
        yaml.dump(config_data, default_flow_style=False), encoding="utf-8"
    )

    return project_dir


@pytest.fixture
def sample_config_yaml() -> str:
    """Return a valid domagent config.yaml as a string."""
    return """\
start_url: "https://example.com"
headless: false
viewport:
  width: 1920
  height: 1080
wait_timeout_ms: 3000
text_separator: " | "
model:
  endpoint: "https://llm.internal.example"
  name: "claude-sonnet-4-20250514"
  max_tokens: 2048
  timeout: 30
"""

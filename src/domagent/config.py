"""domagent configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from domagent.models import (
    DEFAULT_ENDPOINT,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL_TIMEOUT,
    DEFAULT_TEXT_SEPARATOR,
    DEFAULT_VIEWPORT,
    DEFAULT_WAIT_TIMEOUT_MS,
    MODELS,
)


class DomAgentConfigError(Exception):
    """Raised when configuration is invalid or missing."""

    pass


@dataclass
class ModelConfig:
    """Connection settings for the language model used on the fallback path."""

    endpoint: str = DEFAULT_ENDPOINT
    model: str = MODELS["interpreter"]
    # repr=False keeps the key out of logs and tracebacks that print the config.
    api_key: str = field(default="", repr=False)
    max_tokens: int = DEFAULT_MAX_TOKENS
    timeout: float = DEFAULT_MODEL_TIMEOUT

    def validate(self) -> None:
        """Raise DomAgentConfigError if the settings cannot reach a model."""
        if not isinstance(self.endpoint, str) or not self.endpoint.startswith(("http://", "https://")):
            raise DomAgentConfigError(
                f"Invalid model endpoint: {self.endpoint!r}\n\n"
                "To fix: set model.endpoint to an http(s) URL in config.yaml"
            )
        if not isinstance(self.model, str) or not self.model.strip():
            raise DomAgentConfigError("Model identifier is empty\n\nTo fix: set model.name in config.yaml")
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise DomAgentConfigError(
                "Model API key is empty\n\n"
                "To fix:\n"
                "  export ANTHROPIC_API_KEY=sk-ant-your-key-here"
            )
        if self.max_tokens <= 0:
            raise DomAgentConfigError(f"max_tokens must be positive, got {self.max_tokens}")
        if self.timeout <= 0:
            raise DomAgentConfigError(f"Model timeout must be positive, got {self.timeout}")


@dataclass
class DomAgentConfig:
    """Configuration for a domagent run."""

    # Paths
    project_dir: Path = field(default_factory=lambda: Path(".domagent"))

    # Model
    model: ModelConfig = field(default_factory=ModelConfig)

    # Browser
    start_url: str = ""
    headless: bool = True
    viewport: tuple[int, int] = DEFAULT_VIEWPORT

    # Element interaction
    wait_timeout_ms: int = DEFAULT_WAIT_TIMEOUT_MS
    text_separator: str = DEFAULT_TEXT_SEPARATOR

    @classmethod
    def from_file(cls, config_path: Path) -> DomAgentConfig:
        """Load config from a YAML file."""
        if not config_path.exists():
            raise DomAgentConfigError(f"Config file not found: {config_path}")
        with open(config_path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise DomAgentConfigError(f"Config file is not valid YAML: {config_path}\n\n{exc}") from exc
        if not isinstance(data, dict):
            raise DomAgentConfigError(f"Config file must contain a mapping: {config_path}")
        return cls._from_dict(data, config_path.parent)

    @classmethod
    def _from_dict(cls, data: dict[str, Any], project_dir: Path) -> DomAgentConfig:
        """Create config from a dictionary."""
        config = cls()
        config.project_dir = project_dir

        model_data = data.get("model") or {}
        if not isinstance(model_data, dict):
            raise DomAgentConfigError("'model' must be a mapping with endpoint/name keys")
        if "endpoint" in model_data:
            config.model.endpoint = str(model_data["endpoint"])
        if "name" in model_data:
            config.model.model = str(model_data["name"])
        if "max_tokens" in model_data:
            config.model.max_tokens = int(model_data["max_tokens"])
        if "timeout" in model_data:
            config.model.timeout = float(model_data["timeout"])
        if "api_key" in model_data:
            config.model.api_key = str(model_data["api_key"])

        if "start_url" in data:
            config.start_url = str(data["start_url"])
        if "headless" in data:
            config.headless = bool(data["headless"])
        if "viewport" in data:
            vp = data["viewport"]
            if isinstance(vp, dict):
                config.viewport = (vp.get("width", 1280), vp.get("height", 720))
        if "wait_timeout_ms" in data:
            config.wait_timeout_ms = int(data["wait_timeout_ms"])
        if "text_separator" in data:
            config.text_separator = str(data["text_separator"])

        return config

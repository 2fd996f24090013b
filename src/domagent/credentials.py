"""Model API key lookup for runs whose project config carries no ``model.api_key``."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from domagent.config import DomAgentConfig, DomAgentConfigError

logger = logging.getLogger("domagent.credentials")

API_KEY_ENV = "ANTHROPIC_API_KEY"

# mask_key() shows this many leading and trailing characters
_MASK_HEAD = 7
_MASK_TAIL = 3


def global_config_path() -> Path:
    return Path.home() / ".domagent" / "config.yaml"


def resolve_api_key() -> str:
    """Return the model API key from the first source that has one.

    Sources, highest priority first:

    1. the ``ANTHROPIC_API_KEY`` environment variable
    2. ``ANTHROPIC_API_KEY`` in a ``.env`` file in the working directory
    3. ``model.api_key`` in the global config (``~/.domagent/config.yaml``)

    The project config is not consulted here; ``DomAgentConfig.from_file``
    has already read its ``model.api_key``.
    """
    sources = (
        ("environment", lambda: os.environ.get(API_KEY_ENV)),
        (".env", lambda: read_dotenv(Path(".env")).get(API_KEY_ENV)),
        (str(global_config_path()), _global_config_key),
    )
    for label, lookup in sources:
        key = lookup()
        if key:
            logger.debug("Model API key taken from %s", label)
            return key

    raise DomAgentConfigError(
        f"{API_KEY_ENV} not set\n\n"
        "domagent needs a model API key to interpret tasks outside the command grammar.\n\n"
        "To fix, either:\n"
        f"  export {API_KEY_ENV}=sk-ant-your-key-here\n"
        "  or set model.api_key in .domagent/config.yaml"
    )


def mask_key(key: str) -> str:
    """Shorten *key* for display, e.g. ``sk-ant-...345``."""
    if len(key) <= _MASK_HEAD + _MASK_TAIL:
        return "***"
    return f"{key[:_MASK_HEAD]}...{key[-_MASK_TAIL:]}"


def read_dotenv(path: Path) -> dict[str, str]:
    """Read ``NAME=value`` pairs from a dotenv file.

    Blank lines and ``#`` comments are skipped, a leading ``export`` is
    allowed and one pair of matching quotes around the value is removed.
    A missing file reads as empty.
    """
    if not path.is_file():
        return {}
    values: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):]
        name, sep, value = line.partition("=")
        if not sep:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
        values[name.strip()] = value
    return values


def _global_config_key() -> str:
    path = global_config_path()
    if not path.is_file():
        return ""
    return DomAgentConfig.from_file(path).model.api_key

"""Centralized model configuration and runtime defaults."""

# Model IDs used when interpreting free-form tasks
MODELS = {
    "interpreter": "claude-haiku-4-5-20251001",
}

# Default model endpoint (Anthropic Messages API)
DEFAULT_ENDPOINT = "https://api.anthropic.com"

# Token / time limits for a single interpretation call
DEFAULT_MAX_TOKENS = 1024
DEFAULT_MODEL_TIMEOUT = 60.0  # seconds

# Element interaction defaults
DEFAULT_WAIT_TIMEOUT_MS = 5000
DEFAULT_TEXT_SEPARATOR = "\n"

# Literal marker replaced with the previous task's successful output
PLACEHOLDER = "{{PLACEHOLDER}}"

# Default viewport
DEFAULT_VIEWPORT = (1280, 720)

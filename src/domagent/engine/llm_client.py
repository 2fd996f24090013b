"""Anthropic-backed language model client.

One request per call, no retries: the Anthropic SDK's own retry loop is
disabled with ``max_retries=0``.
"""

from __future__ import annotations

import logging
from typing import Any

from domagent.config import ModelConfig
from domagent.errors import LanguageModelCallError

logger = logging.getLogger("domagent.engine.llm_client")


class AnthropicModelClient:
    """LanguageModelClient over ``anthropic.AsyncAnthropic``."""

    def __init__(self, model_config: ModelConfig) -> None:
        self._config = model_config
        self._client: Any | None = None  # Lazy-initialised AsyncAnthropic client

    def _get_client(self) -> Any:
        """Return the cached client, creating it lazily on first use."""
        if self._client is None:
            import anthropic

            self._client = anthropic.AsyncAnthropic(
                api_key=self._config.api_key,
                base_url=self._config.endpoint,
                max_retries=0,
                timeout=self._config.timeout,
            )
        return self._client

    async def complete(self, prompt: str) -> str:
        import anthropic

        client = self._get_client()
        try:
            response = await client.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as exc:
            logger.error("Anthropic API call failed: %s", exc)
            raise LanguageModelCallError(
                f"Language model call failed: {exc}",
                {"model": self._config.model, "error_type": type(exc).__name__},
            ) from exc

        raw_text = ""
        for block in response.content:
            if hasattr(block, "text"):
                raw_text += block.text

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.debug(
                "Model %s used %s input / %s output tokens",
                self._config.model,
                usage.input_tokens,
                usage.output_tokens,
            )
        return raw_text

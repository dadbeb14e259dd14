"""
LLM Service - Chat completions through an OpenAI-compatible API.

Every generator in ``docubuddy.agents`` talks to the model through
``LLMClient.generate`` (single prompt) or ``LLMClient.chat`` (multi-turn).
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from docubuddy.api.middleware.error_handler import LLMError, LLMNotConfiguredError

logger = logging.getLogger(__name__)


@dataclass
class LLMConfig:
    """Configuration for the LLM client."""
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    default_model: str = "gpt-4o-mini"
    timeout_seconds: float = 60.0


class LLMClient:
    """
    Async chat-completion client.

    The underlying SDK client is created lazily so the service starts (and
    serves stored data) without an API key; the first generation call
    raises LLMNotConfiguredError instead.
    """

    def __init__(self, config: Optional[LLMConfig] = None):
        self.config = config or LLMConfig()
        self._client: Optional[AsyncOpenAI] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    @property
    def client(self) -> AsyncOpenAI:
        if not self.is_configured:
            raise LLMNotConfiguredError()
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.config.api_key,
                base_url=self.config.base_url,
                timeout=self.config.timeout_seconds,
            )
        return self._client

    async def chat(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 2000
    ) -> str:
        """
        Run a chat completion and return the reply text.

        Raises:
            LLMNotConfiguredError: No API key configured
            LLMError: Provider failure or empty reply
        """
        model = model or self.config.default_model
        logger.info(f"Sending {len(messages)} messages to {model}")

        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            logger.error(f"LLM call to {model} failed: {e}")
            raise LLMError(f"OpenAI API error: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise LLMError("No content generated")

        logger.info(f"LLM replied with {len(content)} chars")
        return content.strip()

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 2000
    ) -> str:
        """Single-prompt convenience wrapper around ``chat``."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return await self.chat(
            messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens
        )


def parse_json_response(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object out of an LLM reply.

    Strips Markdown code fences, then falls back to the outermost ``{...}``
    block.

    Raises:
        ValueError: If no JSON object can be recovered
    """
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped[stripped.index("\n") + 1:] if "\n" in stripped else stripped[3:]
        if stripped.endswith("```"):
            stripped = stripped[:-3]
        stripped = stripped.strip()

    try:
        data = json.loads(stripped)
    except json.JSONDecodeError:
        match = re.search(r"\{[\s\S]*\}", text)
        if not match:
            raise ValueError(f"Unparseable LLM response: {text[:200]}")
        try:
            data = json.loads(match.group())
        except json.JSONDecodeError as e:
            raise ValueError(f"Unparseable LLM response: {text[:200]}") from e

    if not isinstance(data, dict):
        raise ValueError("LLM response is not a JSON object")
    return data

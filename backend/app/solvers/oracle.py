"""
Text-completion oracle adapters.

The pipeline only needs "prompt in, text out, may fail". Anything that
satisfies TextCompletionOracle can be injected, which is how tests supply a
scripted oracle instead of a network client.
"""
from typing import Optional, Protocol, runtime_checkable
import logging

from ..prompts.layout_prompts import BASE_SYSTEM_PROMPT
from .errors import OracleUnavailable

logger = logging.getLogger(__name__)


@runtime_checkable
class TextCompletionOracle(Protocol):
    async def complete(self, prompt: str) -> str:
        ...


class OpenAICompatibleOracle:
    """Chat-completions oracle over the OpenAI SDK.

    Works against any OpenAI-compatible endpoint (OpenAI, Gemini's OpenAI
    endpoint, xAI, local servers). The client is created lazily on first use.
    """

    def __init__(self,
                 api_key: str,
                 model: str,
                 base_url: Optional[str] = None,
                 timeout: float = 30.0,
                 temperature: float = 0.7,
                 max_tokens: int = 4096,
                 system_prompt: str = BASE_SYSTEM_PROMPT):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.system_prompt = system_prompt
        self._client = None

    def _get_client(self):
        if not self.api_key:
            raise OracleUnavailable("no API key configured for the layout oracle")
        if self._client is None:
            from openai import AsyncOpenAI
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def complete(self, prompt: str) -> str:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            raise OracleUnavailable(f"oracle request failed: {e}") from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


def oracle_from_settings() -> Optional[OpenAICompatibleOracle]:
    """Configured oracle, or None when no API key is set."""
    from .. import config

    if not config.LAYOUT_ORACLE_API_KEY:
        logger.info("LAYOUT_ORACLE_API_KEY not set, layout suggestions use the built-in strategies")
        return None
    return OpenAICompatibleOracle(
        api_key=config.LAYOUT_ORACLE_API_KEY,
        model=config.LAYOUT_ORACLE_MODEL,
        base_url=config.LAYOUT_ORACLE_BASE_URL or None,
        timeout=config.LAYOUT_ORACLE_TIMEOUT,
    )

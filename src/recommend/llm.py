"""LLM client for recommendation operations.

Uses LiteLLM for provider-agnostic text generation. The client makes exactly
one completion request per call and translates provider errors into the
upstream error types; retrying is left to ExternalCallWrapper.
"""

from __future__ import annotations

import logging
import os
import warnings
from typing import Any, Protocol, TypeVar

from litellm import RateLimitError, Timeout, acompletion
from pydantic import TypeAdapter, ValidationError

from src.recommend.config import RecommendConfig, get_recommend_config
from src.recommend.outcome import (
    MalformedResponseError,
    RateLimitedError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

warnings.filterwarnings(
    "ignore",
    message=r"(?s)^Pydantic serializer warnings:.*",
    category=UserWarning,
)

# LiteLLM loads `.env` into process environment in DEV mode.
os.environ.setdefault("LITELLM_MODE", "PRODUCTION")


class TextGenerator(Protocol):
    """AI text-generation service used by the pipeline stages."""

    async def generate_text(self, prompt: str, system_prompt: str | None = None) -> str: ...

    async def generate_structured(
        self,
        prompt: str,
        adapter: TypeAdapter[T],
        system_prompt: str | None = None,
    ) -> T: ...


class RecommendLLM:
    """LiteLLM-backed client for search terms, rankings and insights."""

    def __init__(self, config: RecommendConfig | None = None) -> None:
        self.config = config or get_recommend_config()
        self._setup_provider_env()

    def _setup_provider_env(self) -> None:
        """Set up provider-specific environment variables.

        Anthropic reads custom base URLs from the environment rather than
        from call parameters.
        """
        if self.config.llm_base_url and self.config.llm_provider == "anthropic":
            base_url = self.config.llm_base_url.rstrip("/")
            if base_url.endswith("/v1"):
                base_url = base_url[:-3]
            os.environ["ANTHROPIC_BASE_URL"] = base_url
            if self.config.llm_api_key:
                os.environ["ANTHROPIC_API_KEY"] = self.config.llm_api_key

    def _get_model_name(self) -> str:
        """Return provider-qualified model name for LiteLLM routing."""
        if "/" in self.config.llm_model:
            return self.config.llm_model

        if self.config.llm_provider == "anthropic":
            return f"anthropic/{self.config.llm_model}"

        # Custom base URLs are routed to the OpenAI-compatible endpoint
        if self.config.llm_base_url:
            return f"openai/{self.config.llm_model}"

        if self.config.llm_provider == "openai":
            return self.config.llm_model

        return f"{self.config.llm_provider}/{self.config.llm_model}"

    async def generate_text(self, prompt: str, system_prompt: str | None = None) -> str:
        """Generate a plain text response.

        Raises:
            RateLimitedError: The provider reported a quota/rate limit.
            TimeoutError: The provider did not answer within llm_timeout.
            MalformedResponseError: The response carried no text.
            UpstreamUnavailableError: Any other provider failure.
        """
        response = await self._complete(prompt=prompt, system_prompt=system_prompt)
        content = self._extract_content(response)
        if not content.strip():
            raise MalformedResponseError("LLM returned empty content.")
        return content.strip()

    async def generate_structured(
        self,
        prompt: str,
        adapter: TypeAdapter[T],
        system_prompt: str | None = None,
    ) -> T:
        """Generate JSON output and validate it with a pydantic TypeAdapter.

        Raises:
            MalformedResponseError: The response is not valid JSON for the
                requested type.
        """
        response = await self._complete(prompt=prompt, system_prompt=system_prompt)
        content = self._extract_json_from_response(self._extract_content(response))

        try:
            return adapter.validate_json(content, strict=True)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Failed to parse LLM response - validation error: {e}", e
            ) from e

    async def _complete(self, *, prompt: str, system_prompt: str | None) -> Any:
        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            return await self._call_completion(messages=messages)
        except RateLimitError as e:
            raise RateLimitedError(f"LLM rate limited: {e}", e) from e
        except Timeout as e:
            raise TimeoutError(
                f"LLM request timed out (timeout={self.config.llm_timeout}s)"
            ) from e
        except Exception as e:
            if _looks_rate_limited(e):
                raise RateLimitedError(f"LLM quota exceeded: {e}", e) from e
            raise UpstreamUnavailableError(f"LLM call failed: {e}", e) from e

    async def _call_completion(self, *, messages: list[dict[str, str]]) -> Any:
        kwargs: dict[str, Any] = {
            "model": self._get_model_name(),
            "messages": messages,
            "timeout": self.config.llm_timeout,
            "num_retries": 0,
        }

        reasoning_effort = _normalize_reasoning_effort(self.config.llm_reasoning_effort)
        if reasoning_effort is not None:
            kwargs["reasoning_effort"] = reasoning_effort

        if self.config.llm_api_key:
            kwargs["api_key"] = self.config.llm_api_key

        if self.config.llm_base_url and self.config.llm_provider != "anthropic":
            kwargs["base_url"] = self.config.llm_base_url

        return await acompletion(**kwargs)

    def _extract_content(self, response: Any) -> str:
        try:
            message = response.choices[0].message
        except (AttributeError, IndexError, TypeError) as e:
            raise MalformedResponseError("LLM response has no choices.", e) from e

        content = getattr(message, "content", None)
        if content is None:
            raise MalformedResponseError("LLM returned no content to parse.")
        return str(content)

    def _extract_json_from_response(self, content: str) -> str:
        content = content.strip()

        if content.startswith("```"):
            first_newline = content.find("\n")
            if first_newline != -1:
                content = content[first_newline + 1 :]
            if content.endswith("```"):
                content = content[:-3]
            content = content.strip()

        if content.startswith("[") or content.startswith("{"):
            return content

        def extract_balanced(text: str, open_char: str, close_char: str) -> str | None:
            start = text.find(open_char)
            if start == -1:
                return None

            depth = 0
            for idx in range(start, len(text)):
                ch = text[idx]
                if ch == open_char:
                    depth += 1
                elif ch == close_char:
                    depth -= 1
                    if depth == 0:
                        return text[start : idx + 1].strip()
            return None

        extracted = extract_balanced(content, "[", "]")
        if extracted is not None:
            return extracted

        extracted = extract_balanced(content, "{", "}")
        if extracted is not None:
            return extracted

        return content


def _looks_rate_limited(error: Exception) -> bool:
    status = getattr(error, "status_code", None)
    if status == 429:
        return True
    text = str(error).lower()
    return "rate_limit" in text or "resource_exhausted" in text or "quota" in text


def _normalize_reasoning_effort(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = str(value).strip().lower()
    if not normalized:
        return None
    if normalized in {"off", "disabled", "0", "false"}:
        return "disable"
    return normalized

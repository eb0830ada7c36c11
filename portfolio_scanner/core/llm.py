"""Reasoning service clients and response parsing."""

import json
import re
import time
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI
from pydantic import BaseModel

from portfolio_scanner.core.config import Settings, get_settings
from portfolio_scanner.core.exceptions import ConfigurationError, ParseError
from portfolio_scanner.core.llm_usage import log_llm_usage
from portfolio_scanner.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

_JSON_FENCE = re.compile(r"```json\s*\n?(.*?)```", re.DOTALL | re.IGNORECASE)


@dataclass(frozen=True)
class ReasoningParams:
    """Per-call generation parameters."""

    model: str
    max_tokens: int = 3000
    temperature: float = 0.6
    workflow: str = "portfolio_scanner"


class ReasoningClient(Protocol):
    """Anything that turns instructions plus a payload into free text.

    Implementations may raise any exception or return arbitrary text; callers
    must treat every call as potentially failing or slow.
    """

    async def call(
        self, system_instructions: str, user_payload: str, params: ReasoningParams
    ) -> str: ...


class AnthropicReasoningClient:
    """ReasoningClient backed by the Anthropic Messages API."""

    provider = "anthropic"

    def __init__(self, api_key: str, timeout_s: float = 60.0):
        # SDK retries are disabled so the ladder owns the retry budget
        self._client = AsyncAnthropic(api_key=api_key, timeout=timeout_s, max_retries=0)

    async def call(
        self, system_instructions: str, user_payload: str, params: ReasoningParams
    ) -> str:
        start = time.time()
        response = await self._client.messages.create(
            model=params.model,
            max_tokens=params.max_tokens,
            temperature=params.temperature,
            system=system_instructions,
            messages=[{"role": "user", "content": user_payload}],
        )
        usage = getattr(response, "usage", None)
        if usage is not None:
            log_llm_usage(
                workflow=params.workflow,
                model=params.model,
                provider=self.provider,
                tokens_input=getattr(usage, "input_tokens", 0) or 0,
                tokens_output=getattr(usage, "output_tokens", 0) or 0,
                duration_ms=int((time.time() - start) * 1000),
            )
        return response.content[0].text if response.content else ""


class OpenAIReasoningClient:
    """ReasoningClient backed by OpenAI chat completions.

    Claude model names in ReasoningParams are replaced by ``model``.
    """

    provider = "openai"

    def __init__(self, api_key: str, model: str = "gpt-4o", timeout_s: float = 60.0):
        self._client = AsyncOpenAI(api_key=api_key, timeout=timeout_s, max_retries=0)
        self._model = model

    async def call(
        self, system_instructions: str, user_payload: str, params: ReasoningParams
    ) -> str:
        start = time.time()
        response = await self._client.chat.completions.create(
            model=self._model,
            max_tokens=params.max_tokens,
            temperature=params.temperature,
            messages=[
                {"role": "system", "content": system_instructions},
                {"role": "user", "content": user_payload},
            ],
        )
        usage = getattr(response, "usage", None)
        if usage is not None:
            log_llm_usage(
                workflow=params.workflow,
                model=self._model,
                provider=self.provider,
                tokens_input=getattr(usage, "prompt_tokens", 0) or 0,
                tokens_output=getattr(usage, "completion_tokens", 0) or 0,
                duration_ms=int((time.time() - start) * 1000),
            )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


def get_reasoning_client(settings: Settings | None = None) -> ReasoningClient | None:
    """
    Build the configured reasoning client.

    Args:
        settings: Settings override (defaults to cached settings)

    Returns:
        A client, or None when the selected provider has no API key
        (callers then score with heuristics only)

    Raises:
        ConfigurationError: If REASONING_PROVIDER is unknown
    """
    settings = settings or get_settings()
    provider = settings.REASONING_PROVIDER.lower()

    if provider == "anthropic":
        if not settings.ANTHROPIC_API_KEY:
            logger.warning("No Anthropic API key configured, heuristic scoring only")
            return None
        return AnthropicReasoningClient(
            api_key=settings.ANTHROPIC_API_KEY, timeout_s=settings.REASONING_TIMEOUT_S
        )
    if provider == "openai":
        if not settings.OPENAI_API_KEY:
            logger.warning("No OpenAI API key configured, heuristic scoring only")
            return None
        return OpenAIReasoningClient(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            timeout_s=settings.REASONING_TIMEOUT_S,
        )
    raise ConfigurationError(f"Unknown REASONING_PROVIDER '{settings.REASONING_PROVIDER}'")


def _first_brace_span(text: str) -> str | None:
    """Return the first balanced {...} span, skipping braces inside strings."""
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for idx in range(start, len(text)):
        ch = text[idx]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : idx + 1]
    return None


def extract_json_object(raw_output: Any) -> dict[str, Any]:
    """
    Extract the JSON object embedded in a model response.

    Looks for the first ```json fenced block; failing that, the first
    top-level {...} span. Commentary before or after the object is ignored.

    Args:
        raw_output: Raw text from the reasoning service

    Returns:
        Parsed JSON object

    Raises:
        ParseError: If no object can be located or decoded
    """
    if not isinstance(raw_output, str):
        raise ParseError(f"Expected text response, got {type(raw_output).__name__}")

    fence_match = _JSON_FENCE.search(raw_output)
    if fence_match:
        candidate: str | None = fence_match.group(1).strip()
    else:
        candidate = _first_brace_span(raw_output)

    if not candidate:
        raise ParseError("No JSON object found in response")

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in response: {e.msg}") from e

    if not isinstance(parsed, dict):
        raise ParseError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def parse_llm_json(raw_output: Any, model: type[T]) -> T:
    """
    Parse a model response and validate it against a Pydantic model.

    Raises:
        ParseError: If JSON extraction fails
        pydantic.ValidationError: If parsed JSON doesn't match schema
    """
    return model.model_validate(extract_json_object(raw_output))

"""Generation invoker - primary provider with a single fallback hop.

Both providers are reached through OpenAI-compatible chat completion APIs.
ATTEMPT_PRIMARY -> DONE on success, otherwise ATTEMPT_FALLBACK with the same
system instruction -> DONE or FAILED. There is no backoff and no retry beyond
that hop; SDK-level retries are disabled.
"""

import logging
import time
from collections.abc import Callable
from typing import Any, Protocol

import openai
from openai import AsyncOpenAI
from pydantic import SecretStr

from tripgen.config import Settings
from tripgen.errors import GenerationFailedError, InvalidAIOutputError, ProviderError
from tripgen.llm.normalizer import parse_itinerary
from tripgen.llm.prompts import ComposedPrompt
from tripgen.llm.tiers import TierProfile
from tripgen.models.itinerary import ItineraryPayload
from tripgen.utils.logging import StageContext, StructuredStageLogger
from tripgen.utils.metrics import metrics

logger = logging.getLogger(__name__)


class ChatProvider(Protocol):
    """One text-generation endpoint/model pair."""

    name: str

    async def complete(self, prompt: ComposedPrompt) -> str:
        """Return raw model text for the prompt.

        Raises:
            ProviderError: On any transport, API or empty-content failure
        """
        ...


class OpenAICompatibleProvider:
    """Chat-completions provider (OpenAI, Groq, or any compatible endpoint)."""

    def __init__(
        self,
        name: str,
        model: str,
        client: AsyncOpenAI | None,
        *,
        max_tokens: int = 8000,
        web_search: bool = False,
    ) -> None:
        """Initialize provider.

        Args:
            name: Label for logs and metrics ("primary" / "fallback")
            model: Model identifier
            client: SDK client, or None if the provider has no credentials
            max_tokens: Completion token cap
            web_search: Request search-augmented generation
        """
        self.name = name
        self.model = model
        self._client = client
        self._max_tokens = max_tokens
        self._web_search = web_search

    async def complete(self, prompt: ComposedPrompt) -> str:
        """Call the chat completions endpoint."""
        if self._client is None:
            raise ProviderError(self.name, "provider is not configured (missing API key)")

        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "system", "content": prompt.system}],
            "max_completion_tokens": self._max_tokens,
        }
        if self._web_search:
            # Search-augmented models reject response_format=json_object
            kwargs["web_search_options"] = {}
        else:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except openai.APIStatusError as e:
            raise ProviderError(self.name, f"HTTP {e.status_code}: {e.message}") from e
        except openai.OpenAIError as e:
            raise ProviderError(self.name, f"{type(e).__name__}: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise ProviderError(self.name, f"malformed response envelope: {e}") from e

        if not content or not content.strip():
            raise ProviderError(self.name, "empty content")
        return content


def _make_client(
    api_key: SecretStr | None, base_url: str | None, settings: Settings
) -> AsyncOpenAI | None:
    if api_key is None or not api_key.get_secret_value():
        return None
    kwargs: dict[str, Any] = {"api_key": api_key.get_secret_value(), "max_retries": 0}
    if base_url:
        kwargs["base_url"] = base_url
    if settings.llm_timeout_seconds is not None:
        kwargs["timeout"] = settings.llm_timeout_seconds
    return AsyncOpenAI(**kwargs)


class GenerationInvoker:
    """Runs a prompt against the primary provider, then the fallback once."""

    def __init__(
        self,
        primary: ChatProvider,
        fallback: ChatProvider,
        stage_logger: StructuredStageLogger | None = None,
    ) -> None:
        self.primary = primary
        self.fallback = fallback
        self._stage_logger = stage_logger or StructuredStageLogger()

    async def _attempt(
        self,
        provider: ChatProvider,
        prompt: ComposedPrompt,
        parse: Callable[[str], ItineraryPayload],
        ctx: StageContext,
    ) -> ItineraryPayload:
        start = time.perf_counter()
        try:
            text = await provider.complete(prompt)
            payload = parse(text)
        except (ProviderError, InvalidAIOutputError) as e:
            latency_ms = (time.perf_counter() - start) * 1000
            metrics.record_generation(provider.name, "error", latency_ms)
            self._stage_logger.log_stage(
                ctx,
                f"generation.{provider.name}",
                "error",
                latency_ms=latency_ms,
                error_reason=str(e),
            )
            raise

        latency_ms = (time.perf_counter() - start) * 1000
        metrics.record_generation(provider.name, "success", latency_ms)
        self._stage_logger.log_stage(
            ctx, f"generation.{provider.name}", "success", latency_ms=latency_ms
        )
        return payload

    async def generate(
        self,
        prompt: ComposedPrompt,
        ctx: StageContext,
        parse: Callable[[str], ItineraryPayload] = parse_itinerary,
    ) -> ItineraryPayload:
        """Generate and parse an itinerary.

        Raises:
            InvalidAIOutputError: If the fallback returned unparseable output
            GenerationFailedError: If the fallback call itself failed
        """
        try:
            return await self._attempt(self.primary, prompt, parse, ctx)
        except (ProviderError, InvalidAIOutputError) as primary_error:
            logger.warning(f"Primary generation failed, trying fallback: {primary_error}")
            first_error = primary_error

        try:
            return await self._attempt(self.fallback, prompt, parse, ctx)
        except InvalidAIOutputError as e:
            raise InvalidAIOutputError(
                f"{e}\n\nPrimary error: {first_error}", raw_output=e.raw_output
            ) from e
        except ProviderError as e:
            raise GenerationFailedError(
                f"Itinerary generation failed on both providers.\n"
                f"Primary error: {first_error}\nFallback error: {e}"
            ) from e


def build_invoker(profile: TierProfile, settings: Settings) -> GenerationInvoker:
    """Create an invoker for the tier's primary/fallback model pair."""
    primary = OpenAICompatibleProvider(
        "primary",
        profile.primary_model,
        _make_client(settings.openai_api_key, settings.openai_base_url, settings),
        max_tokens=settings.llm_max_tokens,
        web_search=profile.web_search,
    )
    fallback = OpenAICompatibleProvider(
        "fallback",
        profile.fallback_model,
        _make_client(settings.fallback_api_key, settings.fallback_base_url, settings),
        max_tokens=settings.llm_max_tokens,
    )
    return GenerationInvoker(primary, fallback)

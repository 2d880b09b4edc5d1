"""
Summarizer Registry - provider selection and fallback chain.

The registry itself satisfies the Summarizer contract, so the pipeline
can be handed either a single adapter or the whole chain. Each provider
runs under its own get_timeout_seconds() deadline; a provider that stalls
is abandoned and the next one is tried.
"""

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Dict, List, Optional
import logging

from citypulse.core.settings import settings
from citypulse.services.summarizer.base import Summarizer, SummaryResult
from citypulse.services.summarizer.gemini_provider import GeminiSummarizer
from citypulse.services.summarizer.mock_provider import MockSummarizer

logger = logging.getLogger(__name__)


class SummarizerRegistry(Summarizer):
    """
    Ordered list of summarizers, tried until one returns a usable result.

    Priority:
    1. Gemini (if AI is enabled, selected and an API key is configured)
    2. Mock (always available)
    """

    def __init__(self, providers: Optional[List[Summarizer]] = None):
        self.providers: List[Summarizer] = list(providers) if providers else self._default_providers()

    def _default_providers(self) -> List[Summarizer]:
        providers: List[Summarizer] = []

        if not settings.AI_ENABLED:
            logger.info("⚠️ AI is disabled globally (AI_ENABLED=false), using mock summarizer only")
        elif settings.AI_PROVIDER.lower() == "gemini":
            gemini = GeminiSummarizer()
            if gemini.is_enabled():
                providers.append(gemini)
                logger.info("✅ Gemini summarizer registered")

        providers.append(MockSummarizer())
        logger.info("✅ Mock summarizer registered (fallback)")
        return providers

    def is_enabled(self) -> bool:
        return any(provider.is_enabled() for provider in self.providers)

    def get_model_info(self) -> Dict[str, str]:
        provider = self.get_provider()
        return provider.get_model_info() if provider else {"name": "none", "version": ""}

    def get_timeout_seconds(self) -> float:
        return sum(provider.get_timeout_seconds() for provider in self.providers if provider.is_enabled())

    def get_provider(self) -> Optional[Summarizer]:
        for provider in self.providers:
            if provider.is_enabled():
                return provider
        return None

    def summarize(
        self,
        text: str,
        category: Optional[str] = None,
        area: Optional[str] = None,
    ) -> SummaryResult:
        last_error = "No summarizer available"
        for provider in self.providers:
            name = provider.get_model_info()["name"]
            if not provider.is_enabled():
                continue
            try:
                result = self._call_with_deadline(provider, text, category, area)
            except FutureTimeoutError:
                logger.warning(f"⚠️ Summarizer {name} timed out after {provider.get_timeout_seconds()}s")
                last_error = f"{name} timed out"
                continue
            except Exception as e:
                logger.warning(f"Summarizer {name} raised: {e}")
                last_error = str(e)
                continue

            if result.error or not result.summary:
                logger.warning(f"Summarizer {name} returned no usable summary: {result.error}")
                last_error = result.error or "empty summary"
                continue

            return result

        return SummaryResult.failed("registry", last_error)

    @staticmethod
    def _call_with_deadline(
        provider: Summarizer,
        text: str,
        category: Optional[str],
        area: Optional[str],
    ) -> SummaryResult:
        # A stalled call keeps its worker thread; only the wait is abandoned
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="summarizer")
        try:
            future = executor.submit(provider.summarize, text, category, area)
            return future.result(timeout=provider.get_timeout_seconds())
        finally:
            executor.shutdown(wait=False)


# Global registry instance (singleton)
_registry: Optional[SummarizerRegistry] = None


def get_summarizer() -> SummarizerRegistry:
    """Process-wide summarizer chain."""
    global _registry
    if _registry is None:
        _registry = SummarizerRegistry()
    return _registry


def reset_summarizer() -> None:
    """Drop the cached registry so the next call re-reads settings."""
    global _registry
    _registry = None

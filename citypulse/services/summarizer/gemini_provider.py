"""
Gemini Summarizer - production adapter over the Gemini REST API.

Requires GEMINI_API_KEY. Each request is bounded by AI_TIMEOUT_SECONDS. The
default session mounts an HTTPAdapter whose urllib3 Retry policy retries
transport errors, 429 and 5xx with exponential backoff. Never raises:
failures come back as SummaryResult(error=...).
"""

from typing import Dict, Optional
import json
import logging

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from citypulse.core.settings import settings
from citypulse.services.summarizer.base import (
    Summarizer,
    SummarizerError,
    SummaryResult,
    normalize_severity,
)
from citypulse.models.event import DEFAULT_SEVERITY

logger = logging.getLogger(__name__)


RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)


def create_retry_session(max_retries: int, backoff_seconds: float) -> requests.Session:
    """Create a requests session that retries POSTs to the Gemini API."""
    session = requests.Session()

    retry_strategy = Retry(
        total=max_retries,
        backoff_factor=backoff_seconds,
        status_forcelist=RETRYABLE_STATUS_CODES,
        allowed_methods=frozenset({"POST"}),
        respect_retry_after_header=False,
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    return session


class GeminiSummarizer(Summarizer):
    """
    Google Gemini provider for cluster summaries.

    Fails gracefully if the API key is missing or every attempt fails.
    """

    API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
    MODEL_VERSION = "v1beta"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.AI_TIMEOUT_SECONDS
        self.max_retries = max_retries if max_retries is not None else settings.AI_MAX_RETRIES
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.AI_RETRY_BACKOFF_SECONDS
        self.session = session or create_retry_session(self.max_retries, self.backoff_seconds)
        self.enabled = bool(self.api_key and self.api_key.strip())

        if self.enabled:
            logger.info(f"✅ Gemini summarizer initialized: {self.model}")
        else:
            logger.info("⚠️ Gemini summarizer disabled: No API key configured")

    def is_enabled(self) -> bool:
        return self.enabled

    def get_model_info(self) -> Dict[str, str]:
        return {"name": self.model, "version": self.MODEL_VERSION}

    def get_timeout_seconds(self) -> float:
        # Upper bound for the mounted retry policy: every attempt times out, plus backoff sleeps
        attempts = self.max_retries + 1
        backoff = sum(self.backoff_seconds * (2 ** i) for i in range(self.max_retries))
        return self.timeout_seconds * attempts + backoff

    def summarize(
        self,
        text: str,
        category: Optional[str] = None,
        area: Optional[str] = None,
    ) -> SummaryResult:
        if not self.enabled:
            return SummaryResult.failed(self.model, "Gemini API key not configured")

        try:
            prompt = self._build_prompt(text, category, area)
            response_text = self._call_gemini_api(prompt)
            parsed = self._parse_response(response_text)
            return SummaryResult(
                summary=parsed["summary"],
                severity=parsed["severity"],
                top_issues=parsed["top_issues"],
                model_name=self.model,
            )
        except Exception as e:
            logger.warning(f"⚠️ Gemini summarize failed: {e}")
            return SummaryResult.failed(self.model, f"Gemini API error: {e}")

    def _build_prompt(self, text: str, category: Optional[str], area: Optional[str]) -> str:
        return f"""You summarize clusters of citizen incident reports for a city dashboard.

Use calm, neutral, factual language. Do not speculate beyond the reports.

---
CATEGORY: {category or "Any"}
AREA: {area or "Any"}
REPORTS:
{text}

---
Respond with JSON only:

{{
  "summary": "<one sentence describing what is being reported>",
  "severity": "<one of: Low, Medium, High>",
  "topIssues": ["<issue1>", "<issue2>", "<issue3>"]
}}"""

    def _call_gemini_api(self, prompt: str) -> str:
        url = f"{self.API_BASE_URL}/{self.model}:generateContent"
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}

        try:
            response = self.session.post(url, json=payload, headers=headers, timeout=self.timeout_seconds)
        except requests.RequestException as e:
            raise SummarizerError(f"Gemini request failed: {e}") from e

        if response.status_code != 200:
            raise SummarizerError(f"Gemini API returned status {response.status_code}: {response.text[:200]}")

        data = response.json()
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise SummarizerError(f"Unexpected Gemini response shape: {e}") from e

    def _parse_response(self, text: str) -> Dict:
        """Extract the JSON object, tolerating markdown code fences."""
        if "```json" in text:
            text = text.split("```json")[1].split("```")[0]
        elif "```" in text:
            text = text.split("```")[1].split("```")[0]

        try:
            parsed = json.loads(text.strip())
        except json.JSONDecodeError as e:
            raise SummarizerError(f"Gemini returned non-JSON content: {e}") from e

        if not isinstance(parsed, dict):
            raise SummarizerError("Gemini returned JSON that is not an object")

        summary = parsed.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            raise SummarizerError("Gemini response missing 'summary'")

        top_issues = parsed.get("topIssues") or parsed.get("top_issues") or []
        if not isinstance(top_issues, list):
            top_issues = []

        return {
            "summary": summary.strip(),
            "severity": normalize_severity(parsed.get("severity")) or DEFAULT_SEVERITY,
            "top_issues": [str(issue) for issue in top_issues][:5],
        }

"""
OpenAI-compatible chat completion client (OpenRouter by default)

Transient failures are retried with exponential backoff; permanent ones
(auth, invalid model, exhausted credits, content policy) fail immediately.
"""

import json
import logging
import time
from typing import Any, Dict, Optional

import requests
from requests.exceptions import ChunkedEncodingError, ConnectionError, Timeout

from . import config
from .exceptions import (
    LLMResponseError,
    LLMRetryExhaustedError,
    NonRetryableLLMError,
    RetryableLLMError,
)

logger = logging.getLogger(__name__)

RETRYABLE_EXCEPTIONS = (
    ChunkedEncodingError,  # Response ended prematurely
    ConnectionError,       # Network connectivity issues
    Timeout,               # Request took too long
)


class LLMClient:
    """Client for OpenAI-compatible chat completion endpoints"""

    def __init__(
        self,
        api_key: str,
        model: str = config.DEFAULT_MODEL,
        provider: str = config.DEFAULT_PROVIDER,
        temperature: float = config.DEFAULT_TEMPERATURE,
        max_tokens: int = config.DEFAULT_MAX_TOKENS,
        timeout: int = config.LLM_TIMEOUT_SECONDS,
        max_retries: int = config.MAX_RETRIES
    ):
        """
        Initialize LLM client

        Args:
            api_key: Provider API key
            model: Model identifier (e.g. "google/gemini-flash-1.5" on OpenRouter)
            provider: One of openrouter, openai, deepseek, gemini
            temperature: Sampling temperature (0-2)
            max_tokens: Maximum tokens in the completion
            timeout: Per-request timeout in seconds
            max_retries: Retries after the first attempt for transient failures
        """
        if provider not in config.PROVIDER_ENDPOINTS:
            raise ValueError(
                f"Unknown LLM provider: {provider}. "
                f"Expected one of: {', '.join(config.PROVIDER_ENDPOINTS)}"
            )
        self.api_key = api_key
        self.provider = provider
        self.endpoint = config.PROVIDER_ENDPOINTS[provider]
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.max_retries = max_retries

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.provider == "openrouter":
            headers["HTTP-Referer"] = "https://github.com/report-pipeline"
            headers["X-Title"] = "Dataset Report Pipeline"
        return headers

    def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        run_logger: Optional[Any] = None
    ) -> str:
        """
        Send a single-message chat completion and return the text content

        Args:
            prompt: Fully rendered prompt
            model: Optional per-call model override
            run_logger: Optional RunLogger receiving token usage

        Returns:
            Trimmed completion text

        Raises:
            NonRetryableLLMError: 4xx other than 429, or a content_filter finish
            LLMRetryExhaustedError: Every attempt failed with a transient error
            LLMResponseError: The response has no usable content
        """
        model = model or self.model
        logger.info(f"Calling LLM: {model} via {self.provider}")
        logger.debug(f"Prompt size: {len(prompt)} characters ({len(prompt.split())} words)")

        payload = {
            "model": model,
            "messages": [
                {
                    "role": "user",
                    "content": prompt
                }
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

        start_time = time.time()
        last_error: Optional[RetryableLLMError] = None
        result = None

        for attempt in range(self.max_retries + 1):
            try:
                result = self._post(payload)
                break
            except RetryableLLMError as e:
                last_error = e
                if attempt < self.max_retries:
                    delay = config.RETRY_DELAY_BASE * (2 ** attempt)  # 2s, 4s, 8s
                    logger.warning(f"⚠️ Retryable error on attempt {attempt + 1}/{self.max_retries + 1}: {e}")
                    logger.warning(f"Retrying in {delay} seconds...")
                    time.sleep(delay)

        if result is None:
            logger.error(f"❌ All {self.max_retries + 1} attempts failed")
            raise LLMRetryExhaustedError(
                f"LLM API call failed after {self.max_retries + 1} attempts: {last_error}"
            )

        elapsed_time = time.time() - start_time
        logger.info(f"API response received in {elapsed_time:.2f} seconds")

        content = self._extract_content(result)
        logger.info(f"✅ Received {len(content)} characters")

        usage = result.get("usage") or {}
        if usage:
            logger.info(
                f"Token usage - Prompt: {usage.get('prompt_tokens', 'N/A')}, "
                f"Completion: {usage.get('completion_tokens', 'N/A')}, "
                f"Total: {usage.get('total_tokens', 'N/A')}"
            )

        if run_logger is not None:
            run_logger.llm_call(
                prompt_preview=prompt,
                response_preview=content,
                tokens={
                    "prompt_tokens": usage.get("prompt_tokens", 0),
                    "completion_tokens": usage.get("completion_tokens", 0),
                    "total_tokens": usage.get("total_tokens", 0),
                },
                duration_ms=int(elapsed_time * 1000),
                model=model
            )

        return content

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """One HTTP attempt, translating failures into retryable / non-retryable errors"""
        try:
            response = requests.post(
                self.endpoint,
                headers=self._headers(),
                json=payload,
                timeout=self.timeout
            )
        except RETRYABLE_EXCEPTIONS as e:
            raise RetryableLLMError(f"{type(e).__name__}: {e}")

        if response.status_code in config.RETRYABLE_STATUS_CODES:
            raise RetryableLLMError(f"HTTP {response.status_code}: {response.text[:200]}")

        if response.status_code >= 400:
            logger.error(f"❌ HTTP error occurred: {response.status_code}")
            logger.error(f"Response body: {response.text[:1000]}")
            raise NonRetryableLLMError(
                f"LLM API HTTP error ({response.status_code}): {self._error_message(response)}"
            )

        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise LLMResponseError(f"Invalid JSON response from API: {e}")

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            return str(error.get("message", error))
        return str(error or body)[:200]

    @staticmethod
    def _extract_content(result: Dict[str, Any]) -> str:
        choices = result.get("choices") if isinstance(result, dict) else None
        if not choices:
            logger.error(f"Invalid API response format: {str(result)[:500]}")
            raise LLMResponseError("Invalid API response format: no choices")

        choice = choices[0]
        if choice.get("finish_reason") == "content_filter":
            raise NonRetryableLLMError("Response blocked by content filter")

        content = (choice.get("message") or {}).get("content")
        if not isinstance(content, str):
            raise LLMResponseError("Invalid API response format: missing message content")
        return content.strip()

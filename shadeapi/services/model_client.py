from typing import Any, Optional
import logging
import time

from shadeapi.config import settings
from shadeapi.core.errors import ApiError, ConfigurationError, classify_error

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0


class EmptyModelResponse(ApiError):
    status_code = 500
    default_message = "No response received from analysis service"


class ShadeModelClient:
    """
    Wrapper around an OpenAI-compatible chat-completion endpoint.

    The SDK client is created on first use and then reused for the lifetime of
    the process. Building it twice under concurrent first calls is harmless:
    it only holds connection settings.
    """

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: str = "https://openrouter.ai/api/v1",
        model: str = "google/gemini-flash-1.5",
        app_url: str = "http://localhost:3000",
        app_title: str = "Dental Analysis API",
        max_tokens: int = 2000,
        temperature: float = 0.3,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Any = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.app_url = app_url
        self.app_title = app_title
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, cfg=settings) -> "ShadeModelClient":
        return cls(
            cfg.OPENROUTER_API_KEY,
            base_url=cfg.OPENROUTER_BASE_URL,
            model=cfg.ANALYSIS_MODEL,
            app_url=cfg.APP_URL,
            max_tokens=cfg.ANALYSIS_MAX_TOKENS,
            temperature=cfg.ANALYSIS_TEMPERATURE,
            timeout=cfg.ANALYSIS_TIMEOUT_SECONDS,
        )

    def _get_client(self):
        if self._client is None:
            if not self.api_key:
                raise ConfigurationError()
            from openai import AsyncOpenAI
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
                default_headers={
                    "HTTP-Referer": self.app_url,
                    "X-Title": self.app_title,
                },
            )
            logger.info(f"Analysis model client initialized for {self.base_url}")
        return self._client

    @staticmethod
    def build_messages(prompt: str, image1: str, image2: str) -> list:
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": image1}},
                    {"type": "image_url", "image_url": {"url": image2}},
                ],
            }
        ]

    async def complete(self, prompt: str, image1: str, image2: str) -> str:
        """Send one multimodal request and return the raw text of the first choice."""
        client = self._get_client()
        start = time.perf_counter()
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(prompt, image1, image2),
                response_format={"type": "json_object"},
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            error = classify_error(e)
            logger.error(f"Analysis model call failed ({type(e).__name__}): {e} -> {error.status_code}")
            raise error from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"Analysis model responded in {elapsed_ms:.0f}ms (model={self.model})")

        choices = getattr(response, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        content = getattr(message, "content", None)
        if not content:
            raise EmptyModelResponse()
        return content

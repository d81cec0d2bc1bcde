"""LLM provider adapters.

Each provider turns (question, document) into the model's raw completion
text, or raises ProviderError. Parsing is NOT done here; src.llm.validators
owns response semantics, so SDK and HTTP quirks stay inside this module.

  OpenRouterProvider → primary, LangChain ChatOpenAI against OpenRouter
  GeminiProvider     → secondary, Google Generative Language REST via httpx

A provider without an API key is "not configured": it reports so through
is_configured and fails any call before touching the network.
"""

import os
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import httpx
from langchain_core.messages import HumanMessage, SystemMessage

from src.errors import ProviderError
from src.llm.client import OPENROUTER_API_KEY, OPENROUTER_MODEL, get_openrouter_llm
from src.prompts.answering import ANSWER_SYSTEM, build_user_prompt
from src.utils.logging import log, get_logger

MODULE = "llm.providers"
logger = get_logger()

GOOGLE_AI_API_KEY = os.getenv("GOOGLE_AI_API_KEY", "")
GOOGLE_AI_MODEL = os.getenv("GOOGLE_AI_MODEL", "gemini-2.0-flash")
GEMINI_URL = os.getenv("GEMINI_URL", "https://generativelanguage.googleapis.com/v1beta")


class LLMProvider(ABC):
    """A chat model that answers a question from a document."""

    name: str = "provider"

    def __init__(self, api_key: str, model: str, timeout: float):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @abstractmethod
    async def call(self, question: str, document: str) -> str:
        """Return the raw completion text.

        Raises:
            ProviderError: missing key, transport/SDK failure, non-2xx
                status, or an empty completion
        """

    def _require_key(self) -> None:
        if not self.is_configured:
            raise ProviderError(f"{self.name} API key not configured", self.name)

    def _require_content(self, content: Any) -> str:
        if not isinstance(content, str) or not content.strip():
            raise ProviderError(
                f"{self.name} returned empty or invalid content", self.name
            )
        log.debug(logger, MODULE, "raw_received", "Raw content received",
                  provider=self.name, model=self.model, length=len(content),
                  preview=content[:300])
        return content


class OpenRouterProvider(LLMProvider):
    """OpenRouter chat completions in JSON mode."""

    name = "openrouter"

    def __init__(
        self,
        api_key: str = OPENROUTER_API_KEY,
        model: str = OPENROUTER_MODEL,
        timeout: float = 75.0,
        llm_factory: Callable[..., Any] = get_openrouter_llm,
    ):
        super().__init__(api_key, model, timeout)
        self._llm_factory = llm_factory

    async def call(self, question: str, document: str) -> str:
        self._require_key()
        llm = self._llm_factory(
            api_key=self.api_key, model=self.model, timeout=self.timeout,
        )

        log.debug(logger, MODULE, "openrouter_start", "Calling OpenRouter",
                  model=self.model, question=question[:70])
        try:
            response = await llm.ainvoke([
                SystemMessage(content=ANSWER_SYSTEM),
                HumanMessage(content=build_user_prompt(question, document)),
            ])
        except Exception as e:
            # openai.APIStatusError carries the HTTP status
            status_code = getattr(e, "status_code", None)
            raise ProviderError(
                f"OpenRouter request failed: {e}", self.name, status_code=status_code,
            ) from e

        return self._require_content(response.content)


class GeminiProvider(LLMProvider):
    """Google Gemini generateContent in JSON mime-type mode."""

    name = "gemini"

    def __init__(
        self,
        api_key: str = GOOGLE_AI_API_KEY,
        model: str = GOOGLE_AI_MODEL,
        timeout: float = 60.0,
        base_url: str = GEMINI_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(api_key, model, timeout)
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    def _request_body(self, question: str, document: str) -> dict:
        return {
            "systemInstruction": {"parts": [{"text": ANSWER_SYSTEM}]},
            "contents": [{
                "role": "user",
                "parts": [{"text": build_user_prompt(question, document)}],
            }],
            "generationConfig": {
                "responseMimeType": "application/json",
                "temperature": 0.2,
                "maxOutputTokens": 2000,
            },
        }

    async def call(self, question: str, document: str) -> str:
        self._require_key()
        url = f"{self.base_url}/models/{self.model}:generateContent"

        log.debug(logger, MODULE, "gemini_start", "Calling Gemini",
                  model=self.model, question=question[:70])
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            try:
                resp = await client.post(
                    url,
                    json=self._request_body(question, document),
                    headers={
                        "x-goog-api-key": self.api_key,
                        "Content-Type": "application/json",
                    },
                )
                resp.raise_for_status()
                data = resp.json()
            except httpx.HTTPStatusError as e:
                raise ProviderError(
                    f"Gemini returned HTTP {e.response.status_code}: {e.response.text[:200]}",
                    self.name, status_code=e.response.status_code,
                ) from e
            except (httpx.HTTPError, ValueError) as e:
                raise ProviderError(f"Gemini request failed: {e}", self.name) from e

        return self._require_content(self._completion_text(data))

    def _completion_text(self, data: Any) -> str:
        """Join the text parts of the first candidate."""
        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not candidates or not isinstance(candidates, list):
            feedback = data.get("promptFeedback", {}) if isinstance(data, dict) else {}
            reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
            raise ProviderError(
                f"Gemini returned no candidates (block_reason={reason})", self.name,
            )

        content = candidates[0].get("content", {}) if isinstance(candidates[0], dict) else {}
        parts = content.get("parts", []) if isinstance(content, dict) else []
        return "".join(
            p["text"] for p in parts
            if isinstance(p, dict) and isinstance(p.get("text"), str)
        )

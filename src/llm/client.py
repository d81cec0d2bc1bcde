"""LLM client configuration.

The primary provider is OpenRouter, reached through LangChain's ChatOpenAI:
OpenRouter exposes an OpenAI-compatible /v1/chat/completions endpoint, so the
stock client works once base_url and the attribution headers are set.

  get_openrouter_llm() → JSON-mode chat client, no SDK-level retries

The fallback hop is the only retry in the pipeline (see src.llm.invoker), so
max_retries is pinned to 0 here.
"""

import os

from langchain_openai import ChatOpenAI

from src.utils.logging import log, get_logger

MODULE = "llm"
logger = get_logger()

OPENROUTER_URL = os.getenv("OPENROUTER_URL", "https://openrouter.ai/api/v1")
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY", "")
# Pick a model with reliable JSON-mode adherence
OPENROUTER_MODEL = os.getenv("OPENROUTER_MODEL", "google/gemma-3-27b-it:free")

# OpenRouter app attribution
APP_SITE_URL = os.getenv("APP_SITE_URL", "http://localhost:3000")
APP_NAME = os.getenv("APP_NAME", "FundraisingQABot")


def get_openrouter_llm(
    api_key: str,
    model: str = OPENROUTER_MODEL,
    temperature: float = 0.2,
    max_tokens: int = 2000,
    timeout: float = 75.0,
) -> ChatOpenAI:
    """Get an OpenRouter chat client in JSON mode.

    Args:
        api_key: OpenRouter API key.
        model: OpenRouter model slug.
        temperature: Low by default; answers should track the document.
        max_tokens: Completion cap, bounds latency and cost.
        timeout: Per-request timeout in seconds. Free-tier models are slow.
    """
    client = ChatOpenAI(
        base_url=OPENROUTER_URL,
        api_key=api_key,
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout=timeout,
        max_retries=0,
        default_headers={
            "HTTP-Referer": APP_SITE_URL,
            "X-Title": APP_NAME,
        },
        model_kwargs={"response_format": {"type": "json_object"}},
    )
    log.debug(logger, MODULE, "openrouter_init", "OpenRouter client created",
              base_url=OPENROUTER_URL, model=model, temperature=temperature)
    return client

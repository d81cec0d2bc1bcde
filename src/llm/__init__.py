"""LLM answering package.

This package turns a question into a validated StructuredAnswer:

  from src.llm import AnswerInvoker, OpenRouterProvider, GeminiProvider

  invoker = AnswerInvoker(
      primary=OpenRouterProvider(),
      secondary=GeminiProvider(),
      knowledge=knowledge_base,
  )
  answer = await invoker.answer("What is a SAFE?")

Architecture:
  client.py     → ChatOpenAI configuration for OpenRouter
  providers.py  → Provider adapters (raw completion text or ProviderError)
  parser.py     → Markdown fence unwrapping, bold stripping
  validators.py → Field-by-field validation into text / list / error
  invoker.py    → Precheck, primary call, single fallback, error synthesis

The invoker implements defense-in-depth:
  1. PROMPT: Tell the LLM exactly which JSON shapes are allowed
  2. PARSE: Unwrap markdown fences around the JSON
  3. VALIDATE: Check structure, coerce bad sub-fields instead of failing
  4. FALLBACK: On provider failure, try the secondary provider once
"""

from src.llm.client import get_openrouter_llm

from src.llm.invoker import AnswerInvoker, ProviderAttempt

from src.llm.parser import extract_json_text, strip_markdown_bold

from src.llm.providers import LLMProvider, OpenRouterProvider, GeminiProvider

from src.llm.validators import validate_answer

__all__ = [
    # Client
    "get_openrouter_llm",
    # Invoker
    "AnswerInvoker",
    "ProviderAttempt",
    # Parser
    "extract_json_text",
    "strip_markdown_bold",
    # Providers
    "LLMProvider",
    "OpenRouterProvider",
    "GeminiProvider",
    # Validators
    "validate_answer",
]

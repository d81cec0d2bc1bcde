"""Validation and normalization of raw LLM answers.

LLM output is untrusted text, not a wire format. Instead of deserializing it
straight into the answer schema (which would reject the whole payload over
one bad field), every field is checked and coerced on its own:

- follow_up / source_section_* of the wrong type become None
- list items that are not objects become {"N/A", "Invalid item structure"}
- list items missing point/detail get "N/A" for the missing side

Only the structural checks below fail a response, each with a stable code:

  PV01  not parseable as JSON
  PV02  not an object, or no string "type"
  PV03  text answer without a string "answer"
  PV04  list answer without a string "title" and an "items" array
  PV05  error answer without a string "message"
  PV06  unknown "type"

validate_answer() never raises. Failures come back as ErrorAnswer.
"""

import json
from typing import Any, Optional

from pydantic import ValidationError

from src.llm.parser import extract_json_text, strip_markdown_bold
from src.schemas.answers import (
    ErrorAnswer,
    ListAnswer,
    ListItem,
    StructuredAnswer,
    TextAnswer,
)
from src.utils.logging import log, get_logger

MODULE = "llm.validators"
logger = get_logger()

INVALID_ITEM = ListItem(point="N/A", detail="Invalid item structure")


class _Rejected(Exception):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def validate_answer(raw: str, provider: str) -> StructuredAnswer:
    """Turn raw model output into a normalized, immutable answer.

    Args:
        raw: Raw completion text from a provider
        provider: Provider label ("primary"/"secondary"), used for
            provenance and embedded in error codes

    Returns:
        TextAnswer, ListAnswer, or ErrorAnswer
    """
    candidate = extract_json_text(raw)

    try:
        data = json.loads(candidate)
    except (ValueError, RecursionError) as e:
        return _reject(
            "PV01", provider,
            f"AI service response from {provider} was not valid JSON.",
            raw=candidate, error=str(e),
        )

    try:
        result = _build_answer(data, provider)
    except _Rejected as e:
        return _reject(e.code, provider, e.message, raw=candidate)
    except ValidationError as e:
        # \ud800-style escapes decode but are not valid Unicode text
        return _reject(
            "PV01", provider,
            f"AI service response from {provider} was not valid JSON.",
            raw=candidate, error=str(e),
        )

    log.debug(logger, MODULE, "validated", f"Response accepted as '{result.type}'",
              provider=provider)
    return result


def _build_answer(data: Any, provider: str) -> StructuredAnswer:
    kind = data.get("type") if isinstance(data, dict) else None
    if not isinstance(kind, str) or not kind:
        raise _Rejected("PV02", f"AI response from {provider} invalid structure.")

    common = {
        "follow_up": _optional_str(data, "follow_up", provider, strip_bold=True),
        "source_section_id": _optional_str(data, "source_section_id", provider),
        "source_section_title": _optional_str(data, "source_section_title", provider),
        "provider": provider,
    }

    if kind == "text":
        answer = data.get("answer")
        if not isinstance(answer, str):
            raise _Rejected("PV03", f"AI 'text' response from {provider} missing 'answer'.")
        return TextAnswer(answer=strip_markdown_bold(answer), **common)

    if kind == "list":
        title = data.get("title")
        items = data.get("items")
        if not isinstance(title, str) or not isinstance(items, list):
            raise _Rejected("PV04", f"AI 'list' response from {provider} invalid.")
        return ListAnswer(
            title=strip_markdown_bold(title),
            items=tuple(_coerce_item(item, provider) for item in items),
            **common,
        )

    if kind == "error":
        message = data.get("message")
        if not isinstance(message, str):
            raise _Rejected("PV05", f"AI 'error' response from {provider} missing 'message'.")
        return ErrorAnswer(message=message, provider=provider)

    raise _Rejected(
        "PV06",
        f"AI from {provider} returned unknown type: {ascii(kind[:50])}.",
    )


def _coerce_item(item: Any, provider: str) -> ListItem:
    if not isinstance(item, dict):
        log.warning(logger, MODULE, "invalid_item",
                    "Non-object item in list response",
                    provider=provider, item=ascii(item)[:100])
        return INVALID_ITEM

    point = item.get("point")
    detail = item.get("detail")
    return ListItem(
        point=strip_markdown_bold(point if isinstance(point, str) else "N/A"),
        detail=strip_markdown_bold(detail if isinstance(detail, str) else "N/A"),
    )


def _optional_str(
    data: dict,
    key: str,
    provider: str,
    strip_bold: bool = False,
) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        log.warning(logger, MODULE, "field_coerced",
                    f"'{key}' was not a string or null, using null",
                    provider=provider, value_type=type(value).__name__)
        return None
    return strip_markdown_bold(value) if strip_bold else value


def _reject(code: str, provider: str, message: str, raw: str,
            error: Optional[str] = None) -> ErrorAnswer:
    log.warning(logger, MODULE, "rejected", "Response failed validation",
                code=code, provider=provider, error=error, preview=ascii(raw[:300]))
    return ErrorAnswer(
        message=f"{message} (E:{code}_{provider})",
        code=code,
        provider=provider,
    )

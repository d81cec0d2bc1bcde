"""JSON extraction from LLM responses.

Models are told to return a bare JSON object but often wrap it in a markdown
code block anyway. This module unwraps that one case and leaves everything
else alone: an unparseable blob is not always a wrapping issue, and the
validator reports it as PV01.
"""

import re

from src.utils.logging import log, get_logger

MODULE = "llm.parser"
logger = get_logger()

# A fence spanning the whole (trimmed) text, optionally labeled json
_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)

_BOLD_STARS = re.compile(r"\*\*(.*?)\*\*")
_BOLD_UNDERSCORES = re.compile(r"__(.*?)__")


def extract_json_text(text: str) -> str:
    """Return the JSON candidate string from raw model output.

    Handles:
    - Raw JSON: {"key": "value"}
    - Markdown blocks: ```json\\n{"key": "value"}\\n``` (also nested fences)

    Surrounding whitespace is always trimmed. Fences are unwrapped until
    none is left, so calling this on its own output changes nothing.

    Args:
        text: Raw LLM output string

    Returns:
        The string the validator should hand to json.loads
    """
    candidate = text.strip()

    unwrapped = False
    match = _FENCE.match(candidate)
    while match:
        candidate = match.group(1).strip()
        unwrapped = True
        match = _FENCE.match(candidate)

    if unwrapped:
        log.debug(logger, MODULE, "fence_stripped",
                  "Extracted content from markdown block",
                  length=len(candidate))
    elif not (candidate.startswith("{") and candidate.endswith("}")):
        log.warning(logger, MODULE, "not_json_like",
                    "Content is neither JSON nor markdown-wrapped JSON",
                    preview=candidate[:70])

    return candidate


def strip_markdown_bold(text: str) -> str:
    """Remove **bold** and __bold__ emphasis, keeping the inner text."""
    return _BOLD_UNDERSCORES.sub(r"\1", _BOLD_STARS.sub(r"\1", text))

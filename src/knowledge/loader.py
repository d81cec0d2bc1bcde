"""Knowledge base loading.

The guide is read from disk once at startup and only read afterwards, so it
is safe to share across concurrent requests without locking.

KNOWLEDGE_BASE_CONTENT_OVERRIDE replaces the file content entirely (useful
for serverless deployments without a bundled file).
"""

import os
from pathlib import Path
from typing import Optional

from src.utils.logging import log, get_logger

MODULE = "knowledge"
logger = get_logger()

KNOWLEDGE_BASE_PATH = os.getenv("KNOWLEDGE_BASE_PATH", "data/knowledge_base.txt")


class KnowledgeBase:
    """Read-only holder for the knowledge document."""

    def __init__(self, path: str = KNOWLEDGE_BASE_PATH, override: Optional[str] = None):
        self.path = Path(path)
        self._override = override
        self._content = ""
        self._loaded = False

    def load(self) -> None:
        """Read the document from disk. Safe to call more than once."""
        if self._loaded:
            return
        self._loaded = True

        log.info(logger, MODULE, "load_start", "Loading knowledge base",
                 path=str(self.path))
        try:
            self._content = self.path.read_text(encoding="utf-8")
        except OSError as e:
            # Leave content empty; the invoker reports CFG02 per request
            log.error(logger, MODULE, "load_failed",
                      "Failed to load knowledge base, check path and deployment",
                      error=str(e), error_type=type(e).__name__, path=str(self.path))
            return

        log.info(logger, MODULE, "load_done", "Knowledge base loaded",
                 chars=len(self._content))

    def get_document(self) -> str:
        """Return the document text. An empty string means unavailable."""
        override = self._override
        if override is None:
            override = os.getenv("KNOWLEDGE_BASE_CONTENT_OVERRIDE")
        if override:
            return override
        return self._content

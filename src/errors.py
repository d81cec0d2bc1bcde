"""Exception types shared across the answering pipeline.

Only ProviderError and PersistenceError cross module boundaries as raised
exceptions. Configuration and validation problems are surfaced to callers
as error-shaped answers instead (see src.llm.invoker and src.llm.validators).
"""

from typing import Optional


class ConfigError(Exception):
    """Missing provider credentials or knowledge document."""

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.code = code


class ProviderError(Exception):
    """Raised when one LLM provider call fails.

    Covers missing credentials, network/SDK errors, non-2xx status,
    timeouts and empty completions.
    """

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class PersistenceError(Exception):
    """Raised when the history store cannot be reached or written."""

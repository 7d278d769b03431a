from __future__ import annotations

from typing import Optional


class AgriIntelError(Exception):
    """Base class for errors raised by the orchestration stack."""


class ConfigurationError(AgriIntelError):
    """Credentials required by an administrative operation are missing."""


class SearchServiceError(AgriIntelError):
    def __init__(
        self,
        message: str,
        *,
        index: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.index = index
        self.status_code = status_code


class CompletionsError(AgriIntelError):
    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code

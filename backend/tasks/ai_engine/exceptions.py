# tasks/ai_engine/exceptions.py
"""
Exceptions raised inside the AI engine.

Only TeamNotFoundError is meant to reach the API layer; oracle failures
are always absorbed by the deterministic fallbacks.
"""

from __future__ import annotations

import enum
from typing import List, Optional


class ProviderErrorKind(str, enum.Enum):
    """Structured classification of a failed generation call."""

    RATE_LIMITED = "rate_limited"
    TRANSPORT = "transport"
    INVALID_RESPONSE = "invalid_response"


class ProviderError(Exception):
    """Raised by a generation provider; `kind` drives the retry policy."""

    def __init__(self, kind: ProviderErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind

    @property
    def is_rate_limited(self) -> bool:
        return self.kind == ProviderErrorKind.RATE_LIMITED


class OracleExhaustedError(Exception):
    """Raised when every candidate model failed to return usable JSON."""

    def __init__(self, candidates: List[str], last_error: Optional[BaseException] = None) -> None:
        message = f"All AI models failed ({', '.join(candidates) or 'no candidates'})"
        if last_error is not None:
            message += f": {last_error}"
        super().__init__(message)
        self.candidates = list(candidates)
        self.last_error = last_error


class TeamNotFoundError(Exception):
    """Raised when a manager has no teams."""

    def __init__(self, manager_id) -> None:
        super().__init__(f"No teams found for manager {manager_id}")
        self.manager_id = manager_id

"""Error types raised by analysis, storage and the journal service."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class AnalysisErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    EMPTY_RESPONSE = "empty_response"
    MALFORMED = "malformed"
    TIMEOUT = "timeout"
    CONNECTIVITY = "connectivity"
    AUTHORIZATION = "authorization"
    SERVICE = "service"


NON_RETRYABLE_KINDS = frozenset({AnalysisErrorKind.CONFIGURATION, AnalysisErrorKind.AUTHORIZATION})


class AnalysisError(Exception):
    """Failure to turn entry content into emotion scores.

    Callers read ``retryable`` to decide between re-queueing the analysis
    and surfacing a permanent failure to the user.
    """

    def __init__(self, kind: AnalysisErrorKind, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.cause = cause

    @property
    def retryable(self) -> bool:
        return self.kind not in NON_RETRYABLE_KINDS

    def __repr__(self) -> str:
        return f"AnalysisError(kind={self.kind.value!r}, message={self.message!r}, retryable={self.retryable})"


class JournalError(Exception):
    """Base class for entry-level errors."""


class EntryNotFoundError(JournalError):
    def __init__(self, entry_id: str):
        super().__init__(f"Entry not found: {entry_id}")
        self.entry_id = entry_id


class EmptyContentError(JournalError):
    def __init__(self) -> None:
        super().__init__("Entry content cannot be empty")

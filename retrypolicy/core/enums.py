from __future__ import annotations

from enum import StrEnum


class FailureKind(StrEnum):
    TRANSIENT = "transient"
    THROTTLING = "throttling"
    RESOURCE_CONFLICT = "resource_conflict"
    INVALID_INPUT = "invalid_input"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    SERVER_INTERNAL = "server_internal"
    UNKNOWN = "unknown"


class TerminalReason(StrEnum):
    MAX_ATTEMPTS_EXCEEDED = "max_attempts_exceeded"
    NON_RETRYABLE_KIND = "non_retryable_kind"
    CALLER_ABORTED = "caller_aborted"

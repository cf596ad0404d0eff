"""Core module exports."""

from __future__ import annotations

from .enums import FailureKind, TerminalReason

__all__ = [
    "FailureKind",
    "TerminalReason",
]

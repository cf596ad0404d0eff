"""Unit tests for core enums."""

from __future__ import annotations

import pytest

from retrypolicy.core.enums import FailureKind, TerminalReason


class TestFailureKind:
    def test_all_kinds_have_unique_values(self) -> None:
        values = [k.value for k in FailureKind]
        assert len(values) == len(set(values)) == 8

    def test_kind_from_string(self) -> None:
        assert FailureKind("throttling") == FailureKind.THROTTLING
        assert FailureKind("server_internal") == FailureKind.SERVER_INTERNAL

    def test_invalid_kind_string_raises(self) -> None:
        with pytest.raises(ValueError):
            FailureKind("invalid")

    def test_kind_is_string_subclass(self) -> None:
        """Test FailureKind is a str subclass for JSON serialization."""
        assert isinstance(FailureKind.TRANSIENT, str)
        assert f"{FailureKind.TRANSIENT}" == "transient"


class TestTerminalReason:
    def test_reason_values(self) -> None:
        assert {r.value for r in TerminalReason} == {
            "max_attempts_exceeded",
            "non_retryable_kind",
            "caller_aborted",
        }

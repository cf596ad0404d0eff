"""Unit tests for ErrorClassifier and category_of."""

from __future__ import annotations

import pytest

from retrypolicy.core.enums import FailureKind
from retrypolicy.resilience import DEFAULT_RETRYABLE_KINDS, ErrorClassifier, category_of


class SDKError(Exception):
    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class CategorizedError(Exception):
    category = "Throttling"


class TestErrorClassifier:
    """Tests for the category table."""

    @pytest.mark.parametrize(
        ("tag", "kind"),
        [
            ("ThrottlingException", FailureKind.THROTTLING),
            ("TooManyRequestsException", FailureKind.THROTTLING),
            ("RequestTimeout", FailureKind.TRANSIENT),
            ("TimeoutError", FailureKind.TRANSIENT),
            ("ConnectionError", FailureKind.TRANSIENT),
            ("InternalServerError", FailureKind.SERVER_INTERNAL),
            ("ResourceNotFoundException", FailureKind.NOT_FOUND),
            ("AccessDeniedException", FailureKind.PERMISSION_DENIED),
            ("PermissionError", FailureKind.PERMISSION_DENIED),
            ("ConflictException", FailureKind.RESOURCE_CONFLICT),
            ("ValidationException", FailureKind.INVALID_INPUT),
        ],
    )
    def test_default_synonyms(self, tag: str, kind: FailureKind) -> None:
        assert ErrorClassifier.default().kind_for(tag) == kind

    def test_default_retryable_kinds(self) -> None:
        assert DEFAULT_RETRYABLE_KINDS == {
            FailureKind.TRANSIENT,
            FailureKind.THROTTLING,
            FailureKind.SERVER_INTERNAL,
        }

    def test_custom_table_replaces_defaults(self) -> None:
        """Test a caller-supplied table is used instead of the default one."""
        classifier = ErrorClassifier({"Busy": FailureKind.TRANSIENT})
        assert classifier.kind_for("Busy") == FailureKind.TRANSIENT
        assert classifier.kind_for("Throttling") == FailureKind.UNKNOWN

    def test_extend_layers_over_existing(self) -> None:
        base = ErrorClassifier.default()
        extended = base.extend(
            {"NotFound": FailureKind.TRANSIENT, "Busy": FailureKind.TRANSIENT}
        )

        assert extended.kind_for("NotFound") == FailureKind.TRANSIENT
        assert extended.kind_for("Busy") == FailureKind.TRANSIENT
        assert base.kind_for("NotFound") == FailureKind.NOT_FOUND
        assert base.kind_for("Busy") == FailureKind.UNKNOWN

    def test_custom_retryable_kinds(self) -> None:
        classifier = ErrorClassifier(
            retryable_kinds=frozenset({FailureKind.RESOURCE_CONFLICT})
        )
        assert classifier.is_retryable(FailureKind.RESOURCE_CONFLICT) is True
        assert classifier.is_retryable(FailureKind.TRANSIENT) is False

    def test_categories_are_read_only(self) -> None:
        classifier = ErrorClassifier.default()
        with pytest.raises(TypeError):
            classifier.categories["Busy"] = FailureKind.TRANSIENT  # type: ignore[index]

    def test_non_string_tag_is_stringified(self) -> None:
        classifier = ErrorClassifier({"503": FailureKind.TRANSIENT})
        assert classifier.kind_for(503) == FailureKind.TRANSIENT


class TestCategoryOf:
    """Tests for deriving a category tag from an exception."""

    def test_uses_code_attribute(self) -> None:
        assert category_of(SDKError("slow down", code="SlowDown")) == "SlowDown"

    def test_uses_category_attribute(self) -> None:
        assert category_of(CategorizedError("busy")) == "Throttling"

    def test_falls_back_to_class_name(self) -> None:
        assert category_of(SDKError("boom")) == "SDKError"
        assert category_of(TimeoutError("late")) == "TimeoutError"

    def test_ignores_non_string_code(self) -> None:
        error = SDKError("boom")
        error.code = 500  # type: ignore[assignment]
        assert category_of(error) == "SDKError"

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from ..core.enums import FailureKind

DEFAULT_RETRYABLE_KINDS: frozenset[FailureKind] = frozenset(
    {
        FailureKind.TRANSIENT,
        FailureKind.THROTTLING,
        FailureKind.SERVER_INTERNAL,
    }
)

# Category tags seen from cloud SDK clients, plus the Python built-ins that
# surface from transports. Anything not listed classifies as UNKNOWN.
DEFAULT_CATEGORIES: Mapping[str, FailureKind] = MappingProxyType(
    {
        # throttling
        "Throttling": FailureKind.THROTTLING,
        "ThrottlingException": FailureKind.THROTTLING,
        "ThrottledException": FailureKind.THROTTLING,
        "TooManyRequestsException": FailureKind.THROTTLING,
        "RequestLimitExceeded": FailureKind.THROTTLING,
        "SlowDown": FailureKind.THROTTLING,
        "ProvisionedThroughputExceededException": FailureKind.THROTTLING,
        # transient
        "ServiceUnavailable": FailureKind.TRANSIENT,
        "ServiceUnavailableException": FailureKind.TRANSIENT,
        "Timeout": FailureKind.TRANSIENT,
        "RequestTimeout": FailureKind.TRANSIENT,
        "RequestTimeoutException": FailureKind.TRANSIENT,
        "TimeoutError": FailureKind.TRANSIENT,
        "ConnectionError": FailureKind.TRANSIENT,
        # server internal
        "InternalError": FailureKind.SERVER_INTERNAL,
        "InternalFailure": FailureKind.SERVER_INTERNAL,
        "InternalServerError": FailureKind.SERVER_INTERNAL,
        "InternalServerException": FailureKind.SERVER_INTERNAL,
        "ServiceException": FailureKind.SERVER_INTERNAL,
        # invalid input
        "ValidationError": FailureKind.INVALID_INPUT,
        "ValidationException": FailureKind.INVALID_INPUT,
        "InvalidParameterValue": FailureKind.INVALID_INPUT,
        "InvalidParameterException": FailureKind.INVALID_INPUT,
        # permission denied
        "AccessDenied": FailureKind.PERMISSION_DENIED,
        "AccessDeniedException": FailureKind.PERMISSION_DENIED,
        "UnauthorizedOperation": FailureKind.PERMISSION_DENIED,
        "PermissionError": FailureKind.PERMISSION_DENIED,
        # not found
        "NotFound": FailureKind.NOT_FOUND,
        "ResourceNotFoundException": FailureKind.NOT_FOUND,
        "NoSuchKey": FailureKind.NOT_FOUND,
        "NoSuchBucket": FailureKind.NOT_FOUND,
        # resource conflict
        "ConflictAlreadyExists": FailureKind.RESOURCE_CONFLICT,
        "ConflictException": FailureKind.RESOURCE_CONFLICT,
        "ResourceInUseException": FailureKind.RESOURCE_CONFLICT,
        "AlreadyExistsException": FailureKind.RESOURCE_CONFLICT,
    }
)


class ErrorClassifier:
    """Maps caller-supplied category tags onto :class:`FailureKind`.

    The table is data, not code: callers with their own error taxonomy pass a
    mapping (or ``extend`` the default one) instead of subclassing. Lookups try
    the exact tag first, then a case-insensitive match.
    """

    __slots__ = ("_categories", "_folded", "_retryable_kinds")

    def __init__(
        self,
        categories: Mapping[str, FailureKind] | None = None,
        retryable_kinds: frozenset[FailureKind] | None = None,
    ) -> None:
        table = dict(DEFAULT_CATEGORIES if categories is None else categories)
        self._categories: Mapping[str, FailureKind] = MappingProxyType(table)
        self._folded: Mapping[str, FailureKind] = MappingProxyType(
            {name.casefold(): kind for name, kind in table.items()}
        )
        self._retryable_kinds = (
            DEFAULT_RETRYABLE_KINDS
            if retryable_kinds is None
            else frozenset(retryable_kinds)
        )

    @classmethod
    def default(cls) -> ErrorClassifier:
        return cls()

    @property
    def categories(self) -> Mapping[str, FailureKind]:
        return self._categories

    @property
    def retryable_kinds(self) -> frozenset[FailureKind]:
        return self._retryable_kinds

    def extend(self, categories: Mapping[str, FailureKind]) -> ErrorClassifier:
        """Return a new classifier with ``categories`` layered over this table."""
        return ErrorClassifier(
            {**self._categories, **categories}, self._retryable_kinds
        )

    def kind_for(self, raw_category: object) -> FailureKind:
        if isinstance(raw_category, FailureKind):
            return raw_category
        if raw_category is None:
            return FailureKind.UNKNOWN

        tag = str(raw_category).strip()
        kind = self._categories.get(tag)
        if kind is None:
            kind = self._folded.get(tag.casefold(), FailureKind.UNKNOWN)
        return kind

    def is_retryable(self, kind: FailureKind) -> bool:
        return kind in self._retryable_kinds


def category_of(exc: BaseException) -> str:
    """Category tag for an exception.

    Prefers an explicit ``category`` or ``code`` string attribute (SDK errors
    commonly carry one), falling back to the exception class name.
    """
    for attr in ("category", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, str) and value:
            return value
    return type(exc).__name__

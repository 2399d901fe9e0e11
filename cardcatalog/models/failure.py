"""
Failure classification for the catalog.

Every failure that reaches a caller is a KnownError subclass carrying a
FailureKind. The HTTP layer converts these into the ApiResponse envelope.

Only "source unavailable" failures are user-visible. Malformed records are
skipped by the normalizer and an unavailable search index falls back to a
substring scan, so neither is represented here.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Resource failures
    NOT_FOUND = "not_found"
    FEED_NOT_FOUND = "feed_not_found"

    # Service failures
    SERVICE_UNAVAILABLE = "service_unavailable"
    EXTERNAL_API_ERROR = "external_api_error"
    IMPORT_IN_PROGRESS = "import_in_progress"
    IMPORT_TIMEOUT = "import_timeout"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    KNOWN_FAILURE = "known_failure"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel):
    """Response envelope returned to API callers on failure."""

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse":
        """Create a known failure response."""
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


# =============================================================================
# SOURCE FAILURES
# =============================================================================


class SourceUnavailable(KnownError):
    """
    The external card source could not be reached or answered with an error.

    `status_code` on the exception is the HTTP status we report to our own
    callers; `upstream_status` is what Scryfall answered (None on a transport
    error).
    """

    def __init__(
        self,
        message: str,
        upstream_status: int | None = None,
        kind: FailureKind = FailureKind.SERVICE_UNAVAILABLE,
        detail: str | None = None,
    ):
        self.upstream_status = upstream_status
        super().__init__(
            kind=kind,
            message=message,
            detail=detail,
            suggestion="Try again later.",
            status_code=502,
        )


class CatalogUnavailable(SourceUnavailable):
    """The bulk-data catalog endpoint failed."""

    def __init__(self, upstream_status: int | None = None, detail: str | None = None):
        super().__init__(
            "Failed to fetch bulk data catalog",
            upstream_status=upstream_status,
            detail=detail,
        )


class DownloadFailed(SourceUnavailable):
    """The bulk feed download failed."""

    def __init__(self, upstream_status: int | None = None, detail: str | None = None):
        message = (
            f"Download failed: {upstream_status}"
            if upstream_status is not None
            else "Download failed"
        )
        super().__init__(message, upstream_status=upstream_status, detail=detail)

    @property
    def http_status(self) -> int | None:
        return self.upstream_status


class CardFetchError(SourceUnavailable):
    """A single-card lookup against Scryfall failed."""

    def __init__(self, upstream_status: int | None = None, detail: str | None = None):
        super().__init__(
            f"Scryfall lookup failed: {upstream_status}",
            upstream_status=upstream_status,
            kind=FailureKind.EXTERNAL_API_ERROR,
            detail=detail,
        )

    @property
    def is_not_found(self) -> bool:
        return self.upstream_status == 404


class FeedNotFound(KnownError):
    """The bulk-data catalog has no entry of the requested type."""

    def __init__(self, feed_type: str):
        self.feed_type = feed_type
        super().__init__(
            kind=FailureKind.FEED_NOT_FOUND,
            message=f"{feed_type} bulk data not found",
            suggestion="Check the Scryfall bulk-data catalog.",
            status_code=502,
        )


class CardNotFound(KnownError):
    """No playable card exists for the requested identifier or name."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message="Card not found",
            detail=key,
            status_code=404,
        )

"""GitHub REST client errors and their retry classification."""

from __future__ import annotations

from imir.retry import RetryDecision

_HTTP_SERVER_ERROR_THRESHOLD = 500


class GitHubAPIError(RuntimeError):
    """Raised when a GitHub request fails.

    Attributes
    ----------
    status_code
        HTTP status code of the response, or ``None`` when no response was
        received.
    retryable
        Whether repeating the same request may succeed.

    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        """Initialise with a message, optional status code, and retry hint."""
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int) -> GitHubAPIError:
        """Return an error for non-2xx HTTP responses.

        Server errors are retryable; client errors such as bad credentials
        or malformed queries are not.
        """
        return cls(
            f"GitHub REST HTTP {status_code}",
            status_code=status_code,
            retryable=status_code >= _HTTP_SERVER_ERROR_THRESHOLD,
        )

    @classmethod
    def rate_limited(
        cls, status_code: int = 429, retry_after: int | None = None
    ) -> GitHubAPIError:
        """Return an error for primary or secondary rate limiting."""
        msg = "GitHub REST API rate limited"
        if retry_after is not None:
            msg = f"{msg}, retry after {retry_after}s"
        return cls(msg, status_code=status_code, retryable=True)

    @classmethod
    def timeout(cls) -> GitHubAPIError:
        """Return an error for request timeouts."""
        return cls("GitHub REST request timed out", retryable=True)

    @classmethod
    def network_error(cls, detail: str) -> GitHubAPIError:
        """Return an error for connection, DNS, or TLS failures."""
        return cls(f"GitHub REST network error: {detail}", retryable=True)


class GitHubResponseShapeError(RuntimeError):
    """Raised when a GitHub response body does not have the expected shape."""

    @classmethod
    def invalid_payload(cls, endpoint: str, detail: object) -> GitHubResponseShapeError:
        """Return an error for a body that failed to decode."""
        return cls(f"GitHub response from {endpoint} has unexpected shape: {detail}")


class GitHubConfigError(RuntimeError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def missing_token(cls) -> GitHubConfigError:
        """Return an error when no GitHub token is configured."""
        return cls("IMIR_GITHUB_TOKEN or GITHUB_TOKEN is required for GitHub API")

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")


def classify_github_error(exc: Exception) -> RetryDecision:
    """Decide whether a failed GitHub call should be retried.

    Only :class:`GitHubAPIError` instances flagged ``retryable`` are retried;
    configuration problems, malformed responses, and anything unexpected are
    fatal.
    """
    if isinstance(exc, GitHubAPIError) and exc.retryable:
        return RetryDecision.RETRYABLE
    return RetryDecision.FATAL

"""Minimal GitHub REST client for target discovery."""

from __future__ import annotations

import dataclasses
import os
import typing as typ

import httpx
import msgspec

from imir.logging import get_logger, log_debug

from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .models import Account, CodeSearchPage

logger = get_logger(__name__)

T = typ.TypeVar("T")

DEFAULT_API_URL = "https://api.github.com"
JSON_MEDIA_TYPE = "application/vnd.github+json"
TEXT_MATCH_MEDIA_TYPE = "application/vnd.github.text-match+json"
RAW_MEDIA_TYPE = "application/vnd.github.raw+json"

_HTTP_ERROR_STATUS_THRESHOLD = 400
_HTTP_FORBIDDEN = 403
_HTTP_NOT_FOUND = 404
_HTTP_RATE_LIMITED = 429


class GitHubDiscoveryClient(typ.Protocol):
    """Read operations discovery needs from GitHub."""

    async def search_code(
        self, query: str, *, page: int, per_page: int = 100
    ) -> CodeSearchPage:
        """Return one page of code search results with text matches."""
        ...

    async def list_stargazers(
        self, owner: str, repository: str, *, page: int, per_page: int = 100
    ) -> list[Account]:
        """Return one page of accounts that starred a repository."""
        ...

    async def fetch_profile_readme(self, login: str) -> str | None:
        """Return the raw profile README of ``login``, or ``None`` if absent."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRestConfig:
    """Configuration for the GitHub REST API client."""

    token: str
    api_url: str = DEFAULT_API_URL
    timeout_s: float = 20.0
    user_agent: str = "imir/0.1"

    @classmethod
    def from_env(cls) -> GitHubRestConfig:
        """Build configuration from ``IMIR_GITHUB_TOKEN`` or ``GITHUB_TOKEN``.

        ``IMIR_GITHUB_API_URL`` overrides the API root, for example to target
        GitHub Enterprise Server.
        """
        token = (
            os.environ.get("IMIR_GITHUB_TOKEN", "").strip()
            or os.environ.get("GITHUB_TOKEN", "").strip()
        )
        if not token:
            raise GitHubConfigError.missing_token()
        api_url = os.environ.get("IMIR_GITHUB_API_URL", "").strip() or DEFAULT_API_URL
        return cls(token=token, api_url=api_url)


def _get_retry_after(response: httpx.Response) -> int | None:
    """Extract Retry-After header value if present and numeric."""
    retry_after = response.headers.get("Retry-After")
    if retry_after and retry_after.isdigit():
        return int(retry_after)
    return None


def _is_rate_limited(response: httpx.Response) -> bool:
    if response.status_code == _HTTP_RATE_LIMITED:
        return True
    return (
        response.status_code == _HTTP_FORBIDDEN
        and response.headers.get("X-RateLimit-Remaining") == "0"
    )


class GitHubRestClient:
    """httpx implementation of :class:`GitHubDiscoveryClient`."""

    def __init__(
        self,
        config: GitHubRestConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._base_url = config.api_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {config.token}",
            "User-Agent": config.user_agent,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> typ.Self:
        """Return the client for use as an async context manager."""
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        """Close owned HTTP resources on exit."""
        await self.aclose()

    async def search_code(
        self, query: str, *, page: int, per_page: int = 100
    ) -> CodeSearchPage:
        """Return one page of ``GET /search/code`` results with text matches."""
        response = await self._get(
            "/search/code",
            params={"q": query, "page": page, "per_page": per_page},
            accept=TEXT_MATCH_MEDIA_TYPE,
        )
        self._check_response_errors(response)
        return self._decode(response, CodeSearchPage, endpoint="/search/code")

    async def list_stargazers(
        self, owner: str, repository: str, *, page: int, per_page: int = 100
    ) -> list[Account]:
        """Return one page of ``GET /repos/{owner}/{repository}/stargazers``."""
        path = f"/repos/{owner}/{repository}/stargazers"
        response = await self._get(
            path,
            params={"page": page, "per_page": per_page},
            accept=JSON_MEDIA_TYPE,
        )
        self._check_response_errors(response)
        return self._decode(response, list[Account], endpoint=path)

    async def fetch_profile_readme(self, login: str) -> str | None:
        """Return the raw README of the ``login/login`` profile repository.

        Accounts without a profile repository or README yield ``None``.
        """
        path = f"/repos/{login}/{login}/readme"
        response = await self._get(path, params=None, accept=RAW_MEDIA_TYPE)
        if response.status_code == _HTTP_NOT_FOUND:
            log_debug(logger, "No profile README for %s", login)
            return None
        self._check_response_errors(response)
        return response.text

    async def _get(
        self,
        path: str,
        *,
        params: dict[str, str | int] | None,
        accept: str,
    ) -> httpx.Response:
        """Perform a GET request against the REST API.

        Raises
        ------
        GitHubAPIError
            If a timeout or network error occurs.

        """
        try:
            return await self._client.get(
                f"{self._base_url}{path}",
                params=params,
                headers={**self._headers, "Accept": accept},
            )
        except httpx.TimeoutException as exc:
            raise GitHubAPIError.timeout() from exc
        except httpx.RequestError as exc:
            raise GitHubAPIError.network_error(str(exc)) from exc

    def _check_response_errors(self, response: httpx.Response) -> None:
        """Raise :class:`GitHubAPIError` for rate limits and non-2xx statuses."""
        if _is_rate_limited(response):
            raise GitHubAPIError.rate_limited(
                response.status_code, _get_retry_after(response)
            )
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise GitHubAPIError.http_error(response.status_code)

    def _decode(
        self, response: httpx.Response, type_: type[T], *, endpoint: str
    ) -> T:
        try:
            return msgspec.json.decode(response.content, type=type_)
        except (msgspec.DecodeError, msgspec.ValidationError) as exc:
            raise GitHubResponseShapeError.invalid_payload(endpoint, exc) from exc

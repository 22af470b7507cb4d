"""
GitHub REST API client.

This module handles all HTTP traffic: authentication scoped to the API
host, proxy selection, manual redirect following, Link-header pagination
and translation of failures into issuesync exceptions.
"""

import ipaddress
import logging
import re
from datetime import UTC, datetime
from typing import Any

import httpx

from .exceptions import (
    ApiTimeoutError,
    ConfigError,
    DecodeError,
    NetworkError,
    RateLimitError,
    TransportError,
)
from .models import ClientConfig

logger = logging.getLogger(__name__)

LINK_PATTERN = re.compile(r'<(.+?)>; rel="(.+?)"')


def parse_links(header: str | None) -> dict[str, str]:
    """
    Parse a Link header into a mapping of relation name to URL.

    Args:
        header: Raw header value, e.g. ``<https://...?page=2>; rel="next"``

    Returns:
        Dictionary like {"next": "https://...?page=2"}
    """
    if not header:
        return {}
    return {rel: url for url, rel in LINK_PATTERN.findall(header)}


def _bypass_pattern(host: str) -> str | None:
    """Mount pattern sending ``host`` (and its subdomains) direct."""
    if "://" in host:
        return host
    bare = host.strip("[]")
    try:
        address = ipaddress.ip_address(bare.split("/")[0])
    except ValueError:
        address = None
    if address is not None and address.version == 6:
        return f"all://[{bare}]"
    if address is not None or host.lower() == "localhost":
        return f"all://{host}"
    host = host.lstrip("*.")
    return f"all://*{host}" if host else None


def proxy_mounts(config: ClientConfig) -> dict[str, httpx.BaseTransport | None] | None:
    """
    Build httpx transport mounts for the configured proxy.

    Hosts in the exclusion list map to None, which makes httpx use the
    default direct transport for them. Names also cover their subdomains;
    IP addresses and ``localhost`` match exactly.
    """
    proxy = config.proxy_url
    if proxy is None:
        return None

    mounts: dict[str, httpx.BaseTransport | None] = {
        "all://": httpx.HTTPTransport(proxy=proxy),
    }
    for host in config.no_proxy:
        pattern = _bypass_pattern(host)
        if pattern:
            mounts[pattern] = None
    return mounts


def _redact(name: str, value: str) -> str:
    return "<redacted>" if name.lower() == "authorization" else value


def _log_request(request: httpx.Request) -> None:
    logger.debug(f"-> {request.method} {request.url}")
    for name, value in request.headers.items():
        logger.debug(f"-> {name}: {_redact(name, value)}")


def _log_response(response: httpx.Response) -> None:
    logger.debug(f"<- {response.status_code} {response.reason_phrase} {response.request.url}")
    for name, value in response.headers.items():
        logger.debug(f"<- {name}: {value}")


class ApiResponse:
    """A single HTTP response from the API, not yet decoded."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.response.headers

    @property
    def url(self) -> httpx.URL:
        return self.response.url

    @property
    def content(self) -> bytes:
        return self.response.content

    @property
    def text(self) -> str:
        return self.response.text

    @property
    def is_success(self) -> bool:
        return self.response.is_success

    @property
    def links(self) -> dict[str, str]:
        return parse_links(self.headers.get("link"))

    @property
    def next_url(self) -> httpx.URL | None:
        """URL of the next page, or None on the last page."""
        rel_next = self.links.get("next")
        return httpx.URL(rel_next) if rel_next else None

    @property
    def ratelimit_remaining(self) -> int | None:
        value = self.headers.get("x-ratelimit-remaining")
        try:
            return int(value) if value is not None else None
        except ValueError:
            return None

    def json(self) -> Any:
        """Decode the body as JSON."""
        try:
            return self.response.json()
        except ValueError as e:
            raise DecodeError(f"Invalid JSON response: {e}", str(self.url)) from e


class ApiClient:
    """
    Synchronous client for the GitHub REST API.

    Requests are issued one at a time. The token is only ever sent to the
    API host, so redirects to other hosts (patch downloads) never see it.
    """

    ACCEPT = "application/vnd.github.v3.raw+json"
    MAX_REDIRECTS = 10

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the API client.

        Args:
            config: Client configuration; defaults to unauthenticated access
            transport: Optional httpx transport, replaces proxy handling
        """
        self.config = config or ClientConfig()
        self.base_url = httpx.URL(self.config.base_url)
        self._client = self._build_client(transport)

    def _build_client(self, transport: httpx.BaseTransport | None) -> httpx.Client:
        event_hooks: dict[str, list[Any]] = {}
        if self.config.debug:
            event_hooks = {"request": [_log_request], "response": [_log_response]}

        options: dict[str, Any] = {
            "headers": {"Accept": self.ACCEPT, "User-Agent": self.config.user_agent},
            "timeout": httpx.Timeout(self.config.timeout),
            "follow_redirects": False,
            "trust_env": False,
            "event_hooks": event_hooks,
        }
        if transport is not None:
            return httpx.Client(transport=transport, **options)
        try:
            return httpx.Client(mounts=proxy_mounts(self.config), **options)
        except (httpx.InvalidURL, ValueError) as e:
            raise ConfigError(
                f"Invalid proxy settings: {e}",
                hint="Check the https_proxy, http_proxy and no_proxy environment variables",
            ) from e

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def _trace(self, message: str) -> None:
        logger.log(logging.INFO if self.config.verbose else logging.DEBUG, message)

    def _resolve(self, path: str | httpx.URL) -> httpx.URL:
        if isinstance(path, httpx.URL):
            return path
        if "://" in path:
            return httpx.URL(path)
        return httpx.URL(self.config.base_url.rstrip("/") + "/" + path.lstrip("/"))

    def _is_api_host(self, url: httpx.URL) -> bool:
        return url.host == self.base_url.host

    def _auth_headers(self, url: httpx.URL) -> dict[str, str]:
        if self.config.token and self._is_api_host(url):
            return {"Authorization": f"token {self.config.token}"}
        return {}

    def _error_for(self, response: ApiResponse) -> TransportError:
        status = response.status_code
        if status in (403, 429) and response.ratelimit_remaining == 0:
            reset = response.headers.get("x-ratelimit-reset")
            reset_time = None
            if reset and reset.isdigit():
                reset_time = datetime.fromtimestamp(int(reset), UTC).isoformat()
            return RateLimitError(status, response.text, str(response.url), reset_time)
        return TransportError(status, response.text, str(response.url))

    def get(self, path: str | httpx.URL) -> list[Any]:
        """
        Fetch a JSON array, following pagination to the last page.

        Args:
            path: API path (joined onto the base URL) or absolute URL

        Returns:
            Items of every page, concatenated in order

        Raises:
            TransportError: On any non-2xx response
            DecodeError: If a page is not a JSON array
        """
        items: list[Any] = []
        url: httpx.URL | None = self._resolve(path)

        while url is not None:
            response = self.get_raw(url)
            page = response.json()
            if not isinstance(page, list):
                raise DecodeError("expected a JSON array", str(response.url))
            items.extend(page)
            url = response.next_url

        return items

    def get_raw(self, url: str | httpx.URL, _hops: int = 0) -> ApiResponse:
        """
        Issue a single GET and return the undecoded response.

        Redirects are followed by re-issuing the request at the Location
        target, with authentication re-evaluated for the new host.

        Args:
            url: API path or absolute URL

        Returns:
            ApiResponse for the final, non-redirect response

        Raises:
            TransportError: On any non-2xx response
            NetworkError: If the connection fails
            ApiTimeoutError: If the request times out
        """
        url = self._resolve(url)
        self._trace(str(url))

        try:
            raw = self._client.get(url, headers=self._auth_headers(url))
        except httpx.TimeoutException as e:
            raise ApiTimeoutError(self.config.timeout) from e
        except httpx.TransportError as e:
            raise NetworkError(str(e)) from e

        if raw.is_redirect:
            if _hops >= self.MAX_REDIRECTS:
                raise TransportError(raw.status_code, "Too many redirects", str(url))
            location = raw.url.join(raw.headers["location"])
            logger.debug(f"Redirected to {location}")
            return self.get_raw(location, _hops + 1)

        response = ApiResponse(raw)
        if not response.is_success:
            raise self._error_for(response)

        if self._is_api_host(url) and response.ratelimit_remaining is not None:
            self._trace(f"ratelimit remaining: {response.ratelimit_remaining}")

        return response

    def rate_limit(self) -> dict[str, Any]:
        """
        Fetch the core rate limit status.

        Returns:
            Dictionary with "limit", "remaining" and "reset" keys
        """
        data = self.get_raw("/rate_limit").json()
        try:
            return dict(data["resources"]["core"])
        except (KeyError, TypeError) as e:
            raise DecodeError(f"missing rate limit field {e}", "/rate_limit") from e

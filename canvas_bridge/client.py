"""
Canvas API Client

Authenticated HTTP access to the Canvas REST API: request dispatch,
page-number pagination and error normalization. A process-wide client is
built lazily from environment variables.
"""

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

import requests

from .anonymizer import DEFAULT_POLICY, AnonymizationPolicy
from .config import Settings, load_settings, validate_token
from .errors import normalize_error
from .exceptions import CanvasAPIError, ErrorKind

logger = logging.getLogger("canvas_bridge.client")

DEFAULT_PER_PAGE = 100

# Global client instance cache
_canvas_client: Optional["CanvasClient"] = None
_client_lock = threading.Lock()


def encode_segment(value: Any) -> str:
    """Percent-encode a value for use as a single URL path segment."""
    return quote(str(value), safe="")


def _compact(values: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop keys whose value is None, including inside nested objects."""
    if not values:
        return {}
    return {
        key: _compact(value) if isinstance(value, Mapping) else value
        for key, value in values.items()
        if value is not None
    }


class CanvasClient:
    """
    Thin wrapper around a requests session bound to one Canvas instance.

    The base URL and token are fixed at construction. Every request carries
    ``Authorization: Bearer <token>``; any failure is raised as CanvasAPIError.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: Optional[float] = None,
        policy: AnonymizationPolicy = DEFAULT_POLICY,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize Canvas client.

        Args:
            base_url: Canvas URL (e.g., 'https://canvas.instructure.com')
            token: Canvas API token
            timeout: Optional per-request timeout in seconds
            policy: Anonymization policy for operations on student records
            session: Optional preconfigured requests session

        Raises:
            ConfigurationError: If the token is missing
        """
        validate_token(token)
        self._base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.policy = policy
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        })

    @classmethod
    def from_settings(cls, settings: Settings) -> "CanvasClient":
        return cls(
            settings.base_url,
            settings.token,
            timeout=settings.timeout,
            policy=settings.policy,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def __repr__(self) -> str:
        return f"CanvasClient(base_url={self._base_url!r})"

    def _request(
        self,
        method: str,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        body: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        url = f"{self._base_url}{path}"
        kwargs: Dict[str, Any] = {"params": _compact(query)}
        if body is not None:
            kwargs["json"] = _compact(body)
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        logger.debug(f"{method} {path}")
        try:
            response = self.session.request(method, url, **kwargs)
            response.raise_for_status()
            if not response.content:
                return None
            return response.json()
        except Exception as e:
            error = normalize_error(e)
            logger.debug(f"{method} {path} failed ({error.kind.value}): {error.message}")
            raise error from e

    def get(self, path: str, query: Optional[Mapping[str, Any]] = None) -> Any:
        """GET ``path`` and return the decoded body."""
        return self._request("GET", path, query=query)

    def post(
        self,
        path: str,
        body: Optional[Mapping[str, Any]] = None,
        query: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """POST a JSON body to ``path`` and return the decoded body."""
        return self._request("POST", path, query=query, body=body or {})

    def put(
        self,
        path: str,
        body: Optional[Mapping[str, Any]] = None,
        query: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """PUT a JSON body to ``path`` and return the decoded body."""
        return self._request("PUT", path, query=query, body=body or {})

    def delete(self, path: str, query: Optional[Mapping[str, Any]] = None) -> Any:
        """DELETE ``path`` and return the decoded body."""
        return self._request("DELETE", path, query=query)

    def fetch_all_pages(self, path: str, query: Optional[Mapping[str, Any]] = None) -> List[Any]:
        """
        Fetch every page of a paginated listing.

        Pages are requested in order starting at 1 and concatenated. A page
        shorter than ``per_page`` ends the run, so a listing whose size is an
        exact multiple of ``per_page`` costs one extra, empty request.

        Args:
            path: Listing endpoint path
            query: Extra query parameters; ``per_page`` defaults to 100

        Returns:
            All items in request order

        Raises:
            CanvasAPIError: If any page fails; nothing fetched so far is returned
        """
        params = dict(query or {})
        per_page = int(params.get("per_page") or DEFAULT_PER_PAGE)
        results: List[Any] = []
        page = 1
        has_more = True

        while has_more:
            data = self.get(path, {**params, "page": page, "per_page": per_page})
            items = [] if data is None else data
            if not isinstance(items, list):
                raise CanvasAPIError(
                    f"Expected a list from {path}, got {type(items).__name__}",
                    kind=ErrorKind.TRANSPORT,
                )
            results.extend(items)
            has_more = len(items) == per_page
            page += 1

        logger.debug(f"Fetched {len(results)} items from {path} in {page - 1} pages")
        return results


def get_canvas_client(settings: Optional[Settings] = None) -> CanvasClient:
    """
    Get the global Canvas client instance.

    Args:
        settings: Optional explicit settings; a new, uncached client is built

    Returns:
        CanvasClient instance

    Raises:
        ConfigurationError: If credentials are missing
        ValidationError: If the domain or base URL is invalid
    """
    global _canvas_client

    if settings is not None:
        return CanvasClient.from_settings(settings)

    # Handlers run on worker threads; only one of them builds the client
    with _client_lock:
        if _canvas_client is None:
            _canvas_client = CanvasClient.from_settings(load_settings())
            logger.info(f"Canvas API client initialized for {_canvas_client.base_url}")
        return _canvas_client


def reset_canvas_client() -> None:
    """Drop the cached global client."""
    global _canvas_client
    with _client_lock:
        _canvas_client = None

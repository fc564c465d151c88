"""
HTTP transport for the HubSpot REST API.

Connection turns path templates such as ``/contacts/v1/contact/vid/:id``
into requests, adds authentication, decodes JSON and maps failures onto the
library's error types. Requests are synchronous and never retried.
"""

import logging
import re
import time
from typing import Any, Optional
from urllib.parse import quote

import httpx

from .config import HubspotConfig, get_config
from .errors import DecodeError, PathTemplateError, TransportError
from .telemetry import RequestOutcome, create_event, get_recorder

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")

SNIPPET_LENGTH = 200


def build_path(template: str, params: Optional[dict[str, Any]] = None) -> tuple[str, dict[str, Any]]:
    """
    Substitute ``:name`` placeholders in a path template.

    Placeholder values are URL-encoded and removed from the parameters; the
    remaining parameters with a non-None value form the query.

    Args:
        template: Path template, e.g. ``/companies/v2/companies/:id``
        params: Placeholder and query values

    Returns:
        Tuple of (path, query parameters)

    Raises:
        PathTemplateError: If a placeholder has no value
    """
    remaining = {str(key): value for key, value in (params or {}).items()}
    missing = []

    def substitute(match: re.Match) -> str:
        name = match.group(1)
        if remaining.get(name) is None:
            missing.append(name)
            return match.group(0)
        return quote(str(remaining.pop(name)), safe="")

    path = PLACEHOLDER.sub(substitute, template)
    if missing:
        raise PathTemplateError(
            f"Unresolved placeholders in {template!r}: {', '.join(missing)}",
            details={"template": template, "missing": missing},
        )

    query = {key: value for key, value in remaining.items() if value is not None}
    return path, query


class Connection:
    """
    Synchronous JSON client bound to one HubSpot configuration.

    Example:
        with Connection(HubspotConfig(hapikey="demo")) as connection:
            data = connection.get_json("/contacts/v1/contact/vid/:id/profile", {"id": 42})
    """

    def __init__(
        self,
        config: Optional[HubspotConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
        base_url: Optional[str] = None,
        authenticate: bool = True,
    ):
        """
        Initialize the connection.

        Args:
            config: Client configuration; the process default when None
            transport: Optional httpx transport, e.g. httpx.MockTransport
            base_url: Override for config.base_url
            authenticate: Whether to attach hapikey/access_token
        """
        self.config = config if config is not None else get_config()
        self.base_url = (base_url or self.config.base_url).rstrip("/")
        self.authenticate = authenticate
        self.client = httpx.Client(
            base_url=self.base_url,
            timeout=self.config.timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.client.close()

    def _auth(self, query: dict[str, Any]) -> tuple[dict[str, str], dict[str, Any]]:
        """Add credentials to headers or query."""
        headers: dict[str, str] = {}
        if not self.authenticate:
            return headers, query
        if self.config.access_token:
            headers["Authorization"] = f"Bearer {self.config.access_token}"
        else:
            self.config.ensure("hapikey")
            query = {**query, "hapikey": self.config.hapikey}
        return headers, query

    def _record(
        self,
        method: str,
        path: str,
        start: float,
        outcome: RequestOutcome,
        status: Optional[int] = None,
        error: Optional[str] = None,
    ) -> None:
        get_recorder().record(
            create_event(
                method=method,
                path=path,
                outcome=outcome,
                status=status,
                elapsed_ms=round((time.perf_counter() - start) * 1000, 3),
                error=error,
            )
        )

    def send(
        self,
        method: str,
        template: str,
        params: Optional[dict[str, Any]] = None,
        body: Any = None,
    ) -> tuple[str, httpx.Response, float]:
        """
        Send one request and return the raw response.

        Network failures are recorded here; callers record the outcome of
        every response they receive.

        Returns:
            Tuple of (resolved path, response, perf_counter start)

        Raises:
            PathTemplateError: If the template cannot be resolved
            ConfigurationError: If credentials are not configured
            TransportError: On network failure or timeout
        """
        path, query = build_path(template, params)
        headers, query = self._auth(query)

        start = time.perf_counter()
        try:
            response = self.client.request(
                method,
                path,
                params=query,
                json=body,
                headers=headers,
            )
        except httpx.TransportError as exc:
            self._record(method, path, start, RequestOutcome.NETWORK_ERROR, error=str(exc))
            raise TransportError(
                f"Network error on {method} {path}: {exc}",
                code="NETWORK_ERROR",
            ) from exc
        return path, response, start

    def request_json(
        self,
        method: str,
        template: str,
        params: Optional[dict[str, Any]] = None,
        body: Any = None,
        parse: bool = True,
    ) -> Any:
        """
        Send a request and decode its JSON body.

        Args:
            method: HTTP method
            template: Path template
            params: Placeholder and query values
            body: JSON request body
            parse: If False the response body is not decoded

        Returns:
            Decoded JSON, or None for empty bodies and unparsed responses

        Raises:
            TransportError: On non-2xx status or network failure
            DecodeError: If a 2xx body is not valid JSON
        """
        path, response, start = self.send(method, template, params, body)
        status = response.status_code

        if not response.is_success:
            snippet = response.text[:SNIPPET_LENGTH] if response.text else None
            self._record(method, path, start, RequestOutcome.HTTP_ERROR, status=status)
            raise TransportError(
                f"HTTP {status} on {method} {path}",
                status_code=status,
                body_snippet=snippet,
            )

        if not parse or not response.content:
            self._record(method, path, start, RequestOutcome.OK, status=status)
            return None

        try:
            data = response.json()
        except ValueError as exc:
            self._record(
                method,
                path,
                start,
                RequestOutcome.DECODE_ERROR,
                status=status,
                error="Invalid JSON response",
            )
            raise DecodeError(
                f"Invalid JSON response from {method} {path}",
                details={"body_snippet": response.text[:SNIPPET_LENGTH]},
            ) from exc

        self._record(method, path, start, RequestOutcome.OK, status=status)
        return data

    def get_json(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return self.request_json("GET", path, params)

    def post_json(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        body: Any = None,
        parse: bool = True,
    ) -> Any:
        return self.request_json("POST", path, params, body, parse=parse)

    def put_json(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        body: Any = None,
        parse: bool = True,
    ) -> Any:
        return self.request_json("PUT", path, params, body, parse=parse)

    def delete_json(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return self.request_json("DELETE", path, params, parse=False)


class EventConnection(Connection):
    """
    Connection to the event tracking host.

    Tracking requests carry the portal id instead of API credentials and
    answer with an empty body, so only the status is reported.
    """

    def __init__(
        self,
        config: Optional[HubspotConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        config = config if config is not None else get_config()
        super().__init__(
            config,
            transport=transport,
            base_url=config.events_base_url,
            authenticate=False,
        )

    def complete(self, path: str, params: Optional[dict[str, Any]] = None) -> bool:
        """Send a tracking request; True if the endpoint answered 2xx."""
        resolved, response, start = self.send("GET", path, params)
        if response.is_success:
            self._record("GET", resolved, start, RequestOutcome.OK, status=response.status_code)
            return True
        self._record(
            "GET", resolved, start, RequestOutcome.HTTP_ERROR, status=response.status_code
        )
        logger.info("Event request to %s returned HTTP %d", resolved, response.status_code)
        return False

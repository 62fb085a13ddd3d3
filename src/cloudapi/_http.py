"""
HTTP client utilities for the cloudapi client
"""

import httpx
from typing import Optional, Sequence, Tuple


class HttpClient:
    """
    Blocking HTTP client wrapper. Each call is a single exchange; there is
    no retry, callers that want one wrap the call themselves.
    """

    def __init__(self, timeout: float = 30, transport: Optional[httpx.BaseTransport] = None):
        self.timeout = timeout
        self._client = httpx.Client(
            timeout=timeout,
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=100),
            transport=transport,
        )

    def execute(
        self,
        verb: str,
        url: str,
        headers: Sequence[Tuple[str, str]] = (),
        body: Optional[bytes] = None,
    ) -> httpx.Response:
        """Perform one request. Raises ``httpx.RequestError`` on transport failure."""
        return self._client.request(verb, url, headers=list(headers), content=body)

    def close(self):
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

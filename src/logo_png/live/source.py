"""Source fetcher — one GET against the upstream logo API.

Learn: The fetcher never retries and never touches the cache. It either
returns a parsed LogoDescription or raises FetchError with a `kind` telling
the caller whether the network or the payload was at fault. Retry policy is
the update loop's job: the next tick is the retry.
"""

from typing import Literal

import httpx
from pydantic import ValidationError

from logo_png.logo.models import LogoDescription


class FetchError(Exception):
    """Fetching or decoding the upstream description failed."""

    def __init__(self, kind: Literal["network", "decode"], message: str):
        super().__init__(message)
        self.kind = kind


class SourceFetcher:
    """Fetch the current logo description from a fixed URL.

    A shared ``httpx.AsyncClient`` may be injected (tests pass one built on
    ``httpx.MockTransport``). Otherwise the fetcher opens its own client on
    the first fetch and closes it in ``aclose()``, so building a fetcher
    (e.g. at app import) holds no connections.
    """

    def __init__(
        self,
        url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self.url = url
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def fetch(self) -> LogoDescription:
        try:
            resp = await self._get_client().get(self.url)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise FetchError("network", f"GET {self.url} failed: {exc}") from exc

        try:
            return LogoDescription.model_validate_json(resp.content)
        except ValidationError as exc:
            raise FetchError(
                "decode", f"Unexpected logo payload: {exc.error_count()} error(s)"
            ) from exc

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

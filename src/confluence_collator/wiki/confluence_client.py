"""
Confluence REST API Client

Thin asynchronous client over the Confluence v1 REST API used by the
collator. It is responsible for:

- HTTP Basic authentication on every request
- Mapping non-2xx responses and undecodable bodies to typed errors
- Following `_links.next` through the paginated content listing

No retries and no explicit timeouts are applied; scheduling and time budgets
belong to whoever drives the collection run.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
import logging

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..core.errors import ConfluenceRequestError, ConfluenceResponseError
from ..search.models import ConfluenceDocumentList

logger = logging.getLogger("collator.confluence.client")

PAGE_LIST_LIMIT = 1000
PAGE_EXPAND = "body.storage,space,ancestors,version"


class ConfluenceClient:
    """
    Authenticated Confluence API client.

    Use as an async context manager when the client owns its HTTP session:

        async with ConfluenceClient(url, user, password) as client:
            links = await client.list_space_page_links("ENG")
    """

    def __init__(
        self,
        wiki_url: str,
        username: str,
        password: str,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Parameters
        ----------
        wiki_url : str
            Base URL of the wiki, e.g. "https://wiki.example.com".
            Relative links returned by the API are appended to it verbatim.

        username : str
            Basic-auth user name.

        password : str
            Basic-auth password or API token.

        http_client : Optional[httpx.AsyncClient]
            Optional pre-built session (tests inject one backed by
            httpx.MockTransport). When omitted the client creates and owns
            its own session.
        """
        self.wiki_url = wiki_url.rstrip("/")
        self._auth = httpx.BasicAuth(username, password)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=None)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "ConfluenceClient":
        return cls(
            wiki_url=settings.confluence_wiki_url,
            username=settings.confluence_username,
            password=settings.confluence_password.get_secret_value(),
            http_client=http_client,
        )

    async def __aenter__(self) -> "ConfluenceClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get(self, url: str) -> Any:
        """
        Issue an authenticated GET and decode the JSON body.

        Raises
        ------
        ConfluenceRequestError
            If the response status is not 2xx.

        ConfluenceResponseError
            If the body is not valid JSON.
        """
        resp = await self._client.get(url, auth=self._auth)

        if not resp.is_success:
            logger.warning(
                "non-ok response from confluence: %s %d %s",
                url,
                resp.status_code,
                resp.text,
            )
            raise ConfluenceRequestError(url, resp.status_code, resp.reason_phrase)

        try:
            return resp.json()
        except ValueError as exc:
            raise ConfluenceResponseError(
                url, "body is not valid JSON", status_code=resp.status_code
            ) from exc

    async def list_space_page_links(self, space: str) -> List[str]:
        """
        Return the self links of every current page in a space.

        Pages of the listing are fetched strictly one after another. A listing
        without a `results` field ends the walk.
        """
        logger.info("exploring space %s", space)

        links: List[str] = []
        request_url: Optional[str] = (
            f"{self.wiki_url}/rest/api/content"
            f"?limit={PAGE_LIST_LIMIT}&status=current&spaceKey={space}"
        )

        # No upper bound on `next` hops: a listing that never terminates
        # is followed indefinitely.
        while request_url:
            raw = await self.get(request_url)
            try:
                data = ConfluenceDocumentList.model_validate(raw)
            except ValidationError as exc:
                raise ConfluenceResponseError(request_url, str(exc)) from exc

            if data.results is None:
                break

            for result in data.results:
                if result.links.self_:
                    links.append(result.links.self_)
                else:
                    logger.debug("skipping listing entry without self link: %s", result.title)

            if data.links.next:
                request_url = f"{self.wiki_url}{data.links.next}"
            else:
                request_url = None

        return links

    async def get_page(self, page_url: str) -> Dict[str, Any]:
        """Fetch a page's expanded detail record as raw JSON."""
        logger.debug("fetching document content %s", page_url)

        data = await self.get(f"{page_url}?expand={PAGE_EXPAND}")
        if not isinstance(data, dict):
            raise ConfluenceResponseError(page_url, "page detail is not a JSON object")
        return data

"""
Confluence Document Collator

Orchestrates one collection run:

1. Resolve the spaces to crawl (static list or catalog-derived).
2. Enumerate every current page of every space, one space after another.
3. Transform all pages, at most `parallelism_limit` at a time.
4. Yield the resulting documents one by one.

A failing page is logged and skipped; a failing space resolution or
enumeration aborts the run.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, List, Optional

import httpx

from ..catalog.client import CatalogApi
from ..config import Settings
from ..core.limiter import ConcurrencyLimiter
from ..wiki.confluence_client import ConfluenceClient
from .models import IndexableConfluenceDocument
from .spaces import SpaceResolver, build_space_resolver
from .transform import transform_page

DEFAULT_PARALLELISM_LIMIT = 15


class ConfluenceCollatorFactory:
    """
    Builds single-pass document streams over a set of Confluence spaces.

    Every call to `get_collator()` starts an independent run; nothing is
    cached between runs.
    """

    type: str = "confluence"

    def __init__(
        self,
        *,
        wiki_url: str,
        username: str,
        password: str,
        spaces: Optional[List[str]] = None,
        parallelism_limit: int = DEFAULT_PARALLELISM_LIMIT,
        catalog: Optional[CatalogApi] = None,
        logger: Optional[logging.Logger] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Parameters
        ----------
        wiki_url : str
            Base URL of the wiki.

        username, password : str
            Basic-auth credentials for the wiki API.

        spaces : Optional[List[str]]
            Space keys to crawl when no catalog is given.

        parallelism_limit : int
            Maximum number of page-detail requests in flight.

        catalog : Optional[CatalogApi]
            When provided, spaces are read from catalog Resource entities
            and `spaces` is ignored.

        logger : Optional[logging.Logger]
            Logger for progress and per-page failures.

        http_client : Optional[httpx.AsyncClient]
            Optional testing override for the wiki HTTP session.
        """
        self.logger = logger or logging.getLogger("collator.confluence")
        self.parallelism_limit = parallelism_limit
        self.wiki_url = wiki_url.rstrip("/")
        self._username = username
        self._password = password
        self._http_client = http_client
        self.space_resolver: SpaceResolver = build_space_resolver(
            spaces or [],
            catalog=catalog,
            logger=self.logger,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        logger: Optional[logging.Logger] = None,
        parallelism_limit: Optional[int] = None,
        catalog: Optional[CatalogApi] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "ConfluenceCollatorFactory":
        """
        Build a factory from application settings.

        A missing or zero `parallelism_limit` falls back to the configured
        limit.
        """
        return cls(
            wiki_url=settings.confluence_wiki_url,
            username=settings.confluence_username,
            password=settings.confluence_password.get_secret_value(),
            spaces=settings.confluence_spaces,
            parallelism_limit=parallelism_limit or settings.confluence_parallelism_limit,
            catalog=catalog,
            logger=logger,
            http_client=http_client,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_collator(self) -> AsyncIterator[IndexableConfluenceDocument]:
        """Start a fresh collection run and return its document stream."""
        return self.execute()

    async def execute(self) -> AsyncIterator[IndexableConfluenceDocument]:
        async with ConfluenceClient(
            self.wiki_url,
            self._username,
            self._password,
            http_client=self._http_client,
        ) as client:
            spaces = await self.get_spaces()
            page_urls = await self.get_documents_from_spaces(client, spaces)

            limiter = ConcurrencyLimiter(self.parallelism_limit)
            results = await asyncio.gather(
                *(self._transform_safely(client, limiter, url) for url in page_urls)
            )

        for documents in results:
            for document in documents:
                yield document

    async def get_spaces(self) -> List[str]:
        return await self.space_resolver.resolve_spaces()

    async def get_documents_from_spaces(
        self,
        client: ConfluenceClient,
        spaces: List[str],
    ) -> List[str]:
        """Enumerate page links space by space, in resolution order."""
        page_urls: List[str] = []
        for space in spaces:
            page_urls.extend(await client.list_space_page_links(space))
        return page_urls

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _transform_safely(
        self,
        client: ConfluenceClient,
        limiter: ConcurrencyLimiter,
        page_url: str,
    ) -> List[IndexableConfluenceDocument]:
        try:
            return await limiter.run(transform_page, client, page_url)
        except Exception as exc:
            self.logger.warning(
                'error while indexing document "%s": %s',
                page_url,
                exc,
                exc_info=True,
            )
            return []

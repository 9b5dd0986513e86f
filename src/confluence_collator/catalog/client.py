"""
Software Catalog Client

Minimal asynchronous client for a Backstage-style software catalog. The
collator only needs one query: "entities matching this filter", where a
filter maps field paths to either a required value or the
`CATALOG_FILTER_EXISTS` marker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, Union
import logging

import httpx

from ..core.errors import CatalogRequestError

logger = logging.getLogger("collator.catalog")


class _FilterExists:
    """Sentinel: the filtered field must be present, whatever its value."""

    def __repr__(self) -> str:
        return "CATALOG_FILTER_EXISTS"


CATALOG_FILTER_EXISTS = _FilterExists()

FilterValue = Union[str, _FilterExists]
EntityFilter = Mapping[str, FilterValue]


@dataclass
class CatalogEntities:
    """Result of an entity query."""
    items: List[Dict[str, Any]] = field(default_factory=list)


class CatalogApi(Protocol):
    """Anything able to answer a filtered entity query."""

    async def get_entities(self, filter: Sequence[EntityFilter]) -> CatalogEntities:
        ...


def encode_filters(filters: Sequence[EntityFilter]) -> List[Tuple[str, str]]:
    """
    Encode entity filters as repeated `filter` query parameters.

    Conditions of one filter are comma-joined (AND); separate filters become
    separate parameters (OR). An existence check is written as the bare key.
    """
    params: List[Tuple[str, str]] = []
    for entity_filter in filters:
        parts = []
        for key, value in entity_filter.items():
            if isinstance(value, _FilterExists):
                parts.append(key)
            else:
                parts.append(f"{key}={value}")
        params.append(("filter", ",".join(parts)))
    return params


class CatalogClient:
    """
    HTTP implementation of `CatalogApi`.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Parameters
        ----------
        base_url : str
            Catalog backend base URL; entities are read from
            `{base_url}/api/catalog/entities`.

        token : Optional[str]
            Optional bearer token sent with every request.

        http_client : Optional[httpx.AsyncClient]
            Optional testing override.
        """
        self.base_url = base_url.rstrip("/")
        self._token = token
        self._client = http_client

    async def get_entities(self, filter: Sequence[EntityFilter]) -> CatalogEntities:
        """
        Fetch entities matching any of the given filters.

        Raises
        ------
        CatalogRequestError
            If the catalog responds with a non-2xx status.
        """
        headers = {}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        url = f"{self.base_url}/api/catalog/entities"
        params = encode_filters(filter)

        if self._client is not None:
            resp = await self._client.get(url, params=params, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=30) as client:
                resp = await client.get(url, params=params, headers=headers)

        if not resp.is_success:
            logger.warning(
                "non-ok response from catalog: %d %s",
                resp.status_code,
                resp.text,
            )
            raise CatalogRequestError(resp.status_code, resp.reason_phrase)

        data = resp.json()
        # Older catalog backends return a bare list, newer ones wrap it.
        items = data.get("items", []) if isinstance(data, dict) else data
        return CatalogEntities(items=list(items))

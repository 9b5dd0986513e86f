"""
Space Resolution

Decides which Confluence spaces a collection run crawls. Two strategies
exist and one is picked when the collator is built:

- StaticSpaceResolver: the configured list, verbatim.
- CatalogSpaceResolver: spaces listed in the annotation of catalog
  `Resource` entities whose `spec.type` is `confluence-spaces`. A single
  entity may list several spaces as a comma-separated value.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

from ..catalog.client import CATALOG_FILTER_EXISTS, CatalogApi

RESOURCE_TYPE_CONFLUENCE_SPACES = "confluence-spaces"
ANNOTATION_CONFLUENCE_SPACES = "ovo.com/confluence-spaces"


class StaticSpaceResolver:
    """Returns the configured space keys unchanged."""

    def __init__(self, spaces: Sequence[str]) -> None:
        self.spaces = list(spaces)

    async def resolve_spaces(self) -> List[str]:
        return list(self.spaces)


class CatalogSpaceResolver:
    """
    Reads space keys from catalog Resource entities.

    Tokens from all matching entities are accumulated in catalog order.
    Duplicates are kept.
    """

    def __init__(self, catalog: CatalogApi, logger: Optional[logging.Logger] = None) -> None:
        self.catalog = catalog
        self.logger = logger or logging.getLogger("collator.spaces")

    async def resolve_spaces(self) -> List[str]:
        self.logger.info(
            "Using Resources of type %s to index Confluence",
            RESOURCE_TYPE_CONFLUENCE_SPACES,
        )
        annotation_key = f"metadata.annotations.{ANNOTATION_CONFLUENCE_SPACES}"

        response = await self.catalog.get_entities(
            filter=[
                {
                    "kind": "Resource",
                    "spec.type": RESOURCE_TYPE_CONFLUENCE_SPACES,
                    annotation_key: CATALOG_FILTER_EXISTS,
                }
            ]
        )
        self.logger.debug(
            "Have found %d Resources of type %s",
            len(response.items),
            RESOURCE_TYPE_CONFLUENCE_SPACES,
        )

        spaces: List[str] = []
        for entity in response.items:
            annotation = entity["metadata"]["annotations"][ANNOTATION_CONFLUENCE_SPACES]
            self.logger.debug("%s: %s", annotation_key, annotation)
            spaces.extend(item.strip() for item in annotation.split(","))

        self.logger.info("Indexing the following spaces %s", ",".join(spaces))
        return spaces


SpaceResolver = Union[StaticSpaceResolver, CatalogSpaceResolver]


def build_space_resolver(
    spaces: Sequence[str],
    catalog: Optional[CatalogApi] = None,
    logger: Optional[logging.Logger] = None,
) -> SpaceResolver:
    """
    Pick the resolution strategy: catalog-derived when a catalog is given,
    otherwise the static list.
    """
    if catalog is not None:
        return CatalogSpaceResolver(catalog, logger=logger)
    return StaticSpaceResolver(spaces)

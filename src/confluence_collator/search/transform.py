"""
Page Transformer

Turns one Confluence page reference into zero or one indexable documents.
"""

from __future__ import annotations

import re
from typing import List

from pydantic import ValidationError

from ..core.errors import ConfluenceResponseError
from ..wiki.confluence_client import ConfluenceClient
from .models import (
    ConfluenceDocument,
    IndexableAncestorRef,
    IndexableConfluenceDocument,
)

# Plain-text approximation: entities are left encoded and tag contents
# (e.g. <script>) are kept.
HTML_TAG_PATTERN = re.compile(r"(<([^>]+)>)", re.IGNORECASE)


def strip_html(value: str) -> str:
    return HTML_TAG_PATTERN.sub("", value)


def build_document(wiki_url: str, page: ConfluenceDocument) -> IndexableConfluenceDocument:
    """
    Map a decoded page detail record onto the indexable document shape.

    The owning space is always the first ancestor, followed by the page's
    ancestor chain in API order.
    """
    ancestors = [
        IndexableAncestorRef(
            title=page.space.name,
            location=f"{wiki_url}{page.space.links.webui}",
        )
    ]
    for ancestor in page.ancestors:
        ancestors.append(
            IndexableAncestorRef(
                title=ancestor.title,
                location=f"{wiki_url}{ancestor.links.webui}",
            )
        )

    return IndexableConfluenceDocument(
        title=page.title,
        text=strip_html(page.body.storage.value),
        location=f"{wiki_url}{page.links.webui}",
        space_key=page.space.key,
        space_name=page.space.name,
        ancestors=ancestors,
        last_modified_by=page.version.by.public_name,
        last_modified=page.version.when,
        last_modified_friendly=page.version.friendly_when,
    )


async def transform_page(
    client: ConfluenceClient,
    page_url: str,
) -> List[IndexableConfluenceDocument]:
    """
    Fetch a page and return it as a one-element list, or an empty list when
    the page is not current.

    Raises
    ------
    ConfluenceRequestError
        If the page fetch fails.

    ConfluenceResponseError
        If the page detail is missing fields the document needs.
    """
    data = await client.get_page(page_url)
    if data.get("status") != "current":
        return []

    try:
        page = ConfluenceDocument.model_validate(data)
    except ValidationError as exc:
        raise ConfluenceResponseError(page_url, str(exc)) from exc

    return [build_document(client.wiki_url, page)]

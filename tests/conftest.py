import asyncio
from typing import Any, Dict, List, Optional

import httpx
import pytest

WIKI_URL = "https://wiki.example.com"
CONTENT_PATH = "/rest/api/content"


def make_page(
    page_id: str,
    title: str = "Page",
    status: str = "current",
    body: str = "<p>Hello</p>",
    space_key: str = "ENG",
    space_name: str = "Engineering",
    ancestors: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Page detail payload as returned with expand=body.storage,space,ancestors,version."""
    return {
        "id": page_id,
        "type": "page",
        "title": title,
        "status": status,
        "_links": {
            "self": f"{WIKI_URL}{CONTENT_PATH}/{page_id}",
            "webui": f"/display/{space_key}/{title.replace(' ', '+')}",
        },
        "body": {"storage": {"value": body, "representation": "storage"}},
        "version": {
            "by": {"publicName": "Ada Lovelace", "type": "known"},
            "when": "2024-03-01T10:15:00.000Z",
            "friendlyWhen": "Mar 01, 2024",
            "number": 3,
        },
        "space": {
            "key": space_key,
            "name": space_name,
            "_links": {"webui": f"/display/{space_key}"},
        },
        "ancestors": ancestors or [],
    }


def make_ancestor(title: str, webui: str) -> Dict[str, Any]:
    return {"title": title, "status": "current", "_links": {"webui": webui}}


class FakeWiki:
    """
    In-memory Confluence REST API served through httpx.MockTransport.

    Listings are keyed by (space key, start offset); page details by page id.
    """

    def __init__(self, delay: float = 0.0) -> None:
        self.listings: Dict[tuple, Dict[str, Any]] = {}
        self.pages: Dict[str, Dict[str, Any]] = {}
        self.failing_pages: Dict[str, int] = {}
        self.failing_spaces: Dict[str, int] = {}
        self.requests: List[httpx.Request] = []
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0

    # -- fixture setup --------------------------------------------------

    def add_space(self, space: str, pages: List[Dict[str, Any]], page_size: int = 0) -> None:
        """Register pages for a space, split into listing pages of `page_size` items."""
        for page in pages:
            self.pages[page["id"]] = page

        size = page_size or max(len(pages), 1)
        chunks = [pages[i:i + size] for i in range(0, len(pages), size)] or [[]]
        for index, chunk in enumerate(chunks):
            start = index * size
            links: Dict[str, Any] = {"base": WIKI_URL}
            if index + 1 < len(chunks):
                links["next"] = (
                    f"{CONTENT_PATH}?limit=1000&status=current"
                    f"&spaceKey={space}&start={start + size}"
                )
            self.listings[(space, start)] = {
                "results": [
                    {
                        "id": p["id"],
                        "title": p["title"],
                        "status": "current",
                        "_links": {"self": p["_links"]["self"], "webui": p["_links"]["webui"]},
                    }
                    for p in chunk
                ],
                "start": start,
                "limit": 1000,
                "size": len(chunk),
                "_links": links,
            }

    # -- inspection -----------------------------------------------------

    @property
    def listing_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == CONTENT_PATH]

    @property
    def page_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.startswith(CONTENT_PATH + "/")]

    # -- transport ------------------------------------------------------

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == CONTENT_PATH:
            space = request.url.params.get("spaceKey")
            start = int(request.url.params.get("start", "0"))
            if space in self.failing_spaces:
                return httpx.Response(self.failing_spaces[space], text="space unavailable")
            return httpx.Response(200, json=self.listings.get((space, start), {}))

        page_id = path.rsplit("/", 1)[-1]
        if page_id in self.failing_pages:
            return httpx.Response(self.failing_pages[page_id], text="boom")
        if page_id not in self.pages:
            return httpx.Response(404, json={"message": "not found"})

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            return httpx.Response(200, json=self.pages[page_id])
        finally:
            self.in_flight -= 1

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def wiki() -> FakeWiki:
    return FakeWiki()

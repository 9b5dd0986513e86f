import re

import pytest

from confluence_collator.core.errors import ConfluenceRequestError, ConfluenceResponseError
from confluence_collator.search.transform import strip_html, transform_page
from confluence_collator.wiki.confluence_client import ConfluenceClient

from conftest import WIKI_URL, make_ancestor, make_page


def _client(wiki):
    return ConfluenceClient(WIKI_URL, "bot", "secret", http_client=wiki.client())


def test_strip_html_removes_nested_tags():
    assert strip_html("<p>Hello <b>World</b></p>") == "Hello World"


def test_strip_html_is_case_insensitive_and_keeps_entities():
    value = '<DIV class="x">Fish &amp; Chips</DIV><br/>'
    assert strip_html(value) == "Fish &amp; Chips"


def test_strip_html_keeps_script_contents():
    """Only the tags go; what sits between them stays."""
    assert strip_html("<script>alert(1)</script>") == "alert(1)"


@pytest.mark.asyncio
async def test_transform_current_page(wiki):
    wiki.pages["100"] = make_page(
        "100",
        title="Runbook",
        body="<p>Hello <b>World</b></p>",
        ancestors=[
            make_ancestor("Home", "/display/ENG/Home"),
            make_ancestor("Ops", "/display/ENG/Ops"),
        ],
    )

    docs = await transform_page(_client(wiki), f"{WIKI_URL}/rest/api/content/100")

    assert len(docs) == 1
    doc = docs[0]
    assert doc.title == "Runbook"
    assert doc.text == "Hello World"
    assert doc.location == f"{WIKI_URL}/display/ENG/Runbook"
    assert doc.space_key == "ENG"
    assert doc.space_name == "Engineering"
    assert doc.last_modified_by == "Ada Lovelace"
    assert doc.last_modified == "2024-03-01T10:15:00.000Z"
    assert doc.last_modified_friendly == "Mar 01, 2024"
    assert [a.title for a in doc.ancestors] == ["Engineering", "Home", "Ops"]
    assert [a.location for a in doc.ancestors] == [
        f"{WIKI_URL}/display/ENG",
        f"{WIKI_URL}/display/ENG/Home",
        f"{WIKI_URL}/display/ENG/Ops",
    ]


@pytest.mark.asyncio
async def test_transform_requests_expanded_detail(wiki):
    wiki.pages["100"] = make_page("100")

    await transform_page(_client(wiki), f"{WIKI_URL}/rest/api/content/100")

    request = wiki.page_requests[0]
    assert request.url.params["expand"] == "body.storage,space,ancestors,version"


@pytest.mark.asyncio
async def test_space_is_first_ancestor_without_raw_ancestors(wiki):
    wiki.pages["7"] = make_page("7", space_key="HR", space_name="People")

    docs = await transform_page(_client(wiki), f"{WIKI_URL}/rest/api/content/7")

    assert len(docs[0].ancestors) == 1
    assert docs[0].ancestors[0].title == "People"
    assert docs[0].ancestors[0].location == f"{WIKI_URL}/display/HR"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["archived", "trashed", "draft", "Current"])
async def test_non_current_page_yields_nothing(wiki, status):
    wiki.pages["5"] = make_page("5", status=status)

    docs = await transform_page(_client(wiki), f"{WIKI_URL}/rest/api/content/5")

    assert docs == []


@pytest.mark.asyncio
async def test_non_current_page_with_partial_payload_yields_nothing(wiki):
    wiki.pages["5"] = {"id": "5", "status": "trashed", "title": "Gone"}

    assert await transform_page(_client(wiki), f"{WIKI_URL}/rest/api/content/5") == []


@pytest.mark.asyncio
async def test_stripped_text_contains_no_tags(wiki):
    body = (
        '<h1>Title</h1><ac:structured-macro ac:name="info">'
        "<ac:rich-text-body><p>Note</p></ac:rich-text-body>"
        "</ac:structured-macro><table><tr><td>a</td></tr></table>"
    )
    wiki.pages["9"] = make_page("9", body=body)

    docs = await transform_page(_client(wiki), f"{WIKI_URL}/rest/api/content/9")

    assert not re.search(r"<[^>]+>", docs[0].text)
    assert docs[0].text == "TitleNotea"


@pytest.mark.asyncio
async def test_missing_fields_raise_response_error(wiki):
    page = make_page("11")
    del page["version"]
    wiki.pages["11"] = page

    with pytest.raises(ConfluenceResponseError):
        await transform_page(_client(wiki), f"{WIKI_URL}/rest/api/content/11")


@pytest.mark.asyncio
async def test_http_failure_propagates(wiki):
    wiki.failing_pages["13"] = 500

    with pytest.raises(ConfluenceRequestError) as excinfo:
        await transform_page(_client(wiki), f"{WIKI_URL}/rest/api/content/13")
    assert excinfo.value.status_code == 500


def test_document_serializes_with_indexer_field_names():
    from confluence_collator.search.models import IndexableAncestorRef, IndexableConfluenceDocument

    doc = IndexableConfluenceDocument(
        title="T",
        text="body",
        location=f"{WIKI_URL}/display/ENG/T",
        space_key="ENG",
        space_name="Engineering",
        ancestors=[IndexableAncestorRef(title="Engineering", location=f"{WIKI_URL}/display/ENG")],
        last_modified_by="Ada",
        last_modified="2024-03-01T10:15:00.000Z",
        last_modified_friendly="Mar 01, 2024",
    )

    data = doc.model_dump(by_alias=True)
    assert set(data) == {
        "title",
        "text",
        "location",
        "spaceKey",
        "spaceName",
        "ancestors",
        "lastModifiedBy",
        "lastModified",
        "lastModifiedFriendly",
    }
    assert data["ancestors"] == [{"title": "Engineering", "location": f"{WIKI_URL}/display/ENG"}]


@pytest.mark.asyncio
async def test_version_without_public_name_is_still_indexed(wiki):
    page = make_page("12", title="Anonymous edit")
    page["version"] = {
        "by": {"type": "known", "username": "jdoe", "displayName": "J. Doe"},
        "when": "2024-03-01T10:15:00.000Z",
    }
    wiki.pages["12"] = page

    docs = await transform_page(_client(wiki), f"{WIKI_URL}/rest/api/content/12")

    assert len(docs) == 1
    assert docs[0].title == "Anonymous edit"
    assert docs[0].last_modified_by is None
    assert docs[0].last_modified == "2024-03-01T10:15:00.000Z"
    assert docs[0].last_modified_friendly is None

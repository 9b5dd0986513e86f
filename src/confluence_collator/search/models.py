"""
Confluence Collator Data Models

Two families of models live here:

- Raw Confluence REST payloads, decoded leniently (unknown fields ignored)
  because the wiki returns far more than the collator consumes.
- Normalized indexable documents, which are the collator's output contract
  and are therefore strict and immutable.
"""

from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict


# ---------------------------------------------------------------------
# Raw Confluence Payloads
# ---------------------------------------------------------------------

class _ConfluencePayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ConfluenceLinks(_ConfluencePayload):
    self_: Optional[str] = Field(default=None, alias="self")
    webui: Optional[str] = None
    next: Optional[str] = None


class ConfluenceDocumentMetadata(_ConfluencePayload):
    """A single entry of the content listing endpoint."""

    title: Optional[str] = None
    status: Optional[str] = None
    links: ConfluenceLinks = Field(default_factory=ConfluenceLinks, alias="_links")


class ConfluenceDocumentList(_ConfluencePayload):
    """
    One page of `/rest/api/content` results.

    `results` is optional: an absent field ends pagination.
    """

    results: Optional[List[ConfluenceDocumentMetadata]] = None
    links: ConfluenceLinks = Field(default_factory=ConfluenceLinks, alias="_links")


class ConfluenceWebLinks(_ConfluencePayload):
    webui: str


class ConfluenceAncestorRef(_ConfluencePayload):
    title: str
    links: ConfluenceWebLinks = Field(..., alias="_links")


class ConfluenceStorage(_ConfluencePayload):
    value: str


class ConfluenceBody(_ConfluencePayload):
    storage: ConfluenceStorage


class ConfluenceUser(_ConfluencePayload):
    # Missing for some anonymous or deleted users
    public_name: Optional[str] = Field(default=None, alias="publicName")


class ConfluenceVersion(_ConfluencePayload):
    by: ConfluenceUser
    when: Optional[str] = None
    friendly_when: Optional[str] = Field(default=None, alias="friendlyWhen")


class ConfluenceSpace(_ConfluencePayload):
    key: str
    name: str
    links: ConfluenceWebLinks = Field(..., alias="_links")


class ConfluenceDocument(_ConfluencePayload):
    """
    Page detail fetched with `expand=body.storage,space,ancestors,version`.
    """

    title: str
    status: str
    links: ConfluenceWebLinks = Field(..., alias="_links")
    body: ConfluenceBody
    version: ConfluenceVersion
    space: ConfluenceSpace
    ancestors: List[ConfluenceAncestorRef] = Field(default_factory=list)


# ---------------------------------------------------------------------
# Indexable Output
# ---------------------------------------------------------------------

class IndexableAncestorRef(BaseModel):
    """Breadcrumb entry: a parent page or the owning space."""

    title: str = Field(..., description="Display title of the ancestor.")
    location: str = Field(..., description="Absolute URL of the ancestor.")

    model_config = ConfigDict(extra="forbid", frozen=True)


class IndexableConfluenceDocument(BaseModel):
    """
    A single normalized Confluence page, ready for the search indexer.

    Serialize with `by_alias=True` to obtain the indexer's camelCase keys.
    """

    title: str = Field(..., description="Page title.")

    text: str = Field(
        ...,
        description="Page body with markup tags stripped.",
    )

    location: str = Field(..., description="Absolute URL of the page.")

    space_key: str = Field(..., alias="spaceKey")
    space_name: str = Field(..., alias="spaceName")

    ancestors: List[IndexableAncestorRef] = Field(
        ...,
        description="Owning space first, then parent pages from root to direct parent.",
    )

    last_modified_by: Optional[str] = Field(default=None, alias="lastModifiedBy")
    last_modified: Optional[str] = Field(
        default=None,
        alias="lastModified",
        description="Raw timestamp of the latest version as reported by Confluence.",
    )
    last_modified_friendly: Optional[str] = Field(default=None, alias="lastModifiedFriendly")

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )

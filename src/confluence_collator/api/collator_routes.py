"""
Collator Routes

Exposes collection runs to a host indexing scheduler. Each request starts a
fresh run and streams its documents as newline-delimited JSON, one
indexable document per line, using the indexer's camelCase field names.
"""

from typing import Annotated, AsyncIterator, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from ..search.collator import ConfluenceCollatorFactory
from ..search.models import IndexableConfluenceDocument
from .dependencies import get_collator_factory, verify_collator_key

router = APIRouter(
    prefix="/collators",
    tags=["collators"],
    dependencies=[Depends(verify_collator_key)],
)

NDJSON_MEDIA_TYPE = "application/x-ndjson"


async def _ndjson_lines(
    first: Optional[IndexableConfluenceDocument],
    rest: AsyncIterator[IndexableConfluenceDocument],
) -> AsyncIterator[str]:
    if first is None:
        return
    yield first.model_dump_json(by_alias=True) + "\n"
    async for document in rest:
        yield document.model_dump_json(by_alias=True) + "\n"


@router.get(
    "/confluence/documents",
    summary="Stream one Confluence collection run as NDJSON",
    response_class=StreamingResponse,
)
async def stream_confluence_documents(
    factory: Annotated[ConfluenceCollatorFactory, Depends(get_collator_factory)],
) -> StreamingResponse:
    """
    Run the Confluence collator and stream the resulting documents.

    The first document is pulled before the response starts. Space resolution
    and page enumeration complete before any document is produced, so a run
    that fails there is reported as a 500 by the global exception handler
    instead of as a truncated stream.
    """
    collator = factory.get_collator()
    first = await anext(collator, None)

    return StreamingResponse(
        _ndjson_lines(first, collator),
        media_type=NDJSON_MEDIA_TYPE,
    )

from fastapi import APIRouter, Depends

from ..config import Settings, get_settings

router = APIRouter(tags=["health"])

@router.get("/health")
def health(settings: Settings = Depends(get_settings)):
    return {"status": "ok", "wiki_url": settings.confluence_wiki_url}

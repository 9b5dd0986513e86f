from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, Query, status

from ..catalog.client import CatalogClient
from ..config import Settings, get_settings
from ..search.collator import ConfluenceCollatorFactory


def get_catalog_client(settings: Settings) -> Optional[CatalogClient]:
    if not settings.catalog_base_url:
        return None
    token = settings.catalog_token.get_secret_value() if settings.catalog_token else None
    return CatalogClient(settings.catalog_base_url, token=token)


@lru_cache
def get_collator_factory() -> ConfluenceCollatorFactory:
    settings = get_settings()
    return ConfluenceCollatorFactory.from_settings(
        settings,
        catalog=get_catalog_client(settings),
    )


async def verify_collator_key(
    x_collator_key: Optional[str] = Header(None, alias="x-collator-key"),
    key: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Verify the caller presents the configured collator API key.
    Checks header first, then query param.
    """
    expected_key = settings.collator_api_key.get_secret_value() if settings.collator_api_key else None

    if not expected_key:
        # No key configured: the document stream stays closed
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Collator access is not configured (COLLATOR_API_KEY missing)"
        )

    provided_key = x_collator_key or key

    if not provided_key or provided_key != expected_key:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or missing collator API key"
        )

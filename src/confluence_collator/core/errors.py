"""
Error Types and Global Error Handling

This module defines the exceptions raised while talking to Confluence and the
catalog, plus the application-wide exception handler for the collator's HTTP
surface.

Design Goals
------------
- Transport failures and payload-shape failures are distinct types
- Never leak internal exception details to HTTP clients
- Log full stack traces internally for debugging
"""

from __future__ import annotations

import logging
from typing import Dict, Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("collator.errors")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class ConfluenceClientError(RuntimeError):
    """Base exception for Confluence client failures."""


class ConfluenceRequestError(ConfluenceClientError):
    """
    Raised when Confluence answers with a non-2xx status.

    Carries the HTTP status code and reason phrase of the failed response.
    """

    def __init__(self, url: str, status_code: int, reason: str) -> None:
        self.url = url
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"Request failed with {status_code} {reason}")


class ConfluenceResponseError(ConfluenceClientError):
    """Raised when a Confluence payload cannot be decoded into the expected shape."""

    def __init__(self, url: str, detail: str, status_code: Optional[int] = None) -> None:
        self.url = url
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"Unexpected response from {url}: {detail}")


class CatalogRequestError(RuntimeError):
    """Raised when the catalog API answers with a non-2xx status."""

    def __init__(self, status_code: int, reason: str) -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"Catalog request failed with {status_code} {reason}")


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    Registered with FastAPI as the final safety net. A failed space
    resolution or enumeration surfaces here when it happens before the
    document stream has started.

    Parameters
    ----------
    request : Request
        The incoming HTTP request that triggered the exception.

    exc : Exception
        The uncaught exception instance.

    Returns
    -------
    JSONResponse
        A JSON 500 response with a minimal error payload.
    """
    logger.exception(
        "Unhandled collator exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "detail": "Internal server error",
    }

    return JSONResponse(
        status_code=500,
        content=payload,
    )

"""Map marketplace and Protean exceptions onto HTTP responses.

Every error body has the shape ``{"status": <code>, "error": <detail>}``;
conflicts that carry cart lines add an ``"items"`` list.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError
from protean.integrations.fastapi import register_exception_handlers

from marketplace.errors import Conflict, MarketplaceError, NotFound

logger = structlog.get_logger(__name__)


async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.detail)
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


async def object_not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:  # noqa: ARG001
    error = NotFound(str(exc) or "Not found")
    return JSONResponse(status_code=error.http_status, content=error.to_dict())


async def version_conflict_handler(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    logger.warning("Concurrent modification", path=request.url.path, error=str(exc))
    error = Conflict("The resource was modified concurrently, retry the request")
    return JSONResponse(status_code=error.http_status, content=error.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path, error_type=type(exc).__name__)
    error = MarketplaceError("Internal server error")
    return JSONResponse(status_code=error.http_status, content=error.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's validation handlers, then the marketplace taxonomy on top."""
    register_exception_handlers(app)

    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(ObjectNotFoundError, object_not_found_handler)
    app.add_exception_handler(ExpectedVersionError, version_conflict_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

"""FastAPI integration: page parameters and error responses."""

import logging

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from querypage.config import get_settings
from querypage.errors import MissingRequiredArgument, QueryCompositionError
from querypage.schemas.common import ErrorDetail, PageRequest

logger = logging.getLogger(__name__)

_settings = get_settings()


def page_request(
    page: int = Query(1, ge=1),
    page_size: int = Query(_settings.default_page_size, ge=1, le=_settings.max_page_size),
) -> PageRequest:
    """Read ``page`` and ``page_size`` query parameters into a PageRequest."""
    return PageRequest(page=page, size=page_size)


async def query_composition_error_handler(request: Request, exc: QueryCompositionError) -> JSONResponse:
    code = "missing_argument" if isinstance(exc, MissingRequiredArgument) else "invalid_query"
    details = {"argument": exc.argument} if isinstance(exc, MissingRequiredArgument) else None
    logger.debug("Rejected query for %s: %s", request.url.path, exc)
    error = ErrorDetail(code=code, message=str(exc), details=details)
    return JSONResponse(status_code=400, content={"error": error.model_dump()})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(QueryCompositionError, query_composition_error_handler)

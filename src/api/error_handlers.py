"""Convert exceptions raised while serving a request into markdown error documents."""

from typing import cast

from fastapi import FastAPI, Request, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.comments.errors import MARKDOWN_CONTENT_TYPE, CommentsError, RouteNotFoundError
from src.utils.logging import get_logger

logger = get_logger(__name__)

INTERNAL_ERROR_MARKDOWN = "# Error 500\n\nInternal server error while fetching comments."


def _markdown(content: str, status_code: int) -> Response:
    return Response(content=content, status_code=status_code, media_type=MARKDOWN_CONTENT_TYPE)


async def comments_error_handler(request: Request, exc: Exception) -> Response:
    error = cast(CommentsError, exc)
    if error.status_code >= 500:
        logger.error(
            f"Request failed: {error.message}", path=request.url.path, status_code=error.status_code
        )
    else:
        logger.info(
            f"Request rejected: {error.message}",
            path=request.url.path,
            status_code=error.status_code,
        )
    return _markdown(error.to_markdown(), error.status_code)


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    http_exc = cast(StarletteHTTPException, exc)
    if http_exc.status_code == 404:
        return _markdown(RouteNotFoundError(request.url.path).to_markdown(), 404)
    return _markdown(f"# Error {http_exc.status_code}\n\n{http_exc.detail}", http_exc.status_code)


async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    # Error-level events reach New Relic through newrelic_error_processor
    logger.error(f"Unhandled error serving {request.url.path}: {exc}", exc_info=exc)
    return _markdown(INTERNAL_ERROR_MARKDOWN, 500)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CommentsError, comments_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

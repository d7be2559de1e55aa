"""Health check and homepage endpoints."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse, RedirectResponse

from src.utils.config import get_project_url

router = APIRouter(tags=["health"])


@router.get("/health", response_class=PlainTextResponse)
async def health_check():
    """Liveness probe - always healthy if the process is serving requests."""
    return "OK"


@router.get("/")
async def homepage():
    return RedirectResponse(get_project_url(), status_code=302)

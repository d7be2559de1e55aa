"""gitcom FastAPI service: GitHub pull request and issue comments as LLM-ready markdown."""

from pathlib import Path

import newrelic.agent
from fastapi import FastAPI

from src.api.controllers.health import router as health_router
from src.api.error_handlers import register_error_handlers
from src.api.routes import router as comments_router
from src.utils.config import get_gitcom_environment, get_port
from src.utils.logging import get_logger, get_uvicorn_log_config

logger = get_logger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="gitcom",
        description="GitHub pull request and issue comments rendered as markdown for LLM agents",
        version="1.0.0",
    )
    register_error_handlers(app)

    # Health routes first so /health is never taken for a repository path
    app.include_router(health_router)
    app.include_router(comments_router)
    return app


app = create_app()


def main():
    """Run the gitcom service."""
    import uvicorn

    config_path = Path(__file__).parent / "newrelic.ini"
    newrelic.agent.initialize(str(config_path), environment=get_gitcom_environment())

    port = get_port()
    logger.info(f"Starting gitcom on port {port}")
    uvicorn.run(app, host="0.0.0.0", port=port, log_config=get_uvicorn_log_config())


if __name__ == "__main__":
    main()

"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from identity.accounts import router as accounts_router
from identity.core.config import get_settings
from identity.core.database import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting %s...", settings.app_name)
    logger.info("Policy file: %s", settings.policy_path)
    logger.info("Event publisher: %s", settings.event_publisher)

    init_db()

    yield

    logger.info("Shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Identity service with label-driven account state and level",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.include_router(accounts_router)  # /management/accounts

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.app_name,
            "version": "0.1.0",
            "endpoints": {
                "accounts": "/management/accounts - Account lookup and creation",
                "labels": "/management/accounts/{uid}/labels - Label management",
            },
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)

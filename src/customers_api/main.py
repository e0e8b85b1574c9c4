"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from customers_api.api.handler import router as customers_router
from customers_api.config import Settings, settings
from customers_api.database.engine import connect
from customers_api.database.repository import CustomerRepository

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


def create_app(config: Settings = settings) -> FastAPI:
    """Build the application; the database pool is opened by the lifespan."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup / shutdown lifecycle hook."""
        logger.info("Starting %s …", config.app_name)
        engine = await connect(config)
        app.state.customers = CustomerRepository(engine)
        logger.info("Database initialised")
        yield
        logger.info("Shutting down %s …", config.app_name)
        await engine.dispose()

    app = FastAPI(
        title=config.app_name,
        description="CRUD and block/unblock operations over customers",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(customers_router)

    @app.exception_handler(StarletteHTTPException)
    async def plain_text_error(request: Request, exc: StarletteHTTPException):
        """Errors carry only the status text, never internal detail."""
        return PlainTextResponse(
            str(exc.detail), status_code=exc.status_code, headers=exc.headers
        )

    @app.get("/health")
    async def health_check():
        """Simple liveness probe."""
        return {"status": "healthy", "app": config.app_name}

    return app


app = create_app()


def run() -> None:
    """Serve the app on the configured host and port."""
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()

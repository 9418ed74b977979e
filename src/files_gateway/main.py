from textwrap import dedent
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.routing import APIRoute

from files_gateway.adapters.storage import S3Storage
from files_gateway.config.settings import Settings, get_settings
from files_gateway.errors import (
    GatewayError,
    handle_broad_exceptions,
    handle_gateway_error,
)
from files_gateway.routers.files import router as files_router
from files_gateway.routers.health import router as health_router

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send log records to stderr with timestamps at the given level."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


def create_app(settings: Optional[Settings] = None, storage: Optional[S3Storage] = None) -> FastAPI:
    """
    Create a FastAPI application.

    Both collaborators are injected here and stored on `app.state`; routes
    reach them through `files_gateway.dependencies`. Without arguments the
    settings come from the environment and the storage adapter is built
    from them.
    """
    settings = settings or get_settings()
    storage = storage or S3Storage.from_settings(settings)

    app = FastAPI(
        title="Files Gateway",
        summary="Stream files into and out of object storage",
        version="v1",
        description=dedent(
            """\
        Upload a file with `POST /upload` and keep the returned key.
        Fetch it back with `GET /download/{key}`.

        | Route | Notes |
        | --- | --- |
        | `POST /upload` | multipart field `file`, which must carry a Content-Type |
        | `GET /download/{key}` | streamed; every storage failure is a 500 |
        """
        ),
        docs_url="/docs",  # "/" is the hello route
        generate_unique_id_function=custom_generate_unique_id,
    )
    app.state.settings = settings
    app.state.storage = storage

    app.include_router(health_router, tags=["health"])
    app.include_router(files_router, tags=["files"])

    app.add_exception_handler(GatewayError, handle_gateway_error)
    app.add_exception_handler(Exception, handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from devon_farm.api.v1.router import api_router
from devon_farm.auth_strategies.factory import get_magic_link_provider
from devon_farm.core.config import settings
from devon_farm.core.exceptions import DevonFarmException, convert_to_http_exception
from devon_farm.core.postgres import engine

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger(__name__)

# Silence noisy libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("Starting up Devon Farm...")

    # One immutable provider client shared by every request
    app.state.provider = get_magic_link_provider(settings)

    yield

    logger.info("Shutting down Devon Farm...")
    await app.state.provider.aclose()
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)


@app.exception_handler(DevonFarmException)
async def devon_farm_exception_handler(request: Request, exc: DevonFarmException) -> JSONResponse:
    http_exc = convert_to_http_exception(exc)
    if http_exc.status_code >= 500:
        logger.error(
            f"[App] {exc.error_code} on {request.method} {request.url.path}: "
            f"operation={exc.details.get('operation')}"
        )
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        f"[App] Database error on {request.method} {request.url.path}: {exc.__class__.__name__}"
    )
    return JSONResponse(
        status_code=500,
        content={"detail": {"message": "Internal server error", "error_code": "PERSISTENCE_ERROR"}},
    )


app.include_router(api_router)

if __name__ == "__main__":
    uvicorn.run(
        "devon_farm.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )

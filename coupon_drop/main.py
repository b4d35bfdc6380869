from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from coupon_drop.api.dependencies import get_pool_admin
from coupon_drop.api.responses import http_error_handler, validation_error_handler
from coupon_drop.api.routes.admin_codes import router as admin_codes_router
from coupon_drop.api.routes.claims import router as claims_router
from coupon_drop.api.routes.health import router as health_router
from coupon_drop.claims.errors import StoreUnavailableError
from coupon_drop.core.config import get_settings
from coupon_drop.core.logging import configure_logging
from coupon_drop.db.models.base import Base
from coupon_drop.db.session import engine

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    if settings.db_auto_create:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    try:
        await get_pool_admin().seed_if_empty(settings.seed_code_values)
    except StoreUnavailableError:
        logger.warning("code_pool_seed_skipped")
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.app_env != "dev")

    app = FastAPI(
        title="Coupon Drop API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.frontend_origin_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    app.include_router(health_router)
    app.include_router(claims_router)
    app.include_router(admin_codes_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "coupon_drop.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()

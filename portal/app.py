"""FastAPI application for the B2B portal backend."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from b2bkit.api import ShopifyGraphQLError, ShopifyUserError

from .config import settings
from .database import is_sqlite
from .errors import PortalError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=settings.log_level)
    # Auto-create tables for SQLite (local dev); PostgreSQL uses Alembic migrations
    if is_sqlite(settings.database_url):
        from .database import engine
        from .models import Base
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    yield


app = FastAPI(title=settings.app_title, lifespan=lifespan)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(ShopifyGraphQLError)
async def shopify_error_handler(request: Request, exc: ShopifyGraphQLError):
    logger.error("Shopify %s failed: %s", exc.operation_name, exc.message)
    return JSONResponse(
        status_code=502,
        content={"message": exc.message, "code": 502, "error": "SHOPIFY_GRAPHQL_ERROR"},
    )


@app.exception_handler(ShopifyUserError)
async def shopify_user_error_handler(request: Request, exc: ShopifyUserError):
    logger.warning("Shopify %s rejected the change: %s", exc.operation_name, exc.message)
    return JSONResponse(
        status_code=422,
        content={
            "message": exc.message,
            "code": 422,
            "error": "SHOPIFY_USER_ERROR",
            "details": exc.errors,
        },
    )


# Import and register routers
from .routers import customers, health, roles  # noqa: E402

app.include_router(customers.router)
app.include_router(roles.router)
app.include_router(health.router)

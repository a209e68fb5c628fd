"""newsdeck backend - 新闻聚合阅读器服务入口。"""

import sentry_sdk
from fastapi import FastAPI
from fastapi.concurrency import asynccontextmanager
from fastapi.routing import APIRoute
from loguru import logger
from starlette.middleware.cors import CORSMiddleware

from src.core.application import security as app_security
from src.core.config import settings
from src.core.domain.exceptions import DomainException
from src.core.infrastructure.database.session import (
    check_db_health,
    close_db,
    init_db,
)
from src.core.infrastructure.health import overall_status
from src.core.infrastructure.logging import setup_logging
from src.core.infrastructure.redis import redis_client
from src.core.infrastructure.security import jwt as infra_jwt
from src.core.interfaces.http.exceptions import (
    domain_exception_handler,
    global_exception_handler,
)
from src.core.interfaces.http.routers import api_router
from src.modules.aggregation.application import dependencies as aggregation_app_deps
from src.modules.aggregation.infrastructure import (
    dependencies as aggregation_infra_deps,
)
from src.modules.sources.application import dependencies as sources_app_deps
from src.modules.sources.infrastructure import dependencies as sources_infra_deps
from src.modules.users.application import dependencies as users_app_deps
from src.modules.users.infrastructure import dependencies as users_infra_deps


def custom_generate_unique_id(route: APIRoute) -> str:
    """Generate unique operation IDs for OpenAPI."""
    if route.tags:
        return f"{route.tags[0]}-{route.name}"
    return route.name


# Initialize Sentry if configured
if settings.SENTRY_DSN and settings.ENVIRONMENT != "local":
    sentry_sdk.init(
        dsn=str(settings.SENTRY_DSN),
        enable_tracing=True,
        environment=settings.ENVIRONMENT,
    )


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Application lifespan manager."""
    setup_logging()
    logger.info("Starting newsdeck backend...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    logger.info("Initializing database connection...")
    await init_db()

    # 先用内置快照提供服务，再尝试远端目录
    catalog_service = sources_infra_deps.get_source_catalog_service()
    await catalog_service.refresh()

    yield

    logger.info("Shutting down newsdeck backend...")
    await aggregation_infra_deps.cache_write_queue.shutdown()
    await redis_client.close()
    await close_db()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="新闻聚合阅读器 - 多源聚合、按时间排序、本地优先同步",
    version="0.1.0",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
    root_path=settings.ROOTPATH,
    generate_unique_id_function=custom_generate_unique_id,
    lifespan=lifespan,
)

# Dependency overrides (application -> infrastructure)
app.dependency_overrides[app_security.get_current_user_id] = (
    infra_jwt.get_current_user_id
)
app.dependency_overrides[app_security.get_optional_user_id] = (
    infra_jwt.get_optional_user_id
)

app.dependency_overrides[sources_app_deps.get_source_catalog_service] = (
    sources_infra_deps.get_source_catalog_service
)

app.dependency_overrides[aggregation_app_deps.get_aggregate_feed_service] = (
    aggregation_infra_deps.get_aggregate_feed_service
)

app.dependency_overrides[users_app_deps.get_user_record_repository] = (
    users_infra_deps.get_user_record_repository
)

# Exception handlers
app.add_exception_handler(DomainException, domain_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# CORS middleware
if settings.all_cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.all_cors_origins,
        allow_credentials=True,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )

# Include API router
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint.

    检查关键依赖的健康状态：
    - PostgreSQL 数据库连接（同步记录）
    - Redis 连接（源缓存与响应缓存，聚合接口必需）
    """
    db_health = await check_db_health()
    redis_health = await redis_client.health_check()

    catalog_service = sources_infra_deps.get_source_catalog_service()
    return {
        "status": overall_status(db_health, redis_health),
        "environment": settings.ENVIRONMENT,
        "version": "0.1.0",
        "components": {
            "database": db_health.to_dict(),
            "redis": redis_health.to_dict(),
        },
        "catalog": {
            "loaded_from": catalog_service.loaded_from,
            "sources": len(catalog_service.getters),
        },
        "feature_flags": {
            "sync_enabled": settings.SYNC_ENABLED,
            "force_refresh_requires_auth": settings.AGGREGATE_FORCE_REQUIRES_AUTH,
        },
    }


@app.get("/", tags=["root"])
async def root():
    """Root endpoint."""
    return {
        "message": "Welcome to newsdeck API",
        "docs": f"{settings.API_PREFIX}/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.SERVER_PORT,
        reload=settings.ENVIRONMENT == "local",
    )

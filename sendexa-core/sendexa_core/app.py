"""
Application Factory
===================
Builds the FastAPI application for the OTP service.

Usage:
    uvicorn sendexa_core.app:create_app --factory
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
import redis.asyncio as aioredis
import structlog

from sendexa_core import database
from sendexa_core.api import create_otp_router, register_error_handlers
from sendexa_core.config import ServiceConfig
from sendexa_core.health import ComponentHealth, create_health_router
from sendexa_core.log_config import RequestLoggingMiddleware, setup_logging
from sendexa_core.notifier import Notifier, SendexaNotifier
from sendexa_core.service import OTPService
from sendexa_core.store import CodeStore, InMemoryCodeStore, RedisCodeStore, SQLCodeStore

logger = structlog.get_logger(__name__)


def build_store(config: ServiceConfig) -> CodeStore:
    """Create the code store selected by ``config.store_backend``."""
    backend = config.store_backend

    if backend == "memory":
        return InMemoryCodeStore()

    if backend == "redis":
        if not config.redis_url:
            raise ValueError("REDIS_URL is required for the redis store")
        return RedisCodeStore(aioredis.from_url(config.redis_url, decode_responses=True))

    if backend == "sql":
        if not config.database_url:
            raise ValueError("DATABASE_URL is required for the sql store")
        database.create_async_engine(config.database_url)
        return SQLCodeStore(database.AsyncSessionLocal())

    raise ValueError(f"Unknown OTP store backend: {backend}")


def create_app(
    config: Optional[ServiceConfig] = None,
    store: Optional[CodeStore] = None,
    notifier: Optional[Notifier] = None,
) -> FastAPI:
    """
    Create the OTP service application.

    Args:
        config: Service configuration (defaults to environment)
        store: Code store (defaults to the configured backend)
        notifier: SMS notifier (defaults to Sendexa)

    Returns:
        Configured FastAPI app
    """
    config = config or ServiceConfig.from_env()
    setup_logging(config.service_name, config.log_level, config.log_json)

    store = store or build_store(config)
    notifier = notifier or SendexaNotifier(
        api_key=config.sendexa_api_key,
        api_secret=config.sendexa_api_secret,
        base_url=config.sendexa_base_url,
    )
    service = OTPService(store, notifier, config=config.otp, clock=config.clock)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if isinstance(store, SQLCodeStore):
            await database.create_tables()
        await notifier.initialize()
        logger.info("OTP service started", store=store.name, notifier=notifier.name)
        try:
            yield
        finally:
            await notifier.close()
            await store.close()
            await database.close_engine()
            logger.info("OTP service stopped")

    async def notifier_check() -> ComponentHealth:
        healthy = await notifier.health_check()
        return ComponentHealth(status="connected" if healthy else "error")

    app = FastAPI(title=config.service_name, version=config.version, lifespan=lifespan)
    app.state.otp_service = service

    app.add_middleware(RequestLoggingMiddleware)
    register_error_handlers(app)

    app.include_router(create_otp_router(service, prefix=config.route_prefix))
    app.include_router(
        create_health_router(
            config.service_name,
            version=config.version,
            engine=database.get_engine() if isinstance(store, SQLCodeStore) else None,
            redis_client=store.redis if isinstance(store, RedisCodeStore) else None,
            custom_checks={"notifier": notifier_check},
        )
    )
    return app

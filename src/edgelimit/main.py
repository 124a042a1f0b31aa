from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from redis.asyncio import from_url

from edgelimit.api.middleware import RateLimitMiddleware
from edgelimit.api.routes import router
from edgelimit.config import Settings, get_settings
from edgelimit.core.keys import key_by_api_key_or_ip
from edgelimit.core.limiter import RateLimiter, kv_rate_limiter, rate_limiter
from edgelimit.core.logging import setup_logging
from edgelimit.core.storage.memory import InMemoryKVStore
from edgelimit.core.storage.redis import RedisKVStore
from edgelimit.core.storage.service import WindowLimiterBinding
from edgelimit.core.strategies.base import StrategyType

logger = structlog.get_logger()


def build_limiter(settings: Settings) -> RateLimiter:
    if settings.strategy == StrategyType.SERVICE:
        return rate_limiter(
            binding=settings.binding_name,
            key_generator=key_by_api_key_or_ip(),
        )
    return kv_rate_limiter(
        binding=settings.binding_name,
        prefix=settings.prefix,
        limit=settings.limit,
        period=settings.period,
        interval=settings.interval,
        key_generator=key_by_api_key_or_ip(),
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Application lifecycle manager.
        Opens the KV store, registers the binding, and closes Redis on shutdown.
        """
        redis_client = None
        if settings.redis_url:
            redis_client = from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
            store = RedisKVStore(redis_client)
        else:
            store = InMemoryKVStore()

        if settings.strategy == StrategyType.SERVICE:
            binding = WindowLimiterBinding(store, limit=settings.limit, period=settings.period)
        else:
            binding = store
        app.state.bindings = {settings.binding_name: binding}

        logger.info(
            "edgelimit_started",
            strategy=settings.strategy.value,
            binding=settings.binding_name,
            store=type(store).__name__,
        )
        yield

        if redis_client is not None:
            await redis_client.aclose()
        logger.info("edgelimit_stopped")

    setup_logging(settings.log_level)
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.add_middleware(RateLimitMiddleware, limiter=build_limiter(settings))
    app.include_router(router)
    return app


app = create_app()

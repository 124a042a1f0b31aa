from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from edgelimit.core.strategies.base import StrategyType


class Settings(BaseSettings):
    app_name: str = "edgelimit"
    redis_url: str | None = None
    strategy: StrategyType = StrategyType.KV
    binding_name: str = "RATE_LIMIT_KV"
    prefix: str = "ratelimit:"
    limit: int = Field(default=100, ge=1)
    period: int = Field(default=60, ge=60)
    interval: int = Field(default=0, ge=0)
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="EDGELIMIT_", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()

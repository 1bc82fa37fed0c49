"""Centralized application configuration using Pydantic settings."""
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven configuration shared across services."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    database_url: str = Field(
        default="sqlite:///./hotel_ops.db",
        description="SQLAlchemy database URL. Defaults to local SQLite for development.",
    )
    run_db_migrations: bool = Field(
        default=False,
        description="Whether this service should create/update database tables on startup.",
    )
    jwt_secret: str = Field(default="super-secret", description="JWT signing secret")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    access_token_expire_minutes: int = Field(default=60, description="Token lifetime in minutes")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")
    default_rate_limit: str = Field(default="60/minute", description="Global rate limiting rule")
    rate_limiting_enabled: bool = Field(default=True, description="Toggle to disable SlowAPI limits (useful in tests)")
    metrics_enabled: bool = Field(default=True, description="Expose Prometheus metrics on /metrics")
    log_dir: str = Field(default="logs", description="Directory for per-service audit logs")

    lock_online_window_seconds: int = Field(
        default=300,
        description="A smart lock counts as online if it pinged within this many seconds.",
    )
    low_battery_threshold: int = Field(default=20, description="Battery percentage that raises a notification")

    event_broker_enabled: bool = Field(default=False, description="Publish domain events to RabbitMQ")
    rabbitmq_host: str = Field(default="rabbitmq", description="RabbitMQ host for domain events")
    events_queue: str = Field(default="hotel_events", description="Durable queue receiving domain events")

    auth_service_port: int = 8001
    hotels_service_port: int = 8002
    rooms_service_port: int = 8003
    guests_service_port: int = 8004
    bookings_service_port: int = 8005
    payments_service_port: int = 8006
    smart_locks_service_port: int = 8007
    settings_service_port: int = 8008
    search_service_port: int = 8009
    dashboard_service_port: int = 8010


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the Settings object."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached Settings instance (useful for tests)."""

    get_settings.cache_clear()

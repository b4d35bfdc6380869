from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

RECYCLE_POLICY_EXPIRY = "expiry"
RECYCLE_POLICY_RESET_ON_EXHAUSTION = "reset_on_exhaustion"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = Field(default="dev", alias="APP_ENV")
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    database_url: str = Field(
        default="sqlite+aiosqlite:///./coupon_drop.db",
        alias="DATABASE_URL",
    )
    db_auto_create: bool = Field(default=False, alias="DB_AUTO_CREATE")
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")

    celery_broker_url: str = Field(default="redis://localhost:6379/1", alias="CELERY_BROKER_URL")
    celery_result_backend: str = Field(
        default="redis://localhost:6379/2",
        alias="CELERY_RESULT_BACKEND",
    )

    cooldown_seconds: int = Field(default=3600, ge=1, alias="COOLDOWN_SECONDS")
    sweep_interval_seconds: int = Field(default=30, ge=1, alias="SWEEP_INTERVAL_SECONDS")
    pool_recycle_policy: str = Field(
        default=RECYCLE_POLICY_EXPIRY,
        pattern=f"^({RECYCLE_POLICY_EXPIRY}|{RECYCLE_POLICY_RESET_ON_EXHAUSTION})$",
        alias="POOL_RECYCLE_POLICY",
    )
    seed_codes: str = Field(
        default="DISC10,SAVE20,FREE15,OFFER25,DEAL30",
        alias="SEED_CODES",
    )

    identity_pepper: str = Field(default="dev_identity_pepper_change_me", alias="IDENTITY_PEPPER")
    composite_identity_enabled: bool = Field(default=False, alias="COMPOSITE_IDENTITY_ENABLED")
    trusted_proxies: str = Field(default="", alias="TRUSTED_PROXIES")
    cookie_secure: bool = Field(default=False, alias="COOKIE_SECURE")

    frontend_origins: str = Field(default="http://localhost:5175", alias="FRONTEND_ORIGINS")
    admin_api_token: str = Field(default="", alias="ADMIN_API_TOKEN")

    @property
    def seed_code_values(self) -> tuple[str, ...]:
        return tuple(value.strip() for value in self.seed_codes.split(",") if value.strip())

    @property
    def frontend_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.frontend_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

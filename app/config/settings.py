from typing import Optional
from urllib.parse import quote_plus

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Database configuration"""

    driver: str = "postgresql+asyncpg"
    host: str = "localhost"
    port: int = 5432
    username: str = "postgres"
    password: SecretStr = Field(default=SecretStr("postgres"))
    database: str = "school_locator"
    pool_size: int = Field(default=10, ge=1)
    serverless: bool = Field(
        default=False,
        description="If true, disable connection pooling so serverless DBs can pause.",
    )
    dsn: Optional[str] = Field(
        default=None,
        validation_alias="DB_URL",
        description="Full SQLAlchemy URL; overrides the individual fields when set.",
    )

    @property
    def url(self) -> str:
        """Get database URL"""
        if self.dsn:
            return self.dsn
        username = quote_plus(self.username)
        password = quote_plus(self.password.get_secret_value())
        return (
            f"{self.driver}://"
            f"{username}:{password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class GeolocationConfig(BaseSettings):
    """IP geolocation provider configuration."""

    url: str = "https://ipapi.co/json/"
    timeout_seconds: float = Field(default=10.0, gt=0)
    max_retries: int = Field(default=3, ge=0)
    initial_backoff_seconds: float = Field(default=1.0, ge=0)
    backoff_multiplier: float = Field(default=2.0, ge=1.0)
    deadline_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Upper bound for the whole lookup including retries.",
    )
    treat_zero_as_missing: bool = Field(
        default=False,
        description="Treat a zero client coordinate as absent (legacy behaviour).",
    )

    model_config = SettingsConfigDict(
        env_prefix="GEO_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "School Locator"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3307
    log_file: str = "logs/app.log"

    # Database
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # Geolocation
    geolocation: GeolocationConfig = Field(default_factory=GeolocationConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()

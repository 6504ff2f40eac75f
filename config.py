"""
Centralized configuration for the Maintain service and bot.

Loads all environment variables and provides typed configuration objects.
No hardcoded secrets - all sensitive values must come from environment.
"""

import os
from typing import Optional
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass
class RedisConfig:
    """Redis connection configuration for the bot's temporary suggestion cache."""

    host: str = field(default_factory=lambda: os.getenv(
        "REDIS_HOST", "localhost"))
    port: int = field(default_factory=lambda: int(
        os.getenv("REDIS_PORT", "6379")))
    password: Optional[str] = field(
        default_factory=lambda: os.getenv("REDIS_PASSWORD"))
    db: int = field(default_factory=lambda: int(os.getenv("REDIS_DB", "0")))
    ssl: bool = field(default_factory=lambda: os.getenv(
        "REDIS_SSL", "false").lower() == "true")

    @property
    def url(self) -> str:
        """Build Redis connection URL."""
        protocol = "rediss" if self.ssl else "redis"
        auth = f":{self.password}@" if self.password else ""
        return f"{protocol}://{auth}{self.host}:{self.port}/{self.db}"


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    # Support direct DATABASE_URL or individual components
    database_url: Optional[str] = field(
        default_factory=lambda: os.getenv("DATABASE_URL"))
    host: str = field(default_factory=lambda: os.getenv(
        "POSTGRES_HOST", "localhost"))
    port: int = field(default_factory=lambda: int(
        os.getenv("POSTGRES_PORT", "5432")))
    user: str = field(
        default_factory=lambda: os.getenv("POSTGRES_USER", "maintain"))
    password: Optional[str] = field(
        default_factory=lambda: os.getenv("POSTGRES_PASSWORD"))
    database: str = field(default_factory=lambda: os.getenv(
        "POSTGRES_DB", "maintain"))
    ssl_mode: str = field(default_factory=lambda: os.getenv(
        "POSTGRES_SSL_MODE", "prefer"))

    @property
    def url(self) -> str:
        """
        Build PostgreSQL connection URL.

        Prioritizes DATABASE_URL if set, otherwise builds from components.
        Uses the synchronous psycopg2 driver.
        """
        if self.database_url:
            url = self.database_url
            # Normalize postgres:// to postgresql://
            if url.startswith("postgres://"):
                return url.replace("postgres://", "postgresql://", 1)
            return url

        # Build from individual components
        auth = f"{self.user}:{self.password}@" if self.password else f"{self.user}@"
        return f"postgresql://{auth}{self.host}:{self.port}/{self.database}?sslmode={self.ssl_mode}"


@dataclass
class LLMConfig:
    """LLM provider configuration - supports Gemini (default) and Azure OpenAI."""

    provider: str = field(
        default_factory=lambda: os.getenv("LLM_PROVIDER", "gemini"))
    temperature: float = field(default_factory=lambda: float(
        os.getenv("LLM_TEMPERATURE", "0.7")))
    max_output_tokens: int = field(default_factory=lambda: int(
        os.getenv("LLM_MAX_TOKENS", "3048")))
    top_p: float = field(default_factory=lambda: float(
        os.getenv("LLM_TOP_P", "0.8")))
    top_k: int = field(default_factory=lambda: int(
        os.getenv("LLM_TOP_K", "40")))
    timeout: int = field(default_factory=lambda: int(
        os.getenv("LLM_TIMEOUT", "60")))

    # Gemini configuration (default)
    gemini_api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("GOOGLE_GEMINI_API_KEY") or os.getenv("GEMINI_API_KEY"))
    gemini_model: str = field(
        default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.0-flash"))

    # Azure OpenAI configuration
    azure_openai_api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("AZURE_OPENAI_API_KEY"))
    azure_openai_endpoint: Optional[str] = field(
        default_factory=lambda: os.getenv("AZURE_OPENAI_ENDPOINT"))
    azure_openai_api_version: str = field(
        default_factory=lambda: os.getenv("AZURE_OPENAI_API_VERSION", "2024-02-15-preview"))
    azure_openai_deployment_name: Optional[str] = field(
        default_factory=lambda: os.getenv("AZURE_OPENAI_DEPLOYMENT"))


@dataclass
class YouTubeConfig:
    """YouTube Data API configuration for trending content."""

    api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("YOUTUBE_API_KEY"))
    region_code: str = field(
        default_factory=lambda: os.getenv("YOUTUBE_REGION_CODE", "US"))
    timeout: int = field(default_factory=lambda: int(
        os.getenv("YOUTUBE_TIMEOUT", "10")))


@dataclass
class AuthConfig:
    """Cookie-based authentication settings."""

    cookie_name: str = "userId"
    cookie_max_age: int = 60 * 60 * 24 * 7  # 7 days
    bcrypt_rounds: int = field(default_factory=lambda: int(
        os.getenv("BCRYPT_ROUNDS", "10")))


@dataclass
class TelegramConfig:
    """Telegram bot configuration."""

    token: Optional[str] = field(
        default_factory=lambda: os.getenv("TELEGRAM_BOT_TOKEN"))
    api_url: str = field(
        default_factory=lambda: os.getenv("APP_URL", "http://localhost:8000"))
    default_count: int = 5
    max_count: int = 10
    suggestion_ttl: int = field(default_factory=lambda: int(
        os.getenv("BOT_SUGGESTION_TTL", "3600")))
    request_timeout: int = field(default_factory=lambda: int(
        os.getenv("BOT_REQUEST_TIMEOUT", "60")))


@dataclass
class ServerConfig:
    """Server runtime configuration."""

    host: str = field(default_factory=lambda: os.getenv(
        "SERVER_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(
        os.getenv("SERVER_PORT", "8000")))
    environment: str = field(default_factory=lambda: os.getenv(
        "APP_ENV", "development"))
    debug: bool = field(default_factory=lambda: os.getenv(
        "DEBUG", "false").lower() == "true")
    log_level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    cors_origins: list[str] = field(
        default_factory=lambda: os.getenv("CORS_ORIGINS", "*").split(",")
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@dataclass
class Config:
    """
    Root configuration object aggregating all config sections.

    Usage:
        config = Config()
        db_url = config.postgres.url
        model = config.llm.gemini_model
    """

    redis: RedisConfig = field(default_factory=RedisConfig)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    youtube: YouTubeConfig = field(default_factory=YouTubeConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of warnings/errors.

        Returns:
            List of validation messages (empty if all valid)
        """
        warnings = []

        if self.llm.provider == "gemini" and not self.llm.gemini_api_key:
            warnings.append(
                "GOOGLE_GEMINI_API_KEY not set - recommendations will use saved-item fallback")

        if self.llm.provider == "azure_openai" and not self.llm.azure_openai_api_key:
            warnings.append(
                "AZURE_OPENAI_API_KEY not set - recommendations will use saved-item fallback")

        if not self.youtube.api_key:
            warnings.append("YOUTUBE_API_KEY not set - trending will use static fallback content")

        if not self.postgres.password and self.server.is_production:
            warnings.append("POSTGRES_PASSWORD not set in production mode")

        return warnings


# Global config instance - import and use this
config = Config()

"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, secrets, Stripe, etc.)
- Validates configuration on startup
- Environment-specific settings
"""

from urllib.parse import quote_plus

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Literal

DEFAULT_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB
    MONGODB_URL: Optional[str] = Field(
        default=None,
        description="Full MongoDB connection URI (takes precedence over DB_USER/DB_PASS)"
    )
    DB_USER: Optional[str] = Field(default=None, description="Atlas database user")
    DB_PASS: Optional[str] = Field(default=None, description="Atlas database password")
    DB_CLUSTER_HOST: str = Field(
        default="cluster0.mongodb.net",
        description="Atlas cluster host used with DB_USER/DB_PASS"
    )
    MONGODB_DB_NAME: str = Field(
        default="mealDB",
        description="MongoDB database name"
    )
    EAGER_DB_PING: Optional[bool] = Field(
        default=None,
        description="Ping MongoDB during startup (defaults to on outside production)"
    )

    # Tokens
    ACCESS_TOKEN_SECRET: str = Field(
        default=DEFAULT_SECRET,
        validate_default=True,
        description="HMAC secret used to sign access tokens"
    )
    ACCESS_TOKEN_EXPIRE_MINUTES: Optional[int] = Field(
        default=None,
        description="Token lifetime in minutes; unset means tokens never expire"
    )

    # Stripe
    STRIPE_SK_KEY: Optional[str] = Field(
        default=None,
        validate_default=True,
        description="Stripe secret key"
    )
    STRIPE_API_BASE: str = Field(
        default="https://api.stripe.com/v1",
        description="Stripe REST API base URL"
    )
    STRIPE_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Stripe request timeout in seconds"
    )
    PAYMENT_CURRENCY: str = Field(default="usd", description="PaymentIntent currency")
    VERIFY_PAYMENTS: bool = Field(
        default=True,
        description="Check reported payments against Stripe before granting a badge"
    )

    # Catalog
    PROMOTION_LIKE_THRESHOLD: int = Field(
        default=10,
        description="Likes after which an upcoming meal joins the catalog"
    )
    DEFAULT_PAGE_SIZE: int = Field(default=10, description="Default list page size")
    CATEGORY_PAGE_SIZE: int = Field(default=9, description="Meals returned per category tab")
    SUGGESTION_LIMIT: int = Field(default=10, description="Max user search suggestions")

    # Application
    PORT: int = Field(default=5000, description="HTTP listening port")
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @field_validator("ACCESS_TOKEN_SECRET")
    @classmethod
    def validate_token_secret(cls, v, info: ValidationInfo):
        """Ensure the signing secret is changed in production."""
        if info.data.get("ENVIRONMENT") == "production" and v == DEFAULT_SECRET:
            raise ValueError("ACCESS_TOKEN_SECRET must be changed in production environment")
        return v

    @field_validator("STRIPE_SK_KEY")
    @classmethod
    def validate_stripe_key(cls, v, info: ValidationInfo):
        """Ensure the Stripe key is set in production."""
        if info.data.get("ENVIRONMENT") == "production" and not v:
            raise ValueError("STRIPE_SK_KEY is required in production environment")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def should_ping_database(self) -> bool:
        if self.EAGER_DB_PING is not None:
            return self.EAGER_DB_PING
        return not self.is_production

    @property
    def mongodb_uri(self) -> Optional[str]:
        """
        Resolves the connection URI.

        MONGODB_URL wins; otherwise an Atlas SRV URI is built from
        DB_USER/DB_PASS with both credentials URL-quoted.
        """
        if self.MONGODB_URL:
            return self.MONGODB_URL
        if self.DB_USER and self.DB_PASS:
            return (
                f"mongodb+srv://{quote_plus(self.DB_USER)}:{quote_plus(self.DB_PASS)}"
                f"@{self.DB_CLUSTER_HOST}/?retryWrites=true&w=majority"
            )
        if self.is_development:
            return "mongodb://localhost:27017"
        return None


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.mongodb_uri:
        errors.append("MONGODB_URL or DB_USER/DB_PASS is required")

    if settings.PROMOTION_LIKE_THRESHOLD < 1:
        errors.append("PROMOTION_LIKE_THRESHOLD must be at least 1")

    if settings.is_production and settings.ACCESS_TOKEN_SECRET == DEFAULT_SECRET:
        errors.append("ACCESS_TOKEN_SECRET is required in production")
    if settings.is_production and not settings.STRIPE_SK_KEY:
        errors.append("STRIPE_SK_KEY is required in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True

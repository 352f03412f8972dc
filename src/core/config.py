"""Configuration management for TicketDesk."""

from typing import Optional, Literal, List
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import AliasChoices, Field, SecretStr


class DatabaseConfig(BaseSettings):
    """Database configuration."""

    database_url: str = Field(
        default="sqlite:///data/ticketdesk.db",
        description="SQLAlchemy database URL",
    )
    echo: bool = Field(
        default=False,
        validation_alias=AliasChoices("DATABASE_ECHO"),
        description="Echo SQL statements to the log",
    )

    model_config = {"env_prefix": "", "extra": "ignore"}


class AuthConfig(BaseSettings):
    """JWT and password hashing configuration."""

    jwt_secret: SecretStr = Field(
        default=SecretStr("change-me-ticketdesk-secret"),
        description="Secret used to sign access tokens",
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm",
    )
    jwt_expire_days: int = Field(
        default=7,
        ge=1,
        description="Access token lifetime in days",
    )
    bcrypt_rounds: int = Field(
        default=10,
        ge=4,
        le=16,
        description="bcrypt cost factor",
    )
    reset_token_ttl_minutes: int = Field(
        default=60,
        ge=5,
        description="Password reset token lifetime in minutes",
    )
    super_admin_emails: str = Field(
        default="",
        description="Comma-separated e-mails that are always treated as admins",
    )
    frontend_url: str = Field(
        default="http://localhost:3000",
        description="Base URL used to build password reset links",
    )
    min_password_length: int = Field(default=6, ge=1)

    model_config = {"env_prefix": "", "extra": "ignore"}

    @property
    def super_admins(self) -> List[str]:
        return [e.strip().lower() for e in self.super_admin_emails.split(",") if e.strip()]


class OAuthConfig(BaseSettings):
    """Social login provider configuration."""

    google_userinfo_url: str = Field(
        default="https://www.googleapis.com/oauth2/v3/userinfo",
    )
    github_client_id: Optional[str] = Field(default=None)
    github_client_secret: Optional[SecretStr] = Field(default=None)
    github_token_url: str = Field(default="https://github.com/login/oauth/access_token")
    github_api_url: str = Field(default="https://api.github.com")
    request_timeout: float = Field(default=10.0, gt=0)

    model_config = {"env_prefix": "", "extra": "ignore"}


class LLMConfig(BaseSettings):
    """LLM provider configuration for the chat assistant."""

    provider: Literal["gemini", "openai"] = Field(
        default="gemini",
        description="LLM provider to use",
    )
    gemini_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "LLM_GEMINI_API_KEY"),
        description="Google Gemini API key",
    )
    openai_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "LLM_OPENAI_API_KEY"),
        description="OpenAI API key",
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
    )
    model: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model used for completions",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model used when provider is openai",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        description="Attempts for overloaded or unreachable upstream",
    )
    retry_initial_delay: float = Field(
        default=1.0,
        ge=0.0,
        description="First backoff delay in seconds, doubled on every retry",
    )
    request_timeout: float = Field(default=60.0, gt=0)

    model_config = {"env_prefix": "LLM_", "extra": "ignore"}


class UploadConfig(BaseSettings):
    """File upload configuration."""

    uploads_dir: Path = Field(
        default=Path("uploads"),
        description="Directory where uploaded files are stored",
    )
    max_document_size: int = Field(default=10 * 1024 * 1024, ge=1)
    max_avatar_size: int = Field(default=5 * 1024 * 1024, ge=1)
    allowed_document_types: List[str] = Field(
        default=[
            "application/pdf",
            "application/msword",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "application/vnd.ms-excel",
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            "application/vnd.ms-powerpoint",
            "application/vnd.openxmlformats-officedocument.presentationml.presentation",
            "text/plain",
            "text/csv",
            "image/jpeg",
            "image/png",
            "image/gif",
            "image/webp",
            "application/zip",
            "application/x-zip-compressed",
        ],
    )
    allowed_document_extensions: List[str] = Field(
        default=[
            ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
            ".txt", ".csv",
            ".jpg", ".jpeg", ".png", ".gif", ".webp",
            ".zip",
        ],
    )
    allowed_avatar_types: List[str] = Field(
        default=["image/jpeg", "image/jpg", "image/pjpeg", "image/png", "image/gif", "image/webp"],
    )

    model_config = {"env_prefix": "", "extra": "ignore"}


class ScannerConfig(BaseSettings):
    """ClamAV virus scanner configuration."""

    clamav_host: Optional[str] = Field(default=None)
    clamav_port: int = Field(default=3310, ge=1, le=65535)
    clamav_timeout: float = Field(default=30.0, gt=0)
    chunk_size: int = Field(default=64 * 1024, ge=1024)

    model_config = {"env_prefix": "", "extra": "ignore"}


class RateLimitConfig(BaseSettings):
    """Request rate limiting configuration."""

    enabled: bool = Field(default=True)
    general_requests: int = Field(default=1000, ge=1)
    general_window_seconds: int = Field(default=15 * 60, ge=1)
    login_requests: int = Field(default=10, ge=1)
    login_window_seconds: int = Field(default=15 * 60, ge=1)
    upload_requests: int = Field(default=50, ge=1)
    upload_window_seconds: int = Field(default=60 * 60, ge=1)
    trust_forwarded_for: bool = Field(
        default=False,
        description="Key limits on X-Forwarded-For; enable only behind a trusted reverse proxy",
    )

    model_config = {"env_prefix": "RATE_LIMIT_", "extra": "ignore"}


class ServerConfig(BaseSettings):
    """HTTP server configuration."""

    host: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server",
    )
    port: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Port for the API server",
    )
    cors_allowed_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins",
    )

    model_config = {"env_prefix": "SERVER_", "extra": "ignore"}

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]


class Settings(BaseSettings):
    """Main settings combining all configurations."""

    # Sub-configurations
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    oauth: OAuthConfig = Field(default_factory=OAuthConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    scanner: ScannerConfig = Field(default_factory=ScannerConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    # General settings
    environment: Literal["development", "production", "test"] = Field(
        default="development",
        description="Deployment environment",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def is_super_admin(self, email: Optional[str]) -> bool:
        return bool(email) and email.lower() in self.auth.super_admins

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from environment and files."""
        # Load dotenv explicitly
        from dotenv import load_dotenv
        load_dotenv()
        return cls()


# Global settings instance
settings = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global settings
    if settings is None:
        settings = Settings.load()
    return settings


def reload_settings():
    """Reload settings from environment."""
    global settings
    settings = Settings.load()
    return settings

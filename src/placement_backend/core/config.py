"""Application configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./placement.db",
        description="SQLAlchemy database URL"
    )
    database_pool_size: int = Field(default=10, description="Connection pool size")
    database_max_overflow: int = Field(default=20, description="Extra connections when pool is full")
    
    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    secret_key: str = Field(default="dev-secret-key", description="JWT secret key")
    algorithm: str = Field(default="HS256", description="JWT algorithm")
    access_token_expire_minutes: int = Field(default=1440, description="Token expiry minutes")
    
    # Application Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    environment: str = Field(default="development", description="Environment name")
    
    # ATS scoring collaborator (OpenAI-compatible chat completions endpoint)
    scoring_api_key: str = Field(default="", description="API key for the scoring model")
    scoring_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai/",
        description="Base URL of the OpenAI-compatible scoring endpoint"
    )
    scoring_model: str = Field(default="gemini-2.5-flash", description="Scoring model name")
    scoring_timeout_seconds: float = Field(default=30.0, gt=0, description="Per-candidate scoring timeout")
    scoring_max_concurrency: int = Field(default=5, ge=1, description="Concurrent scoring calls per batch")
    default_auto_shortlist_threshold: int = Field(
        default=70, ge=0, le=100,
        description="Threshold used by the API when a request omits one"
    )


# Global settings instance
settings = Settings()

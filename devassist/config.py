"""
Configuration management using Pydantic BaseSettings.

Loads settings from environment variables and .env files with type validation
and sensible defaults.
"""

from typing import Literal, Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, ConfigDict


class Settings(BaseSettings):
    """
    Application configuration settings.

    Loads from environment variables and .env file. All settings are typed
    and validated with sensible defaults.
    """

    # ============================================================================
    # LLM Configuration
    # ============================================================================

    llm_provider: Literal["claude", "openrouter", "openai", "ollama"] = Field(
        default="openai",
        description="Completion provider (claude, openrouter, openai or ollama)"
    )

    claude_api_key: str = Field(
        default="",
        description="Anthropic Claude API key"
    )

    openrouter_api_key: str = Field(
        default="",
        description="OpenRouter API key"
    )

    openai_api_key: str = Field(
        default="",
        description="OpenAI API key"
    )

    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL for the OpenAI-compatible chat completions API"
    )

    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Base URL for local Ollama instance"
    )

    llm_model: Optional[str] = Field(
        default=None,
        description="Model identifier; provider default when unset"
    )

    llm_temperature: float = Field(
        default=0.7,
        description="Sampling temperature for suggestion and error prompts"
    )

    llm_timeout: int = Field(
        default=60,
        description="Completion request timeout in seconds"
    )

    # ============================================================================
    # Database Configuration
    # ============================================================================

    database_url: str = Field(
        default="sqlite:///./dev-assistant.db",
        description="Database connection URL (sqlite://, or postgresql:// with the postgres extra)"
    )

    retention_days: int = Field(
        default=30,
        description="Snippets and context rows older than this are purged"
    )

    enable_retention_job: bool = Field(
        default=True,
        description="Run the daily retention sweep in the background"
    )

    # ============================================================================
    # Snippet Matching
    # ============================================================================

    similarity_backend: Literal["random", "sequence"] = Field(
        default="random",
        description="Scorer used when no exact snippet match exists"
    )

    # ============================================================================
    # Server Configuration
    # ============================================================================

    host: str = Field(
        default="127.0.0.1",
        description="Server host to bind to"
    )

    port: int = Field(
        default=8000,
        description="Server port to listen on"
    )

    # ============================================================================
    # Logging Configuration
    # ============================================================================

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # ============================================================================
    # Validation Methods
    # ============================================================================

    @field_validator("llm_temperature")
    @classmethod
    def validate_llm_temperature(cls, v: float) -> float:
        """Validate that temperature is within the range providers accept."""
        if not (0.0 <= v <= 2.0):
            raise ValueError("llm_temperature must be between 0.0 and 2.0")
        return v

    @field_validator("llm_timeout")
    @classmethod
    def validate_llm_timeout(cls, v: int) -> int:
        """Validate that timeout is positive."""
        if v <= 0:
            raise ValueError("llm_timeout must be positive")
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate that database URL uses supported schemes."""
        if not (v.startswith("sqlite://") or v.startswith("postgresql://") or v.startswith("postgres://")):
            raise ValueError(
                "database_url must start with 'sqlite://', 'postgresql://', or 'postgres://'"
            )
        return v

    @field_validator("retention_days")
    @classmethod
    def validate_retention_days(cls, v: int) -> int:
        """Validate that the retention horizon is not negative."""
        if v < 0:
            raise ValueError("retention_days must be zero or greater")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate that port is within valid range."""
        if not (1 <= v <= 65535):
            raise ValueError("port must be between 1 and 65535")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log level is one of the standard levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()

    # ============================================================================
    # Pydantic Settings Configuration
    # ============================================================================

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown environment variables
    )


# Global settings instance
settings = Settings()

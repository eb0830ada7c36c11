"""Configuration management for Portfolio Scanner."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Reasoning service credentials (optional: missing key means heuristic-only scoring)
    ANTHROPIC_API_KEY: str | None = Field(default=None, description="Anthropic API key")
    OPENAI_API_KEY: str | None = Field(default=None, description="OpenAI API key")
    REASONING_PROVIDER: str = Field(
        default="anthropic", description="Reasoning provider: anthropic or openai"
    )
    REASONING_TIMEOUT_S: float = Field(
        default=60.0, description="Per-call timeout for the reasoning service in seconds"
    )

    # Environment
    SCANNER_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")
    LOG_LEVEL: str | None = Field(
        default=None, description="Overrides the environment default log level (DEBUG, INFO, ...)"
    )
    DEFAULT_EVALUATION_MODE: str = Field(
        default="general", description="Weight table used when a request names no mode"
    )

    # Stage 1: Holistic first impression
    HOLISTIC_MODEL: str = Field(
        default="claude-sonnet-4-5-20250929", description="Model for holistic analysis"
    )
    HOLISTIC_MAX_TOKENS: int = Field(default=3000, description="Max tokens for holistic analysis")
    HOLISTIC_TEMPERATURE: float = Field(default=0.6, description="Holistic analysis temperature")

    # Stage 2: Dimension analyzers
    DIMENSION_MODEL: str = Field(
        default="claude-sonnet-4-5-20250929", description="Model for dimension analyzers"
    )
    DIMENSION_MAX_TOKENS: int = Field(default=3000, description="Max tokens per dimension call")
    DIMENSION_TEMPERATURE: float = Field(default=0.6, description="Dimension analyzer temperature")

    # Stage 3: Synthesis
    SYNTHESIS_MODEL: str = Field(
        default="claude-sonnet-4-5-20250929", description="Model for narrative synthesis"
    )
    SYNTHESIS_MAX_TOKENS: int = Field(default=4000, description="Max tokens for synthesis")
    SYNTHESIS_TEMPERATURE: float = Field(default=0.6, description="Synthesis temperature")

    # Stage 4: Strategic guidance
    GUIDANCE_MODEL: str = Field(
        default="claude-sonnet-4-5-20250929", description="Model for strategic guidance"
    )
    GUIDANCE_MAX_TOKENS: int = Field(default=3000, description="Max tokens for guidance")
    GUIDANCE_TEMPERATURE: float = Field(default=0.7, description="Guidance temperature")

    # Entry-level rubric scorer
    ENTRY_MODEL: str = Field(
        default="claude-sonnet-4-20250514", description="Model for entry rubric scoring"
    )
    ENTRY_MAX_TOKENS: int = Field(default=4096, description="Max tokens for entry scoring")
    ENTRY_TEMPERATURE: float = Field(default=0.3, description="Entry scoring temperature")

    # OpenAI fallback model names (used when REASONING_PROVIDER=openai)
    OPENAI_MODEL: str = Field(default="gpt-4o", description="OpenAI model for all stages")

    PROMPT_VERSION: str = Field(default="portfolio_v1", description="Prompt version for tracking")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance
    """
    return Settings()

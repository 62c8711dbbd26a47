"""
Central configuration. All API keys and settings in one place.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Environment ---
    env: str = Field(default="development", alias="ENV")
    log_level: str = Field(default="info", alias="LOG_LEVEL")
    debug: bool = Field(default=False, alias="DEBUG")

    # --- Database ---
    # Empty string disables persistence: every store degrades to empty results.
    database_url: str = Field(
        default="sqlite+aiosqlite:///./devpilot.db",
        alias="DATABASE_URL",
    )

    # --- Auth0 ---
    auth0_domain: str = Field(default="", alias="AUTH0_DOMAIN")
    auth0_audience: str = Field(default="", alias="AUTH0_AUDIENCE")
    auth0_algorithm: str = Field(default="RS256", alias="AUTH0_ALGORITHM")

    # --- LLM (primary: user's own OpenAI key) ---
    openai_base_url: str = Field(default="https://api.openai.com/v1", alias="OPENAI_BASE_URL")
    default_llm_model: str = Field(default="gpt-4", alias="DEFAULT_LLM_MODEL")

    # --- LLM (fallback: server-side Gemini key) ---
    gemini_api_key: str = Field(default="", alias="GEMINI_API_KEY")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai",
        alias="GEMINI_BASE_URL",
    )
    fallback_llm_model: str = Field(default="gemini-2.5-flash", alias="FALLBACK_LLM_MODEL")

    llm_temperature: float = Field(default=0.7, alias="LLM_TEMPERATURE")
    llm_max_tokens: int = Field(default=2000, alias="LLM_MAX_TOKENS")
    provider_timeout_seconds: float = Field(default=25.0, alias="PROVIDER_TIMEOUT_SECONDS")

    # --- Web Search ---
    tavily_api_key: str = Field(default="", alias="TAVILY_API_KEY")
    duckduckgo_url: str = Field(default="https://api.duckduckgo.com/", alias="DUCKDUCKGO_URL")
    search_timeout_seconds: float = Field(default=15.0, alias="SEARCH_TIMEOUT_SECONDS")

    # --- GitHub ---
    github_api_url: str = Field(default="https://api.github.com", alias="GITHUB_API_URL")

    # --- Remote server (SSH) ---
    ssh_timeout_seconds: float = Field(default=30.0, alias="SSH_TIMEOUT_SECONDS")
    ssh_connect_timeout_seconds: int = Field(default=10, alias="SSH_CONNECT_TIMEOUT_SECONDS")

    # --- API ---
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")


@lru_cache
def get_settings() -> Settings:
    return Settings()

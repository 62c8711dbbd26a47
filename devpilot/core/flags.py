"""
Central feature flags. One file controls every optional external dependency.

Set via environment variables (prefix FF_) or .env file.
When a flag is OFF, the system uses a local fallback. Nothing crashes.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureFlags(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Auth ─────────────────────────────────────────────────────────
    use_auth0: bool = Field(default=True, alias="FF_USE_AUTH0")
    # ON  → JWT validated via Auth0 JWKS. Needs AUTH0_DOMAIN, AUTH0_AUDIENCE.
    # OFF → Dev user injected (user_id="dev-user"). No token needed.

    # ── Web Search ───────────────────────────────────────────────────
    use_web_search: bool = Field(default=True, alias="FF_USE_WEB_SEARCH")
    # ON  → Chat turns may pull web results (Tavily if keyed, else DuckDuckGo).
    # OFF → Search is never called, even if the user enabled it.

    # ── GitHub Search ────────────────────────────────────────────────
    use_github_search: bool = Field(default=True, alias="FF_USE_GITHUB_SEARCH")
    # OFF → /agent/github returns an empty result set.


@lru_cache
def get_flags() -> FeatureFlags:
    return FeatureFlags()

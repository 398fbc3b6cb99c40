from functools import lru_cache
from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    server_port: int = 8000
    # Allow both localhost and 127.0.0.1 for local development
    allowed_origins: List[AnyHttpUrl] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]  # type: ignore
    database_url: str = "sqlite+aiosqlite:///./praxis.db"
    nextauth_secret: Optional[str] = None

    # Process-wide default secrets; per-user keys from the store take precedence
    google_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    openrouter_api_key: Optional[str] = None
    # The gateway manages its own credential
    ai_gateway_api_key: Optional[str] = None

    gateway_base_url: str = "https://ai-gateway.vercel.sh/v1"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    google_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # OpenRouter attribution headers
    openrouter_http_referer: Optional[str] = "http://localhost:3000"
    openrouter_app_title: Optional[str] = "Praxis"

    reasoning_tag_name: str = "thinking"
    title_model: str = "anthropic/claude-haiku-4.5"

    connect_timeout: float = 10.0
    read_timeout: float = 120.0

    # Route every provider tag to the echo adapter (local development only)
    mock_providers: bool = False

    # pydantic-settings v2 style config: load env from both ../.env (repo root) and .env
    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=("../.env", ".env"),
        extra="ignore",  # ignore env vars not defined as fields
    )

    def default_api_key(self, provider: str) -> Optional[str]:
        """Deployment-configured secret for a provider tag, if any."""
        if provider == "google-api":
            return self.google_api_key or self.gemini_api_key
        if provider == "openrouter":
            return self.openrouter_api_key
        return None


@lru_cache()
def get_settings() -> Settings:
    return Settings()

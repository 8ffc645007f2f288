from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present (local dev only)
load_dotenv()


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Inference backend selection: "cloudflare" (raw HTTPS) or "openai" (SDK)
    inference_provider: str = Field("cloudflare", description="Name of the inference backend.")

    # Cloudflare Workers AI
    cloudflare_account_id: Optional[str] = Field(default=None, description="Cloudflare account identifier.")
    cloudflare_api_token: Optional[SecretStr] = Field(default=None, description="Workers AI bearer token.")
    cloudflare_api_base: str = Field("https://api.cloudflare.com/client/v4")
    cloudflare_model: str = Field("@cf/llava-1.5-7b-hf")

    # OpenAI
    openai_api_key: Optional[SecretStr] = Field(default=None)
    openai_model: str = Field("gpt-4o-mini")

    # Request handling
    default_max_tokens: int = Field(512, ge=1, description="Token limit used when the caller sends none.")
    inference_timeout: float = Field(60.0, gt=0, description="Seconds to wait for the inference backend.")
    cors_max_age: int = Field(86400, ge=0, description="Preflight cache lifetime in seconds.")

    log_level: str = Field("INFO")


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()

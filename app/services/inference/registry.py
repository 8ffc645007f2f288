from __future__ import annotations

from typing import Callable

from app.config import Settings

from .base import InferenceProvider
from .cloudflare_provider import CloudflareProvider
from .openai_provider import OpenAIProvider


def _secret(value) -> str | None:
    return value.get_secret_value() if value is not None else None


def _build_cloudflare(settings: Settings) -> InferenceProvider:
    return CloudflareProvider(
        account_id=settings.cloudflare_account_id,
        api_token=_secret(settings.cloudflare_api_token),
        model=settings.cloudflare_model,
        api_base=settings.cloudflare_api_base,
        timeout=settings.inference_timeout,
    )


def _build_openai(settings: Settings) -> InferenceProvider:
    return OpenAIProvider(
        api_key=_secret(settings.openai_api_key),
        model=settings.openai_model,
        timeout=settings.inference_timeout,
    )


_PROVIDERS: dict[str, Callable[[Settings], InferenceProvider]] = {
    "cloudflare": _build_cloudflare,
    "openai": _build_openai,
}


def get_provider(settings: Settings) -> InferenceProvider:
    provider_key = settings.inference_provider.lower()
    if provider_key not in _PROVIDERS:
        raise ValueError(f"Unsupported inference provider: {provider_key}")
    return _PROVIDERS[provider_key](settings)

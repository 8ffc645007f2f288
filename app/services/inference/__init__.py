from __future__ import annotations

from .base import InferenceProvider
from .cloudflare_provider import CloudflareProvider
from .openai_provider import OpenAIProvider
from .registry import get_provider

__all__ = [
    "InferenceProvider",
    "CloudflareProvider",
    "OpenAIProvider",
    "get_provider",
]

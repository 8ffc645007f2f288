"""Cloudflare Workers AI backend.

Calls the REST ``ai/run`` endpoint directly with a bearer token. The image
is forwarded as the caller's data URI string; no decoding happens here.

    POST {api_base}/accounts/{account_id}/ai/run/{model}
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from app.errors import InferenceAPIError, InferenceTransportError, ProviderConfigurationError

from .base import InferenceProvider

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_DETAIL = "Unknown error from Cloudflare AI"


def extract_error_detail(error_json: Any) -> str:
    """Return ``errors[0].message`` from a Cloudflare error envelope."""

    if isinstance(error_json, dict):
        errors = error_json.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            message = errors[0].get("message")
            if message:
                return str(message)
    return UNKNOWN_ERROR_DETAIL


class CloudflareProvider(InferenceProvider):
    """Minimal async client for the Workers AI REST API."""

    name = "cloudflare"
    image_encoding = "data_uri"

    def __init__(
        self,
        *,
        account_id: Optional[str],
        api_token: Optional[str],
        model: str = "@cf/llava-1.5-7b-hf",
        api_base: str = "https://api.cloudflare.com/client/v4",
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not api_token:
            raise ProviderConfigurationError("Cloudflare API token not configured")
        if not account_id:
            raise ProviderConfigurationError("Cloudflare Account ID not configured")
        self._model = model
        self._url = f"{api_base.rstrip('/')}/accounts/{account_id}/ai/run/{model}"
        self._headers = {
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json",
        }
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def url(self) -> str:
        return self._url

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def infer(
        self,
        prompt: str,
        image: bytes | str,
        max_tokens: int,
        *,
        mime_type: str | None = None,
    ) -> dict[str, Any]:
        payload = {
            "messages": [
                {
                    "role": "user",
                    "content": prompt,
                    "image": image,
                }
            ],
            "max_tokens": max_tokens,
        }
        logger.debug("POST %s (model=%s, max_tokens=%d)", self._url, self._model, max_tokens)
        try:
            resp = await self._client.post(self._url, json=payload, headers=self._headers)
        except httpx.HTTPError as exc:
            logger.error("Workers AI request failed: %s", exc)
            raise InferenceTransportError(str(exc)) from exc

        if resp.status_code >= 400:
            try:
                err_json = resp.json()
            except ValueError:
                err_json = None
            detail = extract_error_detail(err_json)
            logger.error("AI API error %s: %s", resp.status_code, detail)
            raise InferenceAPIError(resp.status_code, detail, err_json)

        try:
            return resp.json()
        except ValueError as exc:
            raise InferenceTransportError("Invalid JSON in AI API response") from exc

    async def close(self) -> None:
        await self._client.aclose()

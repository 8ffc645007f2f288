"""Tests for the Cloudflare Workers AI backend"""

import pytest
from unittest.mock import AsyncMock, Mock
import httpx

from app.errors import InferenceAPIError, InferenceTransportError, ProviderConfigurationError
from app.services.inference.cloudflare_provider import (
    UNKNOWN_ERROR_DETAIL,
    CloudflareProvider,
    extract_error_detail,
)
from tests.helpers import PNG_DATA_URI


def _provider(response=None, side_effect=None):
    mock_client = Mock()
    mock_client.post = AsyncMock(return_value=response, side_effect=side_effect)
    mock_client.aclose = AsyncMock()
    provider = CloudflareProvider(account_id="test_account", api_token="test_token", client=mock_client)
    return provider, mock_client


class TestCloudflareProviderConfig:
    def test_missing_token(self):
        with pytest.raises(ProviderConfigurationError, match="Cloudflare API token not configured"):
            CloudflareProvider(account_id="test_account", api_token=None)

    def test_missing_account_id(self):
        with pytest.raises(ProviderConfigurationError, match="Cloudflare Account ID not configured"):
            CloudflareProvider(account_id=None, api_token="test_token")

    def test_url_built_from_account_and_model(self):
        provider, _ = _provider()

        assert provider.url == (
            "https://api.cloudflare.com/client/v4/accounts/test_account/ai/run/@cf/llava-1.5-7b-hf"
        )


class TestCloudflareProviderInfer:
    @pytest.mark.asyncio
    async def test_success_returns_json_verbatim(self):
        body = {"result": {"description": "a cat"}, "success": True}
        provider, mock_client = _provider(httpx.Response(200, json=body))

        result = await provider.infer("describe", PNG_DATA_URI, 512)

        assert result == body

    @pytest.mark.asyncio
    async def test_request_shape(self):
        provider, mock_client = _provider(httpx.Response(200, json={"description": "a cat"}))

        await provider.infer("describe", PNG_DATA_URI, 64)

        mock_client.post.assert_awaited_once()
        args, kwargs = mock_client.post.call_args
        assert args[0] == provider.url
        assert kwargs["headers"]["Authorization"] == "Bearer test_token"
        assert kwargs["json"] == {
            "messages": [{"role": "user", "content": "describe", "image": PNG_DATA_URI}],
            "max_tokens": 64,
        }

    @pytest.mark.asyncio
    async def test_error_status_propagated_with_first_error_message(self):
        error_body = {"success": False, "errors": [{"code": 10000, "message": "Authentication error"}]}
        provider, _ = _provider(httpx.Response(401, json=error_body))

        with pytest.raises(InferenceAPIError) as exc_info:
            await provider.infer("describe", PNG_DATA_URI, 512)

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "AI model error: Authentication error"
        assert exc_info.value.response_json == error_body

    @pytest.mark.asyncio
    async def test_error_without_errors_list_uses_fallback(self):
        provider, _ = _provider(httpx.Response(500, json={"success": False}))

        with pytest.raises(InferenceAPIError) as exc_info:
            await provider.infer("describe", PNG_DATA_URI, 512)

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == f"AI model error: {UNKNOWN_ERROR_DETAIL}"

    @pytest.mark.asyncio
    async def test_non_json_error_body_keeps_status(self):
        provider, _ = _provider(httpx.Response(502, text="<html>Bad Gateway</html>"))

        with pytest.raises(InferenceAPIError) as exc_info:
            await provider.infer("describe", PNG_DATA_URI, 512)

        assert exc_info.value.status_code == 502
        assert exc_info.value.detail == UNKNOWN_ERROR_DETAIL

    @pytest.mark.asyncio
    async def test_network_failure(self):
        provider, _ = _provider(side_effect=httpx.ConnectError("connection refused"))

        with pytest.raises(InferenceTransportError) as exc_info:
            await provider.infer("describe", PNG_DATA_URI, 512)

        assert exc_info.value.status_code == 500
        assert exc_info.value.to_dict() == {
            "message": "Internal server error while processing request",
            "error": "connection refused",
        }

    @pytest.mark.asyncio
    async def test_close(self):
        provider, mock_client = _provider()

        await provider.close()

        mock_client.aclose.assert_awaited_once()


class TestExtractErrorDetail:
    @pytest.mark.parametrize(
        "payload, expected",
        [
            ({"errors": [{"message": "bad input"}]}, "bad input"),
            ({"errors": []}, UNKNOWN_ERROR_DETAIL),
            ({"errors": [{}]}, UNKNOWN_ERROR_DETAIL),
            ({"errors": "oops"}, UNKNOWN_ERROR_DETAIL),
            (None, UNKNOWN_ERROR_DETAIL),
            (["not", "a", "dict"], UNKNOWN_ERROR_DETAIL),
        ],
    )
    def test_extract(self, payload, expected):
        assert extract_error_detail(payload) == expected

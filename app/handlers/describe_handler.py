"""HTTP handler that relays an image + prompt to the inference backend."""
from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from app.errors import InferenceAPIError, InvalidJSONError, ProxyError
from app.models.inference import InferenceRequest
from app.services.inference import InferenceProvider

router = APIRouter()
logger = logging.getLogger(__name__)

CORS_ORIGIN_HEADER = {"Access-Control-Allow-Origin": "*"}
ALLOWED_METHODS = "POST, OPTIONS"

# Every path is served; the describe call is not tied to "/".
ROUTE_PATH = "/{path:path}"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def preflight_headers(max_age: int) -> dict[str, str]:
    return {
        **CORS_ORIGIN_HEADER,
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Max-Age": str(max_age),
    }


def json_response(body: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=body, status_code=status_code, headers=CORS_ORIGIN_HEADER)


def method_not_allowed_response() -> Response:
    return PlainTextResponse(
        "Method Not Allowed",
        status_code=405,
        headers={**CORS_ORIGIN_HEADER, "Allow": ALLOWED_METHODS},
    )


def get_inference_provider(request: Request) -> InferenceProvider:
    return request.app.state.inference_provider


async def parse_json_body(request: Request) -> Any:
    raw = await request.body()
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise InvalidJSONError() from exc


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.options(ROUTE_PATH)
async def preflight(request: Request) -> Response:
    return Response(status_code=204, headers=preflight_headers(request.app.state.settings.cors_max_age))


@router.post(ROUTE_PATH)
async def describe(
    request: Request,
    provider: InferenceProvider = Depends(get_inference_provider),
) -> JSONResponse:
    payload = await parse_json_body(request)
    inference = InferenceRequest.from_payload(
        payload, default_max_tokens=request.app.state.settings.default_max_tokens
    )

    image: bytes | str
    if provider.image_encoding == "bytes":
        image = inference.decode_image()
    else:
        image = inference.image
    logger.debug(
        "Describe request: provider=%s prompt_len=%d image_len=%d max_tokens=%d",
        provider.name,
        len(inference.prompt),
        len(image),
        inference.max_tokens,
    )

    try:
        result = await provider.infer(
            inference.prompt, image, inference.max_tokens, mime_type=inference.mime_type
        )
    except ProxyError:
        raise
    except Exception as exc:  # backend raised something outside our taxonomy
        logger.exception("Inference provider %s failed", provider.name)
        raise InferenceAPIError(500, str(exc) or "Unknown error") from exc

    return json_response(result)

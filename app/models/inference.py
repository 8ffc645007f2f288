from __future__ import annotations

import base64
import binascii
import re
from typing import Any

from pydantic import BaseModel, Field

from app.errors import (
    ImageDecodeError,
    InvalidImageFormatError,
    InvalidMaxTokensError,
    MissingFieldsError,
)

DATA_URI_PREFIX = "data:image/"
BASE64_MARKER = ";base64,"
DEFAULT_MAX_TOKENS = 512

_ASCII_WHITESPACE = re.compile(r"[\t\n\f\r ]")


def normalize_base64(payload: str) -> str:
    """Strip ASCII whitespace and restore padding; raise on an impossible length."""

    data = _ASCII_WHITESPACE.sub("", payload)
    if len(data) % 4 == 0 and data.endswith("="):
        data = data[:-2] if data.endswith("==") else data[:-1]
    if len(data) % 4 == 1:
        raise ImageDecodeError()
    return data + "=" * (-len(data) % 4)


def is_image_data_uri(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(DATA_URI_PREFIX) and BASE64_MARKER in value


class InferenceRequest(BaseModel):
    """A single describe call: one image, one prompt."""

    image: str = Field(..., description="data:image/<subtype>;base64,<payload>")
    prompt: str = Field(..., min_length=1)
    max_tokens: int = Field(DEFAULT_MAX_TOKENS, ge=1)

    @classmethod
    def from_payload(cls, payload: Any, *, default_max_tokens: int = DEFAULT_MAX_TOKENS) -> "InferenceRequest":
        """Validate a decoded JSON body in the order callers see errors.

        Raises a :class:`~app.errors.BadRequestError` subclass on the first
        problem found.
        """

        if not isinstance(payload, dict):
            payload = {}
        image = payload.get("image")
        prompt = payload.get("prompt")
        if not image or not prompt or not isinstance(prompt, str):
            raise MissingFieldsError()
        if not is_image_data_uri(image):
            raise InvalidImageFormatError()

        max_tokens = payload.get("max_tokens")
        if max_tokens is None:
            max_tokens = default_max_tokens
        elif isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens < 1:
            raise InvalidMaxTokensError()

        return cls(image=image, prompt=prompt, max_tokens=max_tokens)

    @property
    def mime_type(self) -> str:
        return self.image[len("data:"):self.image.index(BASE64_MARKER)]

    @property
    def image_payload(self) -> str:
        return self.image.split(",", 1)[1]

    def decode_image(self) -> bytes:
        """Decode the payload the way browsers do: whitespace and missing padding are tolerated."""

        payload = normalize_base64(self.image_payload)
        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ImageDecodeError() from exc
        if not data:
            raise ImageDecodeError()
        return data


class InferenceResult(BaseModel):
    description: str

"""Exceptions raised while handling a describe request.

Each exception knows the HTTP status and JSON body it maps to; the
handlers registered in :mod:`app.main` turn them into responses.
"""
from __future__ import annotations

from typing import Any, Optional


class ProxyError(Exception):
    """Base class for errors that end a request with a JSON error body."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


# ---------------------------------------------------------------------------
# Client errors (400)
# ---------------------------------------------------------------------------


class BadRequestError(ProxyError):
    status_code = 400


class InvalidJSONError(BadRequestError):
    def __init__(self) -> None:
        super().__init__("Invalid JSON in request body")


class MissingFieldsError(BadRequestError):
    def __init__(self) -> None:
        super().__init__("Missing image (base64 data URI) or prompt in request body")


class InvalidImageFormatError(BadRequestError):
    def __init__(self) -> None:
        super().__init__(
            "Invalid image format. Must be a base64 Data URI (e.g., data:image/jpeg;base64,...)"
        )


class ImageDecodeError(BadRequestError):
    def __init__(self) -> None:
        super().__init__("Failed to decode base64 image data.")


class InvalidMaxTokensError(BadRequestError):
    def __init__(self) -> None:
        super().__init__("max_tokens must be a positive integer")


# ---------------------------------------------------------------------------
# Downstream errors
# ---------------------------------------------------------------------------


class InferenceAPIError(ProxyError):
    """Raised when the inference backend rejects or fails a call."""

    def __init__(
        self,
        status: int,
        detail: str,
        response_json: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(f"AI model error: {detail}", status_code=status)
        self.detail = detail
        self.response_json = response_json or {}


class InferenceTransportError(ProxyError):
    """Raised when the inference backend could not be reached at all."""

    def __init__(self, error: str) -> None:
        super().__init__("Internal server error while processing request", status_code=500)
        self.error = error

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "error": self.error}


class ProviderConfigurationError(ValueError):
    """Raised at startup when the selected backend is missing credentials."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Literal


class InferenceProvider(ABC):
    """Abstract interface for a multimodal inference backend."""

    name: str = "abstract"

    # Whether ``infer`` expects decoded image bytes or the original data URI.
    image_encoding: Literal["bytes", "data_uri"] = "data_uri"

    @abstractmethod
    async def infer(
        self,
        prompt: str,
        image: bytes | str,
        max_tokens: int,
        *,
        mime_type: str | None = None,
    ) -> dict[str, Any]:
        """Describe *image* according to *prompt*.

        Returns
        -------
        dict[str, Any]
            JSON body to relay to the caller unchanged.

        Raises
        ------
        app.errors.InferenceAPIError
            The backend answered with an error.
        app.errors.InferenceTransportError
            The backend could not be reached.
        """

    async def close(self) -> None:
        """Release pooled connections. Default is a no-op."""

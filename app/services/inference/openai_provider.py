from __future__ import annotations

import base64
import logging
from typing import Any

from langchain_core.messages import HumanMessage
from langchain_openai import ChatOpenAI

from app.errors import InferenceAPIError, ProviderConfigurationError
from app.models.inference import InferenceResult

from .base import InferenceProvider

logger = logging.getLogger(__name__)


def _message_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class OpenAIProvider(InferenceProvider):
    """SDK-backed provider; authentication is handled by the client library."""

    name = "openai"
    image_encoding = "bytes"

    def __init__(self, *, api_key: str | None, model: str = "gpt-4o-mini", timeout: float = 60.0) -> None:
        if not api_key:
            raise ProviderConfigurationError("OpenAI API key not configured")
        self._model = model
        self._llm = ChatOpenAI(
            model=model,
            api_key=api_key,
            timeout=timeout,
            max_retries=0,
        )

    async def infer(
        self,
        prompt: str,
        image: bytes | str,
        max_tokens: int,
        *,
        mime_type: str | None = None,
    ) -> dict[str, Any]:
        """Send one multimodal user message and wrap the reply as ``description``."""

        if isinstance(image, bytes):
            encoded = base64.b64encode(image).decode("ascii")
            image_url = f"data:{mime_type or 'image/jpeg'};base64,{encoded}"
        else:
            image_url = image

        message = HumanMessage(
            content=[
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image_url}},
            ]
        )
        logger.debug("Invoking %s (max_tokens=%d)", self._model, max_tokens)
        try:
            output = await self._llm.bind(max_tokens=max_tokens).ainvoke([message])
        except Exception as exc:
            detail = getattr(exc, "message", None) or str(exc) or "Unknown error"
            logger.error("OpenAI inference failed: %s", detail)
            raise InferenceAPIError(500, detail) from exc

        return InferenceResult(description=_message_text(output.content)).model_dump()

import base64

from app.services.inference.base import InferenceProvider

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"
PNG_DATA_URI = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


class StubProvider(InferenceProvider):
    """Records calls and returns (or raises) a canned result."""

    name = "stub"

    def __init__(self, result=None, error=None, image_encoding="data_uri"):
        self.result = result if result is not None else {"description": "a cat"}
        self.error = error
        self.image_encoding = image_encoding
        self.calls = []

    async def infer(self, prompt, image, max_tokens, *, mime_type=None):
        self.calls.append(
            {"prompt": prompt, "image": image, "max_tokens": max_tokens, "mime_type": mime_type}
        )
        if self.error is not None:
            raise self.error
        return self.result

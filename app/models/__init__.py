from .inference import InferenceRequest, InferenceResult

__all__ = [
    "InferenceRequest",
    "InferenceResult",
]

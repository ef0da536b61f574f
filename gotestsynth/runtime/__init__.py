"""Runtime captures to assertions, gated by a determinism check."""

from .capture import Capture, CaptureError, Replacement, TypeCorrection, parse_capture
from .decode import Decoder, substitute
from .validate import RunTimeInfo, decode_run, validate

__all__ = [
    "Capture",
    "CaptureError",
    "Decoder",
    "Replacement",
    "RunTimeInfo",
    "TypeCorrection",
    "decode_run",
    "parse_capture",
    "substitute",
    "validate",
]

# =============================================================================
# Runtime Package - Event Classification and Dispatch
# =============================================================================
# Accepts a Lambda payload from any of:
# - SQS (Records[].body)
# - SNS (Records[].Sns.Message)
# - EventBridge / anything else (whole payload as one event)
# and processes each record in order.
# =============================================================================

from src.runtime.envelope import Envelope, EnvelopeKind, ProcessingResult
from src.runtime.errors import DeadlineExceededError, DecodeError, HandlerError, ProcessingError
from src.runtime.parse_event import classify, decode_payload, detect_event_source, parse_event
from src.runtime.dispatch import dispatch
from src.runtime.deps import Deps, create_deps

__all__ = [
    "Envelope",
    "EnvelopeKind",
    "ProcessingResult",
    "HandlerError",
    "DecodeError",
    "ProcessingError",
    "DeadlineExceededError",
    "classify",
    "decode_payload",
    "detect_event_source",
    "parse_event",
    "dispatch",
    "Deps",
    "create_deps",
]

# =============================================================================
# Handler Errors
# =============================================================================
# Every failure is raised to the Lambda runtime, which reports the invocation
# as failed and leaves redelivery to SQS/SNS/EventBridge.
# =============================================================================

from typing import Optional


class HandlerError(Exception):
    """Base class for invocation failures."""


class DecodeError(HandlerError):
    """Payload is not a JSON object."""


class ProcessingError(HandlerError):
    """
    A record failed while being processed.

    Records before ``index`` were already handed to the downstream action;
    their side effects are not undone.
    """

    def __init__(self, kind: str, index: int, cause: Optional[BaseException] = None):
        self.kind = kind
        self.index = index
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to process {kind} record {index}{detail}")


class DeadlineExceededError(HandlerError):
    """Invocation ran out of time before every record was processed."""

    def __init__(self, index: int, remaining_ms: int):
        self.index = index
        self.remaining_ms = remaining_ms
        super().__init__(
            f"Deadline reached before record {index} (remaining {remaining_ms} ms)"
        )

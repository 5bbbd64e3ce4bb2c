# =============================================================================
# Message Event Handler
# =============================================================================
# Entry point for SQS, SNS and EventBridge invocations.
# Classifies the payload, processes every record and reports the count.
# =============================================================================

import logging
from typing import Any

from src.runtime.deps import Deps, create_deps
from src.runtime.dispatch import dispatch
from src.runtime.envelope import ProcessingResult
from src.runtime.parse_event import RawPayload, parse_event

logger = logging.getLogger(__name__)


def handle(raw: RawPayload, deps: Deps = None, context: Any = None) -> ProcessingResult:
    """
    Classify a payload and process its records.

    Raises:
        DecodeError: bytes payload that is not valid JSON
        ProcessingError: a record failed; processing stopped there
        DeadlineExceededError: the invocation ran out of time
    """
    if deps is None:
        deps = create_deps()

    envelope = parse_event(raw, deps.config["EMPTY_BATCH_POLICY"])
    return dispatch(envelope, deps, context)


def event_handler(event: RawPayload, context: Any, deps: Deps = None) -> str:
    """
    Lambda entry point.

    Args:
        event: SQS batch, SNS batch or any other decoded JSON value
        context: Lambda context
        deps: Process-wide dependency container

    Returns:
        "Processed <N> messages"
    """
    request_id = getattr(context, "aws_request_id", "") if context is not None else ""
    logger.info(f"EVENT_HANDLER request_id={request_id}")

    try:
        result = handle(event, deps, context)
    except Exception as e:
        logger.exception(f"Invocation failed: {e}")
        raise

    logger.info(result.message)
    return result.message

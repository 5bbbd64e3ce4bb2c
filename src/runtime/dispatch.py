# =============================================================================
# Record Dispatcher
# =============================================================================
# Routes each record of a classified Envelope to the processor registered
# for its kind. Records are processed one at a time, in payload order, and
# the first failure aborts the invocation.
# =============================================================================

import logging
from typing import Any, Callable, Dict, Optional

from src.runtime.deps import Deps, create_deps
from src.runtime.envelope import (
    Envelope,
    EnvelopeKind,
    GenericRecord,
    ProcessingResult,
    PubSubRecord,
    QueueRecord,
    SOURCE_LABELS,
)
from src.runtime.errors import DeadlineExceededError, ProcessingError

logger = logging.getLogger(__name__)

# Type definitions
ProcessorFunc = Callable[[Any, Deps], None]

# =============================================================================
# PROCESSOR REGISTRY
# =============================================================================
_PROCESSORS: Dict[EnvelopeKind, ProcessorFunc] = {}


def processor(kind: EnvelopeKind):
    """
    Decorator to register the record processor for an envelope kind.

    Usage:
        @processor(EnvelopeKind.QUEUE_BATCH)
        def process_queue_record(record: QueueRecord, deps: Deps) -> None:
            ...
    """
    def decorator(func: ProcessorFunc) -> ProcessorFunc:
        _PROCESSORS[kind] = func
        return func
    return decorator


def get_processor(kind: EnvelopeKind) -> Optional[ProcessorFunc]:
    """Get processor for an envelope kind."""
    return _PROCESSORS.get(kind)


# =============================================================================
# PROCESSORS
# =============================================================================

@processor(EnvelopeKind.QUEUE_BATCH)
def process_queue_record(record: QueueRecord, deps: Deps) -> None:
    """Process one SQS message."""
    logger.info(f"Received SQS message: {record.content}")
    deps.action(SOURCE_LABELS[EnvelopeKind.QUEUE_BATCH], record.content)


@processor(EnvelopeKind.PUBSUB_BATCH)
def process_pubsub_record(record: PubSubRecord, deps: Deps) -> None:
    """Process one SNS notification."""
    logger.info(f"Received SNS message: {record.content}")
    deps.action(SOURCE_LABELS[EnvelopeKind.PUBSUB_BATCH], record.content)


@processor(EnvelopeKind.GENERIC_EVENT)
def process_generic_record(record: GenericRecord, deps: Deps) -> None:
    """Process a whole EventBridge (or unrecognized) event."""
    content = record.content
    logger.info(f"Received EventBridge event: {content}")
    deps.action(SOURCE_LABELS[EnvelopeKind.GENERIC_EVENT], content)


# =============================================================================
# DISPATCH
# =============================================================================

def _check_deadline(context: Any, index: int, guard_ms: int) -> None:
    """Refuse to start a record when the Lambda has no time left for it."""
    get_remaining = getattr(context, "get_remaining_time_in_millis", None)
    if get_remaining is None:
        return
    remaining = get_remaining()
    if remaining <= guard_ms:
        raise DeadlineExceededError(index, remaining)


def dispatch(envelope: Envelope, deps: Deps = None, context: Any = None) -> ProcessingResult:
    """
    Process every record of an envelope.

    Args:
        envelope: Classified payload
        deps: Dependency container (a fresh one is created if not provided)
        context: Lambda context, used for the deadline check

    Returns:
        ProcessingResult with the number of records processed

    Raises:
        ProcessingError: a processor failed; earlier records are not rolled back
        DeadlineExceededError: no time left before a record was started
    """
    if deps is None:
        deps = create_deps()

    handle_record = get_processor(envelope.kind)
    guard_ms = deps.config["DEADLINE_GUARD_MS"]

    logger.info(f"Dispatching kind={envelope.kind.value} records={len(envelope)}")

    processed = 0
    for index, record in enumerate(envelope.records):
        _check_deadline(context, index, guard_ms)
        try:
            handle_record(record, deps)
        except Exception as e:
            logger.error(
                f"Processor error kind={envelope.kind.value} index={index} "
                f"after {processed} processed: {e}"
            )
            raise ProcessingError(envelope.kind.value, index, e) from e
        processed += 1

    return ProcessingResult(processed_count=processed, kind=envelope.kind)

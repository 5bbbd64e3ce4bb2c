# =============================================================================
# Event Parser - Classify and Extract Lambda Events
# =============================================================================
# Decides which wire shape a payload has and pulls its records out.
# Shapes are tried in a fixed priority order, first match wins:
#   1. SQS batch          Records[].body
#   2. SNS batch          Records[].Sns.Message
#   3. Generic event      the whole payload (EventBridge or anything else)
# The generic branch is a catch-all, so classification never fails once the
# payload has been decoded (any JSON value is accepted).
# =============================================================================

import json
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from src.runtime.envelope import (
    Envelope,
    EnvelopeKind,
    GenericRecord,
    PubSubRecord,
    QueueRecord,
)
from src.runtime.errors import DecodeError

logger = logging.getLogger(__name__)

# Lambda hands over already-decoded JSON (any value); bytes are undecoded wire text
RawPayload = Union[Dict[str, Any], List[Any], str, int, float, bool, None, bytes, bytearray]


class EmptyBatchPolicy:
    """What to do with a payload whose Records list is empty."""
    GENERIC = "generic"    # fall through to a single generic event
    NOOP = "noop"          # zero records, nothing processed

    ALL = (GENERIC, NOOP)


# =============================================================================
# DECODING
# =============================================================================

def decode_payload(raw: Union[bytes, bytearray, str]) -> Any:
    """
    Parse undecoded JSON text (CLI input, raw wire bytes).

    Any well-formed JSON value is returned as-is; classification decides what
    it is. Only text that does not parse raises DecodeError.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Payload is not valid UTF-8: {e}") from e

    try:
        return json.loads(raw)
    except (ValueError, RecursionError) as e:
        raise DecodeError(f"Payload is not valid JSON: {e}") from e


def _get_field(obj: Dict[str, Any], key: str) -> Any:
    """Exact key first, then case-insensitive match (``Body`` binds ``body``)."""
    if key in obj:
        return obj[key]
    lowered = key.lower()
    for k, v in obj.items():
        if isinstance(k, str) and k.lower() == lowered:
            return v
    return None


def _batch_records(event: Any) -> Optional[List[Any]]:
    """Return the Records list, or None when the payload has no such list."""
    if not isinstance(event, dict):
        return None
    records = _get_field(event, "Records")
    if isinstance(records, list):
        return records
    return None


def _is_queue_record(record: Any) -> bool:
    return isinstance(record, dict) and isinstance(_get_field(record, "body"), str)


def _sns_object(record: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(record, dict):
        return None
    sns = _get_field(record, "Sns")
    return sns if isinstance(sns, dict) else None


def _is_pubsub_record(record: Any) -> bool:
    sns = _sns_object(record)
    return sns is not None and isinstance(_get_field(sns, "Message"), str)


# =============================================================================
# SHAPE DETECTION
# =============================================================================

def is_queue_batch(event: Any) -> bool:
    """Non-empty Records list where every record carries a string body."""
    records = _batch_records(event)
    return bool(records) and all(_is_queue_record(r) for r in records)


def is_pubsub_batch(event: Any) -> bool:
    """Non-empty Records list where every record carries Sns.Message."""
    records = _batch_records(event)
    return bool(records) and all(_is_pubsub_record(r) for r in records)


def detect_event_source(event: Any) -> EnvelopeKind:
    """
    Detect which wire shape a decoded payload has.

    Returns one of: queue_batch, pubsub_batch, generic_event
    """
    if is_queue_batch(event):
        return EnvelopeKind.QUEUE_BATCH
    logger.debug("Payload is not an SQS batch")

    if is_pubsub_batch(event):
        return EnvelopeKind.PUBSUB_BATCH
    logger.debug("Payload is not an SNS batch")

    return EnvelopeKind.GENERIC_EVENT


# =============================================================================
# EXTRACTORS
# =============================================================================

def extract_queue_records(event: Dict[str, Any]) -> Tuple[QueueRecord, ...]:
    """Pull SQS messages out of a queue batch, in payload order."""
    records = []
    for record in _batch_records(event) or []:
        attributes = _get_field(record, "attributes")
        records.append(QueueRecord(
            body=_get_field(record, "body"),
            message_id=_get_field(record, "messageId") or "",
            event_source_arn=_get_field(record, "eventSourceARN") or "",
            attributes=attributes if isinstance(attributes, dict) else {},
        ))
    return tuple(records)


def extract_pubsub_records(event: Dict[str, Any]) -> Tuple[PubSubRecord, ...]:
    """Pull SNS notifications out of a topic batch, in payload order."""
    records = []
    for record in _batch_records(event) or []:
        sns = _sns_object(record)
        records.append(PubSubRecord(
            message=_get_field(sns, "Message"),
            message_id=_get_field(sns, "MessageId") or "",
            topic_arn=_get_field(sns, "TopicArn") or "",
            subject=_get_field(sns, "Subject") or "",
            timestamp=_get_field(sns, "Timestamp") or "",
        ))
    return tuple(records)


def extract_generic_record(event: Any) -> GenericRecord:
    """Wrap the whole payload as one event, whatever JSON value it is."""
    if not isinstance(event, dict):
        return GenericRecord(raw=event)
    return GenericRecord(
        raw=event,
        detail_type=str(event.get("detail-type") or ""),
        source=str(event.get("source") or ""),
        event_id=str(event.get("id") or ""),
    )


# =============================================================================
# CLASSIFICATION
# =============================================================================

def classify(event: Any, empty_batch_policy: str = EmptyBatchPolicy.GENERIC) -> Envelope:
    """
    Classify a decoded payload and extract its records.

    Selection is final: once a batch shape matches with at least one record,
    the other shapes are not considered. Any JSON value is accepted; anything
    that is not a batch is one generic event.
    """
    kind = detect_event_source(event)

    if kind == EnvelopeKind.QUEUE_BATCH:
        return Envelope.queue_batch(extract_queue_records(event), raw_event=event)

    if kind == EnvelopeKind.PUBSUB_BATCH:
        return Envelope.pubsub_batch(extract_pubsub_records(event), raw_event=event)

    if empty_batch_policy == EmptyBatchPolicy.NOOP and _batch_records(event) == []:
        logger.info("Empty Records list, nothing to process")
        return Envelope.generic_event(None, raw_event=event)

    return Envelope.generic_event(extract_generic_record(event), raw_event=event)


def parse_event(raw: RawPayload, empty_batch_policy: str = EmptyBatchPolicy.GENERIC) -> Envelope:
    """
    Classify a Lambda payload.

    Bytes are undecoded JSON and are parsed first. Every other value is taken
    as already decoded: a ``str`` is a JSON string event, not JSON text.

    Raises:
        DecodeError: bytes that are not valid JSON. Nothing is classified.
    """
    event = decode_payload(raw) if isinstance(raw, (bytes, bytearray)) else raw
    envelope = classify(event, empty_batch_policy)
    logger.info(f"Detected event source: {envelope.to_dict()}")
    return envelope

# =============================================================================
# Envelope - Classified Event Container
# =============================================================================
# Every inbound payload is classified into exactly one Envelope kind
# (SQS batch, SNS batch or generic EventBridge event) carrying the ordered
# records extracted from it.
# =============================================================================

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class EnvelopeKind(str, Enum):
    """Wire shapes the handler accepts, in classification priority order."""
    QUEUE_BATCH = "queue_batch"        # SQS Records[].body
    PUBSUB_BATCH = "pubsub_batch"      # SNS Records[].Sns.Message
    GENERIC_EVENT = "generic_event"    # EventBridge / anything else


# Human-readable source labels used in log lines and downstream actions
SOURCE_LABELS = {
    EnvelopeKind.QUEUE_BATCH: "SQS",
    EnvelopeKind.PUBSUB_BATCH: "SNS",
    EnvelopeKind.GENERIC_EVENT: "EventBridge",
}


@dataclass(frozen=True)
class QueueRecord:
    """One SQS message from a queue batch."""
    body: str
    message_id: str = ""
    event_source_arn: str = ""
    attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def content(self) -> str:
        return self.body


@dataclass(frozen=True)
class PubSubRecord:
    """One SNS notification from a topic batch."""
    message: str
    message_id: str = ""
    topic_arn: str = ""
    subject: str = ""
    timestamp: str = ""

    @property
    def content(self) -> str:
        return self.message


@dataclass(frozen=True)
class GenericRecord:
    """
    The whole payload treated as a single event.

    Attributes:
        raw: The payload exactly as received (any JSON value)
        detail_type: EventBridge ``detail-type`` when present
        source: EventBridge ``source`` when present
        event_id: EventBridge ``id`` when present
    """
    raw: Any
    detail_type: str = ""
    source: str = ""
    event_id: str = ""

    @property
    def content(self) -> str:
        return json.dumps(self.raw, ensure_ascii=False, default=str)


Record = Union[QueueRecord, PubSubRecord, GenericRecord]


@dataclass(frozen=True)
class Envelope:
    """
    Classified payload.

    Attributes:
        kind: Which wire shape matched
        records: Records in payload order
        raw_event: Original decoded payload for debugging
    """
    kind: EnvelopeKind
    records: Tuple[Record, ...]
    raw_event: Any = field(default_factory=dict, repr=False)

    @property
    def source_label(self) -> str:
        return SOURCE_LABELS[self.kind]

    def __len__(self) -> int:
        return len(self.records)

    def to_dict(self) -> Dict[str, Any]:
        """Convert envelope to dictionary (for logging)."""
        return {
            "kind": self.kind.value,
            "source": self.source_label,
            "recordCount": len(self.records),
        }

    @classmethod
    def queue_batch(cls, records: Tuple[QueueRecord, ...], raw_event: Dict[str, Any]) -> "Envelope":
        return cls(kind=EnvelopeKind.QUEUE_BATCH, records=tuple(records), raw_event=raw_event)

    @classmethod
    def pubsub_batch(cls, records: Tuple[PubSubRecord, ...], raw_event: Dict[str, Any]) -> "Envelope":
        return cls(kind=EnvelopeKind.PUBSUB_BATCH, records=tuple(records), raw_event=raw_event)

    @classmethod
    def generic_event(cls, record: Optional[GenericRecord], raw_event: Any) -> "Envelope":
        """Create a generic envelope; ``record=None`` yields the empty no-op envelope."""
        records = (record,) if record is not None else ()
        return cls(kind=EnvelopeKind.GENERIC_EVENT, records=records, raw_event=raw_event)


@dataclass(frozen=True)
class ProcessingResult:
    """Outcome of one invocation."""
    processed_count: int
    kind: EnvelopeKind

    @property
    def message(self) -> str:
        return f"Processed {self.processed_count} messages"

    def __str__(self) -> str:
        return self.message

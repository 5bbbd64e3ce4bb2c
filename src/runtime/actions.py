# =============================================================================
# Downstream Actions
# =============================================================================
# The side effect performed once per record. Processors call an action with
# the source label ("SQS", "SNS", "EventBridge") and the record content.
# An action either returns or raises; a raise fails the whole invocation.
# =============================================================================

import logging
from typing import Any, Callable

from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

# (source_label, content) -> None
Action = Callable[[str, str], None]


class HelloWorldAction:
    """Placeholder action: announces which source the record came from."""

    def __call__(self, source: str, content: str) -> None:
        logger.info(f"Hello World from {source}")


class SqsForwardAction:
    """Forward each record's content to another SQS queue."""

    def __init__(self, sqs_client: Any, queue_url: str):
        self.sqs = sqs_client
        self.queue_url = queue_url

    def __call__(self, source: str, content: str) -> None:
        try:
            response = self.sqs.send_message(
                QueueUrl=self.queue_url,
                MessageBody=content,
                MessageAttributes={
                    "source": {"DataType": "String", "StringValue": source},
                },
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to forward {source} message to {self.queue_url}: {e}")
            raise
        logger.info(f"Forwarded {source} message: {response.get('MessageId', '')}")


def build_action(deps: Any) -> Action:
    """Pick the configured action: SQS forwarding if FORWARD_QUEUE_URL is set."""
    queue_url = deps.config["FORWARD_QUEUE_URL"]
    if queue_url:
        return SqsForwardAction(deps.sqs, queue_url)
    return HelloWorldAction()

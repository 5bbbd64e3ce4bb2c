# =============================================================================
# Dependency Injection Container
# =============================================================================
# Holds the AWS client and configuration the handler needs.
# One instance lives for the whole Lambda process (see app.py); clients are
# created on first access and reused across invocations.
# =============================================================================

import logging
import os
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, Optional

import boto3

from src.runtime.actions import Action, build_action
from src.runtime.parse_event import EmptyBatchPolicy

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"


@dataclass
class Deps:
    """
    Dependency injection container for the handler.

    Usage:
        deps = create_deps()
        deps.action("SQS", "hello")     # configured downstream action
        deps.config["EMPTY_BATCH_POLICY"]

    Attributes:
        region: AWS region for clients
        downstream: Explicit downstream action; overrides the configured one
    """
    region: str = field(default_factory=lambda: os.environ.get("AWS_REGION", DEFAULT_REGION))
    downstream: Optional[Action] = field(default=None, repr=False)

    # ==========================================================================
    # AWS Clients (lazy-loaded)
    # ==========================================================================

    @cached_property
    def sqs(self):
        """SQS client."""
        logger.info(f"Creating SQS client region={self.region}")
        return boto3.client("sqs", region_name=self.region)

    # ==========================================================================
    # Configuration
    # ==========================================================================

    @cached_property
    def config(self) -> Dict[str, Any]:
        """Environment configuration."""
        policy = os.environ.get("EMPTY_BATCH_POLICY", EmptyBatchPolicy.GENERIC).strip().lower()
        if policy not in EmptyBatchPolicy.ALL:
            raise ValueError(
                f"EMPTY_BATCH_POLICY must be one of {', '.join(EmptyBatchPolicy.ALL)}, got {policy!r}"
            )
        return {
            "EMPTY_BATCH_POLICY": policy,
            "FORWARD_QUEUE_URL": os.environ.get("FORWARD_QUEUE_URL", "").strip(),
            "DEADLINE_GUARD_MS": int(os.environ.get("DEADLINE_GUARD_MS", "0")),
        }

    @cached_property
    def action(self) -> Action:
        """Downstream action invoked once per record."""
        if self.downstream is not None:
            return self.downstream
        return build_action(self)


def create_deps(region: str = None, downstream: Optional[Action] = None) -> Deps:
    """Create a new Deps instance."""
    return Deps(
        region=region or os.environ.get("AWS_REGION", DEFAULT_REGION),
        downstream=downstream,
    )

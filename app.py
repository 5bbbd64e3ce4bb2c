import logging
import os
from typing import Any, Dict

from src.app.event_handler import event_handler
from src.runtime.deps import create_deps

# ---------- Logger ----------
logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())

# =============================================================================
# PROCESS-WIDE DEPENDENCIES
# =============================================================================
# Built once per Lambda process and reused by every invocation.
# AWS clients inside are created on first access, so the module can be
# imported without AWS credentials.
# =============================================================================
DEPS = create_deps()


def lambda_handler(event: Dict[str, Any], context: Any) -> str:
    return event_handler(event, context, DEPS)

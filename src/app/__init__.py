# =============================================================================
# Application Entry Points
# =============================================================================
# Thin adapter that parses the Lambda event and calls the dispatcher.
# =============================================================================

from src.app.event_handler import event_handler, handle

__all__ = [
    "event_handler",
    "handle",
]

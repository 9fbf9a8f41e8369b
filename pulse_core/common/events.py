# pulse_core/common/events.py
"""
In-process publish/subscribe between apps.

Payloads are plain dicts of ids so the publishing app never imports the
subscribing one. Handlers run synchronously, inside the publisher's
transaction, and their exceptions reach the publisher.
"""
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Payload = Dict[str, Any]
Handler = Callable[[Payload], None]

_handlers: Dict[str, List[Handler]] = defaultdict(list)


def subscribe(topic: str):
    """
    Register the decorated function for `topic`:

        @subscribe("ledger.feedback_flagged")
        def on_feedback_flagged(payload): ...

    Registering the same function twice is a no-op (AppConfig.ready may run
    more than once under some test runners).
    """
    def register(fn: Handler) -> Handler:
        if fn not in _handlers[topic]:
            _handlers[topic].append(fn)
        return fn
    return register


def publish(topic: str, payload: Payload) -> int:
    """Call every handler of `topic` in registration order; returns how many ran."""
    handlers = list(_handlers.get(topic, ()))
    logger.debug("Publishing %s to %d handler(s)", topic, len(handlers))
    for handler in handlers:
        handler(payload)
    return len(handlers)

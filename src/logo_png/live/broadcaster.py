"""Broadcaster — fan one PNG frame out to every live subscriber."""

import structlog

from logo_png.live.registry import SendError, Subscriber, SubscriberRegistry

logger = structlog.get_logger()


class Broadcaster:
    """Queue a payload on every registered outbox without blocking.

    A failing subscriber is logged and skipped; delivery to the rest always
    continues. Removal is left to the subscriber's own connection handler.
    """

    def __init__(self, registry: SubscriberRegistry):
        self.registry = registry

    def broadcast(self, payload: bytes) -> int:
        """Returns the number of subscribers the payload was queued for."""
        delivered = 0

        def _deliver(subscriber: Subscriber) -> None:
            nonlocal delivered
            try:
                subscriber.outbox.send_nowait(payload)
            except SendError as e:
                logger.warning(
                    "live.send_failed",
                    subscriber_id=subscriber.id,
                    error=str(e),
                )
                return
            except Exception:
                logger.exception("live.send_error", subscriber_id=subscriber.id)
                return
            delivered += 1

        self.registry.for_each(_deliver)
        logger.debug("live.broadcast", bytes=len(payload), delivered=delivered)
        return delivered

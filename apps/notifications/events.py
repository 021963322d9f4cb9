"""
Real-time event bus.

Events are pushed to connected user sessions through a Django signal.
A websocket layer (or anything else) subscribes with
``user_event.connect(receiver)``; nothing is persisted here, so a user
who is not connected simply misses the event.
"""

import logging

from django.dispatch import Signal

logger = logging.getLogger(__name__)

# Sent with: user_id, event, payload
user_event = Signal()


class EventBus:
    """Fire-and-forget publisher for per-user live events."""

    def __init__(self, signal=None):
        self.signal = signal or user_event

    def emit_to_user(self, user_id, event_name, payload):
        """
        Push ``event_name`` to ``user_id``.

        Receiver failures are logged and never raised to the caller.
        Returns the number of receivers that handled the event.
        """
        responses = self.signal.send_robust(
            sender=self.__class__,
            user_id=user_id,
            event=event_name,
            payload=payload,
        )
        delivered = 0
        for receiver, response in responses:
            if isinstance(response, Exception):
                logger.warning(
                    'Event %s to user %s failed in %r: %s',
                    event_name, user_id, receiver, response,
                )
            else:
                delivered += 1
        return delivered

"""
backend/carservice/services/events.py

Event emitter: pushes booking events to a Redis queue for the mailer and
notification consumers.

Queue:
- events:bookings: booking_created / booking_cancelled / booking_status_changed
"""

import json
import time
import logging

from ..config import settings
from ..redis_client import redis_client

logger = logging.getLogger(__name__)

BOOKING_EVENTS_QUEUE = "events:bookings"


def emit_event(event_type: str, payload: dict) -> None:
    """
    Emit a booking event.

    Called after the transaction commits. A failed push is logged and
    dropped; the booking itself is already persisted.
    """
    if not settings.events_enabled:
        return

    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis_client.rpush(BOOKING_EVENTS_QUEUE, json.dumps(event, default=str))
        logger.info(f"Event emitted: {event_type} → {BOOKING_EVENTS_QUEUE}")
    except Exception as e:
        logger.error(f"Failed to emit event {event_type}: {e}")

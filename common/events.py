"""Best-effort publishing of domain events to RabbitMQ."""
from __future__ import annotations

import json
import logging
from datetime import date, datetime
from typing import Any

import pika
from pika.exceptions import AMQPError

from .config import get_settings

logger = logging.getLogger(__name__)


def _default(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def publish_event(event: str, **payload: Any) -> bool:
    """Send ``event`` to the events queue.

    Returns False when publishing is disabled or the broker is unreachable;
    a failed publish never fails the request that triggered it.
    """

    settings = get_settings()
    if not settings.event_broker_enabled:
        return False

    message = {"event": event, **payload}
    try:
        connection = pika.BlockingConnection(pika.ConnectionParameters(host=settings.rabbitmq_host))
        try:
            channel = connection.channel()
            channel.queue_declare(queue=settings.events_queue, durable=True)
            channel.basic_publish(
                exchange="",
                routing_key=settings.events_queue,
                body=json.dumps(message, default=_default),
                properties=pika.BasicProperties(delivery_mode=2),
            )
        finally:
            connection.close()
    except AMQPError as exc:
        logger.error("Failed to publish %s event: %s", event, exc)
        return False
    logger.info("Published %s event", event)
    return True

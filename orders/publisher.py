# orders/publisher.py
"""Relay of order events to a RabbitMQ topic exchange for external consumers."""
import json
import logging

import pika
from django.conf import settings

logger = logging.getLogger(__name__)

ORDER_UPDATED_KEY = "order.updated"


def _connection_parameters() -> pika.ConnectionParameters:
    """Connection parameters with short timeouts and a single attempt,
    so a down or distant broker never holds the request for long."""
    return pika.ConnectionParameters(
        host=settings.RABBIT_HOST,
        port=settings.RABBIT_PORT,
        virtual_host=settings.RABBIT_VHOST,
        credentials=pika.PlainCredentials(settings.RABBIT_USER, settings.RABBIT_PASS),
        heartbeat=30,
        blocked_connection_timeout=5,
        socket_timeout=5,
        connection_attempts=1,
    )


def _publish(routing_key: str, payload: dict) -> bool:
    """Publish without breaking the request if the broker fails. Returns True on success."""
    if not settings.RABBIT_HOST:
        logger.debug("RABBIT_HOST not set; %s relay skipped", routing_key)
        return False
    conn = None
    try:
        conn = pika.BlockingConnection(_connection_parameters())
        ch = conn.channel()
        ch.exchange_declare(exchange=settings.RABBIT_EXCHANGE, exchange_type="topic", durable=True)
        ch.basic_publish(
            exchange=settings.RABBIT_EXCHANGE,
            routing_key=routing_key,
            body=json.dumps(payload).encode("utf-8"),
            properties=pika.BasicProperties(
                content_type="application/json",
                delivery_mode=2,  # persistent if the queue is durable
            ),
        )
        return True
    except Exception:
        # the order is already saved; a broker problem must not fail the request
        logger.exception("Failed to relay %s", routing_key)
        return False
    finally:
        if conn is not None and conn.is_open:
            conn.close()


def publish_order_updated(order: dict) -> bool:
    return _publish(ORDER_UPDATED_KEY, order)

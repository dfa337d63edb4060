# scripts/consumer.py
"""Tail the order events relayed to RabbitMQ. Ctrl+C to stop."""
import json
import logging
import os

import pika

RABBIT_HOST   = os.getenv("RABBIT_HOST", "127.0.0.1")
RABBIT_PORT   = int(os.getenv("RABBIT_PORT", "5672"))
RABBIT_USER   = os.getenv("RABBIT_USER", "guest")
RABBIT_PASS   = os.getenv("RABBIT_PASS", "guest")
RABBIT_VHOST  = os.getenv("RABBIT_VHOST", "/")
EXCHANGE      = os.getenv("RABBIT_EXCHANGE", "order_events")

BIND_KEYS = ["order.updated"]

logger = logging.getLogger("consumer")


def describe(routing_key: str, body: bytes) -> str:
    """One log line per event; bodies that are not order JSON are shown raw."""
    text = body.decode("utf-8", errors="replace")
    try:
        order = json.loads(text)
        return f"{routing_key} {order['id']} {order['status']} {order['title']!r} @ {order['updatedAtUtc']}"
    except (ValueError, KeyError, TypeError):
        return f"{routing_key} {text}"


def on_message(channel, method, properties, body):
    logger.info(describe(method.routing_key, body))
    channel.basic_ack(delivery_tag=method.delivery_tag)


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    params = pika.ConnectionParameters(
        host=RABBIT_HOST, port=RABBIT_PORT, virtual_host=RABBIT_VHOST,
        credentials=pika.PlainCredentials(RABBIT_USER, RABBIT_PASS),
        heartbeat=30, blocked_connection_timeout=10,
    )
    conn = pika.BlockingConnection(params)
    ch = conn.channel()
    ch.exchange_declare(exchange=EXCHANGE, exchange_type="topic", durable=True)

    # exclusive auto-delete queue, only for inspection
    qname = ch.queue_declare(queue="", exclusive=True, auto_delete=True).method.queue
    for key in BIND_KEYS:
        ch.queue_bind(exchange=EXCHANGE, queue=qname, routing_key=key)

    logger.info("Listening for %s on %s (queue %s)", BIND_KEYS, EXCHANGE, qname)
    ch.basic_consume(queue=qname, on_message_callback=on_message, auto_ack=False)
    try:
        ch.start_consuming()
    except KeyboardInterrupt:
        logger.info("Closing")
        ch.stop_consuming()
    finally:
        conn.close()


if __name__ == "__main__":
    main()

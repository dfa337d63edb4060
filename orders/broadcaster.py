import logging
import threading
from typing import Callable, Optional

from asgiref.sync import async_to_sync
from channels.exceptions import ChannelFull
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)

# Channels dispatches "order.updated" to the consumer's order_updated() handler
ORDER_UPDATED = "order.updated"


class OrderBroadcaster:
    """
    Fan-out of order snapshots to every connected subscriber.

    Subscribers are channel-layer channel names registered by the WebSocket
    consumer. Delivery is best effort: a full or broken subscriber is logged
    and skipped. There is no backlog, a new subscriber only sees events
    published after it joined.
    """

    def __init__(self, channel_layer=None, relay: Optional[Callable[[dict], object]] = None):
        self._channel_layer = channel_layer
        self._relay = relay
        self._lock = threading.Lock()
        self._subscribers = set()

    @property
    def channel_layer(self):
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer()
        return self._channel_layer

    def add(self, channel_name: str) -> None:
        with self._lock:
            self._subscribers.add(channel_name)
        logger.debug("Subscriber %s joined", channel_name)

    def remove(self, channel_name: str) -> None:
        with self._lock:
            self._subscribers.discard(channel_name)
        logger.debug("Subscriber %s left", channel_name)

    def subscribers(self) -> frozenset:
        with self._lock:
            return frozenset(self._subscribers)

    def publish(self, order: dict) -> int:
        """Send the snapshot to all current subscribers; returns how many accepted it."""
        message = {"type": ORDER_UPDATED, "order": order}
        send = async_to_sync(self.channel_layer.send)
        delivered = 0
        for channel_name in self.subscribers():
            try:
                send(channel_name, message)
            except ChannelFull:
                logger.warning("Subscriber %s is full; dropped update for order %s", channel_name, order.get("id"))
                continue
            except Exception:
                logger.exception("Failed to deliver update for order %s to %s", order.get("id"), channel_name)
                continue
            delivered += 1

        if self._relay is not None:
            self._relay(order)
        return delivered

import asyncio

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.apps import apps

from orders.auth import WebhookAuthenticator, WebhookConfig

WEBHOOK_SECRET = "test-secret"


class RecordingBroadcaster:
    """Stands in for OrderBroadcaster and keeps every published snapshot."""

    def __init__(self):
        self.published = []

    def publish(self, order):
        self.published.append(order)
        return 1


@pytest.fixture
def orders_app():
    return apps.get_app_config("orders")


@pytest.fixture(autouse=True)
def webhook_secret(monkeypatch):
    """Every test runs against a server configured with WEBHOOK_SECRET."""
    service = apps.get_app_config("orders").service
    monkeypatch.setattr(service, "authenticator", WebhookAuthenticator(WebhookConfig(secret=WEBHOOK_SECRET)))
    return WEBHOOK_SECRET


@pytest.fixture(autouse=True)
def no_relay(settings):
    """Keep tests off any RabbitMQ the environment may point at."""
    settings.RABBIT_HOST = None


@pytest.fixture
def recording_broadcaster():
    return RecordingBroadcaster()


@pytest.fixture
def subscriber(orders_app):
    """A channel registered with the app broadcaster, as a connected client would be."""
    layer = get_channel_layer()
    channel_name = async_to_sync(layer.new_channel)()
    orders_app.broadcaster.add(channel_name)
    yield channel_name
    orders_app.broadcaster.remove(channel_name)


@pytest.fixture
def drain():
    """Return a function reading every message currently queued for a channel."""

    def _drain(channel_name, layer=None):
        layer = layer or get_channel_layer()

        async def _read():
            messages = []
            while True:
                try:
                    messages.append(await asyncio.wait_for(layer.receive(channel_name), timeout=0.05))
                except asyncio.TimeoutError:
                    return messages

        return async_to_sync(_read)()

    return _drain

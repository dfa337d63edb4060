from django.apps import AppConfig
from django.conf import settings


class OrdersConfig(AppConfig):
    name = "orders"

    def ready(self):
        from .auth import WebhookAuthenticator, WebhookConfig
        from .broadcaster import OrderBroadcaster
        from .publisher import publish_order_updated
        from .services import OrderService
        from .store import OrderStore

        # one broadcaster per process: it owns the subscriber set
        self.broadcaster = OrderBroadcaster(relay=publish_order_updated)
        self.service = OrderService(
            store=OrderStore(),
            broadcaster=self.broadcaster,
            authenticator=WebhookAuthenticator(WebhookConfig.from_settings(settings)),
        )

from django.apps import apps

from channels.generic.websocket import AsyncJsonWebsocketConsumer


class OrdersConsumer(AsyncJsonWebsocketConsumer):
    """
    Live feed of order updates. Clients get no backlog on connect and
    should fetch the current list over REST after the socket opens.
    """

    async def connect(self):
        _broadcaster().add(self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        _broadcaster().remove(self.channel_name)

    async def order_updated(self, event):
        # event = {"type": "order.updated", "order": {...}}
        await self.send_json({"type": "OrderUpdated", "order": event["order"]})


def _broadcaster():
    return apps.get_app_config("orders").broadcaster

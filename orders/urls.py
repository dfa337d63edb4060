from django.urls import path
from .views import get_order, index, move_to_in_progress, orders_collection, payment_webhook

urlpatterns = [
    path("", index),
    path("api/orders", orders_collection),
    path("api/orders/<uuid:order_id>", get_order),
    path("api/orders/<uuid:order_id>/in-progress", move_to_in_progress),
    path("api/webhooks/payment", payment_webhook),
]

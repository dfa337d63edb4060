import uuid

from django.db import models


class OrderStatus(models.TextChoices):
    NEW = "New", "New"
    IN_PROGRESS = "InProgress", "InProgress"
    PAID = "Paid", "Paid"


class Order(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    price = models.DecimalField(max_digits=18, decimal_places=2)
    status = models.CharField(max_length=16, choices=OrderStatus.choices, default=OrderStatus.NEW)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()
    version = models.IntegerField(default=0)  # optimistic concurrency token, bumped on every status change

    def __str__(self):
        return f"{self.id}:{self.status}:{self.version}"


def serialize_order(order: Order) -> dict:
    """JSON-ready representation shared by the API, the WebSocket feed and the relay."""
    return {
        "id": str(order.id),
        "title": order.title,
        "price": float(order.price),
        "status": str(order.status),
        "createdAtUtc": order.created_at.isoformat(),
        "updatedAtUtc": order.updated_at.isoformat(),
    }

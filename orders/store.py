"""Durable order records on top of the Django ORM."""

from django.db import transaction

from .models import Order


def newest_first(orders):
    """Sort by created_at descending, ties broken by id so repeated reads agree."""
    return sorted(orders, key=lambda o: (o.created_at, o.id.hex), reverse=True)


class OrderStore:
    def insert(self, order: Order) -> Order:
        with transaction.atomic():
            order.save(force_insert=True)
        return order

    def list_all(self) -> list:
        # final ordering is owned here, not by whatever the engine returns
        return newest_first(Order.objects.all())

    def find_by_id(self, order_id, for_update=False):
        qs = Order.objects.filter(pk=order_id)
        if for_update:
            # row lock where the backend supports it (no-op on SQLite)
            qs = qs.select_for_update()
        return qs.first()

    def save(self, order: Order, expected_version: int) -> bool:
        """
        Compare-and-swap the mutable fields. Only succeeds if nobody else bumped
        the version since ``expected_version`` was read.
        """
        updated = Order.objects.filter(pk=order.pk, version=expected_version).update(
            status=order.status,
            updated_at=order.updated_at,
            version=expected_version + 1,
        )
        if updated:
            order.version = expected_version + 1
        return bool(updated)

"""Order use cases: every mutation is persisted, then broadcast, then returned."""

import logging

from django.db import transaction
from django.utils import timezone

from . import workflow
from .errors import ConflictError, NotFound
from .models import OrderStatus, serialize_order

logger = logging.getLogger(__name__)

# Bounded re-evaluation when a concurrent writer bumps the version under us
MAX_CAS_ATTEMPTS = 3


class OrderService:
    def __init__(self, store, broadcaster, authenticator, clock=timezone.now):
        self.store = store
        self.broadcaster = broadcaster
        self.authenticator = authenticator
        self.clock = clock

    def list_orders(self):
        return self.store.list_all()

    def get_order(self, order_id):
        order = self.store.find_by_id(order_id)
        if order is None:
            raise NotFound("Order not found.")
        return order

    def create_order(self, title, price):
        order = workflow.create(title, price, self.clock())
        self.store.insert(order)
        logger.info("Order %s created", order.id)
        self.broadcaster.publish(serialize_order(order))
        return order

    def start_order(self, order_id):
        """New -> InProgress. A lost race reports the status that won."""
        with transaction.atomic():
            order = self._load_for_update(order_id)
            expected_version = order.version
            workflow.move_to_in_progress(order, self.clock())
            if not self.store.save(order, expected_version):
                current = self._load_for_update(order_id)
                raise ConflictError(
                    f"Cannot move to InProgress from {OrderStatus(current.status).label}."
                )
        logger.info("Order %s moved to InProgress", order.id)
        self.broadcaster.publish(serialize_order(order))
        return order

    def mark_paid(self, order_id):
        with transaction.atomic():
            for _ in range(MAX_CAS_ATTEMPTS):
                order = self._load_for_update(order_id)
                expected_version = order.version
                if not workflow.mark_paid(order, self.clock()):
                    logger.info("Order %s already Paid; confirmed again", order.id)
                    break
                if self.store.save(order, expected_version):
                    logger.info("Order %s marked Paid", order.id)
                    break
            else:
                raise ConflictError(f"Order {order_id} kept changing; payment not recorded.")
        # re-confirmations are broadcast as well
        self.broadcaster.publish(serialize_order(order))
        return order

    def _load_for_update(self, order_id):
        order = self.store.find_by_id(order_id, for_update=True)
        if order is None:
            raise NotFound("Order not found.")
        return order

"""Synthetic traffic against the order API.

Worker threads walk orders through their lifecycle over HTTP:
create, move New orders to InProgress, then confirm payment through the
webhook. Knobs:

* HTTP_BASE_URL: base URL of the API, e.g. http://localhost:8000
* WEBHOOK_API_KEY: key sent in X-Webhook-Key (payments are skipped without it)
* HTTP_WORKERS / HTTP_SLEEP: concurrency and pacing
* MAX_LIVE_ORDERS: how many unpaid orders to keep in flight
"""
from __future__ import annotations

import logging
import os
import random
import threading
import time
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

import requests
from urllib.parse import urljoin

HTTP_BASE_URL = os.getenv("HTTP_BASE_URL", "http://localhost:8000")
WEBHOOK_API_KEY = os.getenv("WEBHOOK_API_KEY")
HTTP_WORKERS = int(os.getenv("HTTP_WORKERS", "2"))
HTTP_DELAY = float(os.getenv("HTTP_SLEEP", "0.3"))
MAX_LIVE_ORDERS = int(os.getenv("MAX_LIVE_ORDERS", "20"))

# What the pump does next for an order in a given status
STATUSES_FLOW = {
    "New": ["in-progress", "pay"],
    "InProgress": ["pay"],
    "Paid": [],
}

TITLES = ["Fix sink", "Paint fence", "Mount TV", "Replace faucet", "Patch drywall", "Clean gutters"]

logger = logging.getLogger("pump")

LIVE_LOCK = threading.Lock()


def rand_order() -> Dict:
    price = Decimal(random.randint(1000, 50000)) / 100
    return {"title": random.choice(TITLES), "price": float(price)}


def next_action(status: str, can_pay: bool) -> Optional[str]:
    """Pick the next lifecycle step for an order, or None if it is finished."""
    choices = [a for a in STATUSES_FLOW.get(status, []) if can_pay or a != "pay"]
    return random.choice(choices) if choices else None


def build_request(base_url: str, action: str, order_id: str) -> Tuple[str, Dict]:
    if action == "in-progress":
        return urljoin(base_url, f"/api/orders/{order_id}/in-progress"), {}
    if action == "pay":
        return urljoin(base_url, "/api/webhooks/payment"), {
            "json": {"orderId": order_id},
            "headers": {"X-Webhook-Key": WEBHOOK_API_KEY or ""},
        }
    raise ValueError(f"Unknown action: {action}")


def http_worker(name: str, live_orders: Dict[str, str], stop: threading.Event) -> None:
    session = requests.Session()
    while not stop.is_set():
        with LIVE_LOCK:
            order_ids = list(live_orders.keys())
            room = len(order_ids) < MAX_LIVE_ORDERS

        try:
            if room and (not order_ids or random.random() < 0.4):
                resp = session.post(urljoin(HTTP_BASE_URL, "/api/orders"), json=rand_order(), timeout=5)
                if resp.status_code == 201:
                    order = resp.json()
                    with LIVE_LOCK:
                        live_orders[order["id"]] = order["status"]
                    logger.info("[%s] created %s", name, order["id"])
                continue

            if not order_ids:
                continue
            order_id = random.choice(order_ids)
            with LIVE_LOCK:
                status = live_orders.get(order_id)
            action = next_action(status, can_pay=bool(WEBHOOK_API_KEY)) if status else None
            if action is None:
                with LIVE_LOCK:
                    live_orders.pop(order_id, None)
                continue

            url, kwargs = build_request(HTTP_BASE_URL, action, order_id)
            resp = session.post(url, timeout=5, **kwargs)
            if resp.status_code == 200:
                new_status = resp.json()["status"]
                with LIVE_LOCK:
                    if new_status == "Paid":
                        live_orders.pop(order_id, None)
                    elif order_id in live_orders:
                        live_orders[order_id] = new_status
                logger.info("[%s] %s %s -> %s", name, action, order_id, new_status)
            else:
                # 409 is expected when another worker won the race
                logger.info("[%s] %s %s -> HTTP %s", name, action, order_id, resp.status_code)
        except requests.RequestException as exc:
            logger.warning("[%s] error calling %s: %s", name, HTTP_BASE_URL, exc)
        finally:
            time.sleep(HTTP_DELAY)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    live_orders: Dict[str, str] = {}
    stop_http = threading.Event()
    http_threads: List[threading.Thread] = []

    for idx in range(HTTP_WORKERS):
        thread = threading.Thread(
            target=http_worker,
            name=f"http-{idx}",
            args=(f"w{idx}", live_orders, stop_http),
            daemon=True,
        )
        thread.start()
        http_threads.append(thread)
    logger.info("%d HTTP workers active against %s. Ctrl+C to stop.", HTTP_WORKERS, HTTP_BASE_URL)
    if not WEBHOOK_API_KEY:
        logger.info("WEBHOOK_API_KEY not set; payments will not be confirmed")

    try:
        while True:
            time.sleep(0.5)
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    finally:
        stop_http.set()
        for thread in http_threads:
            thread.join(timeout=1.0)


if __name__ == "__main__":
    main()

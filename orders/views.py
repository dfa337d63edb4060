from django.apps import apps
from django.http import JsonResponse
from django.shortcuts import render
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .auth import header_values
from .errors import OrderError
from .models import serialize_order
from .validators import parse_json_body, parse_order_id


def _json(data, status=200):
    return JsonResponse(data, status=status, safe=False, json_dumps_params={"ensure_ascii": False})


def _error(exc: OrderError):
    return _json({"message": str(exc)}, exc.status_code)


def _service():
    return apps.get_app_config("orders").service


@require_GET
def index(request):
    return render(request, "orders/index.html")


@csrf_exempt
@require_http_methods(["GET", "POST"])
def orders_collection(request):
    if request.method == "GET":
        return _json([serialize_order(o) for o in _service().list_orders()])

    try:
        body = parse_json_body(request)
        order = _service().create_order(body.get("title"), body.get("price"))
    except OrderError as e:
        return _error(e)

    response = _json(serialize_order(order), 201)
    response["Location"] = f"/api/orders/{order.id}"
    return response


@require_GET
def get_order(request, order_id):
    try:
        order = _service().get_order(order_id)
    except OrderError as e:
        return _error(e)
    return _json(serialize_order(order))


@csrf_exempt
@require_POST
def move_to_in_progress(request, order_id):
    """
    Only New orders may move. 404 if the order does not exist,
    409 naming the current status otherwise.
    """
    try:
        order = _service().start_order(order_id)
    except OrderError as e:
        return _error(e)
    return _json(serialize_order(order))


@csrf_exempt
@require_POST
def payment_webhook(request):
    """
    Payment provider callback:
    - X-Webhook-Key is checked before the body is read (500 if the server
      has no key configured, 401 if missing, repeated or wrong).
    - Marks the order Paid; repeating the call is a no-op that returns 200.
    """
    service = _service()
    try:
        service.authenticator.authenticate(header_values(request))
        body = parse_json_body(request)
        order = service.mark_paid(parse_order_id(body.get("orderId")))
    except OrderError as e:
        return _error(e)
    return _json(serialize_order(order))

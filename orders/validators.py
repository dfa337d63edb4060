import json
import uuid
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .errors import ConflictError, ValidationError
from .models import OrderStatus

TITLE_MAX_LENGTH = 200
CENT = Decimal("0.01")
# Prices go out as JSON numbers (floats), exact to the cent up to 15 significant digits
PRICE_MAX = Decimal("9999999999999.99")


class BadJSON(ValidationError):
    """Raised when the request body is not a JSON object."""
    pass


def parse_json_body(request):
    """
    Decode the request body as a JSON object and return it as a dict.
    Numbers with a fractional part are decoded as Decimal so prices keep
    their exact value. Raises BadJSON on failure.
    """
    try:
        body = request.body.decode("utf-8") if request.body else "{}"
        data = json.loads(body or "{}", parse_float=Decimal)
    except ValueError as e:
        raise BadJSON(f"Invalid JSON: {e}")
    if not isinstance(data, dict):
        raise BadJSON("Request body must be a JSON object.")
    return data


def clean_title(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Title is required.")
    title = value.strip()
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters.")
    return title


def clean_price(value) -> Decimal:
    """Quantize the price to cents; it must be a finite number > 0 afterwards."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ValidationError("Price must be a number.")
    try:
        price = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
        if not price.is_finite():
            raise ValidationError("Price must be a finite number.")
        price = price.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError("Price is out of range.")
    if price <= 0:
        raise ValidationError("Price must be > 0.")
    if price > PRICE_MAX:
        raise ValidationError("Price is out of range.")
    return price


def parse_order_id(value) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        raise ValidationError("orderId is required.")
    try:
        return uuid.UUID(value)
    except ValueError:
        raise ValidationError("orderId must be a UUID.")


# Forward-only chain; Paid is terminal
ALLOWED_TRANSITIONS = {
    OrderStatus.NEW:         {OrderStatus.IN_PROGRESS, OrderStatus.PAID},
    OrderStatus.IN_PROGRESS: {OrderStatus.PAID},
    OrderStatus.PAID:        set(),
}


def validate_status_transition(current_status, new_status) -> bool:
    """
    Check that moving from current_status to new_status is legal.
    - current_status None always passes (creation).
    - Raises ConflictError naming the current status otherwise.
    """
    if current_status is None:
        return True

    allowed = ALLOWED_TRANSITIONS.get(current_status, set())
    if new_status not in allowed:
        raise ConflictError(
            f"Cannot move to {OrderStatus(new_status).label} from {OrderStatus(current_status).label}."
        )
    return True

import hmac
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from .errors import ConfigurationError, Unauthorized

logger = logging.getLogger(__name__)

WEBHOOK_HEADER = "X-Webhook-Key"


@dataclass(frozen=True)
class WebhookConfig:
    secret: Optional[str] = None

    @classmethod
    def from_settings(cls, settings) -> "WebhookConfig":
        return cls(secret=getattr(settings, "WEBHOOK_API_KEY", None))


class WebhookAuthenticator:
    """Checks the shared secret sent by the payment provider."""

    def __init__(self, config: WebhookConfig):
        self.config = config

    def authenticate(self, supplied: Optional[Sequence[str]]) -> None:
        """
        ``supplied`` holds every value the client sent for the header.
        Raises ConfigurationError when the server has no secret and
        Unauthorized when the header is missing, repeated or wrong.
        """
        expected = self.config.secret
        if expected is None or not expected.strip():
            logger.error("Webhook secret is not configured")
            raise ConfigurationError("Server is missing WEBHOOK_API_KEY configuration.")

        if not supplied or len(supplied) != 1:
            logger.warning("Webhook rejected: %s header missing or repeated", WEBHOOK_HEADER)
            raise Unauthorized("Missing or invalid webhook key.")

        if not hmac.compare_digest(supplied[0].encode("utf-8"), expected.encode("utf-8")):
            logger.warning("Webhook rejected: key mismatch")
            raise Unauthorized("Missing or invalid webhook key.")


def header_values(request, name=WEBHOOK_HEADER) -> list:
    """All values of a request header; repeated headers arrive comma-joined."""
    raw = request.headers.get(name)
    if raw is None:
        return []
    return [part.strip() for part in raw.split(",")]

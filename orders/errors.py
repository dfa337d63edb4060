"""Errors raised by the order workflow and mapped to HTTP status codes by the views."""


class OrderError(Exception):
    status_code = 500


class ValidationError(OrderError):
    """Bad client input."""
    status_code = 400


class Unauthorized(OrderError):
    """Missing, duplicated or wrong webhook key."""
    status_code = 401


class NotFound(OrderError):
    status_code = 404


class ConflictError(OrderError):
    """The requested transition is not legal from the current status."""
    status_code = 409


class ConfigurationError(OrderError):
    """The server is missing configuration it needs (not the client's fault)."""
    status_code = 500

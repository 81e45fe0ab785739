"""Exceptions raised by the booking bot."""


class BookingBotError(Exception):
    """Base class for bot errors."""


class ConfigError(BookingBotError):
    """Configuration is missing or invalid."""


class MalformedPayload(BookingBotError):
    """Webhook body could not be understood. Answered with HTTP 400."""


class InvalidSignature(MalformedPayload):
    """X-Line-Signature does not match the request body."""

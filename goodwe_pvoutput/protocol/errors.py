# goodwe_pvoutput/protocol/errors.py

from __future__ import annotations


class ExchangeError(Exception):
    """Base class for everything the inverter exchange can raise."""


class AttemptError(ExchangeError):
    """A single request/response attempt failed; the driver may retry it."""


class SocketError(AttemptError):
    """Connect, send or receive failed (timeouts included)."""


class FramingError(AttemptError):
    """Datagram had the wrong length or header bytes."""


class IntegrityError(AttemptError):
    """Trailing CRC16 did not match the payload."""


class ValidationError(AttemptError):
    """Frame decoded cleanly but the values are physically impossible."""


class RetriesExhaustedError(ExchangeError):
    def __init__(self, attempts: int, last_error: Exception | None = None):
        self.attempts = attempts
        self.last_error = last_error
        message = f"failed to get data after {attempts} attempt(s)"
        if last_error is not None:
            message = f"{message}: {last_error}"
        super().__init__(message)

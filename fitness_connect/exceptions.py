"""Exceptions raised by fitness_connect."""

from typing import Optional


class FitnessConnectError(Exception):
    """Base class for all fitness_connect errors."""


class PreconditionError(FitnessConnectError):
    """A required credential was not supplied."""


class AuthenticationError(FitnessConnectError):
    """The SSO login flow was rejected by the service."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        locked: bool = False,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.locked = locked


class UnexpectedResponseCodeError(FitnessConnectError):
    """The service answered with a status code the protocol does not allow."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Unexpected response code (expected: {expected}, actual: {actual})")
        self.expected = expected
        self.actual = actual

    @property
    def status_code(self) -> int:
        return self.actual


class ValidationError(FitnessConnectError, ValueError):
    """Caller input was rejected before any request was made."""


class TransportError(FitnessConnectError):
    """A request failed at the network level (connection, TLS, timeout)."""


class IllegalTransitionError(FitnessConnectError, RuntimeError):
    """The authentication state machine was asked to move along an invalid edge."""

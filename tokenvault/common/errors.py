"""Error types raised by the SDK. All derive from TokenVaultError."""

from typing import Optional


class TokenVaultError(Exception):
    """Base class for every error surfaced by the SDK."""


class TransportError(TokenVaultError):
    """No response was received (connection refused, timeout, DNS...)."""


class ServerError(TokenVaultError):
    """
    Non-success HTTP response.

    `message` is the server-provided text, surfaced verbatim.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class VersionMismatchError(TokenVaultError):
    """Server protocol version is outside the accepted range."""

    def __init__(self, expected: str, actual: Optional[str]):
        super().__init__(
            f"protocol version mismatch: expected {expected}, got {actual or '<missing>'}"
        )
        self.expected = expected
        self.actual = actual


class DecryptionError(TokenVaultError):
    """Authenticated decryption rejected a FullText."""


class ProtocolError(TokenVaultError):
    """Response body is missing fields or carries malformed values."""


class ShapeMismatchError(ProtocolError):
    """Batch response groups/items do not mirror the request."""

    def __init__(self, expected, actual):
        super().__init__(f"batch shape mismatch: sent {list(expected)}, got {list(actual)}")
        self.expected = expected
        self.actual = actual

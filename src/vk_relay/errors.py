"""Error hierarchy.

Everything raised on purpose inside the relay derives from BridgeError so the
CLI and the per-item boundary in the pipeline can catch project errors without
swallowing programming mistakes.

    BridgeError
    ├── ConfigError
    ├── TransportError
    │   └── RequestTimeoutError
    ├── RemoteApiError
    ├── PartialDeliveryError
    ├── MalformedItemError
    │   └── MalformedAttachmentError
    └── PersistenceError
"""

from typing import Optional


class BridgeError(Exception):
    """Base class for all relay errors."""


class ConfigError(BridgeError):
    """Required settings are missing or invalid."""


class TransportError(BridgeError):
    """Remote service unreachable or answered with a non-2xx status."""


class RequestTimeoutError(TransportError, TimeoutError):
    """A network call did not complete within its timeout."""


class RemoteApiError(BridgeError):
    """Remote service answered with a structured error payload."""
    
    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
    
    def __str__(self) -> str:
        if self.code is None:
            return self.message
        return f"[{self.code}] {self.message}"


class PartialDeliveryError(BridgeError):
    """A multi-message send failed after some of its messages were delivered."""

    def __init__(self, message: str, delivered: int) -> None:
        super().__init__(message)
        self.delivered = delivered


class MalformedItemError(BridgeError):
    """A feed item does not have the expected shape."""


class MalformedAttachmentError(MalformedItemError):
    """An attachment inside a feed item does not have the expected shape."""


class PersistenceError(BridgeError):
    """Ledger store could not be read or written."""

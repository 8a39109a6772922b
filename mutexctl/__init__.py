"""mutexctl - named mutex lease client."""

from .acquire import acquire
from .autorenew import AutoRenewer, AutoRenewResult, StopReason, auto_renew
from .client import AsyncMutexClient, MutexClient
from .config import Settings
from .exceptions import (
    MutexError,
    NetworkError,
    LockError,
    LockHeldError,
    LeaseExpiredError,
    LockTimeoutError,
    DecodeError,
    ConfigurationError,
)
from .lease import inspect, release, renew
from .models import (
    LeaseHandle,
    LockAnswer,
    Outcome,
    OutcomeKind,
)

__version__ = "1.0.0"
__all__ = [
    "MutexClient",
    "AsyncMutexClient",
    "Settings",
    "acquire",
    "inspect",
    "renew",
    "release",
    "auto_renew",
    "AutoRenewer",
    "AutoRenewResult",
    "StopReason",
    "MutexError",
    "NetworkError",
    "LockError",
    "LockHeldError",
    "LeaseExpiredError",
    "LockTimeoutError",
    "DecodeError",
    "ConfigurationError",
    "LeaseHandle",
    "LockAnswer",
    "Outcome",
    "OutcomeKind",
]

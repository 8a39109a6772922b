"""mutexctl exception classes."""

class MutexError(Exception):
    """Base exception for all mutexctl errors."""
    pass


class NetworkError(MutexError):
    """Raised when the coordination service cannot be reached."""
    pass


class LockError(MutexError):
    """Raised when the service rejects a lock operation."""

    def __init__(self, message: str, status_code: int = None, body: str = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class LockHeldError(LockError):
    """Raised when trying to acquire a lock that's already held."""
    pass


class LeaseExpiredError(LockError):
    """Raised when the service no longer honors a lease token."""
    pass


class LockTimeoutError(LockError):
    """Raised when polling for a lock runs past its deadline."""
    pass


class DecodeError(MutexError):
    """Raised when a lock answer cannot be decoded into a token."""
    pass


class ConfigurationError(MutexError):
    """Raised when the service address is not usable."""
    pass

"""mutexctl data models."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .exceptions import (
    DecodeError,
    LeaseExpiredError,
    LockError,
    LockHeldError,
    LockTimeoutError,
    NetworkError,
)


class OutcomeKind(str, Enum):
    """Terminal result of a remote lease operation."""
    SUCCESS = "success"
    CONTENDED = "contended"
    EXPIRED = "expired"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"
    TRANSPORT_FAILURE = "transport_failure"


def _parse_timestamp(value) -> Optional[datetime]:
    """Parse an RFC 3339 ``expiresAt``; absent or null means no expiry."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeError(f"expiresAt is not a timestamp: {value!r}")
    # fromisoformat() only accepts a trailing "Z" from Python 3.11 on
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise DecodeError(f"expiresAt is not a timestamp: {value!r}")


@dataclass
class LockAnswer:
    """Decoded body of a successful lock or refresh call."""
    token: str
    expires_at: Optional[datetime] = None

    @classmethod
    def from_body(cls, body: str) -> "LockAnswer":
        """Decode a ``{token, expiresAt}`` body.

        Keys are matched case-insensitively. Raises DecodeError when the body
        is not a JSON object, carries no token, or has an
        ``expiresAt`` that is not a timestamp.
        """
        try:
            data = json.loads(body)
        except ValueError as e:
            raise DecodeError(f"Failed to parse lock answer: {e}")
        if not isinstance(data, dict):
            raise DecodeError("Lock answer is not a JSON object")

        fields = {str(key).lower(): value for key, value in data.items()}
        token = fields.get("token")
        if not isinstance(token, str) or not token:
            raise DecodeError("Lock answer carries no token")

        return cls(token=token, expires_at=_parse_timestamp(fields.get("expiresat")))


@dataclass
class LeaseHandle:
    """A lease this process believes it holds.

    ``expires_at`` is the best known expiry and is advisory only, the
    server is authoritative.
    """
    name: str
    token: str
    expires_at: Optional[datetime] = None

    @classmethod
    def from_answer(cls, name: str, answer: LockAnswer) -> "LeaseHandle":
        return cls(name=name, token=answer.token, expires_at=answer.expires_at)

    def refresh(self, answer: LockAnswer) -> None:
        """Take the new expiry from a renewal; the token never changes."""
        self.expires_at = answer.expires_at


@dataclass
class Outcome:
    """Result of one remote operation, or of a polling run."""
    kind: OutcomeKind
    body: str = ""
    status_code: Optional[int] = None
    answer: Optional[LockAnswer] = None
    cause: Optional[BaseException] = field(default=None, repr=False)

    @classmethod
    def success(cls, body: str, status_code: int = 200, answer: LockAnswer = None) -> "Outcome":
        return cls(OutcomeKind.SUCCESS, body=body, status_code=status_code, answer=answer)

    @classmethod
    def failure(cls, kind: OutcomeKind, body: str = "", status_code: int = None) -> "Outcome":
        return cls(kind, body=body, status_code=status_code)

    @classmethod
    def timed_out(cls) -> "Outcome":
        return cls(OutcomeKind.TIMED_OUT)

    @classmethod
    def transport_failure(cls, cause: BaseException) -> "Outcome":
        return cls(OutcomeKind.TRANSPORT_FAILURE, cause=cause)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def raise_for_outcome(self) -> "Outcome":
        """Raise the exception matching a non-success outcome.

        Returns the outcome itself on success so calls can be chained.
        """
        if self.kind is OutcomeKind.SUCCESS:
            return self
        if self.kind is OutcomeKind.TRANSPORT_FAILURE:
            raise NetworkError(f"The HTTP request failed with error {self.cause}")
        if self.kind is OutcomeKind.TIMED_OUT:
            raise LockTimeoutError("Timeout elapsed. Could not lock mutex!")
        if self.kind is OutcomeKind.CONTENDED:
            raise LockHeldError("Could not lock mutex!", self.status_code, self.body)
        if self.kind is OutcomeKind.EXPIRED:
            raise LeaseExpiredError(
                f"Lease is no longer valid: HTTP {self.status_code}", self.status_code, self.body
            )
        raise LockError(f"HTTP {self.status_code}: {self.body}", self.status_code, self.body)

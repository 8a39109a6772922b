"""Single-shot lease operations."""

from typing import Union

from .client import MutexClient
from .models import LeaseHandle, Outcome


def inspect(client: MutexClient, name: str) -> Outcome:
    return client.inspect(name)


def renew(client: MutexClient, lease: Union[LeaseHandle, str], token: str = None) -> Outcome:
    """Renew a lease once.

    ``lease`` is either a LeaseHandle, whose expiry is refreshed on success,
    or a bare name used together with ``token``. An EXPIRED outcome means the
    lease is gone; it is never retried.
    """
    if isinstance(lease, LeaseHandle):
        outcome = client.renew(lease.name, lease.token)
        if outcome.ok and outcome.answer is not None:
            lease.refresh(outcome.answer)
        return outcome
    return client.renew(lease, token)


def release(client: MutexClient, lease: Union[LeaseHandle, str], token: str = None) -> Outcome:
    """Release a lease once."""
    if isinstance(lease, LeaseHandle):
        return client.release(lease.name, lease.token)
    return client.release(lease, token)

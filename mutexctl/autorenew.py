"""Keep a lease alive until the process is asked to stop."""

import asyncio
import logging
import signal
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import httpx

from .client import AsyncMutexClient
from .config import Settings
from .models import LeaseHandle, Outcome

logger = logging.getLogger(__name__)

RENEW_INTERVAL = 5.0
STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class StopReason(str, Enum):
    STOPPED = "stopped"
    RENEWAL_FAILED = "renewal_failed"


@dataclass
class AutoRenewResult:
    """How auto-renewal ended.

    ``outcome`` is the release outcome when stopped, or the rejected
    renewal when renewal failed.
    """
    reason: StopReason
    outcome: Outcome
    renewals: int = 0

    @property
    def ok(self) -> bool:
        return self.reason is StopReason.STOPPED and self.outcome.ok


class AutoRenewer:
    """Renews a lease every ``interval`` seconds until stopped.

    A stop request (SIGINT/SIGTERM, or ``stop()``) interrupts the wait
    between renewals. A renewal already in flight is allowed to finish, and
    the lease is then released exactly once, so the release is always the
    last request sent. A rejected renewal ends the loop without releasing:
    the token is no longer honored. Any other error out of the loop releases
    the lease once and is then re-raised.
    """

    def __init__(
        self,
        client: AsyncMutexClient,
        lease: LeaseHandle,
        interval: float = RENEW_INTERVAL,
        on_renew: Optional[Callable[[Outcome], None]] = None,
        handle_signals: bool = True,
    ):
        self.client = client
        self.lease = lease
        self.interval = interval
        self.on_renew = on_renew
        self.handle_signals = handle_signals
        self._stop = asyncio.Event()

    def stop(self) -> None:
        self._stop.set()

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in STOP_SIGNALS:
            loop.add_signal_handler(sig, self._on_signal, sig)

    def _remove_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in STOP_SIGNALS:
            loop.remove_signal_handler(sig)

    def _on_signal(self, sig: signal.Signals) -> None:
        logger.info("Received %s, releasing mutex %r", sig.name, self.lease.name)
        self.stop()

    async def _wait_for_stop(self) -> bool:
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=self.interval)
        except asyncio.TimeoutError:
            return False
        return True

    async def run(self) -> AutoRenewResult:
        loop = asyncio.get_running_loop()
        if self.handle_signals:
            self._install_signal_handlers(loop)
        try:
            return await self._run()
        finally:
            if self.handle_signals:
                self._remove_signal_handlers(loop)

    async def _run(self) -> AutoRenewResult:
        renewals = 0
        try:
            while not await self._wait_for_stop():
                outcome = await self.client.renew(self.lease.name, self.lease.token)
                if not outcome.ok:
                    logger.error(
                        "Could not refresh mutex %r anymore: %s", self.lease.name, outcome.kind.value
                    )
                    return AutoRenewResult(StopReason.RENEWAL_FAILED, outcome, renewals)

                renewals += 1
                if outcome.answer is not None:
                    self.lease.refresh(outcome.answer)
                logger.debug("Renewed mutex %r until %s", self.lease.name, self.lease.expires_at)
                if self.on_renew is not None:
                    self.on_renew(outcome)
        except BaseException:
            # the token is still honored here, so give the lease back before unwinding
            await self._release_after_error()
            raise

        outcome = await self.client.release(self.lease.name, self.lease.token)
        return AutoRenewResult(StopReason.STOPPED, outcome, renewals)

    async def _release_after_error(self) -> None:
        logger.warning("Auto-renewal of mutex %r aborted, releasing it", self.lease.name)
        try:
            outcome = await self.client.release(self.lease.name, self.lease.token)
        except Exception:
            logger.exception("Could not release mutex %r", self.lease.name)
            return
        logger.warning("Release of mutex %r: %s", self.lease.name, outcome.kind.value)


def auto_renew(
    settings: Settings,
    lease: LeaseHandle,
    interval: float = RENEW_INTERVAL,
    on_renew: Optional[Callable[[Outcome], None]] = None,
    transport: httpx.AsyncBaseTransport = None,
) -> AutoRenewResult:
    """Block renewing ``lease`` until SIGINT/SIGTERM or a rejected renewal."""

    async def main() -> AutoRenewResult:
        async with AsyncMutexClient(
            settings.base_url, timeout=settings.timeout, transport=transport
        ) as client:
            renewer = AutoRenewer(client, lease, interval=interval, on_renew=on_renew)
            return await renewer.run()

    return asyncio.run(main())

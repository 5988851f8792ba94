"""Notification arbiter: one owner notification per visitor session."""

import asyncio
import logging
from typing import Optional

from lead_funnel.application.ports.funnel_gateway import FunnelGateway
from lead_funnel.domain.entities.capture_session import CaptureSession
from lead_funnel.infrastructure.logging.logger import log_arbiter_trigger, logger

COMPLETION = "completion"
INACTIVITY = "inactivity"
HIDDEN = "hidden"
UNLOAD = "unload"


class NotificationArbiter:
    """
    Races the completion, inactivity, hidden-tab and unload triggers.

    Every trigger reads the session and its guard at the moment it runs, so
    timers armed long ago still see the current lead id and guard value.
    Whichever trigger claims the guard first dispatches; the rest are no-ops.
    A failed dispatch is logged and never re-armed.
    """

    def __init__(
        self,
        session: CaptureSession,
        gateway: FunnelGateway,
        inactivity_timeout_seconds: float = 120.0,
        hidden_confirmation_seconds: float = 5.0,
    ) -> None:
        """
        Initialize arbiter.

        Args:
            session: Capture session whose guard and lead id are shared
            gateway: Funnel API gateway used to dispatch
            inactivity_timeout_seconds: Idle time before the inactivity trigger
            hidden_confirmation_seconds: How long the page must stay hidden
        """
        self._session = session
        self._gateway = gateway
        self._inactivity_timeout = inactivity_timeout_seconds
        self._hidden_confirmation = hidden_confirmation_seconds
        self._hidden = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._inactivity_handle: Optional[asyncio.TimerHandle] = None
        self._hidden_handles: list[asyncio.TimerHandle] = []
        self._dispatches: set[asyncio.Task] = set()

    @property
    def hidden(self) -> bool:
        """Whether the page is currently hidden."""
        return self._hidden

    @property
    def dispatches(self) -> set[asyncio.Task]:
        """Keep-alive requests and timer-fired beacons still running."""
        return set(self._dispatches)

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def start(self) -> None:
        """Arm the inactivity timer. Must run inside the event loop."""
        self._get_loop()
        self._arm_inactivity()

    def stop(self) -> None:
        """Cancel every pending timer."""
        if self._inactivity_handle is not None:
            self._inactivity_handle.cancel()
            self._inactivity_handle = None
        for handle in self._hidden_handles:
            handle.cancel()
        self._hidden_handles.clear()

    def _arm_inactivity(self) -> None:
        if self._inactivity_handle is not None:
            self._inactivity_handle.cancel()
        self._inactivity_handle = self._get_loop().call_later(
            self._inactivity_timeout, self._on_inactivity
        )

    def on_activity(self) -> None:
        """Pointer move or key press: record it and restart the inactivity timer."""
        self._session.touch()
        if self._session.guard.fired:
            return
        self._arm_inactivity()

    def on_visibility_change(self, hidden: bool) -> None:
        """
        Page visibility changed.

        Going hidden schedules a confirmation check. Coming back does not
        cancel it; the check itself looks at the visibility when it runs.
        """
        self._hidden = hidden
        if hidden and not self._session.guard.fired:
            handle = self._get_loop().call_later(self._hidden_confirmation, self._on_hidden_elapsed)
            self._hidden_handles.append(handle)

    def on_unload(self) -> bool:
        """
        Page teardown. Runs synchronously and never waits on the loop.

        Returns:
            True if this call dispatched the notification
        """
        self._hidden = True
        fired = self._fire(UNLOAD, blocking=True)
        self.stop()
        return fired

    async def complete(self, rating: Optional[int] = None) -> bool:
        """
        Explicit completion (rating submitted and finish pressed).

        Args:
            rating: Optional rating from 1 to 5

        Returns:
            True if the server accepted the dispatch
        """
        lead_id = self._session.lead_id
        if not self._claim(COMPLETION, lead_id):
            return False
        self.stop()
        try:
            accepted = await self._gateway.notify_completion(
                self._session.task_id, lead_id, rating=rating
            )
        except Exception as e:
            logger.error(f"Completion dispatch failed for lead {lead_id}: {str(e)}")
            accepted = False
        log_arbiter_trigger(
            self._session.session_id, COMPLETION, True, lead_id=lead_id, delivered=accepted
        )
        return accepted

    def _on_inactivity(self) -> None:
        self._inactivity_handle = None
        self._fire(INACTIVITY)

    def _on_hidden_elapsed(self) -> None:
        if not self._hidden:
            log_arbiter_trigger(self._session.session_id, HIDDEN, False, reason="visible_again")
            return
        self._fire(HIDDEN)

    def _claim(self, trigger: str, lead_id: Optional[str]) -> bool:
        if not lead_id:
            log_arbiter_trigger(self._session.session_id, trigger, False, reason="no_lead_id")
            return False
        if not self._session.guard.try_claim():
            log_arbiter_trigger(self._session.session_id, trigger, False, reason="already_fired")
            return False
        return True

    def _fire(self, trigger: str, blocking: bool = False) -> bool:
        lead_id = self._session.lead_id
        if not self._claim(trigger, lead_id):
            return False

        if self._inactivity_handle is not None:
            self._inactivity_handle.cancel()
            self._inactivity_handle = None

        if self._hidden and blocking:
            delivered = self._gateway.send_beacon(lead_id)
            log_arbiter_trigger(
                self._session.session_id,
                trigger,
                True,
                lead_id=lead_id,
                delivery="beacon",
                delivered=delivered,
            )
            return True

        if self._hidden:
            # Timer callbacks run on the loop; the blocking beacon goes to a worker thread
            coro = self._send_beacon(trigger, lead_id)
        else:
            coro = self._dispatch(trigger, lead_id)
        task = self._get_loop().create_task(coro)
        self._dispatches.add(task)
        task.add_done_callback(self._dispatches.discard)
        return True

    async def _send_beacon(self, trigger: str, lead_id: str) -> None:
        try:
            delivered = await self._get_loop().run_in_executor(
                None, self._gateway.send_beacon, lead_id
            )
        except Exception as e:
            logger.error(f"Beacon dispatch failed for lead {lead_id}: {str(e)}")
            delivered = False
        log_arbiter_trigger(
            self._session.session_id,
            trigger,
            True,
            level=logging.INFO if delivered else logging.ERROR,
            lead_id=lead_id,
            delivery="beacon",
            delivered=delivered,
        )

    async def _dispatch(self, trigger: str, lead_id: str) -> None:
        try:
            accepted = await self._gateway.notify_lead(lead_id)
        except Exception as e:
            logger.error(f"Notification dispatch failed for lead {lead_id}: {str(e)}")
            accepted = False
        log_arbiter_trigger(
            self._session.session_id,
            trigger,
            True,
            level=logging.INFO if accepted else logging.ERROR,
            lead_id=lead_id,
            delivery="keepalive",
            delivered=accepted,
        )

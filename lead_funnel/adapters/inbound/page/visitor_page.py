"""Visitor page adapter: maps page events onto the capture session."""

from typing import Optional
from uuid import uuid4

from lead_funnel.application.use_cases.capture_session_use_case import CaptureSessionUseCase
from lead_funnel.application.use_cases.notification_arbiter import NotificationArbiter
from lead_funnel.domain.entities.capture_session import CaptureSession, CaptureStage
from lead_funnel.domain.value_objects.chat_message import ChatMessage
from lead_funnel.infrastructure.logging.logger import log_turn


class VisitorPage:
    """
    One open funnel page.

    Page load, message submission, pointer/key activity, visibility changes,
    finish and unload are plain method calls. All of them must be called
    from the same event loop.
    """

    def __init__(
        self,
        session: CaptureSession,
        opening_question: str,
        capture: CaptureSessionUseCase,
        arbiter: NotificationArbiter,
    ) -> None:
        """
        Initialize page.

        Args:
            session: Session owned by this page
            opening_question: Task's first agent message
            capture: Capture flow
            arbiter: Notification arbiter bound to the same session
        """
        self._session = session
        self._opening_question = opening_question
        self._capture = capture
        self._arbiter = arbiter
        self._loaded = False

    @property
    def session(self) -> CaptureSession:
        return self._session

    @property
    def stage(self) -> CaptureStage:
        return self._session.stage

    @property
    def lead_id(self) -> Optional[str]:
        return self._session.lead_id

    @property
    def transcript(self) -> list[ChatMessage]:
        return list(self._session.transcript)

    async def load(self) -> list[str]:
        """Page load: open the conversation and start the arbiter timers."""
        if self._loaded:
            return []
        self._loaded = True
        shown = await self._capture.start(self._session, self._opening_question)
        self._arbiter.start()
        log_turn(self._session.session_id, "load", "page", task_id=self._session.task_id)
        return shown

    async def send_message(self, text: str) -> list[str]:
        """Visitor submitted a message."""
        self._arbiter.on_activity()
        return await self._capture.submit(self._session, text, turn_id=str(uuid4()))

    def pointer_move(self) -> None:
        self._arbiter.on_activity()

    def key_press(self) -> None:
        self._arbiter.on_activity()

    def visibility_change(self, hidden: bool) -> None:
        self._arbiter.on_visibility_change(hidden)

    async def finish(self, rating: Optional[int] = None) -> bool:
        """Visitor rated the conversation and pressed finish."""
        return await self._arbiter.complete(rating)

    def unload(self) -> bool:
        """Page is being torn down."""
        return self._arbiter.on_unload()

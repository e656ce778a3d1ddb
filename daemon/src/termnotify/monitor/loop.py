"""Monitor loop: decides when a terminal session deserves a notification."""

import asyncio
import logging
import time
from typing import Callable, Optional

from termnotify.classifier.client import ClassifierClient
from termnotify.config import Config
from termnotify.monitor.events import (
    CommandFinished,
    CommandStarted,
    HostEvent,
    OutputReceived,
    SessionClosed,
    SessionOpened,
)
from termnotify.monitor.fingerprint import fingerprint
from termnotify.protocols import HostWindow, TerminalSession
from termnotify.session_registry import (
    SessionIdAllocator,
    SessionRecord,
    SessionRegistry,
)
from termnotify.terminal.buffer import ContentBuffer
from termnotify.terminal.capture import OutputRecorder

logger = logging.getLogger(__name__)

SHOW_TERMINAL_ACTION = "Show Terminal"
DISMISS_ACTION = "Dismiss"


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class TerminalMonitor:
    """Owns monitoring state and the periodic check timer.

    Each tick walks the tracked sessions one at a time through three cheap
    gates (minimum length, content changed, cooldown elapsed) before the
    classifier is consulted. A YES verdict raises a warning in the host
    window.

    Host events are posted with ``post()``. They apply immediately when no
    tick is running and are queued otherwise, so session state is never
    mutated while a tick is reading it.

    Usage:
        monitor = TerminalMonitor(config, window)
        monitor.post(SessionOpened(terminal))
        await monitor.enable()
        ...
        await monitor.close()
    """

    def __init__(
        self,
        config: Config,
        window: HostWindow,
        classifier: Optional[ClassifierClient] = None,
        buffer: Optional[ContentBuffer] = None,
        registry: Optional[SessionRegistry] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        """Initialize the monitor.

        Args:
            config: termnotify configuration (classifier + monitor sections).
            window: Host message surface for notifications and alerts.
            classifier: Classifier client; one owning its own HTTP session
                is created if None.
            buffer: Content buffer; created from ``buffer_lines`` if None.
            registry: Session registry; created empty if None.
            clock: Returns epoch milliseconds (injectable for tests).
        """
        self._config = config
        self._window = window
        self._owns_classifier = classifier is None
        self._classifier = classifier or ClassifierClient()
        self._classifier.set_alert(self._show_error)
        self._buffer = buffer or ContentBuffer(max_lines=config.monitor.buffer_lines)
        self._recorder = OutputRecorder(self._buffer)
        self._registry = registry or SessionRegistry()
        self._clock = clock or _epoch_millis
        self._ids = SessionIdAllocator(clock=self._clock)

        # session_id -> handle, and id(handle) -> session_id
        self._sessions: dict[str, TerminalSession] = {}
        self._handle_ids: dict[int, str] = {}

        self._events: asyncio.Queue[HostEvent] = asyncio.Queue()
        self._tick_lock = asyncio.Lock()
        self._enabled = False
        self._task: Optional[asyncio.Task] = None
        self._notifications: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> Config:
        """Current configuration."""
        return self._config

    @config.setter
    def config(self, config: Config) -> None:
        """Replace configuration; takes effect from the next tick."""
        self._config = config

    @property
    def is_enabled(self) -> bool:
        """Whether the periodic check is running."""
        return self._enabled

    @property
    def window(self) -> HostWindow:
        """Host message surface."""
        return self._window

    @property
    def registry(self) -> SessionRegistry:
        """Per-session records, keyed by session ID."""
        return self._registry

    @property
    def buffer(self) -> ContentBuffer:
        """Line history for every tracked session."""
        return self._buffer

    @property
    def session_count(self) -> int:
        """Number of tracked host sessions."""
        return len(self._sessions)

    def session_id_for(self, session: TerminalSession) -> Optional[str]:
        """ID assigned to a host session handle, if it is tracked."""
        return self._handle_ids.get(id(session))

    def get_record(self, session: TerminalSession) -> Optional[SessionRecord]:
        """Registry record for a host session handle."""
        session_id = self.session_id_for(session)
        if session_id is None:
            return None
        return self._registry.get(session_id)

    # ------------------------------------------------------------------
    # Timer lifecycle
    # ------------------------------------------------------------------

    async def enable(self) -> None:
        """Start periodic checks. No-op if already enabled."""
        if self._enabled:
            return

        self._enabled = True
        self._task = asyncio.create_task(self._monitor_loop())
        logger.info(
            "Terminal monitoring enabled (interval=%dms)",
            self._config.monitor.check_interval_ms,
        )

    async def disable(self) -> None:
        """Stop periodic checks.

        A check in progress on the timer is cancelled and its verdict
        discarded. Missed ticks are not replayed on re-enable.
        """
        if not self._enabled:
            return

        self._enabled = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Terminal monitoring disabled")

    async def check_now(self) -> None:
        """Run one check cycle over all tracked sessions immediately."""
        async with self._tick_lock:
            self._drain_events()
            await self._check_all()
        self._drain_events()

    def clear_state(self) -> None:
        """Forget all session records. Buffers and the timer are kept."""
        self._registry.clear_all()
        logger.info("Terminal states cleared")

    async def close(self) -> None:
        """Disable, release the classifier and drop all state."""
        await self.disable()
        await self.wait_for_notifications()
        if self._owns_classifier:
            await self._classifier.close()
        self._registry.clear_all()
        self._buffer.clear_all()
        self._recorder.forget_all()
        self._sessions.clear()
        self._handle_ids.clear()

    async def _monitor_loop(self) -> None:
        """Periodically run a check cycle."""
        while self._enabled:
            await asyncio.sleep(self._config.monitor.check_interval_ms / 1000.0)
            if not self._enabled:
                break
            try:
                await self.check_now()
            except Exception as e:
                logger.error("Monitor tick failed: %s", e)

    # ------------------------------------------------------------------
    # Host events
    # ------------------------------------------------------------------

    def post(self, event: HostEvent) -> None:
        """Submit a host event; never blocks."""
        self._events.put_nowait(event)
        if not self._tick_lock.locked():
            self._drain_events()

    def adopt(self, sessions: list[TerminalSession]) -> None:
        """Start tracking sessions that were already live in the host."""
        for session in sessions:
            self.post(SessionOpened(session))

    def _drain_events(self) -> None:
        while True:
            try:
                event = self._events.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                self._apply(event)
            except Exception:
                logger.exception("Failed to apply host event %s", type(event).__name__)

    def _apply(self, event: HostEvent) -> None:
        if isinstance(event, SessionOpened):
            self._open_session(event.session)
        elif isinstance(event, SessionClosed):
            self._close_session(event.session)
        elif isinstance(event, (CommandStarted, CommandFinished, OutputReceived)):
            self._record(event)
        else:
            logger.warning("Ignoring unknown host event: %r", event)

    def _record(
        self, event: CommandStarted | CommandFinished | OutputReceived
    ) -> None:
        # Only SessionOpened creates a record; output read after close is late
        session_id = self._handle_ids.get(id(event.session))
        if session_id is None:
            logger.debug(
                "Dropping %s for untracked terminal: %s",
                type(event).__name__,
                event.session.name,
            )
            return
        if isinstance(event, CommandStarted):
            self._recorder.command_started(session_id, event.command)
        elif isinstance(event, CommandFinished):
            self._recorder.command_finished(
                session_id, event.command, event.exit_code
            )
        else:
            self._recorder.output(session_id, event.data)

    def _open_session(self, session: TerminalSession) -> str:
        session_id = self._handle_ids.get(id(session))
        if session_id is None:
            session_id = self._ids.allocate()
            self._handle_ids[id(session)] = session_id
            self._sessions[session_id] = session
            logger.info("Terminal opened: %s (%s)", session.name, session_id)
        self._registry.open(session_id, label=session.name)
        self._buffer.open(session_id)
        return session_id

    def _close_session(self, session: TerminalSession) -> None:
        session_id = self._handle_ids.pop(id(session), None)
        if session_id is None:
            return
        self._sessions.pop(session_id, None)
        self._registry.close(session_id)
        self._buffer.clear(session_id)
        self._recorder.forget(session_id)
        logger.info("Terminal closed: %s (%s)", session.name, session_id)

    # ------------------------------------------------------------------
    # Decision pipeline
    # ------------------------------------------------------------------

    async def _check_all(self) -> None:
        if not self._config.classifier.is_configured:
            logger.debug("Classifier not configured, skipping check")
            return

        for session_id, session in list(self._sessions.items()):
            try:
                await self._check_session(session_id, session)
            except Exception:
                logger.exception("Error checking terminal %s", session_id)

    async def _check_session(self, session_id: str, session: TerminalSession) -> bool:
        """Run one session through the gates and, if needed, the classifier.

        Returns:
            True if a notification was raised.
        """
        monitor_config = self._config.monitor
        # Re-created here if clear_state() dropped it
        record = self._registry.open(session_id, label=session.name)

        excerpt = self._buffer.read(session_id, monitor_config.excerpt_lines)
        if not excerpt or len(excerpt) < monitor_config.min_content_length:
            return False

        content_hash = fingerprint(excerpt)
        if content_hash == record.fingerprint:
            return False

        record.last_content = excerpt
        record.fingerprint = content_hash

        now = self._clock()
        if (
            record.last_notification_time > 0
            and now - record.last_notification_time
            < monitor_config.notification_cooldown_ms
        ):
            logger.debug("Session %s in cooldown, skipping", session_id)
            return False

        record.running = True
        try:
            should_notify = await self._classifier.decide(
                excerpt, record.label or session.name, self._config.classifier
            )
        finally:
            record.running = False

        if not should_notify:
            return False

        self._notify(session, record.label or session.name)
        record.last_notification_time = now
        record.notified = True
        return True

    # ------------------------------------------------------------------
    # User-facing output
    # ------------------------------------------------------------------

    def _notify(self, session: TerminalSession, label: str) -> None:
        message = f'Terminal "{label}" needs your attention!'
        task = asyncio.create_task(self._present_notification(session, message))
        self._notifications.add(task)
        task.add_done_callback(self._notifications.discard)
        logger.info("Notification sent for terminal: %s", label)

    async def _present_notification(
        self, session: TerminalSession, message: str
    ) -> None:
        try:
            choice = await self._window.show_warning(
                message, SHOW_TERMINAL_ACTION, DISMISS_ACTION
            )
            if choice == SHOW_TERMINAL_ACTION:
                await session.show()
        except Exception as e:
            logger.error("Failed to present notification: %s", e)

    async def wait_for_notifications(self) -> None:
        """Wait until every raised notification has been handled."""
        if self._notifications:
            await asyncio.gather(*list(self._notifications), return_exceptions=True)

    async def _show_error(self, message: str) -> None:
        await self._window.show_error(message)

"""Commands exposed to the host, each with a user-visible confirmation."""

import logging
from typing import Awaitable, Callable

from termnotify.monitor.loop import TerminalMonitor
from termnotify.protocols import HostWindow, SessionHost

logger = logging.getLogger(__name__)

CMD_ENABLE = "termnotify.enable"
CMD_DISABLE = "termnotify.disable"
CMD_CHECK_NOW = "termnotify.checkNow"
CMD_CLEAR_STATE = "termnotify.clearState"

Command = Callable[[], Awaitable[None]]


def register_commands(
    monitor: TerminalMonitor, window: HostWindow
) -> dict[str, Command]:
    """Build the host command table for a monitor."""

    async def enable() -> None:
        await monitor.enable()
        await window.show_info("Terminal Notifier: Monitoring enabled")

    async def disable() -> None:
        await monitor.disable()
        await window.show_info("Terminal Notifier: Monitoring disabled")

    async def check_now() -> None:
        await monitor.check_now()
        await window.show_info("Terminal Notifier: Check completed")

    async def clear_state() -> None:
        monitor.clear_state()
        await window.show_info("Terminal Notifier: State cleared")

    return {
        CMD_ENABLE: enable,
        CMD_DISABLE: disable,
        CMD_CHECK_NOW: check_now,
        CMD_CLEAR_STATE: clear_state,
    }


async def activate(monitor: TerminalMonitor, host: SessionHost) -> dict[str, Command]:
    """Wire a monitor into its host.

    Adopts sessions that are already live, starts monitoring when the
    configuration enables it, and returns the command table.
    """
    logger.info("Terminal Notifier is now active")
    monitor.adopt(host.live_sessions())
    if monitor.config.monitor.enabled:
        await monitor.enable()
    return register_commands(monitor, monitor.window)

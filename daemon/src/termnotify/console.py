"""Console host: runs shell commands as monitored sessions."""

import asyncio
import logging
from typing import Optional

import click

from termnotify.monitor.events import (
    CommandFinished,
    CommandStarted,
    OutputReceived,
    SessionClosed,
    SessionOpened,
)
from termnotify.monitor.loop import TerminalMonitor

logger = logging.getLogger(__name__)


class ConsoleWindow:
    """HostWindow that prints messages to the terminal.

    There are no buttons on a console, so warnings and errors never
    return an action.
    """

    async def show_info(self, message: str) -> None:
        click.echo(message)

    async def show_warning(self, message: str, *actions: str) -> Optional[str]:
        click.secho(f"\a{message}", fg="yellow", bold=True)
        return None

    async def show_error(self, message: str, *actions: str) -> Optional[str]:
        click.secho(message, fg="red", err=True)
        return None


class ProcessSession:
    """A shell command running as a child process."""

    def __init__(self, command: str, name: Optional[str] = None):
        self.command = command
        self.name = name or command
        self._proc: Optional[asyncio.subprocess.Process] = None

    @property
    def is_running(self) -> bool:
        return self._proc is not None and self._proc.returncode is None

    async def show(self) -> None:
        click.echo(f"Session: {self.name}")

    async def run(self, monitor: TerminalMonitor) -> int:
        """Run the command, streaming its output into the monitor.

        Returns:
            The process exit code.
        """
        monitor.post(CommandStarted(self, self.command))
        self._proc = await asyncio.create_subprocess_shell(
            self.command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )

        assert self._proc.stdout is not None
        while True:
            chunk = await self._proc.stdout.read(4096)
            if not chunk:
                break
            monitor.post(OutputReceived(self, chunk))

        returncode = await self._proc.wait()
        monitor.post(CommandFinished(self, self.command, returncode))
        logger.debug("Command exited with %d: %s", returncode, self.command)
        return returncode


class ConsoleHost:
    """SessionHost over a set of child-process sessions."""

    def __init__(self, commands: list[str]):
        self._sessions = [ProcessSession(command) for command in commands]

    def live_sessions(self) -> list[ProcessSession]:
        return list(self._sessions)

    async def run(self, monitor: TerminalMonitor) -> list[int]:
        """Run every session to completion.

        Sessions stay registered with the monitor until ``close_all``.
        """
        for session in self._sessions:
            monitor.post(SessionOpened(session))
        return list(
            await asyncio.gather(*(session.run(monitor) for session in self._sessions))
        )

    def close_all(self, monitor: TerminalMonitor) -> None:
        """Report every session as closed."""
        for session in self._sessions:
            monitor.post(SessionClosed(session))

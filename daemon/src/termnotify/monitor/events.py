"""Inbound host events, queued and applied between monitor ticks."""

from dataclasses import dataclass
from typing import Optional, Union

from termnotify.protocols import TerminalSession


@dataclass(frozen=True)
class SessionOpened:
    """A terminal session appeared in the host."""

    session: TerminalSession


@dataclass(frozen=True)
class SessionClosed:
    """A terminal session was closed in the host."""

    session: TerminalSession


@dataclass(frozen=True)
class CommandStarted:
    """A shell command started executing."""

    session: TerminalSession
    command: str


@dataclass(frozen=True)
class CommandFinished:
    """A shell command finished executing."""

    session: TerminalSession
    command: str
    exit_code: Optional[int] = None


@dataclass(frozen=True)
class OutputReceived:
    """A raw output chunk was produced by a session."""

    session: TerminalSession
    data: Union[str, bytes]


HostEvent = Union[
    SessionOpened, SessionClosed, CommandStarted, CommandFinished, OutputReceived
]

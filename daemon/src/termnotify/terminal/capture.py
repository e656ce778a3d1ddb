"""Feeds host shell-execution events into the content buffer."""

import codecs
import logging
import re
from dataclasses import dataclass, field
from typing import AsyncIterator

from termnotify.terminal.buffer import ContentBuffer

logger = logging.getLogger(__name__)

MAX_PENDING_ESCAPE = 256


def _utf8_decoder() -> codecs.IncrementalDecoder:
    return codecs.getincrementaldecoder("utf-8")(errors="replace")


@dataclass
class _StreamState:
    """Decoding state carried between output chunks of one session."""

    decoder: codecs.IncrementalDecoder = field(default_factory=_utf8_decoder)
    pending_escape: str = ""
    line_open: bool = False
    after_cr: bool = False


class OutputRecorder:
    """Records command markers and raw output chunks per session.

    Output is decoded (bytes are treated as UTF-8) and stripped of ANSI
    escape codes before it reaches the buffer, so fingerprints and the
    classifier only ever see plain text.

    Chunks are arbitrary slices of a stream. A multi-byte character or an
    escape sequence cut at a chunk boundary is held back until the next
    chunk, and a chunk that ends mid-line is continued by the next one.
    """

    # CSI (incl. private mode like \x1b[?1049h), OSC, and charset selection
    ANSI_ESCAPE = re.compile(
        r"\x1b\[\??[0-9;]*[a-zA-Z]"
        r"|\x1b\].*?(?:\x07|\x1b\\)"
        r"|\x1b\([A-Za-z]"
    )

    # An escape sequence that has started but not finished at end of text
    PARTIAL_ESCAPE = re.compile(
        r"\x1b(?:\[\??[0-9;]*|\][^\x07\x1b\n]*\x1b?|\()?\Z"
    )

    def __init__(self, buffer: ContentBuffer):
        self._buffer = buffer
        self._streams: dict[str, _StreamState] = {}

    def command_started(self, session_id: str, command: str) -> None:
        """Record the start of a shell command."""
        self._end_line(session_id)
        self._buffer.append(session_id, f"[COMMAND] {command}")

    def command_finished(
        self, session_id: str, command: str, exit_code: int | None
    ) -> None:
        """Record the end of a shell command and its exit code."""
        self._end_line(session_id)
        code = "unknown" if exit_code is None else str(exit_code)
        self._buffer.append(session_id, f"[COMPLETED] {command} (exit code: {code})")

    def output(self, session_id: str, data: str | bytes) -> int:
        """Record a raw output chunk.

        Returns:
            Number of new lines added to the buffer.
        """
        state = self._streams.setdefault(session_id, _StreamState())
        if isinstance(data, bytes):
            data = state.decoder.decode(data)

        text = state.pending_escape + data
        state.pending_escape = ""
        partial = self.PARTIAL_ESCAPE.search(text)
        if partial and len(partial.group()) <= MAX_PENDING_ESCAPE:
            state.pending_escape = partial.group()
            text = text[: partial.start()]

        text = self.strip_ansi(text)
        if state.after_cr and text.startswith("\n"):
            # \r\n split across chunks
            text = text[1:]
        if not text:
            return 0

        appended = self._buffer.append(
            session_id, text, continue_line=state.line_open
        )
        last = text.splitlines(keepends=True)[-1]
        state.line_open = last.splitlines() == [last]
        state.after_cr = text.endswith("\r")
        return appended

    async def consume(
        self, session_id: str, stream: AsyncIterator[str | bytes]
    ) -> None:
        """Drain an execution output stream into the buffer.

        Hosts that cannot stream output raise from the iterator; that is
        logged and otherwise ignored.
        """
        try:
            async for chunk in stream:
                self.output(session_id, chunk)
        except Exception as e:
            logger.debug("Output stream unavailable for %s: %s", session_id, e)

    def forget(self, session_id: str) -> None:
        """Drop the stream state of a closed session."""
        self._streams.pop(session_id, None)

    def forget_all(self) -> None:
        """Drop the stream state of every session."""
        self._streams.clear()

    def _end_line(self, session_id: str) -> None:
        # Markers always start on a fresh line
        state = self._streams.get(session_id)
        if state is not None:
            state.line_open = False
            state.after_cr = False

    @classmethod
    def strip_ansi(cls, text: str) -> str:
        """Remove ANSI escape codes from text."""
        return cls.ANSI_ESCAPE.sub("", text)

"""Message log that echoes lines to a stream and appends them to a file."""

from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO, Callable, Optional

BUFFER_SIZE = 60
RESTART_BANNER = b"\r\n** Restart **\r\n\n"


class MessageLog:
    """Buffers message bytes and writes them out in chunks and at message end."""

    def __init__(
        self,
        path: Optional[str | os.PathLike] = None,
        stream: Optional[BinaryIO] = None,
        timestamp: Optional[Callable[[], Optional[str]]] = None,
    ):
        self.path = Path(path) if path is not None else None
        self.stream = stream
        self.timestamp = timestamp
        self._buf = bytearray()
        self._new_message = True
        self._restart = True

    def _flush(self) -> None:
        data = bytes(self._buf)
        self._buf.clear()
        if self.stream is not None:
            self.stream.write(data)
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("ab") as handle:
                handle.write(data)

    def _put(self, byte: int) -> None:
        if len(self._buf) >= BUFFER_SIZE:
            self._flush()
        self._buf.append(byte)

    def _start_message(self) -> None:
        self._new_message = False
        self._buf.clear()
        prefix = b""
        if self._restart:
            self._restart = False
            prefix += RESTART_BANNER
        if self.timestamp is not None:
            stamp = self.timestamp()
            if stamp is not None:
                prefix += f"{stamp} ".encode("utf-8")
        for byte in prefix:
            self._put(byte)

    def write(self, data: str | bytes) -> int:
        """Add text or bytes to the current message; return the bytes taken."""
        raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        for byte in raw:
            if self._new_message:
                self._start_message()
            self._put(byte)
        return len(raw)

    def end_message(self) -> None:
        """Terminate the current message with CRLF and write it out."""
        self.write(b"\r\n")
        self._flush()
        self._new_message = True

    def log(self, fmt: str, *args) -> None:
        """Write one formatted message."""
        self.write(fmt % args if args else fmt)
        self.end_message()
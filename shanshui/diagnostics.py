"""Tagged console diagnostics shared by the engine, the view and the CLI."""

from __future__ import annotations

import io
import sys

DEBUG_MARKER = "[Shanshui][DEBUG]"
WARN_MARKER = "[Shanshui][WARN]"

__all__ = ["DEBUG_MARKER", "WARN_MARKER", "DebugSilencer", "debug", "install_debug_silencer", "warn"]


def debug(message: str) -> None:
    print(f"{DEBUG_MARKER} {message}", flush=True)


def warn(message: str) -> None:
    print(f"{WARN_MARKER} {message}", file=sys.stderr, flush=True)


class DebugSilencer(io.TextIOBase):
    """Text stream that drops whole lines carrying ``marker`` and forwards the rest.

    Writes are buffered up to the next newline so a debug line printed in
    pieces is still recognised.
    """

    def __init__(self, stream: io.TextIOBase, marker: str = DEBUG_MARKER) -> None:
        super().__init__()
        self._stream = stream
        self._marker = marker
        self._pending = ""

    def write(self, text: str) -> int:  # type: ignore[override]
        lines = (self._pending + text).splitlines(keepends=True)
        self._pending = ""
        if lines and not lines[-1].endswith("\n"):
            self._pending = lines.pop()
        for line in lines:
            self._forward(line)
        return len(text)

    def _forward(self, line: str) -> None:
        if self._marker not in line:
            self._stream.write(line)

    def flush(self) -> None:  # type: ignore[override]
        pending, self._pending = self._pending, ""
        if pending:
            self._forward(pending)
        self._stream.flush()

    def writelines(self, lines) -> None:  # type: ignore[override]
        for line in lines:
            self.write(line)

    def close(self) -> None:  # type: ignore[override]
        self.flush()
        super().close()

    def __getattr__(self, name):
        return getattr(self._stream, name)


def install_debug_silencer(marker: str = DEBUG_MARKER) -> None:
    if marker and not isinstance(sys.stdout, DebugSilencer):
        sys.stdout = DebugSilencer(sys.stdout, marker)
    if marker and not isinstance(sys.stderr, DebugSilencer):
        sys.stderr = DebugSilencer(sys.stderr, marker)

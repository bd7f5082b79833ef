"""
Line-by-line filter chain.

A chain starts at a :class:`LineReader`, passes through any number of
:class:`LineFilter` stages and ends at a :class:`LineWriter` (or a
:class:`LineCollector` in tests). Each stage forwards lines by emitting them
on its ``emitted`` signal; downstream stages subscribe with
:meth:`LineSubscriber.subscribe_to`.
"""

import logging
import os
import re
from typing import List, Optional

from extraction.events import Signal, Subscription

logger = logging.getLogger(__name__)

_CLASS_HEAD_RE = re.compile(r"(?:class|struct)\s+([A-Za-z_][A-Za-z0-9_]*)")
_ANNOTATION_RE = re.compile(r"\[\[[^\]]*\]\]")


class LineEmitter:
    """Source of lines for downstream subscribers."""

    def __init__(self) -> None:
        self.emitted = Signal("line")

    def emit(self, line: str) -> None:
        self.emitted.emit(line)


class LineSubscriber:
    """Receives lines from an emitter. Subclasses implement :meth:`process`."""

    def __init__(self) -> None:
        self._subscriptions: List[Subscription] = []

    def process(self, line: str) -> None:
        raise NotImplementedError

    def subscribe_to(self, emitter: LineEmitter) -> None:
        self._subscriptions.append(emitter.emitted.connect(self.process))

    def unsubscribe(self) -> None:
        for subscription in self._subscriptions:
            subscription.release()
        self._subscriptions = []


class LineFilter(LineEmitter, LineSubscriber):
    """Pass-through stage; override :meth:`process` to transform lines."""

    def __init__(self) -> None:
        LineEmitter.__init__(self)
        LineSubscriber.__init__(self)

    def process(self, line: str) -> None:
        self.emit(line)


class LineReader(LineEmitter):
    """Emits every line of a file, without its line terminator."""

    def __init__(self, path: str):
        super().__init__()
        self.path = path

    def run(self) -> int:
        """Read the whole file and return the number of lines emitted."""
        count = 0
        with open(self.path, "r", encoding="utf-8") as f:
            for raw in f:
                self.emit(raw.rstrip("\r\n"))
                count += 1
        logger.debug("Read %d lines from %s", count, self.path)
        return count


class LineWriter(LineSubscriber):
    """End of a chain: writes each received line to a file.

    Use as a context manager so the file is closed when the chain is done.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = path
        self.lines_written = 0
        self._stream = None

    def open(self) -> "LineWriter":
        if self._stream is None:
            os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
            self._stream = open(self.path, "w", encoding="utf-8")
        return self

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def __enter__(self) -> "LineWriter":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()
        self.close()

    def process(self, line: str) -> None:
        if self._stream is None:
            raise RuntimeError(f"LineWriter for {self.path} is not open")
        self._stream.write(line + "\n")
        self.lines_written += 1


class LineCollector(LineSubscriber):
    """End of a chain that keeps the lines in memory."""

    def __init__(self) -> None:
        super().__init__()
        self.lines: List[str] = []

    def process(self, line: str) -> None:
        self.lines.append(line)

    def text(self) -> str:
        return "".join(line + "\n" for line in self.lines)


def _strip_line_prefix(line: str) -> str:
    """Drop leading whitespace, ``//`` comments and ``[[...]]`` annotations."""
    rest = line
    while True:
        rest = rest.lstrip()
        if rest.startswith("//"):
            return ""
        match = _ANNOTATION_RE.match(rest)
        if match is None:
            return rest
        rest = rest[match.end():]


class LineMiniParser(LineFilter):
    """Tracks class entry/exit one line at a time.

    A line starting (after whitespace, comments and annotations) with
    ``class Name`` or ``struct Name`` fires :attr:`class_pushed`; a line
    starting with ``};`` fires :attr:`class_popped`. Both fire before the
    line itself is forwarded.
    """

    def __init__(self) -> None:
        super().__init__()
        self.class_pushed = Signal("class_pushed")
        self.class_popped = Signal("class_popped")

    @staticmethod
    def class_name(line: str) -> Optional[str]:
        match = _CLASS_HEAD_RE.match(_strip_line_prefix(line))
        return match.group(1) if match else None

    def process(self, line: str) -> None:
        name = self.class_name(line)
        if name is not None:
            self.class_pushed.emit(name)
        elif _strip_line_prefix(line).startswith("};"):
            self.class_popped.emit()
        self.emit(line)

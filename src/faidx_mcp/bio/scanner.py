from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO
from typing import Iterator


HEADER_MARKER = b">"


@dataclass(frozen=True)
class Line:
    """One logical line and its byte span in the source file.

    ``end`` is exclusive and includes the line terminator, so ``end - start``
    is the raw byte width of the line.
    """

    raw: bytes
    start: int
    end: int

    @property
    def text(self) -> str:
        return self.raw.decode("utf-8", errors="replace")

    @property
    def is_header(self) -> bool:
        return self.raw.startswith(HEADER_MARKER)

    @property
    def is_blank(self) -> bool:
        return not self.raw.strip()

    @property
    def stripped_length(self) -> int:
        return sum(len(part) for part in self.raw.split())


def scan_lines(handle: BinaryIO, *, chunk_size: int = 100_000) -> Iterator[Line]:
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    pending = bytearray()
    pending_start = 0
    offset = 0

    while True:
        chunk = handle.read(chunk_size)
        if not chunk:
            break
        # pending never holds a terminator, so only the new bytes need searching
        search_from = len(pending)
        pending += chunk
        offset += len(chunk)
        pos = 0
        while True:
            nl = pending.find(b"\n", search_from)
            if nl < 0:
                break
            yield Line(raw=bytes(pending[pos : nl + 1]), start=pending_start + pos, end=pending_start + nl + 1)
            pos = nl + 1
            search_from = pos
        if pos:
            del pending[:pos]
            pending_start += pos

    # unterminated last line
    if pending:
        yield Line(raw=bytes(pending), start=pending_start, end=offset)

from __future__ import annotations

from dataclasses import dataclass

from ..errors import DuplicateSequenceNameError
from ..errors import InconsistentLineLengthError
from ..errors import IndexingError
from ..errors import MissingHeaderError
from ..errors import MissingSequenceNameError
from .scanner import Line


@dataclass(frozen=True)
class SequenceRecord:
    name: str
    sequence_length: int
    byte_offset: int
    line_length: int
    line_full_length: int


def header_name(line: Line) -> str:
    """Sequence name of a header line: text after '>' up to the first whitespace."""
    body = line.raw[1:]
    if not body or body[:1].isspace():
        return ""
    # names round-trip to the original header bytes
    return body.split(None, 1)[0].decode("utf-8", errors="surrogateescape")


class _RecordBuilder:
    def __init__(self, name: str, byte_offset: int) -> None:
        self.name = name
        self.byte_offset = byte_offset
        self.sequence_length = 0
        self.line_length = 0
        self.line_full_length = 0

    def build(self) -> SequenceRecord:
        return SequenceRecord(
            name=self.name,
            sequence_length=self.sequence_length,
            byte_offset=self.byte_offset,
            line_length=self.line_length,
            line_full_length=self.line_full_length,
        )


class RecordAccumulator:
    """Turns a stream of scanned lines into closed index records.

    ``feed`` returns the first structural error it finds instead of raising,
    and the caller is expected to stop feeding at that point. Records are only
    handed out by ``finish`` once the whole stream has been consumed.
    """

    def __init__(self) -> None:
        self._records: list[SequenceRecord] = []
        self._seen_names: set[str] = set()
        self._current: _RecordBuilder | None = None
        self._expect_end = False
        self._is_first_data_line = False

    def feed(self, line: Line) -> IndexingError | None:
        if line.is_blank:
            if self._current is not None:
                self._expect_end = True
            return None

        if line.is_header:
            self._close()
            name = header_name(line)
            if not name:
                return MissingSequenceNameError(f"Empty sequence name in header at byte {line.start}")
            if name in self._seen_names:
                return DuplicateSequenceNameError(f"Duplicate sequence name found for {name}", name=name)
            self._seen_names.add(name)
            self._current = _RecordBuilder(name, line.end)
            self._is_first_data_line = True
            self._expect_end = False
            return None

        current = self._current
        if current is None:
            return MissingHeaderError(f"Sequence data before the first header at byte {line.start}")
        if self._expect_end:
            return InconsistentLineLengthError(f"Different line length in {current.name}", name=current.name)

        seq_len = line.stripped_length
        full_len = line.end - line.start
        current.sequence_length += seq_len
        if self._is_first_data_line:
            current.line_length = seq_len
            current.line_full_length = full_len
            self._is_first_data_line = False
        elif seq_len != current.line_length or full_len != current.line_full_length:
            # allowed only as the last line of the record
            self._expect_end = True
        return None

    def finish(self) -> list[SequenceRecord]:
        self._close()
        return list(self._records)

    def _close(self) -> None:
        if self._current is None:
            return
        self._records.append(self._current.build())
        self._current = None

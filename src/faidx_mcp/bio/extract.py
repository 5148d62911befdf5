"""Random access into an indexed FASTA file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import re

from ..config import IndexerConfig
from .accumulator import SequenceRecord
from .faidx import index_fasta
from .writer import index_path_for
from .writer import read_index


_REGION_RE = re.compile(r"^(?P<name>.+?)(?::(?P<start>[\d,]+)(?:-(?P<end>[\d,]+))?)?$")


def byte_offset(record: SequenceRecord, position: int) -> int:
    """Absolute file offset of the base at 1-based ``position``."""
    if position < 1 or position > record.sequence_length:
        raise ValueError(
            f"Position {position} is outside {record.name} (length {record.sequence_length})"
        )
    i = position - 1
    return record.byte_offset + (i // record.line_length) * record.line_full_length + (i % record.line_length)


@dataclass(frozen=True)
class Region:
    name: str
    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.name}:{self.start}-{self.end}"

    @property
    def length(self) -> int:
        return self.end - self.start + 1


def parse_region(text: str) -> tuple[str, int | None, int | None]:
    """Split ``name``, ``name:start`` or ``name:start-end`` into its parts.

    Coordinates are 1-based inclusive; thousands separators are accepted.
    """
    candidate = str(text or "").strip()
    if not candidate:
        raise ValueError("region is empty")
    m = _REGION_RE.match(candidate)
    if not m:
        raise ValueError(f"Invalid region: {text!r}")
    start = int(m.group("start").replace(",", "")) if m.group("start") else None
    end = int(m.group("end").replace(",", "")) if m.group("end") else None
    return m.group("name"), start, end


def validate_region(text: str, records: dict[str, SequenceRecord]) -> Region:
    name, start, end = parse_region(text)
    rec = records.get(name)
    if rec is None and start is not None:
        # names may themselves contain ':'
        rec = records.get(text.strip())
        if rec is not None:
            name, start, end = rec.name, None, None
    if rec is None:
        raise KeyError(f"Sequence {name!r} not found in index")

    if start is None:
        start, end = 1, rec.sequence_length
    elif end is None:
        end = rec.sequence_length
    if start < 1:
        raise ValueError(f"Region start must be >= 1 (got {start})")
    if end > rec.sequence_length:
        raise ValueError(f"Region end {end} exceeds length of {name} ({rec.sequence_length})")
    if start > end:
        raise ValueError(f"Region start {start} is after end {end}")
    return Region(name=name, start=start, end=end)


class FastaReader:
    """Reads subsequences through the ``.fai`` side index, building it when missing."""

    def __init__(self, fasta_path: str | Path, *, config: IndexerConfig | None = None, rebuild: bool = False) -> None:
        self.fasta_path = Path(fasta_path)
        self.config = config or IndexerConfig()
        self.index_path = index_path_for(self.fasta_path, self.config.index_suffix)
        if rebuild or self._index_is_stale():
            records = index_fasta(self.fasta_path, config=self.config).records
        else:
            records = read_index(self.index_path)
        self.records: dict[str, SequenceRecord] = {rec.name: rec for rec in records}

    def _index_is_stale(self) -> bool:
        if not self.index_path.exists():
            return True
        return self.fasta_path.stat().st_mtime > self.index_path.stat().st_mtime

    def names(self) -> list[str]:
        return list(self.records.keys())

    def region(self, text: str) -> Region:
        return validate_region(text, self.records)

    def fetch(self, name: str, start: int, end: int) -> str:
        """Sequence of ``name`` from 1-based ``start`` to ``end`` inclusive."""
        rec = self.records.get(name)
        if rec is None:
            raise KeyError(f"Sequence {name!r} not found in index")
        if start > end:
            raise ValueError(f"Region start {start} is after end {end}")
        first = byte_offset(rec, start)
        last = byte_offset(rec, end)
        with self.fasta_path.open("rb") as handle:
            handle.seek(first)
            data = handle.read(last - first + 1)
        seq = b"".join(data.split())
        if len(seq) != end - start + 1:
            raise ValueError(f"Short read from {self.fasta_path} for {name}:{start}-{end}; index may be stale")
        return seq.decode("utf-8", errors="replace")

    def fetch_region(self, text: str) -> tuple[Region, str]:
        region = self.region(text)
        return region, self.fetch(region.name, region.start, region.end)

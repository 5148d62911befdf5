from __future__ import annotations

import os
from pathlib import Path
import shutil
from typing import Iterable
import uuid

from .accumulator import SequenceRecord


def index_path_for(fasta_path: str | Path, suffix: str = ".fai") -> Path:
    return Path(f"{fasta_path}{suffix}")


def format_record(rec: SequenceRecord) -> str:
    fields = (rec.name, rec.sequence_length, rec.byte_offset, rec.line_length, rec.line_full_length)
    return "\t".join(str(f) for f in fields) + "\n"


def write_index(records: Iterable[SequenceRecord], index_path: str | Path) -> Path:
    """Write all records at once; the target is replaced only after a complete write."""
    target = Path(index_path)
    text = "".join(format_record(rec) for rec in records)
    tmp = target.with_name(f".{target.name}.{uuid.uuid4().hex[:8]}.tmp")
    try:
        with tmp.open("x", encoding="utf-8", errors="surrogateescape", newline="\n") as f:
            f.write(text)
        if target.exists():
            shutil.copymode(target, tmp)
        os.replace(tmp, target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return target


def parse_index_line(raw: str) -> SequenceRecord:
    parts = raw.rstrip("\r\n").split("\t")
    if len(parts) < 5:
        raise ValueError(f"Invalid index line (expected 5 tab-separated fields): {raw!r}")
    name, length, offset, line_length, line_full_length = parts[:5]
    try:
        return SequenceRecord(
            name=name,
            sequence_length=int(length),
            byte_offset=int(offset),
            line_length=int(line_length),
            line_full_length=int(line_full_length),
        )
    except ValueError as exc:
        raise ValueError(f"Invalid index line (non-integer field): {raw!r}") from exc


def read_index(index_path: str | Path) -> list[SequenceRecord]:
    records: list[SequenceRecord] = []
    with open(index_path, "r", encoding="utf-8", errors="surrogateescape") as handle:
        for raw in handle:
            if not raw.strip():
                continue
            records.append(parse_index_line(raw))
    return records

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable
from typing import Iterable

from ..config import IndexerConfig
from ..errors import IndexingCancelled
from ..errors import IndexingError
from ..log import log
from .accumulator import RecordAccumulator
from .accumulator import SequenceRecord
from .guard import check_not_compressed
from .scanner import scan_lines
from .writer import index_path_for
from .writer import write_index


@dataclass(frozen=True)
class IndexResult:
    fasta_path: str
    index_path: str
    records: list[SequenceRecord]


@dataclass(frozen=True)
class IndexOutcome:
    fasta_path: str
    result: IndexResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None


def build_index(
    fasta_path: str | Path,
    *,
    chunk_size: int = 100_000,
    should_cancel: Callable[[], bool] | None = None,
) -> list[SequenceRecord]:
    """Scan a FASTA file and return its index records without writing anything."""
    path = str(fasta_path)
    check_not_compressed(path)

    acc = RecordAccumulator()
    with open(path, "rb") as handle:
        for line in scan_lines(handle, chunk_size=chunk_size):
            if should_cancel is not None and should_cancel():
                raise IndexingCancelled("Indexing cancelled", path=path)
            err = acc.feed(line)
            if err is not None:
                raise err.with_path(path)
    return acc.finish()


def index_fasta(
    fasta_path: str | Path,
    *,
    config: IndexerConfig | None = None,
    should_cancel: Callable[[], bool] | None = None,
) -> IndexResult:
    cfg = config or IndexerConfig()
    path = str(fasta_path)
    index_path = index_path_for(path, cfg.index_suffix)

    log(f"indexing {path}")
    try:
        records = build_index(path, chunk_size=cfg.chunk_size, should_cancel=should_cancel)
    except IndexingError as exc:
        log(f"indexing failed: {exc}")
        raise
    write_index(records, index_path)
    log(f"wrote {index_path} ({len(records)} sequences)")
    return IndexResult(fasta_path=path, index_path=str(index_path), records=records)


def _index_one(path: str, config: IndexerConfig) -> IndexOutcome:
    try:
        return IndexOutcome(fasta_path=path, result=index_fasta(path, config=config))
    except (IndexingError, OSError) as exc:
        return IndexOutcome(fasta_path=path, error=str(exc))


def index_many(
    fasta_paths: Iterable[str | Path],
    *,
    config: IndexerConfig | None = None,
    workers: int | None = None,
) -> list[IndexOutcome]:
    """Index independent files in parallel; one file failing does not stop the others."""
    cfg = config or IndexerConfig()
    paths = [str(p) for p in fasta_paths]
    if not paths:
        return []
    max_workers = max(1, min(int(workers or cfg.workers), len(paths)))
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(lambda p: _index_one(p, cfg), paths))

from __future__ import annotations

from dataclasses import dataclass
import os


DEFAULT_CHUNK_SIZE = 100_000
DEFAULT_INDEX_SUFFIX = ".fai"
DEFAULT_WORKERS = 4


@dataclass(frozen=True)
class IndexerConfig:
    chunk_size: int = DEFAULT_CHUNK_SIZE
    index_suffix: str = DEFAULT_INDEX_SUFFIX
    workers: int = DEFAULT_WORKERS


@dataclass(frozen=True)
class AppConfig:
    indexer: IndexerConfig
    root: str | None


def _env_int(name: str, default: int, *, minimum: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer (got {raw!r})") from exc
    if value < minimum:
        raise RuntimeError(f"{name} must be >= {minimum} (got {value})")
    return value


def load_config() -> AppConfig:
    chunk_size = _env_int("FAIDX_CHUNK_SIZE", DEFAULT_CHUNK_SIZE, minimum=1)
    workers = _env_int("FAIDX_WORKERS", DEFAULT_WORKERS, minimum=1)

    index_suffix = os.environ.get("FAIDX_INDEX_SUFFIX", DEFAULT_INDEX_SUFFIX).strip()
    if not index_suffix:
        raise RuntimeError("FAIDX_INDEX_SUFFIX must not be empty")

    root = os.environ.get("FAIDX_ROOT", "").strip() or None

    return AppConfig(
        indexer=IndexerConfig(chunk_size=chunk_size, index_suffix=index_suffix, workers=workers),
        root=root,
    )

from __future__ import annotations

from pathlib import Path

from ..errors import UnsupportedCompressedInputError


GZIP_MAGIC = b"\x1f\x8b"


def is_gzip(path: str | Path) -> bool:
    # separate short-lived handle; the scanner opens its own
    with open(path, "rb") as handle:
        return handle.read(len(GZIP_MAGIC)) == GZIP_MAGIC


def check_not_compressed(path: str | Path) -> None:
    if is_gzip(path):
        raise UnsupportedCompressedInputError(
            "is gzip compressed. Indexing of gzip file is not supported.",
            path=str(path),
        )

from __future__ import annotations

import argparse
import sys

from .bio.extract import FastaReader
from .bio.faidx import index_many
from .config import load_config
from .errors import IndexingError


def _wrap(seq: str, width: int) -> list[str]:
    if width <= 0:
        return [seq]
    return [seq[i : i + width] for i in range(0, len(seq), width)] or [""]


def _cmd_index(args: argparse.Namespace) -> int:
    cfg = load_config().indexer
    outcomes = index_many(args.fasta, config=cfg, workers=args.workers)
    failed = 0
    for out in outcomes:
        if out.result is None:
            failed += 1
            print(f"ERROR: {out.error}", file=sys.stderr)
        else:
            print(out.result.index_path)
    return 1 if failed else 0


def _cmd_fetch(args: argparse.Namespace) -> int:
    reader = FastaReader(args.fasta, config=load_config().indexer)
    for text in args.region:
        region, seq = reader.fetch_region(text)
        print(f">{region}")
        for line in _wrap(seq, args.width):
            print(line)
    return 0


def _cmd_sequences(args: argparse.Namespace) -> int:
    reader = FastaReader(args.fasta, config=load_config().indexer)
    for rec in reader.records.values():
        print(f"{rec.name}\t{rec.sequence_length}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="faidx-mcp", description="Index and query FASTA files.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_index = sub.add_parser("index", help="Write <fasta>.fai for each file.")
    p_index.add_argument("fasta", nargs="+")
    p_index.add_argument("--workers", type=int, default=None)
    p_index.set_defaults(func=_cmd_index)

    p_fetch = sub.add_parser("fetch", help="Print regions (name[:start[-end]]) as FASTA.")
    p_fetch.add_argument("fasta")
    p_fetch.add_argument("region", nargs="+")
    p_fetch.add_argument("--width", type=int, default=60, help="Output line width (0 = no wrapping).")
    p_fetch.set_defaults(func=_cmd_fetch)

    p_seqs = sub.add_parser("sequences", help="Print name and length of every sequence.")
    p_seqs.add_argument("fasta")
    p_seqs.set_defaults(func=_cmd_sequences)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return int(args.func(args))
    except (IndexingError, KeyError, ValueError, OSError, RuntimeError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

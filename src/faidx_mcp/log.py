from __future__ import annotations

import os
import sys
import time


def log(message: str) -> None:
    if os.environ.get("FAIDX_MCP_QUIET", "").strip().lower() in {"1", "true", "yes"}:
        return
    ts = time.strftime("%Y-%m-%d %H:%M:%S", time.gmtime())
    # stdout carries the stdio MCP transport
    print(f"[{ts}] {message}", file=sys.stderr, flush=True)

from __future__ import annotations

import sys
from pathlib import Path


def main() -> None:
    # run from a source checkout without installing
    sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

    from faidx_mcp.mcp_stdio_server import main as _server_main

    _server_main()


if __name__ == "__main__":
    main()

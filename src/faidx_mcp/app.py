from __future__ import annotations

from .config import load_config
from .tools import ToolDispatcher


def build_dispatcher() -> ToolDispatcher:
    cfg = load_config()
    return ToolDispatcher(config=cfg.indexer, root=cfg.root)

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import asdict
from dataclasses import field
from pathlib import Path
from typing import Any

from .bio.extract import FastaReader
from .bio.faidx import index_many
from .config import IndexerConfig


def _as_text(value: object | None) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def _as_list_of_str(value: object | None) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        out: list[str] = []
        for item in value:
            if item is None:
                continue
            out.append(str(item))
        return out
    return [str(value)]


def _as_bool(value: object | None, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        v = value.strip().lower()
        if v in {"1", "true", "yes", "y", "on"}:
            return True
        if v in {"0", "false", "no", "n", "off"}:
            return False
    return default


def _as_int(value: object | None, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str) and value.strip():
        return int(float(value.strip()))
    return default


def tool_definitions() -> list[dict[str, Any]]:
    return [
        {
            "name": "faidx.index",
            "description": "Build the .fai random-access index for one or more uncompressed FASTA files.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "path": {"type": "string"},
                    "paths": {"type": "array", "items": {"type": "string"}},
                    "workers": {"type": "integer"},
                },
                "anyOf": [{"required": ["path"]}, {"required": ["paths"]}],
            },
        },
        {
            "name": "faidx.sequences",
            "description": "List sequence names and lengths of a FASTA file (indexing it if needed).",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "path": {"type": "string"},
                    "rebuild": {"type": "boolean"},
                },
                "required": ["path"],
            },
        },
        {
            "name": "faidx.fetch",
            "description": "Fetch a subsequence by region (name, name:start or name:start-end; 1-based inclusive).",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "path": {"type": "string"},
                    "region": {"type": "string"},
                },
                "required": ["path", "region"],
            },
        },
        {
            "name": "faidx.validate_region",
            "description": "Check a region against the sequence lengths in the index.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "path": {"type": "string"},
                    "region": {"type": "string"},
                },
                "required": ["path", "region"],
            },
        },
    ]


@dataclass(frozen=True)
class ToolDispatcher:
    config: IndexerConfig = field(default_factory=IndexerConfig)
    root: str | None = None

    def list_tools(self) -> dict[str, Any]:
        return {"tools": tool_definitions()}

    def _resolve(self, raw: object | None) -> str:
        text = _as_text(raw).strip()
        if not text:
            raise ValueError("path is required")
        path = Path(text)
        if self.root is None:
            return str(path)
        root = Path(self.root).resolve()
        resolved = (root / path).resolve()
        if not resolved.is_relative_to(root):
            raise ValueError(f"path is outside the allowed root: {text}")
        return str(resolved)

    def _reader(self, arguments: dict[str, Any], *, rebuild: bool = False) -> FastaReader:
        return FastaReader(self._resolve(arguments.get("path")), config=self.config, rebuild=rebuild)

    def call_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        if name == "faidx.index":
            raw_paths = _as_list_of_str(arguments.get("paths")) or _as_list_of_str(arguments.get("path")) or []
            if not raw_paths:
                raise ValueError("path or paths is required")
            paths = [self._resolve(p) for p in raw_paths]
            workers = _as_int(arguments.get("workers"), self.config.workers)
            outcomes = index_many(paths, config=self.config, workers=workers)
            results: list[dict[str, Any]] = []
            for out in outcomes:
                if out.result is None:
                    results.append({"path": out.fasta_path, "ok": False, "error": out.error})
                    continue
                results.append(
                    {
                        "path": out.fasta_path,
                        "ok": True,
                        "index_path": out.result.index_path,
                        "sequences": len(out.result.records),
                    }
                )
            return {"results": results, "failed": sum(1 for r in results if not r["ok"])}

        if name == "faidx.sequences":
            reader = self._reader(arguments, rebuild=_as_bool(arguments.get("rebuild"), False))
            return {
                "path": str(reader.fasta_path),
                "index_path": str(reader.index_path),
                "sequences": [
                    {"name": rec.name, "length": rec.sequence_length} for rec in reader.records.values()
                ],
            }

        if name == "faidx.fetch":
            region_text = _as_text(arguments.get("region"))
            reader = self._reader(arguments)
            region, seq = reader.fetch_region(region_text)
            return {"region": str(region), **asdict(region), "sequence": seq}

        if name == "faidx.validate_region":
            region_text = _as_text(arguments.get("region"))
            reader = self._reader(arguments)
            try:
                region = reader.region(region_text)
            except (KeyError, ValueError) as exc:
                return {"valid": False, "error": str(exc.args[0] if isinstance(exc, KeyError) else exc)}
            return {"valid": True, "region": str(region), **asdict(region)}

        raise ValueError(f"Unknown tool: {name}")

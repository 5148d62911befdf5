from __future__ import annotations

import json
import sys
from typing import Any
from typing import BinaryIO

from .app import build_dispatcher
from .log import log
from .tools import ToolDispatcher


PROTOCOL_VERSION = "2024-11-05"
SERVER_INFO = {"name": "faidx-mcp", "version": "0.1.0"}


def read_message(stream: BinaryIO) -> dict[str, Any] | None:
    headers: dict[str, str] = {}
    while True:
        line = stream.readline()
        if not line:
            return None
        s = line.decode("utf-8", errors="replace").strip()
        if not s:
            break
        if ":" in s:
            k, v = s.split(":", 1)
            headers[k.strip().lower()] = v.strip()

    length = int(headers.get("content-length", "0"))
    if length <= 0:
        return None
    body = stream.read(length)
    return json.loads(body.decode("utf-8", errors="replace"))


def write_message(stream: BinaryIO, payload: dict[str, Any]) -> None:
    raw = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    stream.write(f"Content-Length: {len(raw)}\r\n\r\n".encode("ascii"))
    stream.write(raw)
    stream.flush()


def _result_text(obj: object) -> dict[str, Any]:
    return {"content": [{"type": "text", "text": json.dumps(obj, ensure_ascii=False, indent=2)}]}


def _error(err: Exception) -> dict[str, Any]:
    return {"content": [{"type": "text", "text": f"ERROR: {err}"}], "isError": True}


def handle_message(dispatcher: ToolDispatcher, msg: dict[str, Any]) -> dict[str, Any] | None:
    """Response for one JSON-RPC message, or None for notifications."""
    method = msg.get("method")
    msg_id = msg.get("id")

    try:
        if method == "initialize":
            result = {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": SERVER_INFO,
            }
            return {"jsonrpc": "2.0", "id": msg_id, "result": result}
        if method == "tools/list":
            return {"jsonrpc": "2.0", "id": msg_id, "result": dispatcher.list_tools()}
        if method == "tools/call":
            params = msg.get("params") or {}
            name = params.get("name")
            arguments = params.get("arguments") or {}
            if not isinstance(name, str) or not isinstance(arguments, dict):
                raise ValueError("Invalid tools/call params")
            out = dispatcher.call_tool(name, arguments)
            return {"jsonrpc": "2.0", "id": msg_id, "result": _result_text(out)}

        if msg_id is not None:
            return {"jsonrpc": "2.0", "id": msg_id, "error": {"code": -32601, "message": "Method not found"}}
        return None
    except Exception as exc:
        log(f"{method} failed: {exc}")
        if msg_id is None:
            return None
        return {"jsonrpc": "2.0", "id": msg_id, "result": _error(exc)}


def serve(dispatcher: ToolDispatcher, stdin: BinaryIO, stdout: BinaryIO) -> None:
    while True:
        msg = read_message(stdin)
        if msg is None:
            break
        resp = handle_message(dispatcher, msg)
        if resp is not None:
            write_message(stdout, resp)


def main() -> None:
    serve(build_dispatcher(), sys.stdin.buffer, sys.stdout.buffer)


if __name__ == "__main__":
    main()

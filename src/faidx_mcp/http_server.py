from __future__ import annotations

import argparse
import json
import os
from http.server import BaseHTTPRequestHandler
from http.server import ThreadingHTTPServer
from typing import Any

from .log import log
from .tools import ToolDispatcher


_DISPATCHER: ToolDispatcher | None = None
_ALLOW_ALL_ORIGINS = True
_ALLOWED_ORIGINS: set[str] = set()


def _init_cors() -> None:
    raw = os.environ.get("FAIDX_CORS_ORIGINS", "*")
    parts = [p.strip() for p in raw.split(",") if p.strip()]
    global _ALLOW_ALL_ORIGINS, _ALLOWED_ORIGINS
    if not parts or "*" in parts:
        _ALLOW_ALL_ORIGINS = True
        _ALLOWED_ORIGINS = set()
    else:
        _ALLOW_ALL_ORIGINS = False
        _ALLOWED_ORIGINS = set(parts)


def _error_status(exc: Exception) -> int:
    if isinstance(exc, (KeyError, FileNotFoundError)):
        return 404
    if isinstance(exc, OSError):
        return 500
    return 400


class Handler(BaseHTTPRequestHandler):
    _MAX_BODY_BYTES = 1024 * 1024

    @property
    def dispatcher(self) -> ToolDispatcher:
        if _DISPATCHER is None:
            raise RuntimeError("Server not initialized")
        return _DISPATCHER

    def _set_cors_headers(self) -> None:
        origin = self.headers.get("Origin")
        if _ALLOW_ALL_ORIGINS:
            self.send_header("Access-Control-Allow-Origin", "*")
        elif origin and origin in _ALLOWED_ORIGINS:
            self.send_header("Access-Control-Allow-Origin", origin)
            self.send_header("Vary", "Origin")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.send_header("Access-Control-Max-Age", "600")

    def _json(self, code: int, payload: dict[str, Any]) -> None:
        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        self.send_response(code)
        self._set_cors_headers()
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def _read_json(self) -> dict[str, Any]:
        length_raw = self.headers.get("Content-Length")
        try:
            length = int(length_raw) if length_raw else 0
        except ValueError as exc:
            raise ValueError("Invalid Content-Length header") from exc
        if length < 0:
            raise ValueError("Invalid Content-Length header")
        if length > self._MAX_BODY_BYTES:
            raise ValueError("Request body too large")
        raw = (self.rfile.read(length) if length else b"") or b"{}"
        data = json.loads(raw.decode("utf-8", errors="replace"))
        if not isinstance(data, dict):
            raise ValueError("JSON body must be an object")
        return data

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        log(f"{self.address_string()} {format % args}")

    def do_OPTIONS(self) -> None:  # noqa: N802
        self.send_response(204)
        self._set_cors_headers()
        self.end_headers()

    def do_GET(self) -> None:  # noqa: N802
        if self.path.rstrip("/") == "/healthz":
            self._json(200, {"ok": True})
            return
        self._json(404, {"error": "not found"})

    def do_POST(self) -> None:  # noqa: N802
        try:
            if self.path.rstrip("/") == "/tools/list":
                self._json(200, self.dispatcher.list_tools())
                return
            if self.path.rstrip("/") == "/tools/call":
                body = self._read_json()
                name = body.get("name")
                arguments = body.get("arguments") or {}
                if not isinstance(name, str) or not isinstance(arguments, dict):
                    raise ValueError("Expected {name: str, arguments: object}")
                out = self.dispatcher.call_tool(name, arguments)
                self._json(200, {"ok": True, "result": out})
                return
            self._json(404, {"error": "not found"})
        except Exception as exc:
            self.log_error("error handling %s: %s", self.path, exc)
            self._json(_error_status(exc), {"ok": False, "error": str(exc)})


def make_server(host: str, port: int, dispatcher: ToolDispatcher) -> ThreadingHTTPServer:
    global _DISPATCHER
    _DISPATCHER = dispatcher
    _init_cors()
    return ThreadingHTTPServer((host, port), Handler)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    from .app import build_dispatcher

    httpd = make_server(args.host, args.port, build_dispatcher())
    log(f"listening: http://{args.host}:{args.port}")
    httpd.serve_forever()


if __name__ == "__main__":
    main()

from __future__ import annotations

import argparse
import asyncio
import json
import os
from contextlib import asynccontextmanager
from typing import Any, Iterable

import uvicorn
from starlette.applications import Starlette
from starlette.routing import Mount

from mcp.server import Server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from mcp.types import CallToolResult, TextContent, Tool

from .tools import ToolDispatcher
from .tools import tool_definitions


def list_mcp_tools() -> list[Tool]:
    tools: list[Tool] = []
    for item in tool_definitions():
        tools.append(
            Tool(
                name=item["name"],
                description=item.get("description"),
                inputSchema=item.get("inputSchema") or {"type": "object", "properties": {}},
            )
        )
    return tools


def _tool_result_payload(result: object) -> CallToolResult:
    if isinstance(result, (dict, list)):
        text = json.dumps(result, ensure_ascii=False, indent=2)
    else:
        text = json.dumps({"value": result}, ensure_ascii=False, indent=2)
    structured = result if isinstance(result, dict) else None
    return CallToolResult(content=[TextContent(type="text", text=text)], structuredContent=structured)


def build_app(
    dispatcher: ToolDispatcher,
    *,
    path: str = "/mcp",
    json_response: bool = False,
    stateless: bool = False,
) -> Starlette:
    server = Server("faidx-mcp")

    @server.list_tools()
    async def list_tools() -> Iterable[Tool]:
        return list_mcp_tools()

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]):
        # indexing is blocking file I/O
        result = await asyncio.to_thread(dispatcher.call_tool, name, arguments or {})
        return _tool_result_payload(result)

    session_manager = StreamableHTTPSessionManager(
        app=server,
        json_response=json_response,
        stateless=stateless,
    )

    @asynccontextmanager
    async def lifespan(_: Starlette):
        async with session_manager.run():
            yield

    route_path = path if path.startswith("/") else f"/{path}"
    return Starlette(
        routes=[Mount(route_path, app=session_manager.handle_request)],
        lifespan=lifespan,
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--host", default=os.environ.get("MCP_HTTP_HOST") or "127.0.0.1")
    parser.add_argument("--port", type=int, default=int(os.environ.get("MCP_HTTP_PORT") or "18081"))
    parser.add_argument("--path", default=os.environ.get("MCP_HTTP_PATH") or "/mcp")
    parser.add_argument(
        "--json-response",
        action="store_true",
        help="Return JSON responses instead of SSE streams.",
    )
    parser.add_argument(
        "--stateless",
        action="store_true",
        help="Disable session tracking (stateless StreamableHTTP).",
    )
    args = parser.parse_args(argv)

    from .app import build_dispatcher

    app = build_app(
        build_dispatcher(),
        path=str(args.path),
        json_response=bool(args.json_response),
        stateless=bool(args.stateless),
    )
    uvicorn.run(app, host=str(args.host), port=int(args.port), log_level="info")


if __name__ == "__main__":
    main()

"""MCP stdio server wiring for :class:`AgentBridge`."""
from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from agentbridge.bridge import AgentBridge
from agentbridge.core.errors import UnknownToolError
from agentbridge.core.logging import get_logger

if TYPE_CHECKING:
    from pydantic import AnyUrl

    from agentbridge.core.config import ServerConfig

logger = get_logger("server")


def create_server(bridge: AgentBridge) -> Server:
    """Build a low-level MCP server whose handlers delegate to *bridge*.

    The tool set is resolved per request, so the tool list reflects the
    registry at the time of the call.
    """
    server: Server = Server(
        bridge.config.server_name,
        version=bridge.config.server_version,
    )

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=tool["name"],
                description=tool["description"],
                inputSchema=tool["inputSchema"],
            )
            for tool in await bridge.list_tools()
        ]

    # Arguments are checked by the tool itself so clients get its messages.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        response = await bridge.call_tool(name, arguments)
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=response.text)],
            structuredContent=response.structured_content,
            isError=response.is_error,
        )

    # The low-level call_tool wrapper turns every exception into an isError
    # result; unknown names must reach the client as a JSON-RPC error.
    call_tool_handler = server.request_handlers[types.CallToolRequest]

    async def call_known_tool(req: types.CallToolRequest) -> types.ServerResult:
        try:
            await bridge.resolve_tool(req.params.name)
        except UnknownToolError as exc:
            raise McpError(
                types.ErrorData(code=types.INVALID_PARAMS, message=str(exc))
            ) from exc
        return await call_tool_handler(req)

    server.request_handlers[types.CallToolRequest] = call_known_tool

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        return [
            types.Resource(
                uri=resource.uri,
                name=resource.name,
                description=resource.description,
                mimeType=resource.mime_type,
            )
            for resource in await bridge.list_resources()
        ]

    @server.read_resource()
    async def read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
        content = await bridge.read_resource(str(uri))
        return [ReadResourceContents(content=content.text, mime_type=content.mime_type)]

    return server


async def serve_stdio(bridge: AgentBridge) -> None:
    server = create_server(bridge)
    logger.info("Serving %s over stdio", bridge.config.server_name)
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
    finally:
        bridge.shutdown()


def run_stdio(config: ServerConfig) -> None:
    """Run the server until the client disconnects."""
    asyncio.run(serve_stdio(AgentBridge(config)))

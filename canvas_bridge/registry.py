"""
Tool Registry

The capability interface tool bindings register against, and its MCP
implementation on top of the low-level ``mcp`` server.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Type

import anyio
import anyio.to_thread
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from pydantic import BaseModel

from .exceptions import ToolInvocationError

logger = logging.getLogger("canvas_bridge.registry")

Handler = Callable[[Any], str]


class ToolRegistry(Protocol):
    """Anything tool bindings can be registered with."""

    def register(
        self,
        name: str,
        description: str,
        schema: Type[BaseModel],
        handler: Handler,
    ) -> None:
        ...


@dataclass(frozen=True)
class RegisteredTool:
    name: str
    description: str
    schema: Type[BaseModel]
    handler: Handler

    def input_schema(self) -> Dict[str, Any]:
        return self.schema.model_json_schema()


class MCPToolRegistry:
    """
    ToolRegistry served over MCP.

    Arguments are validated against each tool's pydantic schema before the
    handler runs. Handlers are blocking, so each call runs in a worker thread
    and the event loop stays free for concurrent calls.
    """

    def __init__(self, name: str = "canvas-bridge"):
        self.name = name
        self.server = Server(name)
        self._tools: Dict[str, RegisteredTool] = {}
        self.server.list_tools()(self._list_tools)
        self.server.call_tool()(self._call_tool)

    def register(
        self,
        name: str,
        description: str,
        schema: Type[BaseModel],
        handler: Handler,
    ) -> None:
        if name in self._tools:
            raise ValueError(f"Tool already registered: {name}")
        self._tools[name] = RegisteredTool(name, description, schema, handler)
        logger.debug(f"Registered tool {name}")

    @property
    def tools(self) -> List[RegisteredTool]:
        return list(self._tools.values())

    def get(self, name: str) -> Optional[RegisteredTool]:
        return self._tools.get(name)

    def invoke(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        """
        Validate arguments and run a tool synchronously.

        Raises:
            ToolInvocationError: If the tool is unknown or the handler fails
            pydantic.ValidationError: If the arguments do not match the schema
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolInvocationError(name, message=f"Unknown tool: {name}")
        args = tool.schema.model_validate(arguments or {})
        return tool.handler(args)

    async def _list_tools(self) -> List[types.Tool]:
        return [
            types.Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema())
            for tool in self._tools.values()
        ]

    async def _call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
        text = await anyio.to_thread.run_sync(self.invoke, name, arguments)
        return [types.TextContent(type="text", text=text)]

    async def serve_stdio(self) -> None:
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )

    def run(self) -> None:
        """Serve the registered tools over stdio until the host disconnects."""
        logger.info(f"Serving {len(self._tools)} tools over stdio")
        anyio.run(self.serve_stdio)

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import httpx

project_root = os.path.abspath(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(__file__))))
)
sys.path.insert(0, project_root)

from mcp.types import TextContent, Tool
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from prometheus_client import Counter

from src.utils.majestic.client import MajesticClient
from src.utils.majestic.errors import MajesticError
from src.utils.majestic.tools import TOOLS, TOOLS_BY_NAME
from src.utils.majestic.util import configure_logging, get_majestic_api_key

SERVICE_NAME = Path(__file__).parent.name
SERVER_NAME = f"{SERVICE_NAME}-server"
SERVER_VERSION = "1.0.0"

configure_logging()
logger = logging.getLogger(SERVICE_NAME)

tool_calls_total = Counter(
    "majestic_mcp_tool_calls_total",
    "Total number of Majestic tool calls",
    ["tool", "outcome"],
)


def create_server(
    user_id,
    api_key: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
):
    """Create a new server instance with optional user context

    api_key pins the Majestic key for this instance; when omitted the key is
    read from the environment on every tool call.
    """
    server = Server(SERVER_NAME)

    server.user_id = user_id
    server.api_key = api_key

    @server.list_tools()
    async def handle_list_tools() -> list[Tool]:
        """List available tools for Majestic"""
        logger.info(f"Listing tools for user: {server.user_id}")
        return [tool.to_tool() for tool in TOOLS]

    # The pydantic argument models are the validation boundary; their errors name the field
    @server.call_tool(validate_input=False)
    async def handle_call_tool(name: str, arguments: dict | None) -> list[TextContent]:
        """Handle tool execution requests for Majestic"""
        logger.info(f"Tool: {name}, User: {server.user_id}")

        tool = TOOLS_BY_NAME.get(name)
        if tool is None:
            tool_calls_total.labels(tool="unknown", outcome="error").inc()
            raise ValueError(f"Unknown tool: {name}")

        try:
            args = tool.parse_arguments(arguments)
            client = MajesticClient(
                get_majestic_api_key(server.api_key), transport=transport
            )
            result = await tool.run(args, client)
        except MajesticError as e:
            tool_calls_total.labels(tool=name, outcome="error").inc()
            logger.error(f"Error processing {name}: {e}")
            raise

        tool_calls_total.labels(tool=name, outcome="ok").inc()
        return result

    return server


def get_initialization_options(server_instance: Server) -> InitializationOptions:
    """Get the initialization options for the server"""
    return InitializationOptions(
        server_name=SERVER_NAME,
        server_version=SERVER_VERSION,
        capabilities=server_instance.get_capabilities(
            notification_options=NotificationOptions(),
            experimental_capabilities={},
        ),
    )

import os
import sys
import logging
import argparse
import threading
import contextlib

import uvicorn
from dotenv import load_dotenv
from starlette.routing import Mount, Route
from starlette.applications import Starlette
from starlette.responses import JSONResponse, Response
from prometheus_client import Counter, Gauge, generate_latest, CONTENT_TYPE_LATEST

from mcp.server.sse import SseServerTransport
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager

project_root = os.path.abspath(os.path.dirname(os.path.dirname(os.path.dirname(__file__))))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

load_dotenv()

from src.servers.majestic.main import (
    SERVER_VERSION,
    create_server,
    get_initialization_options,
)
from src.utils.majestic.tools import TOOLS
from src.utils.majestic.util import configure_logging

configure_logging()
logger = logging.getLogger("majestic-server")

SSE_PATH = "/sse"
SSE_MESSAGE_PATH = "/sse/message/"
MCP_PATH = "/mcp"

# Prometheus metrics
active_connections = Gauge(
    "majestic_mcp_active_connections", "Number of active SSE connections", ["transport"]
)
connection_total = Counter(
    "majestic_mcp_connection_total", "Total number of MCP connections", ["transport"]
)

# Default metrics port
METRICS_PORT = 9091


def server_info():
    """Static metadata served at the root path"""
    return {
        "name": "Majestic SEO MCP Server",
        "version": SERVER_VERSION,
        "endpoints": {
            "mcp": MCP_PATH,
            "sse": SSE_PATH,
        },
        "tools": [tool.name for tool in TOOLS],
    }


def create_metrics_app():
    """Create a separate Starlette app just for metrics"""

    async def metrics_endpoint(request):
        """Prometheus metrics endpoint"""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    routes = [Route("/metrics", endpoint=metrics_endpoint)]

    return Starlette(routes=routes)


class StreamableHTTPEndpoint:
    """ASGI app handing /mcp requests to the session manager"""

    def __init__(self, session_manager: StreamableHTTPSessionManager):
        self.session_manager = session_manager

    async def __call__(self, scope, receive, send):
        connection_total.labels(transport="mcp").inc()
        await self.session_manager.handle_request(scope, receive, send)


class SSEMessageEndpoint:
    """ASGI app handing SSE client messages to the transport"""

    def __init__(self, sse_transport: SseServerTransport):
        self.sse_transport = sse_transport

    async def __call__(self, scope, receive, send):
        await self.sse_transport.handle_post_message(scope, receive, send)


def create_starlette_app(api_key=None, transport=None):
    """Create the Starlette app serving Majestic over SSE and streamable HTTP

    Without api_key, every tool call reads MAJESTIC_API_KEY from the
    environment when it runs.
    """
    sse_transport = SseServerTransport(SSE_MESSAGE_PATH)

    session_manager = StreamableHTTPSessionManager(
        app=create_server("remote", api_key, transport=transport),
        stateless=True,
    )

    async def handle_sse(request):
        """Handle SSE connection requests"""
        logger.info("New SSE connection requested")
        server_instance = create_server("remote", api_key, transport=transport)
        init_options = get_initialization_options(server_instance)

        active_connections.labels(transport="sse").inc()
        connection_total.labels(transport="sse").inc()
        try:
            async with sse_transport.connect_sse(
                request.scope, request.receive, request._send
            ) as streams:
                logger.info("SSE connection established")
                await server_instance.run(
                    streams[0],
                    streams[1],
                    init_options,
                )
        finally:
            active_connections.labels(transport="sse").dec()
            logger.info("Closed SSE connection")

        return Response()

    async def root_handler(request):
        """Root endpoint describing the server"""
        return JSONResponse(server_info())

    @contextlib.asynccontextmanager
    async def lifespan(app):
        async with session_manager.run():
            logger.info("Streamable HTTP session manager started")
            yield

    routes = [
        Route("/", endpoint=root_handler),
        Route(SSE_PATH, endpoint=handle_sse),
        # clients that drop the trailing slash would otherwise get a 307
        Route(
            SSE_MESSAGE_PATH.rstrip("/"),
            endpoint=SSEMessageEndpoint(sse_transport),
            methods=["POST"],
        ),
        Mount(SSE_MESSAGE_PATH, app=sse_transport.handle_post_message),
        Route(MCP_PATH, endpoint=StreamableHTTPEndpoint(session_manager)),
    ]

    return Starlette(routes=routes, lifespan=lifespan)


def run_metrics_server(host, port):
    """Run a separate metrics server on the specified port"""
    metrics_app = create_metrics_app()
    logger.info(f"Starting metrics server on {host}:{port}")
    uvicorn.run(metrics_app, host=host, port=port)


def main(argv=None):
    """Main entry point for the Starlette server"""
    parser = argparse.ArgumentParser(description="Majestic MCP Server")
    parser.add_argument("--host", default="0.0.0.0", help="Host for Starlette server")
    parser.add_argument(
        "--port", type=int, default=8000, help="Port for Starlette server"
    )

    args = parser.parse_args(argv)

    metrics_thread = threading.Thread(
        target=run_metrics_server, args=(args.host, METRICS_PORT), daemon=True
    )
    metrics_thread.start()
    logger.info(f"Starting Metrics server on http://{args.host}:{METRICS_PORT}/metrics")

    app = create_starlette_app()
    logger.info(f"Starting Starlette server on {args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()

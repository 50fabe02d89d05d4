import os
import sys
import argparse
import logging

project_root = os.path.abspath(os.path.dirname(os.path.dirname(os.path.dirname(__file__))))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from src.utils.majestic.util import configure_logging

configure_logging()
logger = logging.getLogger("majestic-mcp")


def main(argv=None):
    """Parse arguments and launch the Majestic MCP server"""
    parser = argparse.ArgumentParser(description="Majestic MCP Server")
    parser.add_argument(
        "--stdio",
        action="store_true",
        help="Serve a single session over stdin/stdout instead of HTTP",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Host for server")
    parser.add_argument("--port", type=int, default=8000, help="Port for server")
    parser.add_argument(
        "--user-id", default="local", help="User ID for the stdio server context"
    )

    args = parser.parse_args(argv)

    if args.stdio:
        from src.servers.local import run as local_run

        local_run(["--user-id", args.user_id])
        return

    logger.info(f"Starting Majestic MCP server on {args.host}:{args.port}")
    from src.servers.remote import main as remote_main

    remote_main(["--host", args.host, "--port", str(args.port)])


if __name__ == "__main__":
    main()

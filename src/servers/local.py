import os
import sys
import asyncio
import logging
import argparse

import mcp.server.stdio
from dotenv import load_dotenv

project_root = os.path.abspath(os.path.dirname(os.path.dirname(os.path.dirname(__file__))))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

load_dotenv()

from src.servers.majestic.main import create_server, get_initialization_options
from src.utils.majestic.errors import ConfigError
from src.utils.majestic.util import configure_logging, get_majestic_api_key

configure_logging()
logger = logging.getLogger("majestic-local-stdio")


async def run_stdio_server(server, get_initialization_options):
    """Run the server using stdin/stdout streams"""
    logger.info("Starting stdio server")
    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            get_initialization_options(),
        )


async def main(argv=None):
    """Main entry point for the stdio server"""
    parser = argparse.ArgumentParser(description="Majestic MCP Local Stdio Server")
    parser.add_argument(
        "--user-id", default="local", help="User ID for server context (optional)"
    )

    args = parser.parse_args(argv)

    # The key is read once; without it the process never starts serving
    try:
        api_key = get_majestic_api_key()
    except ConfigError as e:
        logger.error(f"Refusing to start: {e}")
        sys.exit(1)

    server_instance = create_server(user_id=args.user_id, api_key=api_key)

    logger.info(f"Starting local stdio server with user: {args.user_id}")
    await run_stdio_server(
        server_instance, lambda: get_initialization_options(server_instance)
    )


def run(argv=None):
    asyncio.run(main(argv))


if __name__ == "__main__":
    logger.info("Starting Majestic MCP local stdio server")
    run()

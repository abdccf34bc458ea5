#!/usr/bin/env python3
"""
resp-kv Server Entry Point

This is the main entry point for starting the resp-kv server.

Usage:
    python -m respkv.server                    # Default settings (0.0.0.0:6379)
    python -m respkv.server --port 7000        # Custom port
    python -m respkv.server --host 127.0.0.1   # Custom host
    python -m respkv.server --debug            # Enable debug logging

Environment Variables:
    RESPKV_HOST                 - Server bind address
    RESPKV_PORT                 - Server port
    RESPKV_READ_BUFFER_SIZE     - Per-connection read buffer limit
    RESPKV_CONNECTION_TIMEOUT   - Idle seconds before disconnect (0 = never)
    RESPKV_DEBUG                - Enable debug mode (true/false)
    RESPKV_LOG_LEVEL            - Log level when not in debug mode
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from .config.settings import settings
from .network.tcp_server import RESPServer
from .store.store import KVStore


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="resp-kv: In-Memory Key-Value Server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Host address to bind to",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Port number to listen on",
    )

    parser.add_argument(
        "--timeout",
        type=int,
        default=settings.CONNECTION_TIMEOUT,
        help="Idle seconds before a connection is closed (0 = never)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the server."""
    args = parse_args(argv)

    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    store = KVStore()
    server = RESPServer(host=args.host, port=args.port, store=store, timeout=args.timeout)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    async def shutdown(sig: signal.Signals) -> None:
        """Handle shutdown signal."""
        logger.info(f"Received signal {sig.name}, initiating shutdown...")
        await server.stop()

    # Register signal handlers (Unix only)
    if sys.platform != 'win32':
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(
                sig,
                lambda s=sig: asyncio.create_task(shutdown(s))
            )

    logger.info("Starting resp-kv server")
    logger.info(f"  Host: {args.host}")
    logger.info(f"  Port: {args.port}")
    logger.info(f"  Debug: {args.debug}")

    try:
        loop.run_until_complete(server.start())
    except OSError as e:
        logger.error(f"Failed to bind to {args.host}:{args.port}: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        loop.run_until_complete(server.stop())
    finally:
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    main()

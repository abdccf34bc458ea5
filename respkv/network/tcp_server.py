"""
Async TCP Server Module

This module implements the asynchronous TCP server for resp-kv.

Each accepted connection gets its own coroutine that loops:
    1. Decode one frame with FrameDecoder
    2. Dispatch the Command through CommandDispatcher
    3. Encode and write the Reply
until the client disconnects or sends a malformed frame.
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import Optional, Set

from ..config.settings import settings
from ..protocol.commands import Reply
from ..protocol.parser import FrameDecoder, ProtocolError, encode_reply
from ..store.dispatcher import CommandDispatcher
from ..store.store import KVStore

logger = logging.getLogger(__name__)


class RESPServer:
    """
    Asynchronous TCP server for the resp-kv service.

    This server handles multiple concurrent clients using asyncio.
    Each client connection is handled in a separate coroutine, and
    commands on one connection are answered strictly in order.

    Features:
    - Non-blocking I/O with asyncio
    - Persistent connections (multiple commands per connection)
    - Protocol errors are reported to the client, then the connection closes
    - Shared KVStore across all connections

    Usage:
        server = RESPServer(host='0.0.0.0', port=6379)
        await server.start()  # Runs forever

    Attributes:
        host: Server bind address (e.g., '0.0.0.0')
        port: Server port number (e.g., 6379)
        store: The KVStore instance shared by all connections
        dispatcher: The CommandDispatcher bound to the store
        decoder: The FrameDecoder used for every connection
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            store: KVStore = None,
            timeout: int = None,
    ):
        """
        Initialize the server.

        Args:
            host: Bind address (default from settings)
            port: Port number (default from settings)
            store: KVStore instance (creates new one if not provided)
            timeout: Idle seconds before a connection is closed, 0 disables
                (default from settings)
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.store = store if store is not None else KVStore()
        self.timeout = timeout if timeout is not None else settings.CONNECTION_TIMEOUT
        self.dispatcher = CommandDispatcher(self.store)
        self.decoder = FrameDecoder()

        # Server state
        self._server: Optional[asyncio.Server] = None
        self._running = False
        self._connection_count = 0
        self._active_connections = 0
        self._total_requests = 0
        self._protocol_errors = 0
        self._writers: Set[StreamWriter] = set()

    async def handle_client(
            self,
            reader: StreamReader,
            writer: StreamWriter
    ) -> None:
        """
        Handle a single client connection.

        Args:
            reader: StreamReader for reading from the client
            writer: StreamWriter for writing to the client
        """
        addr = writer.get_extra_info('peername')
        self._connection_count += 1
        self._active_connections += 1
        self._writers.add(writer)
        logger.debug(f"Client connected: {addr}")

        try:
            while True:
                try:
                    command = await self._read_command(reader)
                except ProtocolError as exc:
                    self._protocol_errors += 1
                    logger.warning(f"Protocol error from {addr}: {exc}")
                    writer.write(encode_reply(Reply.protocol_error(str(exc))))
                    await writer.drain()
                    break
                except asyncio.TimeoutError:
                    logger.debug(f"Idle timeout, closing {addr}")
                    break

                if command is None:
                    logger.debug(f"Client disconnected: {addr}")
                    break

                logger.debug(f"Received from {addr}: {command.name} {command.args}")
                self._total_requests += 1
                reply = self.dispatcher.dispatch(command)

                writer.write(encode_reply(reply))
                await writer.drain()

        except (ConnectionResetError, BrokenPipeError):
            logger.debug(f"Connection reset by client: {addr}")
        except Exception as exc:  # Log unexpected errors but keep server alive
            logger.exception(f"Error handling client {addr}: {exc}")
        finally:
            self._active_connections -= 1
            self._writers.discard(writer)
            try:
                writer.close()
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def _read_command(self, reader: StreamReader):
        """Decode the next frame, honouring the idle timeout if one is set."""
        if self.timeout and self.timeout > 0:
            return await asyncio.wait_for(self.decoder.read_command(reader), self.timeout)
        return await self.decoder.read_command(reader)

    async def start(self) -> None:
        """
        Start the server and begin accepting connections.

        Runs until stop() is called or the task is cancelled.

        Raises:
            OSError: If the address cannot be bound
        """
        if self._running:
            return

        self._server = await asyncio.start_server(
            self.handle_client,
            self.host,
            self.port,
            limit=settings.READ_BUFFER_SIZE,
        )
        self._running = True

        addrs = ', '.join(str(sock.getsockname()) for sock in self._server.sockets or [])
        logger.info(f"Serving on {addrs}")

        try:
            async with self._server:
                await self._server.serve_forever()
        except asyncio.CancelledError:
            # Expected during shutdown/fixture cleanup
            logger.debug("Server start cancelled")
        finally:
            self._running = False

    async def stop(self) -> None:
        """
        Stop the server gracefully.

        Closes the listening socket, closes open client connections and
        waits for the server to fully shut down.
        """
        if self._server is None:
            return

        self._server.close()
        for writer in list(self._writers):
            writer.close()
        try:
            await self._server.wait_closed()
        finally:
            self._server = None
            self._running = False

    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running

    def get_stats(self) -> dict:
        """
        Get server statistics.

        Returns:
            Dictionary with connection counts, request counts, protocol
            error counts and store statistics.
        """
        return {
            "running": self._running,
            "host": self.host,
            "port": self.port,
            "total_connections": self._connection_count,
            "active_connections": self._active_connections,
            "total_requests": self._total_requests,
            "protocol_errors": self._protocol_errors,
            "store_stats": self.store.get_stats(),
        }


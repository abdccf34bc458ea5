"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
import pytest
import pytest_asyncio
from contextlib import closing
from typing import AsyncGenerator

from respkv.network.tcp_server import RESPServer
from respkv.protocol.parser import FrameDecoder, encode_command
from respkv.store.dispatcher import CommandDispatcher
from respkv.store.store import KVStore


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


def make_reader(data: bytes, eof: bool = True, limit: int = 2 ** 16) -> asyncio.StreamReader:
    """Build a StreamReader pre-loaded with data (must run inside a loop)."""
    reader = asyncio.StreamReader(limit=limit)
    reader.feed_data(data)
    if eof:
        reader.feed_eof()
    return reader


# ============================================================================
# Store Fixtures
# ============================================================================

@pytest.fixture
def store() -> KVStore:
    """Create a fresh, empty KVStore."""
    return KVStore()


@pytest.fixture
def dispatcher(store: KVStore) -> CommandDispatcher:
    """Create a CommandDispatcher bound to the store fixture."""
    return CommandDispatcher(store)


# ============================================================================
# Protocol Fixtures
# ============================================================================

@pytest.fixture
def decoder() -> FrameDecoder:
    """Create a FrameDecoder instance."""
    return FrameDecoder()


@pytest.fixture
def reader_factory():
    """
    Factory fixture building StreamReaders fed with fixed bytes.

    Usage:
        async def test_something(decoder, reader_factory):
            reader = reader_factory(b"*1\\r\\n$4\\r\\nPING\\r\\n")
            command = await decoder.read_command(reader)
    """
    return make_reader


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


@pytest_asyncio.fixture
async def server(server_port: int) -> AsyncGenerator[RESPServer, None]:
    """
    Create and start a server instance for testing.

    This fixture:
    1. Creates a RESPServer on a random free port
    2. Starts it in a background task
    3. Yields the server for testing
    4. Cleans up after the test
    """
    srv = RESPServer(host='127.0.0.1', port=server_port, timeout=0)

    # Start server in background task
    server_task = asyncio.create_task(srv.start())

    # Wait for server to be ready
    await asyncio.sleep(0.1)

    yield srv

    # Cleanup
    await srv.stop()
    server_task.cancel()
    try:
        await server_task
    except asyncio.CancelledError:
        pass


# ============================================================================
# Client Fixtures
# ============================================================================

class AsyncClient:
    """
    Helper class for testing server interactions.

    Sends commands as request frames and reads back exactly one reply.

    Usage:
        async with AsyncClient('127.0.0.1', 6379) as client:
            reply = await client.send_command("SET", "key", "value")
            assert reply == b"+OK\\r\\n"
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self.reader = None
        self.writer = None

    async def connect(self) -> None:
        """Establish connection to server."""
        self.reader, self.writer = await asyncio.open_connection(
            self.host, self.port
        )

    async def disconnect(self) -> None:
        """Close connection to server."""
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def send_raw(self, data: bytes) -> None:
        """Write raw bytes to the server."""
        self.writer.write(data)
        await self.writer.drain()

    async def read_reply(self) -> bytes:
        """
        Read one complete reply, returned with its framing intact.
        """
        line = await self.reader.readuntil(b"\r\n")
        if line.startswith(b"$") and not line.startswith(b"$-"):
            length = int(line[1:-2])
            line += await self.reader.readexactly(length + 2)
        return line

    async def send_command(self, *parts: str) -> bytes:
        """
        Send a command and receive the reply.

        Args:
            parts: Command name followed by its arguments

        Returns:
            Raw reply bytes, e.g. b"+PONG\\r\\n"
        """
        await self.send_raw(encode_command(*parts))
        return await self.read_reply()

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


@pytest.fixture
def client_factory(server_port: int):
    """
    Factory fixture to create test clients.

    Usage:
        async def test_something(server, client_factory):
            async with client_factory() as client:
                reply = await client.send_command("GET", "key")
    """
    def factory() -> AsyncClient:
        return AsyncClient('127.0.0.1', server_port)
    return factory


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )

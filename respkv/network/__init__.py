"""Network module for resp-kv."""

from .tcp_server import RESPServer

__all__ = ["RESPServer"]

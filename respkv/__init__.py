"""
resp-kv: In-Memory Key-Value Server

A small key-value server speaking a RESP-style protocol over raw TCP,
built with Python asyncio.
"""

__version__ = "1.0.0"

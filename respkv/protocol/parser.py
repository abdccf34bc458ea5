"""
Protocol Frame Decoder Module

This module reads request frames off a connection's byte stream and
encodes replies back into protocol bytes.

Request grammar:
    *<N>\\r\\n                  array header, N > 0 elements follow
    $<L>\\r\\n<L bytes>\\r\\n     bulk string element (L >= 0)
    $<L>\\r\\n                  null bulk string (L < 0), no payload follows

Reply encodings:
    +<text>\\r\\n               simple string
    $<len>\\r\\n<bytes>\\r\\n     bulk string
    $-1\\r\\n                   null bulk string
    -<message>\\r\\n            error
"""

import asyncio
from asyncio import StreamReader
from typing import List, Optional

from .commands import Command, Reply, ReplyType

CRLF = b"\r\n"

# surrogateescape lets arbitrary payload bytes survive decode/encode
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"


class ProtocolError(Exception):
    """Base class for all frame decoding errors."""


class InvalidArrayHeaderError(ProtocolError):
    """Frame does not start with a well-formed '*<N>' line."""


class EmptyArrayError(ProtocolError):
    """Frame declares zero elements."""


class InvalidBulkStringHeaderError(ProtocolError):
    """Element does not start with a well-formed '$<L>' line."""


class MissingTerminatorError(ProtocolError):
    """Bulk string payload is not followed by CRLF."""


class IncompleteFrameError(ProtocolError):
    """Stream ended in the middle of a frame."""


def _parse_length(text: bytes) -> Optional[int]:
    """Parse a signed decimal length, returning None if it is not one."""
    digits = text[1:] if text.startswith(b"-") else text
    if not digits or not digits.isdigit():
        return None
    return int(text)


class FrameDecoder:
    """
    Decoder for request frames read from an asyncio StreamReader.

    Each call to read_command() consumes exactly the bytes of one frame,
    leaving the reader positioned at the start of the next one. The
    decoder holds no state between calls, so one instance can serve any
    number of connections.

    Usage:
        decoder = FrameDecoder()
        command = await decoder.read_command(reader)
        if command is None:
            ...  # client closed the connection between frames
    """

    def __init__(self, encoding: str = ENCODING, errors: str = ENCODING_ERRORS):
        self.encoding = encoding
        self.errors = errors

    async def read_command(self, reader: StreamReader) -> Optional[Command]:
        """
        Read one frame and return it as a Command.

        Args:
            reader: Buffered byte stream of the connection

        Returns:
            The decoded Command, or None if the stream ended cleanly
            before any byte of a new frame was read.

        Raises:
            InvalidArrayHeaderError: Missing '*' or non-integer element count
            EmptyArrayError: Element count of zero
            InvalidBulkStringHeaderError: Missing '$' or non-integer length
            MissingTerminatorError: Payload not followed by CRLF
            IncompleteFrameError: Stream ended mid-frame
        """
        try:
            header = await reader.readuntil(CRLF)
        except asyncio.IncompleteReadError as exc:
            if not exc.partial:
                return None
            raise IncompleteFrameError("stream ended inside array header") from exc
        except asyncio.LimitOverrunError as exc:
            raise InvalidArrayHeaderError("array header too long") from exc

        count = self._parse_array_header(header[:-2])

        elements: List[str] = []
        try:
            for _ in range(count):
                elements.append(await self._read_bulk_string(reader))
        except asyncio.IncompleteReadError as exc:
            raise IncompleteFrameError(
                f"stream ended after {len(elements)} of {count} elements"
            ) from exc

        return Command(name=elements[0], args=elements[1:])

    def _parse_array_header(self, line: bytes) -> int:
        """Validate a '*<N>' line (CRLF stripped) and return N."""
        if not line.startswith(b"*"):
            raise InvalidArrayHeaderError(f"expected '*', got {line[:1]!r}")

        count = _parse_length(line[1:])
        if count is None:
            raise InvalidArrayHeaderError(f"invalid array length {line[1:]!r}")
        if count == 0:
            raise EmptyArrayError("empty command frame")
        if count < 0:
            raise InvalidArrayHeaderError(f"negative array length {count}")
        return count

    async def _read_bulk_string(self, reader: StreamReader) -> str:
        """Read one '$<L>' element, returning '' for a null bulk string."""
        try:
            header = await reader.readuntil(CRLF)
        except asyncio.LimitOverrunError as exc:
            raise InvalidBulkStringHeaderError("bulk string header too long") from exc

        line = header[:-2]
        if not line.startswith(b"$"):
            raise InvalidBulkStringHeaderError(f"expected '$', got {line[:1]!r}")

        length = _parse_length(line[1:])
        if length is None:
            raise InvalidBulkStringHeaderError(f"invalid bulk string length {line[1:]!r}")

        # Null bulk string: nothing follows the header
        if length < 0:
            return ""

        data = await reader.readexactly(length + 2)
        if data[length:] != CRLF:
            raise MissingTerminatorError("bulk string payload not terminated by CRLF")

        return data[:length].decode(self.encoding, self.errors)


def encode_reply(reply: Reply) -> bytes:
    """
    Encode a Reply into protocol bytes.

    Examples:
        >>> encode_reply(Reply.pong())
        b'+PONG\\r\\n'
        >>> encode_reply(Reply.bulk("hello"))
        b'$5\\r\\nhello\\r\\n'
        >>> encode_reply(Reply.null())
        b'$-1\\r\\n'
    """
    if reply.type == ReplyType.SIMPLE:
        return b"+" + _line_bytes(reply.value) + CRLF
    if reply.type == ReplyType.ERROR:
        return b"-" + _line_bytes(reply.value) + CRLF
    if reply.type == ReplyType.NULL or reply.value is None:
        return b"$-1" + CRLF
    return encode_bulk_string(reply.value)


def encode_bulk_string(value: str) -> bytes:
    """Encode a single bulk string element; lengths are byte lengths."""
    payload = _to_bytes(value)
    return b"$%d\r\n%s\r\n" % (len(payload), payload)


def encode_command(*parts: str) -> bytes:
    """
    Encode a request frame from a command name and its arguments.

    Example:
        >>> encode_command("SET", "k", "v")
        b'*3\\r\\n$3\\r\\nSET\\r\\n$1\\r\\nk\\r\\n$1\\r\\nv\\r\\n'
    """
    return b"*%d\r\n" % len(parts) + b"".join(encode_bulk_string(p) for p in parts)


def _to_bytes(text: Optional[str]) -> bytes:
    return (text or "").encode(ENCODING, ENCODING_ERRORS)


def _line_bytes(text: Optional[str]) -> bytes:
    """Encode a simple-string or error payload; CR and LF become spaces."""
    return _to_bytes(text).replace(b"\r", b" ").replace(b"\n", b" ")

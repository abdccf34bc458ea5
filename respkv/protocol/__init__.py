"""Protocol module for resp-kv."""

from .commands import Command, Reply, ReplyType
from .parser import (
    EmptyArrayError,
    FrameDecoder,
    IncompleteFrameError,
    InvalidArrayHeaderError,
    InvalidBulkStringHeaderError,
    MissingTerminatorError,
    ProtocolError,
    encode_command,
    encode_reply,
)

__all__ = [
    "Command",
    "Reply",
    "ReplyType",
    "FrameDecoder",
    "ProtocolError",
    "InvalidArrayHeaderError",
    "EmptyArrayError",
    "InvalidBulkStringHeaderError",
    "MissingTerminatorError",
    "IncompleteFrameError",
    "encode_command",
    "encode_reply",
]

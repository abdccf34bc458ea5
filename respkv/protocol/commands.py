"""
Protocol Command and Reply Definitions

This module defines the data structures for decoded commands and the
replies the dispatcher produces for them.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional


class ReplyType(Enum):
    """Enumeration of reply encodings."""
    SIMPLE = auto()
    BULK = auto()
    NULL = auto()
    ERROR = auto()


@dataclass
class Command:
    """
    Represents one decoded request frame.

    Attributes:
        name: The command name, exactly as decoded (matched case-sensitively)
        args: Positional arguments following the name
    """
    name: str
    args: List[str] = field(default_factory=list)

    @property
    def arity(self) -> int:
        """Number of arguments, not counting the command name."""
        return len(self.args)


@dataclass
class Reply:
    """
    Represents a protocol reply.

    Attributes:
        type: SIMPLE, BULK, NULL or ERROR
        value: Text of the reply (None for NULL)
    """
    type: ReplyType
    value: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.type == ReplyType.ERROR

    @classmethod
    def simple(cls, text: str) -> "Reply":
        """Create a simple string reply."""
        return cls(type=ReplyType.SIMPLE, value=text)

    @classmethod
    def bulk(cls, value: str) -> "Reply":
        """Create a bulk string reply."""
        return cls(type=ReplyType.BULK, value=value)

    @classmethod
    def null(cls) -> "Reply":
        """Create a null bulk string reply (GET miss)."""
        return cls(type=ReplyType.NULL)

    @classmethod
    def error(cls, message: str) -> "Reply":
        """Create an error reply."""
        return cls(type=ReplyType.ERROR, value=message)

    @classmethod
    def ok(cls) -> "Reply":
        """Create the 'OK' acknowledgment for SET."""
        return cls.simple("OK")

    @classmethod
    def pong(cls) -> "Reply":
        """Create the 'PONG' reply for PING."""
        return cls.simple("PONG")

    @classmethod
    def unknown_command(cls, name: str) -> "Reply":
        """Create the error reply for an unrecognized command name."""
        return cls.error(f"ERR unknown command '{name}'")

    @classmethod
    def wrong_arity(cls, name: str) -> "Reply":
        """Create the error reply for a command with too few arguments."""
        return cls.error(f"ERR wrong number of arguments for '{name.lower()}' command")

    @classmethod
    def protocol_error(cls, detail: str) -> "Reply":
        """Create the error reply sent before closing on a framing error."""
        return cls.error(f"ERR Protocol error: {detail}")

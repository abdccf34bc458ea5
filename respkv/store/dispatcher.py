"""
Command Dispatcher Module

Maps a decoded Command onto a KVStore operation and the Reply to send.

Commands (names are matched case-sensitively):
    PING                -> +PONG
    ECHO <message>      -> bulk string <message>
    SET <key> <value>   -> +OK
    GET <key>           -> bulk string <value> | null bulk string
"""

import logging
from typing import Callable, Dict

from ..protocol.commands import Command, Reply
from .store import KVStore

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """
    Executes commands against a shared KVStore.

    The dispatcher keeps no per-request state; the store's own lock is
    the only synchronization, so one instance is shared by every
    connection.

    Usage:
        dispatcher = CommandDispatcher(store)
        reply = dispatcher.dispatch(Command("SET", ["k", "v"]))
    """

    def __init__(self, store: KVStore):
        self.store = store
        self._handlers: Dict[str, Callable[[Command], Reply]] = {
            "PING": self._ping,
            "ECHO": self._echo,
            "SET": self._set,
            "GET": self._get,
        }

    def dispatch(self, command: Command) -> Reply:
        """
        Execute a command and return its reply.

        Unknown names and missing arguments produce error replies; they
        never raise.
        """
        handler = self._handlers.get(command.name)
        if handler is None:
            logger.debug(f"Unknown command {command.name!r}")
            return Reply.unknown_command(command.name)
        return handler(command)

    def _ping(self, command: Command) -> Reply:
        return Reply.pong()

    def _echo(self, command: Command) -> Reply:
        if command.arity < 1:
            return Reply.wrong_arity(command.name)
        return Reply.bulk(command.args[0])

    def _set(self, command: Command) -> Reply:
        if command.arity < 2:
            return Reply.wrong_arity(command.name)
        key, value = command.args[0], command.args[1]
        self.store.set(key, value)
        return Reply.ok()

    def _get(self, command: Command) -> Reply:
        if command.arity < 1:
            return Reply.wrong_arity(command.name)
        value = self.store.get(command.args[0])
        return Reply.bulk(value) if value is not None else Reply.null()

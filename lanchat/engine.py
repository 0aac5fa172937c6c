#!/usr/bin/env python3
"""Chat engine: the facade a host UI drives.

A host creates one :class:`UDPChat`, calls :meth:`UDPChat.prelude` once, then
calls :meth:`UDPChat.receive` on every UI tick and :meth:`UDPChat.submit_text`
whenever the user hits enter.  :meth:`UDPChat.shutdown` says goodbye.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from .dispatcher import dispatch
from .peers import PeerRegistry
from .protocol import DEFAULT_PORT, Command, Message
from .storage import HistoryStore
from .transport import Recipients, Scope, Transport
from .util import LOG


class UDPChat:
    """Owns peers, history and the outbound message buffer.

    All mutation happens on the caller's (foreground) thread; the transport's
    listener thread only fills the hand‑off slot.
    """

    def __init__(self, name: str, port: int = DEFAULT_PORT,
                 db_path: Union[str, Path, None] = None,
                 transport: Optional[Transport] = None) -> None:
        self.name = name
        self.transport = transport or Transport(port)
        self.store = HistoryStore(db_path)

        self.message: Message = Message.empty()          # Last outbound frame
        self.history: List[Tuple[str, str]] = []          # (sender ip, text)
        self.peers = PeerRegistry()

    @property
    def ip(self) -> str:
        return self.transport.ip

    @property
    def port(self) -> int:
        return self.transport.port

    @property
    def persistence_status(self) -> str:
        return self.store.status

    def peer_count(self) -> int:
        return len(self.peers)

    # ================================================================ lifecycle ===
    def prelude(self, repaint: Optional[Callable[[], None]] = None) -> None:
        """Load stored history, bind, start listening and announce ourselves."""
        self.store.create()
        self.history = self.store.get_all()
        if self.transport.sock is None:
            self.transport.connect()
        self.transport.listen(repaint)
        self.send(Message.enter(self.name), Recipients.ALL)

    def shutdown(self) -> None:
        """Broadcast EXIT to the whole subnet, then release resources."""
        self.send(Message.exit(), Recipients.ALL)
        LOG.info("Shutdown requested")
        self.transport.close()
        self.store.close()

    # ================================================================== sending ===
    def send(self, message: Message, recipients: Recipients) -> int:
        """Send *message*; return the number of datagrams handed to the socket."""
        self.message = message
        if message.command is Command.EMPTY:
            return 0
        if message.command is Command.TEXT:
            self.store.append(self.ip, message)

        # With at most one known peer, fall back to the whole subnet to reach
        # nodes the registry may have missed.
        if recipients.scope is Scope.PEERS and len(self.peers) <= 1:
            recipients = Recipients.ALL

        destinations = self.transport.resolve(recipients, self.peers)
        return self.transport.send(message.encode(), destinations)

    def submit_text(self, text: str) -> Optional[Message]:
        """Send user text to the peers and echo it into local history.

        Returns None when nothing went out (blank text, no socket, or every
        destination failed); history is left untouched in that case.
        """
        message = Message.text(text)
        if not message.data:                 # Nothing left after cleaning
            return None
        if not self.send(message, Recipients.PEERS):
            return None
        self.history.append((self.ip, message.read_text()))
        return message

    # ================================================================ receiving ===
    def receive(self) -> bool:
        """Dispatch at most one inbound message; never blocks.

        Returns True when something was processed.
        """
        item = self.transport.poll()
        if item is None:
            return False
        sender, message = item
        dispatch(self, sender, message)
        return True

    def request_clear(self) -> None:
        """Wipe both stored and in‑memory history."""
        self.store.clear()
        self.history = []

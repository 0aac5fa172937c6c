#!/usr/bin/env python3
"""UDP endpoint, recipient resolution and the background receive thread.

The receive thread never touches chat state: it decodes datagrams and hands
``(sender, Message)`` pairs to the foreground through a single‑slot queue.
If the foreground has not drained the slot yet, the newer item is dropped.
"""

from __future__ import annotations

import queue                          # Single‑slot hand‑off channel
import socket                         # UDP socket operations
import threading                      # Background listener
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from .protocol import BUF_SIZE, DEFAULT_PORT, Message
from .util import LOG, get_local_ip

Address = Tuple[str, int]
Inbound = Tuple[str, Message]


class Scope(Enum):
    ALL = "all"         # Whole /24 subnet of our own address
    PEERS = "peers"     # Addresses in the peer registry
    ONE = "one"         # A single host


@dataclass(frozen=True)
class Recipients:
    """Where a message goes. Use :data:`ALL`, :data:`PEERS` or :meth:`one`."""

    scope: Scope
    address: Optional[str] = None

    @classmethod
    def one(cls, address: str) -> "Recipients":
        return cls(Scope.ONE, address)


Recipients.ALL = Recipients(Scope.ALL)
Recipients.PEERS = Recipients(Scope.PEERS)


def subnet_addresses(ip: str) -> List[str]:
    """Every host ``a.b.c.0`` … ``a.b.c.254`` in the /24 of *ip*."""
    prefix = ".".join(ip.split(".")[:3])
    return [f"{prefix}.{i}" for i in range(255)]


class Transport:
    """Owns the UDP socket shared by the sending and receiving paths."""

    def __init__(self, port: int = DEFAULT_PORT, ip: Optional[str] = None,
                 sock: Optional[socket.socket] = None) -> None:
        self.port = port
        self.ip = ip or get_local_ip()
        self.sock = sock                                   # None until connect()

        # Depth one on purpose: a late datagram is dropped, not buffered
        self.inbox: "queue.Queue[Inbound]" = queue.Queue(maxsize=1)

        self.running = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ================================================================ socket ===
    def connect(self) -> bool:
        """Bind ``(ip, port)`` with broadcast on and multicast loopback off."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_LOOP, 0)
            sock.bind((self.ip, self.port))
        except OSError as exc:
            LOG.error("Bind on %s:%d failed: %s", self.ip, self.port, exc)
            sock.close()
            return False
        self.sock = sock
        LOG.info("Bound on %s:%d", self.ip, self.port)
        return True

    def close(self) -> None:
        self.running.clear()
        if self.sock is not None:
            try:
                self.sock.close()           # Listener is a daemon; it dies with the process
            except OSError:
                pass
            self.sock = None

    # ============================================================ addressing ===
    def resolve(self, recipients: Recipients, peers: Iterable[str]) -> List[Address]:
        """Turn a recipient mode into concrete ``(host, port)`` destinations."""
        if recipients.scope is Scope.ALL:
            hosts = subnet_addresses(self.ip)
        elif recipients.scope is Scope.PEERS:
            hosts = list(peers)
        else:
            hosts = [recipients.address]
        return [(host, self.port) for host in hosts]

    def send(self, frame: bytes, destinations: Iterable[Address]) -> int:
        """Fire‑and‑forget ``frame`` to each destination; return how many went."""
        if self.sock is None:
            LOG.warning("Not connected, message not sent")
            return 0
        sent = 0
        for addr in destinations:
            try:
                self.sock.sendto(frame, addr)
                sent += 1
            except OSError as exc:          # Best effort: skip this host
                LOG.debug("Send to %s:%d failed: %s", addr[0], addr[1], exc)
        return sent

    # ============================================================= receiving ===
    def listen(self, repaint: Optional[Callable[[], None]] = None) -> None:
        """Spawn the daemon receive thread (no‑op without a socket)."""
        if self.sock is None or self._thread is not None:
            return
        self.running.set()
        self._thread = threading.Thread(
            target=self._recv_loop, args=(repaint,), name="lanchat-recv", daemon=True
        )
        self._thread.start()

    def _recv_loop(self, repaint: Optional[Callable[[], None]]) -> None:
        """Listener thread: decode each datagram and hand it to the foreground."""
        sock = self.sock
        while self.running.is_set() and sock is not None:
            try:
                data, (host, _port) = sock.recvfrom(BUF_SIZE)
            except OSError:                 # Socket closed / error
                break

            if host == self.ip:             # Echo of our own broadcast
                continue

            message = Message.decode(data)
            if message is None:
                LOG.debug("Short frame (%d bytes) from %s dropped", len(data), host)
                continue

            LOG.debug("%s: %s", host, message)
            try:
                self.inbox.put_nowait((host, message))
            except queue.Full:
                LOG.warning("Hand-off busy, dropped %s from %s", message.command.name, host)
                continue
            if repaint is not None:
                repaint()

    def poll(self) -> Optional[Inbound]:
        """Non‑blocking take from the hand‑off slot."""
        try:
            return self.inbox.get_nowait()
        except queue.Empty:
            return None

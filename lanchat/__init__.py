"""LAN Chat – peer discovery and short text messages over UDP broadcast.

Importing this package exposes :class:`lanchat.UDPChat` (the chat engine),
:class:`lanchat.Message` (the wire frame) and :class:`lanchat.ChatTerminal`,
allowing the engine to be embedded in another host or launched via
``python -m lanchat``.
"""

# ------------------------ re-exports ------------------------
from .client import ChatTerminal            # noqa: F401  ── terminal host UI
from .engine import UDPChat                 # noqa: F401  ── chat engine facade
from .protocol import Command, Message      # noqa: F401  ── wire codec
from .transport import Recipients           # noqa: F401  ── addressing modes

__all__: list[str] = [
    "ChatTerminal",
    "Command",
    "Message",
    "Recipients",
    "UDPChat",
]

#!/usr/bin/env python3
"""Protocol reactions to one inbound ``(sender, Message)`` pair.

The dispatcher keeps no state of its own; everything it changes lives on the
chat engine passed in as ``chat``.

The transport drops datagrams from our own address before they reach the
hand‑off, so the ``sender == chat.ip`` branches below only fire for frames
injected by a host or a test. They are kept so self is never registered.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .protocol import NOT_FOUND_TEXT, Command, Message
from .transport import Recipients
from .util import LOG

if TYPE_CHECKING:                                # pragma: no cover
    from .engine import UDPChat


def dispatch(chat: "UDPChat", sender: str, message: Message) -> None:
    """Route *message* from *sender* to its handler."""
    cmd = message.command
    if cmd is Command.ENTER:
        _handle_enter(chat, sender, message)
    elif cmd in (Command.TEXT, Command.REPEAT):
        _handle_text(chat, sender, message)
    elif cmd is Command.DAMAGED:
        _handle_damaged(chat, sender, message)
    elif cmd is Command.ASK_TO_REPEAT:
        _handle_ask_to_repeat(chat, sender, message)
    elif cmd is Command.EXIT:
        _handle_exit(chat, sender)
    else:                                        # EMPTY / ERROR
        LOG.debug("Ignored %s from %s", cmd.name, sender)


# ---------------------------------------------------------------- handlers
def _greet(chat: "UDPChat", sender: str) -> None:
    """Register an unknown sender and answer with our own ENTER."""
    if sender == chat.ip or sender in chat.peers:
        return
    chat.peers.add(sender)
    chat.send(Message.enter(chat.name), Recipients.one(sender))


def _handle_enter(chat: "UDPChat", sender: str, message: Message) -> None:
    if sender != chat.ip and sender not in chat.peers:
        LOG.info("%s (%s) entered chat.", sender, message.read_text())
    _greet(chat, sender)


def _handle_text(chat: "UDPChat", sender: str, message: Message) -> None:
    if sender != chat.ip:
        chat.store.append(sender, message)
    chat.history.append((sender, message.read_text()))
    _greet(chat, sender)


def _handle_damaged(chat: "UDPChat", sender: str, message: Message) -> None:
    chat.send(Message.ask_to_repeat(message.id), Recipients.one(sender))


def _handle_ask_to_repeat(chat: "UDPChat", sender: str, message: Message) -> None:
    msg_id = message.requested_id()
    text = chat.store.get_by_id(msg_id)
    if text is None:
        text = NOT_FOUND_TEXT
    LOG.info("%s asked to repeat #%d", sender, msg_id)
    chat.send(Message.repeat(msg_id, text), Recipients.one(sender))


def _handle_exit(chat: "UDPChat", sender: str) -> None:
    if chat.peers.discard(sender):
        LOG.info("%s left chat.", sender)

#!/usr/bin/env python3
"""Wire format shared by every node: constants, the command enumeration, the
CRC-16 used for integrity and the :class:`Message` frame codec.

Frame layout (network byte order)::

    offset 0..4   id        uint32
    offset 4..6   checksum  uint16  (CRC-16/X.25 over payload only)
    offset 6      command   uint8
    offset 7..N   payload   raw bytes, length implied by the datagram
"""

from __future__ import annotations       # Postponed annotation evaluation (PEP 563)
import struct                            # Fixed binary header packing
import time                              # Message ids are epoch seconds
import unicodedata                       # Control‑character filtering for text
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

# --- Network configuration -------------------------------------------------
BUF_SIZE: int = 2048          # Max UDP datagram size we read (bytes)
DEFAULT_PORT: int = 4444      # Every node listens and sends on this port

# --- Frame header ------------------------------------------------------------
HEADER_FMT: str = "!IHB"                      # id, checksum, command tag
HEADER_SIZE: int = struct.calcsize(HEADER_FMT)  # == 7

# --- Protocol literals -------------------------------------------------------
NOT_FOUND_TEXT: str = "NO SUCH MESSAGE! = ("   # Answer to an unknown retry id
ENTER_GREETING: str = "---- ENTERED ----"      # Shown locally after prelude


class Command(IntEnum):
    """Command tag carried in byte 6 of every frame."""

    EMPTY = 0
    ENTER = 1
    TEXT = 2
    REPEAT = 3
    DAMAGED = 4
    ASK_TO_REPEAT = 5
    EXIT = 6
    ERROR = 7           # Decode fallback, never a valid request

    @classmethod
    def from_code(cls, code: int) -> "Command":
        """Map a wire byte to a command; unknown values become ``ERROR``."""
        try:
            return cls(code)
        except ValueError:
            return cls.ERROR


# --- CRC-16/X.25 (a.k.a. IBM-SDLC) -------------------------------------------
# Reflected 0x1021 polynomial, init 0xFFFF, final xor 0xFFFF.

def _make_crc_table() -> tuple[int, ...]:
    table = []
    for byte in range(256):
        crc = byte
        for _ in range(8):
            crc = (crc >> 1) ^ 0x8408 if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


_CRC_TABLE = _make_crc_table()


def crc16(data: bytes) -> int:
    """Return the CRC-16/X.25 of *data* (``crc16(b"123456789") == 0x906E``)."""
    crc = 0xFFFF
    for byte in data:
        crc = (crc >> 8) ^ _CRC_TABLE[(crc ^ byte) & 0xFF]
    return crc ^ 0xFFFF


def _now_id() -> int:
    return int(time.time()) & 0xFFFFFFFF


def _clean_text(text: str) -> bytes:
    # Drop control characters first, then trim surrounding whitespace
    kept = "".join(c for c in text if unicodedata.category(c) != "Cc")
    return kept.strip().encode("utf-8")


@dataclass(slots=True)
class Message:
    """One protocol frame. Build through the classmethods so that ``id`` and
    ``checksum`` are filled in consistently."""

    id: int
    checksum: int
    command: Command
    data: bytes = field(default=b"")

    # ------------------------------------------------------------ constructors
    @classmethod
    def build(cls, command: Command, data: bytes = b"", msg_id: Optional[int] = None) -> "Message":
        if msg_id is None:
            msg_id = _now_id()
        return cls(msg_id & 0xFFFFFFFF, crc16(data), command, bytes(data))

    @classmethod
    def empty(cls) -> "Message":
        return cls(0, 0, Command.EMPTY, b"")

    @classmethod
    def enter(cls, name: str) -> "Message":
        return cls.build(Command.ENTER, name.strip().encode("utf-8"))

    @classmethod
    def text(cls, text: str) -> "Message":
        return cls.build(Command.TEXT, _clean_text(text))

    @classmethod
    def exit(cls) -> "Message":
        return cls.build(Command.EXIT)

    @classmethod
    def ask_to_repeat(cls, msg_id: int) -> "Message":
        return cls.build(Command.ASK_TO_REPEAT, (msg_id & 0xFFFFFFFF).to_bytes(4, "big"))

    @classmethod
    def repeat(cls, msg_id: int, text: str) -> "Message":
        """A ``REPEAT`` answer keeps the id of the message it re‑sends."""
        return cls.build(Command.REPEAT, text.encode("utf-8"), msg_id=msg_id)

    # ---------------------------------------------------------------- payload
    def read_text(self) -> str:
        try:
            return self.data.decode("utf-8")
        except UnicodeDecodeError:
            return "UNKNOWN"

    def requested_id(self) -> int:
        """Id carried by an ``ASK_TO_REPEAT`` payload, zero‑padded if short."""
        return int.from_bytes(self.data[:4].ljust(4, b"\x00"), "big")

    # ------------------------------------------------------------------ codec
    def encode(self) -> bytes:
        header = struct.pack(HEADER_FMT, self.id, self.checksum, int(self.command))
        return header + self.data

    @classmethod
    def decode(cls, raw: bytes) -> Optional["Message"]:
        """Parse a frame.

        Returns ``None`` when the frame is shorter than the header. A frame
        whose checksum does not match its payload is swallowed and comes back
        as :meth:`empty`.
        """
        if len(raw) < HEADER_SIZE:
            return None
        msg_id, checksum, tag = struct.unpack(HEADER_FMT, raw[:HEADER_SIZE])
        payload = bytes(raw[HEADER_SIZE:])
        if crc16(payload) != checksum:
            return cls.empty()
        return cls(msg_id, checksum, Command.from_code(tag), payload)

    def __str__(self) -> str:
        if self.command is Command.ASK_TO_REPEAT:
            body = f"#{self.requested_id()}"
        else:
            body = repr(self.read_text())
        return f"[{self.id}] {self.command.name} {body}"


# Module level aliases so callers can write ``protocol.encode(msg)``
def encode(message: Message) -> bytes:
    return message.encode()


def decode(raw: bytes) -> Optional[Message]:
    return Message.decode(raw)

#!/usr/bin/env python3
"""Command‑line host for the LAN chat:

* Announces itself to the whole /24 subnet on start
* Prints history as it grows, own lines in green, others in cyan
* Slash commands: /peers /status /clear /quit (alias ``qqq``)

Usage (after installing package locally):

    lanchat --name alice            # or: python -m lanchat --name alice
"""

from __future__ import annotations

import argparse                                    # For CLI parsing
import logging
import queue                                       # stdin lines → main loop
import random                                      # Random guest name
import sys
import threading                                   # stdin reader + repaint event
from typing import Optional

# 3rd‑party: coloured terminal output
from colorama import Fore, Style, init

from .engine import UDPChat
from .protocol import DEFAULT_PORT, ENTER_GREETING
from .util import LOG, configure_logging

TICK: float = 0.05                                 # Seconds between UI polls


class ChatTerminal:
    """Terminal front‑end: reads stdin on a thread, drives the engine on ticks."""

    def __init__(self, chat: UDPChat) -> None:
        self.chat = chat
        self.lines: "queue.Queue[Optional[str]]" = queue.Queue()   # None ⇒ EOF
        self.wakeup = threading.Event()            # Set by transport on new data
        self.running = threading.Event()
        self._shown = 0                            # History entries already printed

    # ================================================================== main ===
    def start(self) -> None:
        """Blocking run‑loop until /quit, EOF or Ctrl‑C."""
        init(autoreset=True)
        self.chat.prelude(repaint=self.wakeup.set)
        self.running.set()
        self._print_header()
        print(f"{Fore.CYAN}[SYSTEM]{Style.RESET_ALL} {ENTER_GREETING}")

        threading.Thread(target=self._read_stdin, name="lanchat-stdin", daemon=True).start()
        try:
            while self.running.is_set():
                self.tick()
                self.wakeup.wait(TICK)
        except KeyboardInterrupt:
            pass
        finally:
            self.running.clear()
            self.chat.shutdown()
            print(f"{Fore.CYAN}[SYSTEM]{Style.RESET_ALL} Disconnected")

    def tick(self) -> None:
        """One UI frame: user input, at most one inbound message, redraw."""
        self.wakeup.clear()
        while True:
            try:
                line = self.lines.get_nowait()
            except queue.Empty:
                break
            if line is None:                       # Ctrl‑D
                self.running.clear()
                return
            self.handle_line(line)
            if not self.running.is_set():
                return
        if self.chat.receive():
            self.wakeup.set()                      # Slot may refill; poll again soon
        self._render_history()

    # ---------------------------------------------------------------- input
    def _read_stdin(self) -> None:
        while self.running.is_set():
            try:
                line = input()
            except EOFError:
                self.lines.put(None)
                break
            self.lines.put(line)
            self.wakeup.set()

    def handle_line(self, line: str) -> None:
        """Execute a slash command or submit chat text."""
        stripped = line.strip()
        if not stripped:
            return
        if stripped.lower() in {"/quit", "qqq"}:
            self.running.clear()
            return
        if not stripped.startswith("/"):
            self.chat.submit_text(line)
            return

        match stripped.lower():
            case "/peers":
                peers = ", ".join(self.chat.peers) or "none"
                self._system(f"{self.chat.peer_count()} peer(s): {peers}")
            case "/status":
                self._print_header()
            case "/clear":
                self.chat.request_clear()
                self._shown = 0
                self._system(self.chat.persistence_status)
            case _:
                self._system("Unknown command")

    # ---------------------------------------------------------------- output
    def _print_header(self) -> None:
        print(f"{Style.BRIGHT}{self.chat.ip}:{self.chat.port}{Style.RESET_ALL}"
              f"  peers: {self.chat.peer_count()}  {self.chat.persistence_status}")

    def _system(self, text: str) -> None:
        print(f"{Fore.CYAN}[SYSTEM]{Style.RESET_ALL} {text}")

    def _render_history(self) -> None:
        history = self.chat.history
        if len(history) < self._shown:             # Cleared under us
            self._shown = 0
        for sender, text in history[self._shown:]:
            colour = Fore.GREEN if sender == self.chat.ip else Fore.YELLOW
            print(f"{colour}<{sender}>{Style.RESET_ALL} {text}")
        self._shown = len(history)


# ======================================================================
#  Command‑line entry point
# ======================================================================

def main(argv: Optional[list[str]] = None) -> None:
    """Parse CLI args then instantiate & run the chat terminal."""
    parser = argparse.ArgumentParser("lanchat", description="LAN broadcast chat")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="UDP port shared by all nodes")
    parser.add_argument("--name", default=None, help="display name announced on enter")
    parser.add_argument("--db", default="lanchat.db", help="SQLite history file")
    parser.add_argument("--no-db", action="store_true", help="run without persistent history")
    parser.add_argument("--log-file", default="lanchat.log", help="rotating log file ('' to disable)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file or None)

    name = (args.name or "").strip() or f"Guest{random.randint(1000, 9999)}"
    LOG.info("Welcome, %s", name)
    chat = UDPChat(name, args.port, None if args.no_db else args.db)
    ChatTerminal(chat).start()


if __name__ == "__main__":
    main(sys.argv[1:])

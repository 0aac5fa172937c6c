#!/usr/bin/env python3
"""Logging utils **and** helper that discovers our outward‑facing IP address."""

from __future__ import annotations
import logging                           # Python stdlib logging framework
import socket                            # Needed for IP detection
import sys                               # For stdout handle
from logging.handlers import RotatingFileHandler
from typing import Optional

__all__ = ["LOG", "configure_logging", "get_local_ip"]

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(message)s"

# Library modules log through this logger; handlers are attached only when the
# CLI calls configure_logging(), so importing the package writes nothing.
LOG = logging.getLogger("lanchat")


def configure_logging(level: int = logging.INFO,
                      log_file: Optional[str] = "lanchat.log") -> logging.Logger:
    """Attach console + rotating file handlers to the "lanchat" logger.

    Safe to call more than once: handlers are only added the first time.
    """
    LOG.setLevel(level)
    if LOG.handlers:                        # Already configured
        return LOG

    fmt = logging.Formatter(LOG_FORMAT, "%H:%M:%S")

    # ----- Console handler (stdout) -----
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)
    LOG.addHandler(sh)

    # ----- Rotating file handler -----
    # Rotates once file hits ±1 MiB, keeps 3 backups ⇒ log ≲ 4 MiB on disk.
    if log_file:
        fh = RotatingFileHandler(
            log_file,
            maxBytes=1_048_576,
            backupCount=3,
            encoding="utf-8",
        )
        fh.setFormatter(fmt)
        LOG.addHandler(fh)

    return LOG


def get_local_ip() -> str:
    """Return the host's primary IPv4 address, fallback to 127.0.0.1."""

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # connect() on UDP sends nothing; it only makes the OS pick the source
        # address it would use for that destination.
        sock.connect(("8.8.8.8", 80))
        return sock.getsockname()[0]
    except OSError:
        return "127.0.0.1"                  # Offline or no NIC
    finally:
        sock.close()

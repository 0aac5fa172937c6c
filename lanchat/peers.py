"""Set of addresses currently known to be in the chat."""

from __future__ import annotations
from typing import Iterator, Set


class PeerRegistry:
    """Unordered set of IPv4 address strings.

    Only the dispatcher mutates it, always from the foreground thread, so no
    locking is needed.
    """

    def __init__(self) -> None:
        self._peers: Set[str] = set()

    def add(self, address: str) -> bool:
        """Insert *address*; return True if it was not known before."""
        if address in self._peers:
            return False
        self._peers.add(address)
        return True

    def discard(self, address: str) -> bool:
        """Remove *address* if present; return True if something was removed."""
        if address not in self._peers:
            return False
        self._peers.remove(address)
        return True

    def __contains__(self, address: object) -> bool:
        return address in self._peers

    def __len__(self) -> int:
        return len(self._peers)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._peers))    # Stable order for display/tests

    def __repr__(self) -> str:
        return f"PeerRegistry({sorted(self._peers)!r})"

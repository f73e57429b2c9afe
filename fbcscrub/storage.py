"""Target storage for scrubbed chunks."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FBCKey:
    """Key of a stored chunk: its hash and a state flag."""

    key: int
    state: bool


class FBCMap:
    """In-memory store of chunks keyed by :class:`FBCKey`."""

    def __init__(self) -> None:
        self._chunks: dict[FBCKey, bytes] = {}

    def insert(self, key: FBCKey, chunk: bytes) -> None:
        """Store ``chunk`` under ``key``, replacing any previous value."""
        self._chunks[key] = bytes(chunk)

    def get(self, key: FBCKey) -> bytes:
        """Return the chunk stored under ``key``; raise KeyError if absent."""
        return self._chunks[key]

    def __contains__(self, key: object) -> bool:
        return key in self._chunks

    def __len__(self) -> int:
        return len(self._chunks)
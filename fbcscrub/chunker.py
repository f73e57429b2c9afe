"""Frequency-based chunking: split first-stage chunks around frequent windows."""

from __future__ import annotations

import logging
import os
from collections import deque
from pathlib import Path
from typing import Mapping, Union

from .frequency_analyser import DictRecord
from .hashing import hash_chunk

logger = logging.getLogger(__name__)

MAX_CHUNK_SIZE = 128
ID_SIZE = 8

PathLike = Union[str, "os.PathLike[str]"]


class ChunkerFBC:
    """Holds a file as a sequence of chunk ids and splits chunks on known windows."""

    def __init__(self) -> None:
        self.chunk_ids: list[int] = []
        self.chunks: dict[int, bytes] = {}

    def _insert(self, chunk: bytes) -> int:
        key = hash_chunk(chunk)
        self.chunks[key] = chunk
        return key

    def add_cdc_chunk(self, chunk: bytes) -> None:
        """Append a first-stage chunk to the end of the sequence."""
        self.chunk_ids.append(self._insert(bytes(chunk)))

    def restore(self) -> bytes:
        """Reassemble the original data from the chunk sequence."""
        return b"".join(self.chunks[key] for key in self.chunk_ids)

    def reduplicate(self, file_out: PathLike) -> int:
        """Write the reassembled data to ``file_out``; return its length."""
        data = self.restore()
        Path(file_out).write_bytes(data)
        return len(data)

    def _replace(self, target: int, replacement: list[int]) -> None:
        ids: list[int] = []
        for key in self.chunk_ids:
            if key == target:
                ids.extend(replacement)
            else:
                ids.append(key)
        self.chunk_ids = ids

    def _stored_size(self) -> int:
        return sum(len(chunk) for chunk in self.chunks.values())

    def fbc_dedup(self, dictionary: Mapping[int, DictRecord]) -> int:
        """Split chunks around windows found in ``dictionary``.

        Returns the estimated storage size: stored chunk bytes plus eight bytes
        for every id in the sequence and every stored chunk.
        """
        pending: deque[int] = deque()
        for key in self.chunks:
            pending.appendleft(key)

        checked = 0
        while pending:
            checked += 1
            current_key = pending.pop()
            if checked % 100 == 0:
                logger.debug("chunks left to check: %d", len(pending))
            current = self.chunks.get(current_key)
            if current is None:
                continue

            position = 0
            while position < len(current) - MAX_CHUNK_SIZE:
                window_hash = hash_chunk(current[position:position + MAX_CHUNK_SIZE])
                record = dictionary.get(window_hash)
                if record is None:
                    position += 1
                    continue
                if len(record.chunk) >= len(current):
                    break

                if window_hash in self.chunks:
                    cut_out = window_hash
                else:
                    cut_out = self._insert(bytes(record.chunk))

                if position == 0:
                    tail = self._insert(current[len(record.chunk):])
                    pending.appendleft(tail)
                    if current_key not in (cut_out, tail):
                        del self.chunks[current_key]
                    self._replace(current_key, [cut_out, tail])
                else:
                    tail = self._insert(current[record.size + position:])
                    head = self._insert(current[:position])
                    if current_key not in (cut_out, tail, head):
                        del self.chunks[current_key]
                    pending.appendleft(tail)
                    self._replace(current_key, [head, cut_out, tail])
                break

        return self._stored_size() + len(self.chunk_ids) * ID_SIZE + len(self.chunks) * ID_SIZE
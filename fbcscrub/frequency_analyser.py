"""Frequency analysis of fixed-size windows over first-stage chunks."""

from __future__ import annotations

import io
import logging
import os
import struct
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import BinaryIO, Iterable, Optional, Sequence, Union

from .hashing import hash_chunk

logger = logging.getLogger(__name__)

MAX_CHUNK_SIZE = 128
MIN_CHUNK_SIZE = 127
NEW_CHUNK_STEP = 16

_HEADER = struct.Struct(">QIQ")
_COUNT = struct.Struct(">Q")

PathLike = Union[str, "os.PathLike[str]"]


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise EOFError(f"truncated {what}: expected {size} bytes, got {len(data)}")
    return data


def _read_count(stream: BinaryIO) -> int:
    (count,) = _COUNT.unpack(_read_exact(stream, _COUNT.size, "record count"))
    return count


@dataclass
class DictRecord:
    """A window of bytes together with how often it was seen."""

    chunk: bytes
    occurrence_num: int
    size: int
    hash: int

    def write_to(self, stream: BinaryIO) -> None:
        """Write the record: big-endian hash, occurrences, size, then the bytes."""
        stream.write(_HEADER.pack(self.hash, self.occurrence_num, self.size))
        stream.write(self.chunk)

    @classmethod
    def read_header(cls, stream: BinaryIO) -> "DictRecord":
        """Read a record header, leaving the chunk bytes unread."""
        hash_value, occurrence_num, size = _HEADER.unpack(
            _read_exact(stream, _HEADER.size, "record header")
        )
        return cls(chunk=b"", occurrence_num=occurrence_num, size=size, hash=hash_value)

    @classmethod
    def read_from(cls, stream: BinaryIO) -> "DictRecord":
        """Read a complete record written by :meth:`write_to`."""
        record = cls.read_header(stream)
        record.chunk = _read_exact(stream, record.size, "record chunk")
        return record


class FrequencyAnalyser:
    """Counts occurrences of byte windows, keyed by their hash."""

    def __init__(self) -> None:
        self.records: dict[int, DictRecord] = {}
        self._lock = threading.Lock()

    def get_dict(self) -> dict[int, DictRecord]:
        """Return an independent copy of the records, keyed by hash."""
        with self._lock:
            return {record.hash: replace(record) for record in self.records.values()}

    def print_dict(self) -> None:
        """Print every record seen more than once."""
        for record in self.records.values():
            if record.occurrence_num > 1:
                print(f"chunk: {list(record.chunk)} occurrence: {record.occurrence_num}")

    def reduce_low_occur(self, occurrence: int) -> None:
        """Drop records seen fewer than ``occurrence`` times."""
        with self._lock:
            self.records = {
                key: record
                for key, record in self.records.items()
                if record.occurrence_num >= occurrence
            }
        logger.debug("reduced analyser to %d records", len(self.records))

    def count_candidates(self, occurrence: int) -> int:
        """Count records seen at least ``occurrence`` times."""
        return sum(1 for record in self.records.values() if record.occurrence_num >= occurrence)

    def analyse_pack(self, chunks: Iterable[Optional[bytes]]) -> None:
        """Analyse several first-stage chunks concurrently; ``None`` entries are skipped."""
        present = [chunk for chunk in chunks if chunk is not None]
        if not present:
            return
        with ThreadPoolExecutor(max_workers=len(present)) as pool:
            for future in [pool.submit(self.append_dict, chunk) for chunk in present]:
                future.result()

    def append_dict(self, chunk: bytes) -> None:
        """Slide over ``chunk`` and count the windows it contains."""
        data = bytes(chunk)
        if len(data) < MAX_CHUNK_SIZE:
            raise ValueError(
                f"chunk of {len(data)} bytes is shorter than the window size {MAX_CHUNK_SIZE}"
            )
        start = 1
        while start <= len(data) - MAX_CHUNK_SIZE:
            for window_size in range(MIN_CHUNK_SIZE, MAX_CHUNK_SIZE):
                start += self.add_chunk(data[start:start + window_size + 1])

    def add_chunk(self, chunk: bytes) -> int:
        """Count one window; return how far the scan should advance."""
        data = bytes(chunk)
        key = hash_chunk(data)
        with self._lock:
            record = self.records.get(key)
            if record is not None:
                record.occurrence_num += 1
                return MIN_CHUNK_SIZE
            self.records[key] = DictRecord(
                chunk=data, occurrence_num=1, size=len(data), hash=key
            )
        return NEW_CHUNK_STEP

    def save_to_file(self, path: PathLike) -> int:
        """Write all records to ``path``; return how many were written."""
        with self._lock:
            records = list(self.records.values())
        with open(path, "wb") as stream:
            stream.write(_COUNT.pack(len(records)))
            for record in records:
                record.write_to(stream)
        return len(records)

    @classmethod
    def load_from_file(cls, path: PathLike) -> "FrequencyAnalyser":
        """Build an analyser from a file written by :meth:`save_to_file`."""
        analyser = cls()
        with open(path, "rb") as stream:
            for _ in range(_read_count(stream)):
                record = DictRecord.read_from(stream)
                analyser.records[record.hash] = record
        return analyser

    @staticmethod
    def _read_hashes(stream: BinaryIO) -> set[int]:
        hashes = set()
        for _ in range(_read_count(stream)):
            record = DictRecord.read_header(stream)
            hashes.add(record.hash)
            stream.seek(record.size, io.SEEK_CUR)
        return hashes

    @staticmethod
    def load_hashes(path: PathLike) -> set[int]:
        """Return the hashes of all records stored in ``path``."""
        with open(path, "rb") as stream:
            return FrequencyAnalyser._read_hashes(stream)

    @staticmethod
    def update(path: PathLike, new_records: Sequence[DictRecord]) -> int:
        """Append records whose hash is not yet stored; return how many were added."""
        with open(path, "r+b") as stream:
            existing = FrequencyAnalyser._read_hashes(stream)
            unique = [record for record in new_records if record.hash not in existing]
            stream.seek(0)
            stream.write(_COUNT.pack(len(unique) + len(existing)))
            stream.seek(0, io.SEEK_END)
            for record in unique:
                record.write_to(stream)
        return len(unique)
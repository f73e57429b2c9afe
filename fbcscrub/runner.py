"""Run frequency-based deduplication over sample files and report the gain."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from .chunker import ChunkerFBC
from .frequency_analyser import FrequencyAnalyser

PathLike = Union[str, "os.PathLike[str]"]

DEFAULT_INPUT_DIR = Path("..") / "test_files_input"
DEFAULT_NAMES = (
    "fbc_topic_input.txt",
    "lowinput.txt",
    "orient_express_input.txt",
)
DEFAULT_STEPS = tuple(128 * factor for factor in range(2, 9))
DEFAULT_OUT = "out.txt"


@dataclass(frozen=True)
class CaseResult:
    """Outcome of one deduplication run."""

    dedup_size: int
    restored_size: int
    matched: bool

    @property
    def ratio(self) -> float:
        """Size of the restored data relative to the deduplicated size."""
        return self.restored_size / self.dedup_size


def _fixed_chunks(data: bytes, dt: int):
    position = 0
    while position < len(data) - dt:
        yield data[position:position + dt]
        position += dt
    yield data[position:]


def run_case(path: PathLike, dt: int, out_path: PathLike = DEFAULT_OUT) -> CaseResult:
    """Deduplicate ``path`` cut into ``dt``-byte pieces and check the round trip.

    The restored data is written to ``out_path``, compared with the input and
    then removed.
    """
    if dt <= 0:
        raise ValueError(f"chunk step must be positive, got {dt}")
    contents = Path(path).read_bytes()

    analyser = FrequencyAnalyser()
    analyser.append_dict(contents)

    chunker = ChunkerFBC()
    for piece in _fixed_chunks(contents, dt):
        chunker.add_cdc_chunk(piece)

    dedup_size = chunker.fbc_dedup(analyser.get_dict())
    out = Path(out_path)
    try:
        restored_size = chunker.reduplicate(out)
        matched = Path(path).read_bytes() == out.read_bytes()
    finally:
        out.unlink(missing_ok=True)
    return CaseResult(dedup_size=dedup_size, restored_size=restored_size, matched=matched)


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Measure frequency-based deduplication on sample files."
    )
    parser.add_argument("names", nargs="*", default=list(DEFAULT_NAMES),
                        help="file names inside the input directory")
    parser.add_argument("--input-dir", type=Path, default=DEFAULT_INPUT_DIR,
                        help="directory holding the input files")
    parser.add_argument("--dt", type=int, action="append", dest="steps",
                        help="fixed first-stage chunk size; may be repeated")
    parser.add_argument("--out", default=DEFAULT_OUT,
                        help="temporary file for the restored data")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run every file against every chunk size and print the results."""
    args = _parse_args(argv)
    steps = args.steps or list(DEFAULT_STEPS)
    for name in args.names:
        for dt in steps:
            result = run_case(args.input_dir / name, dt, args.out)
            if result.matched:
                print(result.ratio)
                print("MATCH")
            print()
    return 0
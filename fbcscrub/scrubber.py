"""Scrubber that feeds stored chunks through frequency analysis."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Mapping

from .chunker import ChunkerFBC
from .frequency_analyser import FrequencyAnalyser
from .hashing import hash_chunk
from .storage import FBCKey, FBCMap

logger = logging.getLogger(__name__)

THREADS_COUNT = 16
DATA_LIMIT = 166925888
ID_SIZE = 8
REDUCTION_PERIOD = 500 * 16 // THREADS_COUNT
MIN_OCCURRENCE = 2


@dataclass
class ScrubMeasurements:
    """Figures reported by a scrub run; ``running_time`` is in seconds."""

    processed_data: int = 0
    running_time: float = 0.0
    data_left: int = 0


@dataclass
class FBCScrubber:
    """Runs chunks through a frequency analyser and into a target map."""

    analyser: FrequencyAnalyser = field(default_factory=FrequencyAnalyser)
    chunker: ChunkerFBC = field(default_factory=ChunkerFBC)

    def scrub(self, database: Mapping[Any, Any], target_map: FBCMap) -> ScrubMeasurements:
        """Analyse every chunk in ``database`` and copy it into ``target_map``.

        ``database`` maps chunk hashes to chunk bytes; values that are not
        bytes-like (already moved chunks) are skipped.
        """
        start_time = time.perf_counter()
        chunks = [
            bytes(value)
            for value in database.values()
            if isinstance(value, (bytes, bytearray, memoryview))
        ]
        total = sum(len(chunk) + ID_SIZE for chunk in chunks)
        packs = [chunks[i:i + THREADS_COUNT] for i in range(0, len(chunks), THREADS_COUNT)]
        logger.debug("packs collected: %d", len(packs))

        cdc_data = 0
        for pack in packs:
            if cdc_data > DATA_LIMIT:
                break
            cdc_data += sum(len(chunk) + ID_SIZE for chunk in pack)
            self.analyser.analyse_pack(pack)
            for chunk in pack:
                self.chunker.add_cdc_chunk(chunk)
                target_map.insert(FBCKey(hash_chunk(chunk), False), chunk)
            if cdc_data % 40 == 0:
                logger.info(
                    "data left: (%d/%d) scrubbed: %% %f, dups/size: (%d, %d)",
                    cdc_data,
                    total,
                    cdc_data / total * 100.0,
                    self.analyser.count_candidates(MIN_OCCURRENCE),
                    len(self.analyser.records),
                )
            if cdc_data % REDUCTION_PERIOD == 0:
                self.analyser.reduce_low_occur(MIN_OCCURRENCE)

        self.analyser.reduce_low_occur(MIN_OCCURRENCE)
        return ScrubMeasurements(
            processed_data=0,
            running_time=time.perf_counter() - start_time,
            data_left=0,
        )
# fbcscrub

Frequency-based chunking (FBC) for deduplicated storage.

Data that has already been cut into first-stage chunks often holds byte
sequences that repeat across many chunks. `fbcscrub` counts such
sequences and splits chunks around them, so that a repeated sequence can
be stored once and each chunk rebuilt from a list of references.

The work happens in two steps:

1. **Frequency analysis.** `FrequencyAnalyser` (in
   `fbcscrub.frequency_analyser`) slides a 128-byte window over the data
   and counts how often each window occurs. The result is a dictionary of
   `DictRecord` entries keyed by a 64-bit hash of the bytes
   (`fbcscrub.hashing.hash_chunk`, SipHash-1-3 with a zero key).
2. **Chunking.** `ChunkerFBC` (in `fbcscrub.chunker`) takes the
   first-stage chunks in order and, using the analyser's dictionary, cuts
   chunks at the frequent windows they contain. The original data can be
   rebuilt from the result.

## Installation

```
pip install fbcscrub
```

Python 3.10 or newer is needed. There are no third-party dependencies.

## Usage

### Analysing and re-chunking data

```python
from pathlib import Path

from fbcscrub.chunker import ChunkerFBC
from fbcscrub.frequency_analyser import FrequencyAnalyser

data = Path("input.txt").read_bytes()

analyser = FrequencyAnalyser()
analyser.append_dict(data)          # ValueError if data is shorter than 128 bytes

chunker = ChunkerFBC()
for start in range(0, len(data), 1000):
    chunker.add_cdc_chunk(data[start:start + 1000])

size = chunker.fbc_dedup(analyser.get_dict())
print("estimated stored size:", size)

assert chunker.restore() == data
chunker.reduplicate("out.txt")      # writes the rebuilt data, returns its length
```

`fbc_dedup` returns an estimate of the space the data now takes: the bytes
of all distinct stored chunks plus eight bytes for every reference in the
sequence and every stored chunk.

`FrequencyAnalyser.analyse_pack` runs `append_dict` over several chunks on
worker threads; `None` entries in the pack are skipped.
`FrequencyAnalyser.add_chunk` counts a single window.

### Pruning the dictionary

Windows seen only once are of no use for deduplication. They can be
counted and dropped:

```python
print(analyser.count_candidates(2))  # records seen at least twice
analyser.reduce_low_occur(2)         # drop the others
analyser.print_dict()                # print records seen more than once
```

### Saving a dictionary

The analyser's records can be stored in a binary file, read back, and
extended with new records later:

```python
analyser.save_to_file("dict.bin")                 # returns the number of records

loaded = FrequencyAnalyser.load_from_file("dict.bin")
hashes = FrequencyAnalyser.load_hashes("dict.bin")  # set of hashes

added = FrequencyAnalyser.update("dict.bin", list(other_analyser.get_dict().values()))
```

`update` appends only records whose hashes the file does not hold yet,
rewrites the record count, and returns how many records it added.

The file starts with the record count as an 8-byte big-endian integer.
Each record is its hash (8 bytes), occurrence count (4 bytes) and length
(8 bytes), all big-endian, followed by the bytes of the window. A single
record can be written and read with `DictRecord.write_to`,
`DictRecord.read_from` and `DictRecord.read_header` on any binary stream.
Reading a truncated file raises `EOFError`.

### Scrubbing a chunk store

`FBCScrubber` (in `fbcscrub.scrubber`) takes a mapping of chunk hashes to
chunk bytes, runs the frequency analysis over the chunks in packs of 16,
adds each chunk to its `ChunkerFBC`, and copies each chunk into an
`FBCMap` (in `fbcscrub.storage`) under an `FBCKey`. Values in the mapping
that are not bytes-like are skipped. At the end the analyser keeps only
records seen at least twice.

```python
from fbcscrub.scrubber import FBCScrubber
from fbcscrub.storage import FBCKey, FBCMap

scrubber = FBCScrubber()
target = FBCMap()
measurements = scrubber.scrub(database, target)
print(measurements.running_time)
```

`scrub` returns a `ScrubMeasurements`. Only `running_time` (in seconds) is
measured; `processed_data` and `data_left` are always reported as 0.

`FBCMap` supports `insert`, `get` (which raises `KeyError` for a missing
key), `in` and `len`.

## Command line

```
fbcscrub-runner [NAMES ...] [--input-dir DIR] [--dt SIZE] [--out FILE]
```

For each named file in the input directory and each first-stage chunk
size, the file is analysed, cut into fixed pieces of that size,
re-chunked, rebuilt into the `--out` file (removed afterwards) and
compared with the input. When they match, the ratio of the rebuilt size
to the estimated stored size is printed, followed by `MATCH`.

Defaults: the files `fbc_topic_input.txt`, `lowinput.txt` and
`orient_express_input.txt` in `../test_files_input`, chunk sizes 256, 384,
512, 640, 768, 896 and 1024 bytes (`--dt` may be given several times), and
`out.txt` as the output file.

## What it does not do

- The scrubber does not plug into a chunking file system; it works on a
  plain mapping of chunks, and it does not itself run `fbc_dedup`.
- `FBCMap` keeps chunks in memory only; nothing is written to disk except
  the dictionary files described above.

## Running the tests

```
pip install "fbcscrub[test]"
pytest
```
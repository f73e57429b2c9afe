import io
import random

import pytest

from fbcscrub.frequency_analyser import (
    MAX_CHUNK_SIZE,
    MIN_CHUNK_SIZE,
    NEW_CHUNK_STEP,
    DictRecord,
    FrequencyAnalyser,
)
from fbcscrub.hashing import hash_chunk


def _random_bytes(seed, size):
    rng = random.Random(seed)
    return bytes(rng.randrange(256) for _ in range(size))


@pytest.fixture
def contents():
    phrase = _random_bytes(11, 256)
    return phrase * 6 + _random_bytes(12, 700)


def test_record_save_load_roundtrip():
    record = DictRecord(chunk=bytes(12), occurrence_num=3, size=12, hash=1234)
    stream = io.BytesIO()
    record.write_to(stream)
    stream.seek(0)
    assert DictRecord.read_from(stream) == record


def test_record_wire_layout():
    record = DictRecord(chunk=b"\x01\x02", occurrence_num=3, size=2, hash=1234)
    stream = io.BytesIO()
    record.write_to(stream)
    expected = (
        (1234).to_bytes(8, "big")
        + (3).to_bytes(4, "big")
        + (2).to_bytes(8, "big")
        + b"\x01\x02"
    )
    assert stream.getvalue() == expected


def test_read_header_leaves_chunk_unread():
    record = DictRecord(chunk=b"abcd", occurrence_num=5, size=4, hash=99)
    stream = io.BytesIO()
    record.write_to(stream)
    stream.seek(0)
    header = DictRecord.read_header(stream)
    assert (header.hash, header.occurrence_num, header.size, header.chunk) == (99, 5, 4, b"")
    assert stream.read() == b"abcd"


def test_truncated_header_raises():
    with pytest.raises(EOFError):
        DictRecord.read_header(io.BytesIO(b"\x00" * 10))


def test_truncated_chunk_raises():
    record = DictRecord(chunk=b"abcdef", occurrence_num=1, size=6, hash=7)
    stream = io.BytesIO()
    record.write_to(stream)
    with pytest.raises(EOFError):
        DictRecord.read_from(io.BytesIO(stream.getvalue()[:-2]))


def test_add_chunk_steps_and_counts():
    analyser = FrequencyAnalyser()
    window = bytes(range(128))
    assert analyser.add_chunk(window) == NEW_CHUNK_STEP
    assert analyser.add_chunk(window) == MIN_CHUNK_SIZE
    record = analyser.records[hash_chunk(window)]
    assert record.occurrence_num == 2
    assert record.size == 128
    assert record.chunk == window


def test_append_dict_rejects_short_input():
    with pytest.raises(ValueError):
        FrequencyAnalyser().append_dict(b"x" * (MAX_CHUNK_SIZE - 1))


def test_append_dict_window_sized_input_adds_nothing():
    analyser = FrequencyAnalyser()
    analyser.append_dict(b"y" * MAX_CHUNK_SIZE)
    assert analyser.records == {}


def test_append_dict_records_are_windows_of_input(contents):
    analyser = FrequencyAnalyser()
    analyser.append_dict(contents)
    records = list(analyser.records.values())
    assert records[0].chunk == contents[1:1 + MAX_CHUNK_SIZE]
    for record in records:
        assert record.size == MAX_CHUNK_SIZE == len(record.chunk)
        assert record.hash == hash_chunk(record.chunk)
        assert record.chunk in contents


def test_repeated_data_yields_candidates(contents):
    analyser = FrequencyAnalyser()
    analyser.append_dict(contents)
    assert analyser.count_candidates(2) > 0
    assert analyser.count_candidates(1) == len(analyser.records)


def test_reduce_low_occur(contents):
    analyser = FrequencyAnalyser()
    analyser.append_dict(contents)
    expected = analyser.count_candidates(2)
    analyser.reduce_low_occur(2)
    assert len(analyser.records) == expected
    assert all(r.occurrence_num >= 2 for r in analyser.records.values())


def test_get_dict_is_a_copy(contents):
    analyser = FrequencyAnalyser()
    analyser.append_dict(contents)
    copy = analyser.get_dict()
    assert copy == analyser.records
    key = next(iter(copy))
    copy[key].occurrence_num += 100
    assert analyser.records[key].occurrence_num == copy[key].occurrence_num - 100


def test_print_dict_shows_only_repeated(capsys):
    analyser = FrequencyAnalyser()
    repeated = bytes([1, 2, 3])
    analyser.add_chunk(repeated)
    analyser.add_chunk(repeated)
    analyser.add_chunk(b"\x09")
    analyser.print_dict()
    assert capsys.readouterr().out == "chunk: [1, 2, 3] occurrence: 2\n"


def test_analyse_pack_matches_sequential():
    chunks = [_random_bytes(seed, 600) for seed in range(4)]
    parallel = FrequencyAnalyser()
    parallel.analyse_pack([chunks[0], None, chunks[1], chunks[2], None, chunks[3]])
    sequential = FrequencyAnalyser()
    for chunk in chunks:
        sequential.append_dict(chunk)
    assert parallel.get_dict() == sequential.get_dict()


def test_save_load_analyser(tmp_path, contents):
    analyser = FrequencyAnalyser()
    analyser.append_dict(contents)
    path = tmp_path / "save_load_analizer.bin"
    assert analyser.save_to_file(path) == len(analyser.records)
    loaded = FrequencyAnalyser.load_from_file(path)
    assert loaded.records == analyser.records


def test_load_hashes(tmp_path, contents):
    analyser = FrequencyAnalyser()
    analyser.append_dict(contents)
    path = tmp_path / "load_hashes_analizer.bin"
    analyser.save_to_file(path)
    assert FrequencyAnalyser.load_hashes(path) == set(analyser.records)


def test_update(tmp_path, contents):
    path = tmp_path / "update_analizer.bin"
    analyser = FrequencyAnalyser()
    analyser.append_dict(contents)
    saved = analyser.save_to_file(path)

    other = FrequencyAnalyser()
    other.append_dict(contents[1::2])
    added = FrequencyAnalyser.update(path, list(other.get_dict().values()))

    loaded = FrequencyAnalyser.load_from_file(path)
    assert saved + added == len(loaded.records)
    assert set(loaded.records) == set(analyser.records) | set(other.records)


def test_update_with_known_records_adds_nothing(tmp_path, contents):
    path = tmp_path / "update_same.bin"
    analyser = FrequencyAnalyser()
    analyser.append_dict(contents)
    saved = analyser.save_to_file(path)
    assert FrequencyAnalyser.update(path, list(analyser.records.values())) == 0
    assert len(FrequencyAnalyser.load_from_file(path).records) == saved


def test_load_missing_count_raises(tmp_path):
    path = tmp_path / "empty.bin"
    path.write_bytes(b"")
    with pytest.raises(EOFError):
        FrequencyAnalyser.load_from_file(path)
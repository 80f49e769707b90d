import logging
import struct

import pytest

from waveformdata.buffer import WaveformBuffer, WaveformDataError

LOGGER = "waveformdata.buffer"


def _write_dat(path, *, version=1, flags=0, sample_rate=16000, spp=64,
               size=None, points=()):
    points = list(points)
    if size is None:
        size = len(points)
    data = struct.pack("<iIiiI", version, flags, sample_rate, spp, size)
    fmt = "b" if flags & 1 else "h"
    for lo, hi in points:
        data += struct.pack(f"<{fmt}{fmt}", lo, hi)
    path.write_bytes(data)
    return path


def _points(count, scale=100):
    return [(-(i % scale), i % scale) for i in range(count)]


def test_default_state():
    buffer = WaveformBuffer()
    assert buffer.sample_rate == 0
    assert buffer.samples_per_pixel == 0
    assert len(buffer) == 0


def test_load_valid_16bit_file(tmp_path, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)
    path = _write_dat(tmp_path / "a.dat", points=_points(1774))
    buffer = WaveformBuffer()
    buffer.load(path)

    assert buffer.sample_rate == 16000
    assert buffer.samples_per_pixel == 64
    assert len(buffer) == 1774
    assert buffer.bits == 16
    text = caplog.text
    assert f"Reading waveform data file: {path}" in text
    assert "Sample rate: 16000 Hz\nBits: 16\nSamples per pixel: 64\nLength: 1774 points" in text
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_load_valid_8bit_file(tmp_path, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)
    path = _write_dat(tmp_path / "a.dat", flags=1, points=_points(1774))
    buffer = WaveformBuffer()
    buffer.load(path)

    assert buffer.sample_rate == 16000
    assert buffer.samples_per_pixel == 64
    assert len(buffer) == 1774
    assert buffer.bits == 8
    assert buffer.min_sample(5) == -5 * 256
    assert buffer.max_sample(5) == 5 * 256
    assert "Bits: 8" in caplog.text


def test_load_rejects_version_2(tmp_path, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)
    path = _write_dat(tmp_path / "version2.dat", version=2)
    with pytest.raises(WaveformDataError) as info:
        WaveformBuffer().load(path)
    assert str(path) in str(info.value)
    assert "Cannot load data file version: 2" in str(info.value)
    assert str(path) in caplog.text


def test_load_reports_size_mismatch(tmp_path, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)
    path = _write_dat(tmp_path / "size_mismatch.dat", size=2056, points=_points(1800))
    buffer = WaveformBuffer()
    buffer.load(path)

    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert warnings == ["Expected 2056 points, read 1800 min and max points"]
    assert len(buffer) == 1800


def test_load_missing_file(tmp_path, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)
    path = tmp_path / "unknown.dat"
    with pytest.raises(WaveformDataError) as info:
        WaveformBuffer().load(path)
    assert "No such file or directory" in str(info.value)
    assert str(path) in str(info.value)
    assert caplog.text == ""


def test_load_rejects_low_sample_rate(tmp_path):
    path = _write_dat(tmp_path / "sample_rate_too_low.dat", sample_rate=0)
    with pytest.raises(WaveformDataError) as info:
        WaveformBuffer().load(path)
    assert str(path) in str(info.value)
    assert "Invalid sample rate" in str(info.value)


def test_load_rejects_low_samples_per_pixel(tmp_path):
    path = _write_dat(tmp_path / "samples_per_pixel_too_low.dat", spp=1)
    with pytest.raises(WaveformDataError) as info:
        WaveformBuffer().load(path)
    assert str(path) in str(info.value)
    assert "Invalid samples per pixel" in str(info.value)


def test_load_zero_length(tmp_path):
    path = _write_dat(tmp_path / "zero_length.dat")
    buffer = WaveformBuffer()
    buffer.load(path)
    assert buffer.sample_rate == 16000
    assert buffer.samples_per_pixel == 64
    assert len(buffer) == 0


def test_save_empty_file(tmp_path):
    path = tmp_path / "out.dat"
    WaveformBuffer().save(path)
    assert path.stat().st_size == 20


def test_save_16bit_file(tmp_path):
    buffer = WaveformBuffer()
    buffer.sample_rate = 44100
    buffer.samples_per_pixel = 256
    buffer.append_samples(-1000, 1000)
    path = tmp_path / "out.dat"
    buffer.save(path, 16)
    assert path.stat().st_size == 24


def test_save_8bit_file(tmp_path):
    buffer = WaveformBuffer()
    buffer.sample_rate = 44100
    buffer.samples_per_pixel = 256
    buffer.append_samples(-100, 100)
    path = tmp_path / "out.dat"
    buffer.save(path, 8)
    assert path.stat().st_size == 22


def test_save_rejects_invalid_bits(tmp_path):
    path = tmp_path / "out.dat"
    with pytest.raises(ValueError):
        WaveformBuffer().save(path, 10)
    assert not path.exists()


def _two_point_buffer():
    buffer = WaveformBuffer()
    buffer.sample_rate = 44100
    buffer.samples_per_pixel = 256
    buffer.append_samples(-1024, 1024)
    buffer.append_samples(-2048, 2048)
    return buffer


def test_save_16bit_text(tmp_path):
    path = tmp_path / "out.txt"
    _two_point_buffer().save_as_text(path)
    assert path.read_text() == "-1024,1024\n-2048,2048\n"


def test_save_8bit_text(tmp_path):
    path = tmp_path / "out.txt"
    _two_point_buffer().save_as_text(path, 8)
    assert path.read_text() == "-4,4\n-8,8\n"


def test_save_16bit_json(tmp_path):
    path = tmp_path / "out.json"
    _two_point_buffer().save_as_json(path)
    assert path.read_text() == (
        '{"sample_rate":44100,"samples_per_pixel":256,"bits":16,"length":2,'
        '"data":[-1024,1024,-2048,2048]}\n'
    )


def test_save_8bit_json(tmp_path):
    path = tmp_path / "out.json"
    _two_point_buffer().save_as_json(path, 8)
    assert path.read_text() == (
        '{"sample_rate":44100,"samples_per_pixel":256,"bits":8,"length":2,'
        '"data":[-4,4,-8,8]}\n'
    )


def test_save_json_rejects_invalid_bits(tmp_path):
    with pytest.raises(ValueError):
        _two_point_buffer().save_as_json(tmp_path / "out.json", 12)


def test_binary_round_trip_16bit(tmp_path):
    original = _two_point_buffer()
    original.append_samples(-32768, 32767)
    path = tmp_path / "out.dat"
    original.save(path)

    loaded = WaveformBuffer()
    loaded.load(path)
    assert loaded.sample_rate == original.sample_rate
    assert loaded.samples_per_pixel == original.samples_per_pixel
    assert loaded.bits == 16
    assert [(loaded.min_sample(i), loaded.max_sample(i)) for i in range(len(loaded))] == [
        (original.min_sample(i), original.max_sample(i)) for i in range(len(original))
    ]


def test_binary_round_trip_8bit(tmp_path):
    path = tmp_path / "out.dat"
    _two_point_buffer().save(path, 8)
    loaded = WaveformBuffer()
    loaded.load(path)
    assert loaded.bits == 8
    assert [(loaded.min_sample(i), loaded.max_sample(i)) for i in range(len(loaded))] == [
        (-1024, 1024), (-2048, 2048)
    ]


def test_set_samples_and_resize():
    buffer = WaveformBuffer()
    buffer.resize(3)
    assert len(buffer) == 3
    assert buffer.min_sample(2) == 0
    buffer.set_samples(1, -7, 9)
    assert (buffer.min_sample(1), buffer.max_sample(1)) == (-7, 9)
    buffer.resize(1)
    assert len(buffer) == 1
    with pytest.raises(IndexError):
        buffer.min_sample(1)


def test_load_truncated_header(tmp_path):
    path = tmp_path / "short.dat"
    path.write_bytes(struct.pack("<iI", 1, 0))
    with pytest.raises(WaveformDataError):
        WaveformBuffer().load(path)
"""Reading and writing WAV audio as interleaved 16-bit samples."""

from __future__ import annotations

import logging
import math
import struct
import wave
from collections.abc import Sequence
from pathlib import Path
from typing import BinaryIO, Optional, Protocol, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

BUFFER_SIZE = 16384

_WAVE_FORMAT_PCM = 0x0001
_WAVE_FORMAT_IEEE_FLOAT = 0x0003
_WAVE_FORMAT_EXTENSIBLE = 0xFFFE

_FORMAT_WAV = 0x010000
_SUBTYPES = {
    (_WAVE_FORMAT_PCM, 8): 0x0005,
    (_WAVE_FORMAT_PCM, 16): 0x0002,
    (_WAVE_FORMAT_PCM, 24): 0x0003,
    (_WAVE_FORMAT_PCM, 32): 0x0004,
    (_WAVE_FORMAT_IEEE_FLOAT, 32): 0x0006,
    (_WAVE_FORMAT_IEEE_FLOAT, 64): 0x0007,
}

_SHORT_MAX = 32767
_SHORT_MIN = -32768


class AudioFileError(Exception):
    """Raised when an audio file cannot be opened, read or written."""


class AudioProcessor(Protocol):
    """Anything that consumes interleaved 16-bit audio."""

    def init(self, sample_rate: int, channels: int, buffer_size: int) -> None: ...

    def process(self, samples: Sequence[int], frame_count: int) -> None: ...

    def done(self) -> None: ...


def _float_to_short(value: float) -> int:
    """Scale a sample from [-1.0, 1.0] to the 16-bit range, truncating."""
    if math.isnan(value):
        return 0
    scaled = value * _SHORT_MAX
    if scaled >= _SHORT_MAX:
        return _SHORT_MAX
    if scaled <= _SHORT_MIN:
        return _SHORT_MIN
    return int(scaled)


def _decode(raw: bytes, format_tag: int, bits: int) -> list[int]:
    """Convert raw little-endian sample bytes to 16-bit integers."""
    if format_tag == _WAVE_FORMAT_IEEE_FLOAT:
        code = "f" if bits == 32 else "d"
        count = len(raw) // (bits // 8)
        return [_float_to_short(v) for v in struct.unpack(f"<{count}{code}", raw)]
    if bits == 8:
        return [(byte - 128) << 8 for byte in raw]
    if bits == 16:
        return list(struct.unpack(f"<{len(raw) // 2}h", raw))
    if bits == 24:
        view = memoryview(raw)
        return [
            int.from_bytes(view[start : start + 3], "little", signed=True) >> 8
            for start in range(0, len(raw), 3)
        ]
    return [v >> 16 for v in struct.unpack(f"<{len(raw) // 4}i", raw)]


class WavFileReader:
    """Reads a WAV file and feeds its audio to a processor."""

    def __init__(self) -> None:
        self._file: Optional[BinaryIO] = None
        self.sample_rate = 0
        self.channels = 0
        self.frames = 0
        self.format = 0
        self._format_tag = 0
        self._bits = 0
        self._block_align = 0
        self._position = 0

    def __enter__(self) -> WavFileReader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def open(self, filename: PathLike) -> None:
        """Open a WAV file for reading; raise AudioFileError on failure."""
        self.close()
        try:
            file = open(filename, "rb")
        except OSError as exc:
            raise AudioFileError(
                f"Failed to read file: {filename}\n{exc.strerror or exc}"
            ) from exc

        try:
            self._parse_header(file)
        except AudioFileError as exc:
            file.close()
            raise AudioFileError(f"Failed to read file: {filename}\n{exc}") from exc
        except OSError as exc:
            file.close()
            raise AudioFileError(
                f"Failed to read file: {filename}\n{exc.strerror or exc}"
            ) from exc

        self._file = file
        self._position = 0
        logger.info("Input file: %s", filename)
        logger.info(
            "Frames: %d\nSample rate: %d Hz\nChannels: %d\nFormat: 0x%x\n"
            "Sections: 1\nSeekable: yes",
            self.frames,
            self.sample_rate,
            self.channels,
            self.format,
        )

    def _parse_header(self, file: BinaryIO) -> None:
        header = file.read(12)
        if len(header) < 12 or header[:4] != b"RIFF" or header[8:12] != b"WAVE":
            raise AudioFileError("File contains data in an unknown format.")

        fmt: Optional[tuple[int, int, int, int]] = None
        while True:
            chunk_header = file.read(8)
            if len(chunk_header) < 8:
                raise AudioFileError("No data chunk found in file.")
            chunk_id, chunk_size = struct.unpack("<4sI", chunk_header)

            if chunk_id == b"fmt ":
                body = file.read(chunk_size)
                if len(body) < 16:
                    raise AudioFileError("Format chunk is too short.")
                tag, channels, rate, _, _, bits = struct.unpack_from("<HHIIHH", body)
                if tag == _WAVE_FORMAT_EXTENSIBLE and len(body) >= 26:
                    (tag,) = struct.unpack_from("<H", body, 24)
                fmt = (tag, channels, rate, bits)
                if chunk_size % 2:
                    file.read(1)
            elif chunk_id == b"data":
                if fmt is None:
                    raise AudioFileError("Data chunk found before format chunk.")
                data_offset = file.tell()
                file.seek(0, 2)
                available = file.tell() - data_offset
                file.seek(data_offset)
                data_size = min(chunk_size, available)
                break
            else:
                file.seek(chunk_size + chunk_size % 2, 1)

        tag, channels, rate, bits = fmt
        subtype = _SUBTYPES.get((tag, bits))
        if subtype is None:
            raise AudioFileError(
                f"Unsupported sample format: tag 0x{tag:x}, {bits} bits."
            )
        if channels < 1:
            raise AudioFileError(f"Invalid number of channels: {channels}.")
        if rate < 1:
            raise AudioFileError(f"Invalid sample rate: {rate}.")

        self._format_tag = tag
        self._bits = bits
        self._block_align = channels * bits // 8
        self.channels = channels
        self.sample_rate = rate
        self.format = _FORMAT_WAV | subtype
        self.frames = data_size // self._block_align

    def _read_frames(self, count: int) -> list[int]:
        assert self._file is not None
        count = min(count, self.frames - self._position)
        raw = self._file.read(count * self._block_align)
        frames = len(raw) // self._block_align
        self._position += frames
        return _decode(raw[: frames * self._block_align], self._format_tag, self._bits)

    def run(self, processor: AudioProcessor) -> int:
        """Feed the whole file to ``processor`` and return the frames read.

        The file is closed afterwards, whether or not processing succeeded.
        """
        if self._file is None:
            raise AudioFileError("No input file is open")

        try:
            processor.init(self.sample_rate, self.channels, BUFFER_SIZE)

            frames_to_read = max(1, BUFFER_SIZE // self.channels)
            frames_read = frames_to_read
            total_frames_read = 0

            while frames_read == frames_to_read:
                samples = self._read_frames(frames_to_read)
                frames_read = len(samples) // self.channels
                processor.process(samples, frames_read)
                total_frames_read += frames_read

            logger.info("Read %d frames", total_frames_read)
            processor.done()
        finally:
            self.close()

        return total_frames_read

    def close(self) -> None:
        """Close the input file if one is open."""
        if self._file is not None:
            self._file.close()
            self._file = None


class WavFileWriter:
    """Audio processor that writes 16-bit PCM WAV files."""

    def __init__(self, filename: PathLike) -> None:
        self.filename = filename
        self.channels = 0
        self.buffer_size = 0
        self._output: Optional[wave.Wave_write] = None

    def __enter__(self) -> WavFileWriter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def init(self, sample_rate: int, channels: int, buffer_size: int) -> None:
        """Create the output file; raise AudioFileError on failure."""
        logger.info("Output file: %s", self.filename)
        self.close()
        self.channels = channels
        self.buffer_size = buffer_size

        try:
            output = wave.open(str(self.filename), "wb")
        except OSError as exc:
            raise AudioFileError(
                f"Failed to write file: {self.filename}\n{exc.strerror or exc}"
            ) from exc

        try:
            output.setnchannels(channels)
            output.setsampwidth(2)
            output.setframerate(sample_rate)
        except wave.Error as exc:
            try:
                output.close()
            except wave.Error:
                pass
            raise AudioFileError(
                f"Failed to write file: {self.filename}\n{exc}"
            ) from exc

        self._output = output

    def process(self, samples: Sequence[int], frame_count: int) -> None:
        """Write ``frame_count`` frames of interleaved 16-bit samples."""
        if self._output is None:
            raise AudioFileError("No output file is open")

        needed = frame_count * self.channels
        values = list(samples[:needed])
        if len(values) != needed:
            raise AudioFileError(
                f"Expected {frame_count} frames, got {len(values) // self.channels}"
            )

        try:
            data = struct.pack(f"<{needed}h", *values)
        except struct.error as exc:
            raise AudioFileError(f"Invalid sample value: {exc}") from exc

        try:
            self._output.writeframes(data)
        except OSError as exc:
            raise AudioFileError(
                f"Failed to write file: {self.filename}\n{exc.strerror or exc}"
            ) from exc

    def done(self) -> None:
        """Finish the output file."""
        self.close()

    def close(self) -> None:
        """Close the output file if one is open."""
        if self._output is not None:
            self._output.close()
            self._output = None
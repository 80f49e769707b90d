"""In-memory waveform data and its binary, text and JSON file formats."""

from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import BinaryIO, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

FLAG_8_BIT = 0x00000001
_HEADER = struct.Struct("<iIiiI")


class WaveformDataError(Exception):
    """Raised when a waveform data file cannot be read or written."""


def _trunc_div(value: int, divisor: int) -> int:
    """Integer division that rounds towards zero."""
    quotient = abs(value) // divisor
    return -quotient if value < 0 else quotient


def _check_bits(bits: int) -> None:
    if bits not in (8, 16):
        raise ValueError("Invalid bits: must be either 8 or 16")


def _read_points(file: BinaryIO, size: int, eight_bit: bool) -> list[int]:
    """Read up to ``size`` min/max pairs; a short file yields fewer."""
    point_size = 2 if eight_bit else 4
    raw = file.read(size * point_size)
    count = len(raw) // point_size
    raw = raw[: count * point_size]
    if eight_bit:
        return [value * 256 for value in struct.unpack(f"<{count * 2}b", raw)]
    return list(struct.unpack(f"<{count * 2}h", raw))


class WaveformBuffer:
    """A sequence of (min, max) sample pairs with the rate they were taken at."""

    def __init__(self) -> None:
        self.sample_rate = 0
        self.samples_per_pixel = 0
        self.bits = 16
        self._data: list[int] = []

    def __len__(self) -> int:
        return len(self._data) // 2

    def append_samples(self, min_value: int, max_value: int) -> None:
        self._data.append(min_value)
        self._data.append(max_value)

    def set_samples(self, index: int, min_value: int, max_value: int) -> None:
        self._data[2 * index] = min_value
        self._data[2 * index + 1] = max_value

    def min_sample(self, index: int) -> int:
        return self._data[2 * index]

    def max_sample(self, index: int) -> int:
        return self._data[2 * index + 1]

    def resize(self, size: int) -> None:
        """Set the number of points, padding with zeros or truncating."""
        target = size * 2
        if target < len(self._data):
            del self._data[target:]
        else:
            self._data.extend([0] * (target - len(self._data)))

    def load(self, filename: PathLike) -> None:
        """Read a binary waveform data file, replacing the current contents."""
        try:
            with open(filename, "rb") as file:
                logger.info("Reading waveform data file: %s", filename)

                version_bytes = file.read(4)
                if len(version_bytes) < 4:
                    raise WaveformDataError(
                        f"Failed to read data file: {filename}: truncated header"
                    )
                (version,) = struct.unpack("<i", version_bytes)
                if version != 1:
                    raise WaveformDataError(
                        f"Failed to read data file: {filename}: "
                        f"Cannot load data file version: {version}"
                    )

                rest = file.read(_HEADER.size - 4)
                if len(rest) < _HEADER.size - 4:
                    raise WaveformDataError(
                        f"Failed to read data file: {filename}: truncated header"
                    )
                _, flags, sample_rate, samples_per_pixel, size = _HEADER.unpack(
                    version_bytes + rest
                )

                eight_bit = bool(flags & FLAG_8_BIT)
                self.sample_rate = sample_rate
                self.samples_per_pixel = samples_per_pixel
                self.bits = 8 if eight_bit else 16
                self._data = _read_points(file, size, eight_bit)
        except OSError as exc:
            raise WaveformDataError(
                f"Failed to read data file: {filename}: {exc.strerror or exc}"
            ) from exc

        logger.info(
            "Sample rate: %d Hz\nBits: %d\nSamples per pixel: %d\nLength: %d points",
            self.sample_rate,
            self.bits,
            self.samples_per_pixel,
            len(self),
        )

        if size != len(self):
            logger.warning(
                "Expected %d points, read %d min and max points", size, len(self)
            )

        if self.samples_per_pixel < 2:
            raise WaveformDataError(
                f"Failed to read data file: {filename}: "
                f"Invalid samples per pixel: {self.samples_per_pixel}, minimum 2"
            )
        if self.sample_rate < 1:
            raise WaveformDataError(
                f"Failed to read data file: {filename}: "
                f"Invalid sample rate: {self.sample_rate} Hz, minimum 1 Hz"
            )

    def save(self, filename: PathLike, bits: int = 16) -> None:
        """Write the binary waveform data format at 8 or 16 bits."""
        _check_bits(bits)
        flags = FLAG_8_BIT if bits == 8 else 0
        size = len(self)
        header = _HEADER.pack(1, flags, self.sample_rate, self.samples_per_pixel, size)
        values = self._data[: size * 2]

        if bits == 8:
            body = struct.pack(
                f"<{len(values)}b", *(_trunc_div(v, 256) for v in values)
            )
        else:
            body = struct.pack(f"<{len(values)}h", *values)

        try:
            with open(filename, "wb") as file:
                logger.info(
                    "Writing output file: %s\nResolution: %d bits", filename, bits
                )
                file.write(header)
                file.write(body)
        except OSError as exc:
            raise WaveformDataError(
                f"Failed to write data file: {filename}: {exc.strerror or exc}"
            ) from exc

    def save_as_text(self, filename: PathLike, bits: int = 16) -> None:
        """Write one ``min,max`` line per point."""
        divisor = 256 if bits == 8 else 1
        lines = "".join(
            f"{_trunc_div(self.min_sample(i), divisor)},"
            f"{_trunc_div(self.max_sample(i), divisor)}\n"
            for i in range(len(self))
        )
        self._write_text(filename, lines)

    def save_as_json(self, filename: PathLike, bits: int = 16) -> None:
        """Write the waveform as a single-line JSON document."""
        _check_bits(bits)
        divisor = 256 if bits == 8 else 1
        values = ",".join(str(_trunc_div(v, divisor)) for v in self._data)
        text = (
            f'{{"sample_rate":{self.sample_rate}'
            f',"samples_per_pixel":{self.samples_per_pixel}'
            f',"bits":{bits}'
            f',"length":{len(self)}'
            f',"data":[{values}]}}\n'
        )
        self._write_text(filename, text)

    @staticmethod
    def _write_text(filename: PathLike, text: str) -> None:
        try:
            with open(filename, "w", encoding="ascii", newline="\n") as file:
                logger.info("Writing output file: %s", filename)
                file.write(text)
        except OSError as exc:
            raise WaveformDataError(
                f"Failed to write data file: {filename}: {exc.strerror or exc}"
            ) from exc
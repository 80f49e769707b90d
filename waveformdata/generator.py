"""Reduction of PCM audio to min/max waveform points."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from waveformdata.buffer import WaveformBuffer

logger = logging.getLogger(__name__)

MAX_SAMPLE = 32767
MIN_SAMPLE = -32768


def _trunc_div(value: int, divisor: int) -> int:
    """Integer division that rounds towards zero."""
    quotient = abs(value) // divisor
    return -quotient if value < 0 else quotient


class ScaleFactor(ABC):
    """Decides how many input samples make up one waveform point."""

    @abstractmethod
    def samples_per_pixel(self, sample_rate: int) -> int:
        """Return the number of samples per point at the given sample rate."""


@dataclass(frozen=True)
class SamplesPerPixelScaleFactor(ScaleFactor):
    """A fixed number of samples per point."""

    samples: int

    def samples_per_pixel(self, sample_rate: int) -> int:
        return self.samples


@dataclass(frozen=True)
class PixelsPerSecondScaleFactor(ScaleFactor):
    """A fixed number of points per second of audio."""

    pixels_per_second: int

    def __post_init__(self) -> None:
        if self.pixels_per_second <= 0:
            raise ValueError("Invalid pixels per second: must be greater than zero")

    def samples_per_pixel(self, sample_rate: int) -> int:
        return sample_rate // self.pixels_per_second


@dataclass(frozen=True)
class DurationScaleFactor(ScaleFactor):
    """Fits the time range from start_time to end_time into width_pixels points."""

    start_time: float
    end_time: float
    width_pixels: int

    def __post_init__(self) -> None:
        if self.end_time < self.start_time:
            raise ValueError(
                f"Invalid end time, must be greater than {self.start_time:g}"
            )
        if self.width_pixels < 1:
            raise ValueError("Invalid image width: minimum 1")

    def samples_per_pixel(self, sample_rate: int) -> int:
        seconds = self.end_time - self.start_time
        width_samples = int(seconds * sample_rate)
        return _trunc_div(width_samples, self.width_pixels)


class WaveformGenerator:
    """Audio processor that appends min/max points to a waveform buffer."""

    def __init__(self, buffer: WaveformBuffer, scale_factor: ScaleFactor) -> None:
        self.buffer = buffer
        self.scale_factor = scale_factor
        self.channels = 0
        self.samples_per_pixel = 0
        self._reset()

    def _reset(self) -> None:
        self._min = MAX_SAMPLE
        self._max = MIN_SAMPLE
        self._count = 0

    def init(self, sample_rate: int, channels: int, buffer_size: int) -> None:
        """Prepare for audio of the given format; raise ValueError if unusable."""
        if not 1 <= channels <= 2:
            raise ValueError(
                "Can only generate waveform data from mono or stereo input files"
            )

        samples_per_pixel = self.scale_factor.samples_per_pixel(sample_rate)
        if samples_per_pixel < 2:
            raise ValueError("Invalid zoom: minimum 2")

        self.channels = channels
        self.samples_per_pixel = samples_per_pixel
        self.buffer.samples_per_pixel = samples_per_pixel
        self.buffer.sample_rate = sample_rate
        self._reset()

        logger.info(
            "Generating waveform data...\nSamples per pixel: %d\nInput channels: %d",
            samples_per_pixel,
            channels,
        )

    def process(self, samples: Sequence[int], frame_count: int) -> None:
        """Consume ``frame_count`` frames of interleaved 16-bit samples."""
        channels = self.channels
        if channels < 1:
            raise RuntimeError("init() must be called before process()")

        frames = samples[: frame_count * channels]
        for frame in zip(*[iter(frames)] * channels):
            sample = _trunc_div(sum(frame), channels)
            sample = max(MIN_SAMPLE, min(MAX_SAMPLE, sample))

            self._min = min(self._min, sample)
            self._max = max(self._max, sample)
            self._count += 1

            if self._count == self.samples_per_pixel:
                self.buffer.append_samples(self._min, self._max)
                self._reset()

    def done(self) -> None:
        """Flush any partial point at the end of the audio."""
        if self._count > 0:
            self.buffer.append_samples(self._min, self._max)
            self._reset()

        logger.info("Generated %d points", len(self.buffer))
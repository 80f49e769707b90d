"""Resampling of waveform data to a coarser zoom level."""

from __future__ import annotations

import logging

from waveformdata.buffer import WaveformBuffer

logger = logging.getLogger(__name__)

_MAX_SAMPLE = 32767
_MIN_SAMPLE = -32768


def rescale(input_buffer: WaveformBuffer, samples_per_pixel: int) -> WaveformBuffer:
    """Return a new buffer holding ``input_buffer`` at ``samples_per_pixel``.

    The output scale must be coarser than the input scale.
    """
    logger.info("Rescaling to %d samples/pixel", samples_per_pixel)

    sample_rate = input_buffer.sample_rate
    input_spp = input_buffer.samples_per_pixel

    if sample_rate <= 0:
        raise ValueError(f"Invalid sample rate: {sample_rate}")
    if samples_per_pixel <= 0:
        raise ValueError(f"Invalid samples per pixel: {samples_per_pixel}")
    if input_spp <= 0:
        raise ValueError(f"Invalid input samples per pixel: {input_spp}")
    if samples_per_pixel <= input_spp:
        raise ValueError(
            f"Output scale {samples_per_pixel} must be greater than "
            f"input scale {input_spp}"
        )

    size = len(input_buffer)

    output = WaveformBuffer()
    output.sample_rate = sample_rate
    output.samples_per_pixel = samples_per_pixel

    logger.info(
        "Input scale: %d samples/pixel\nOutput scale: %d samples/pixel\n"
        "Input buffer size: %d",
        input_spp,
        samples_per_pixel,
        size,
    )

    def sample_at_pixel(x: int) -> int:
        return x * samples_per_pixel

    low, high = 0, 0
    if size > 0:
        low, high = input_buffer.min_sample(0), input_buffer.max_sample(0)

    input_index = 0
    output_index = 0
    last_input_index = 0

    while input_index < size:
        while sample_at_pixel(output_index) // input_spp == input_index:
            if output_index > 0:
                output.append_samples(low, high)

            last_input_index = input_index
            output_index += 1

            if sample_at_pixel(output_index) != sample_at_pixel(output_index - 1):
                low, high = _MAX_SAMPLE, _MIN_SAMPLE

        stop = min(sample_at_pixel(output_index) // input_spp, size)

        for index in range(input_index, stop):
            low = min(low, input_buffer.min_sample(index))
            high = max(high, input_buffer.max_sample(index))
        input_index = max(input_index, stop)

    if input_index != last_input_index:
        output.append_samples(low, high)

    logger.info("Generated %d points", len(output))
    return output
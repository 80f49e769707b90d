# waveformdata

Compute and store audio waveform data: the minimum and maximum sample value
for each pixel of a waveform image. The package uses only the standard library.

## Modules

- `waveformdata.generator`
  - `WaveformGenerator(buffer, scale_factor)` turns interleaved 16-bit PCM
    frames, mono or stereo, into min/max points. The points are appended to a
    `WaveformBuffer`. Call `init(sample_rate, channels, buffer_size)` first,
    then call `process(samples, frame_count)` as often as needed, then `done()`.
    `done()` flushes a final partial point. `init` raises `ValueError` in two
    cases: the input has more than two channels, or the scale works out to
    fewer than 2 samples per point.
  - Scale factors:
    - `SamplesPerPixelScaleFactor(samples)` sets a fixed zoom.
    - `PixelsPerSecondScaleFactor(pixels_per_second)` gives
      `sample_rate // pixels_per_second`.
    - `DurationScaleFactor(start_time, end_time, width_pixels)` fits a time
      range into a width.

    Invalid arguments raise `ValueError`.
- `waveformdata.rescaler.rescale(input_buffer, samples_per_pixel)` returns a
  new buffer at a coarser scale. It raises `ValueError` if the new scale is not
  greater than the input scale.
- `waveformdata.buffer`
  - `WaveformBuffer` holds the `(min, max)` pairs. Its other attributes are
    `sample_rate`, `samples_per_pixel` and `bits`.
  - The data is accessed with `len()`, `append_samples`, `set_samples`,
    `min_sample`, `max_sample` and `resize`.
  - `load(filename)` reads the binary `.dat` format (version 1, 8 or 16 bits).
    It raises `WaveformDataError` in these cases:
    - the file cannot be read;
    - the file has another version;
    - the header is truncated;
    - the samples per pixel is below 2;
    - the sample rate is below 1.

    A file with fewer points than its header states loads what is there and
    logs a warning.
  - `save(filename, bits=16)` writes the binary format.
  - `save_as_json(filename, bits=16)` writes one line of JSON.
  - `save_as_text(filename, bits=16)` writes one `min,max` line per point.
  - At 8 bits, values are divided by 256, rounding towards zero.
  - `save` and `save_as_json` raise `ValueError` unless bits is 8 or 16.
- `waveformdata.wavio`
  - `WavFileReader` opens a WAV file with `open(filename)`. It accepts PCM at
    8, 16, 24 and 32 bits, and IEEE float at 32 and 64 bits.
  - `run(processor)` converts the samples to 16 bits and passes them to any
    object with `init`, `process` and `done` methods. It returns the number of
    frames read and closes the file afterwards.
  - `WavFileWriter(filename)` is such a processor: it writes 16-bit PCM WAV.
  - Both classes raise `AudioFileError` on failure and work as context
    managers.
- `waveformdata.bstdfile.BstdFile(fp)` wraps a binary file object.
  `read(size)` returns up to `size` bytes. Its `eof` property becomes true as
  soon as the read that returned the last bytes has completed.
- `waveformdata.timeutil.seconds_to_string(seconds)` formats seconds as
  `MM:SS`, or as `HH:MM:SS` when the time reaches an hour or more.

Progress and details are reported through the standard `logging` module. The
loggers are named after the modules.

## Example

```python
from waveformdata.buffer import WaveformBuffer
from waveformdata.generator import WaveformGenerator, SamplesPerPixelScaleFactor
from waveformdata.wavio import WavFileReader

buffer = WaveformBuffer()
generator = WaveformGenerator(buffer, SamplesPerPixelScaleFactor(256))

reader = WavFileReader()
reader.open("input.wav")
reader.run(generator)

buffer.save("output.dat", 8)
buffer.save_as_json("output.json", 8)
```

Rescaling existing data:

```python
from waveformdata.rescaler import rescale

coarse = rescale(buffer, 1024)
```

## What it does not do

- There is no command-line program. The package is a library only.
- It does not draw waveform images.
- It decodes no audio format other than WAV. MP3 and other compressed formats
  are not read. `BstdFile` is only a buffered byte reader and not a decoder.

## Tests

```
pip install -e .[test]
pytest
```
[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "waveformdata"
version = "1.0.0"
description = "Generate, rescale and store audio waveform min/max data"
requires-python = ">=3.10"
dependencies = []
keywords = ["audio", "waveform", "wav", "peaks", "visualisation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["waveformdata"]

[tool.pytest.ini_options]
addopts = "-ra"

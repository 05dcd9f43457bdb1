[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "logsource"
version = "0.1.0"
description = "Seekable readers for log files, zstd and gzip logs and live streams, with line helpers and search criteria"
requires-python = ">=3.10"
keywords = ["log", "logs", "zstd", "gzip", "stream", "reader", "seek"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Logging",
    "Topic :: Text Processing :: Filters",
]
dependencies = [
    "zstandard",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["logsource"]

[tool.pytest.ini_options]
addopts = "-ra"

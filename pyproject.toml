[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fbcscrub"
version = "0.1.0"
description = "Frequency-based chunking: find frequent byte windows across chunks and split chunks around them"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "deduplication",
    "chunking",
    "frequency-based chunking",
    "fbc",
    "scrubber",
    "storage",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving :: Compression",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
fbcscrub-runner = "fbcscrub.runner:main"

[tool.hatch.build.targets.wheel]
packages = ["fbcscrub"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true

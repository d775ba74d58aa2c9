[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "blockrest"
version = "0.1.0"
description = "Building blocks for a block explorer REST API: scripts, addresses, headers, transactions, fees, JSON views and HTTP responses"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "bitcoin",
    "blockchain",
    "block-explorer",
    "rest",
    "script",
    "bech32",
    "base58",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["blockrest"]

[tool.hatch.build.targets.sdist]
include = ["blockrest", "tests"]

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

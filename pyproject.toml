[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mqctl"
version = "0.1.0"
description = "Message views, send/receive requests, events-store statistics and cluster and connector manifests for a message-queue cluster"
requires-python = ">=3.10"
keywords = ["message-queue", "pubsub", "kubernetes", "manifest", "cli", "events"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "pyyaml>=6.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
mqctl = "mqctl.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["mqctl"]

[tool.hatch.build.targets.sdist]
include = ["mqctl", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true

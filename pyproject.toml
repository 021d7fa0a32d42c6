[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lockmgr"
version = "0.1.0"
description = "Thread-level shared/exclusive lock manager with deadlock detection and two-phase locking"
requires-python = ">=3.10"
dependencies = []
keywords = ["locking", "concurrency", "two-phase locking", "deadlock", "resource allocation graph"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["lockmgr"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ecache"
version = "0.1.0"
description = "Sharded, thread-safe LRU and LRU-2 in-memory cache with lazy expiration and inspection hooks"
requires-python = ">=3.10"
dependencies = []
keywords = ["cache", "lru", "lru-2", "in-memory", "expiration", "thread-safe"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ecache"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

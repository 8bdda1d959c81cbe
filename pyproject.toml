[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "yab"
version = "0.1.0"
description = "Building blocks for RPC benchmarking: options, peer lists, request input, rate limiting and statsd metrics"
requires-python = ">=3.10"
keywords = ["benchmark", "rpc", "thrift", "grpc", "protobuf", "statsd", "load-testing"]
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
    "Topic :: System :: Benchmark",
    "Topic :: Software Development :: Testing :: Traffic Generation",
]
dependencies = [
    "pyyaml",
    "protobuf",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
yab-extract-changelog = "yab.changelog:main"

[tool.hatch.build.targets.wheel]
packages = ["yab"]

[tool.hatch.build.targets.sdist]
include = ["yab", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true

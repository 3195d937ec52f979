[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ckman"
version = "0.1.0"
description = "Library helpers for ClickHouse cluster management: config schemas, credential handling, IP ranges, XML config writing, a worker pool and YAML settings."
requires-python = ">=3.10"
keywords = ["clickhouse", "cluster", "configuration", "xml", "rsa", "jwt", "worker-pool"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "bcrypt",
    "cryptography",
    "pyjwt",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["ckman"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

"""Helpers for ClickHouse cluster management: encryption, IP ranges, config schemas, XML writing, tokens, a worker pool and YAML settings."""

__version__ = "0.1.0"
"""Assorted helpers: passwords, environment lookups, formatting and temp files."""

from __future__ import annotations

import copy
import ipaddress
import os
import random
import re
import socket
import sys
import tempfile
import unicodedata
from dataclasses import dataclass
from datetime import datetime
from typing import Any, TypeVar

import bcrypt

T = TypeVar("T")

KB = 1 << 10
MB = 1 << 20
GB = 1 << 30
TB = 1 << 40
PB = 1 << 50

_BCRYPT_COST = 10
_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


def get_work_directory() -> str:
    """Parent of the directory holding the running program."""
    program_dir = os.path.abspath(os.path.dirname(sys.argv[0]))
    return os.path.dirname(program_dir).replace("\\", "/")


def verify_password(pwd: str) -> None:
    """Raise ValueError unless ``pwd`` is long and varied enough."""
    length = len(pwd.encode("utf-8"))
    if length < 8:
        raise ValueError(f"password is only {length} characters long")
    has_number = has_upper = has_lower = has_special = False
    for char in pwd:
        category = unicodedata.category(char)
        if category.startswith("N"):
            has_number = True
        elif category == "Lu":
            has_upper = True
        elif category == "Ll":
            has_lower = True
        elif category[0] in ("P", "S"):
            has_special = True
    if sum((has_number, has_lower, has_upper, has_special)) < 3:
        raise ValueError("password don't contain at least three character categories")


def hash_password(pwd: str) -> str:
    return bcrypt.hashpw(pwd.encode("utf-8"), bcrypt.gensalt(rounds=_BCRYPT_COST)).decode("ascii")


def compare_password(hashed_pwd: str, plain_pwd: str) -> bool:
    try:
        return bcrypt.checkpw(plain_pwd.encode("utf-8"), hashed_pwd.encode("utf-8"))
    except ValueError:
        return False


def _env_key(key: str) -> str:
    return key.upper().replace("-", "_")


def env_string(key: str, default: str) -> str:
    """Value of the environment variable named after ``key``, else ``default``."""
    return os.environ.get(_env_key(key), default)


def env_int(key: str, default: int) -> int:
    """Integer value of the environment variable, else ``default`` if unset or invalid."""
    raw = os.environ.get(_env_key(key))
    if raw is None or not _INT_RE.fullmatch(raw):
        return default
    number = int(raw)
    if not _INT64_MIN <= number <= _INT64_MAX:
        return default
    return number


def env_bool(key: str, default: bool) -> bool:
    """True if the environment variable is set at all, else ``default``."""
    return True if _env_key(key) in os.environ else default


def convert_disk(size: int) -> str:
    """Human-readable size with two decimals and a binary unit."""
    for limit, unit, divisor in (
        (KB, "B", 1),
        (MB, "KB", KB),
        (GB, "MB", MB),
        (TB, "GB", GB),
        (PB, "TB", TB),
    ):
        if size < limit:
            return f"{size / divisor:.2f}{unit}"
    return f"{size / PB:.2f}PB"


@dataclass(frozen=True)
class TempFile:
    base_name: str
    full_name: str


def new_temp_file(directory: str, prefix: str) -> TempFile:
    """Create an empty temporary file and return its names."""
    fd, name = tempfile.mkstemp(prefix=prefix, dir=directory or None)
    os.close(fd)
    return TempFile(base_name=os.path.basename(name), full_name=name)


def deep_copy(value: T) -> T:
    return copy.deepcopy(value)


def get_string_with_default(value: str, default: str) -> str:
    return value if value != "" else default


def get_integer_with_default(value: int, default: int) -> int:
    return value if value != 0 else default


def get_outbound_ip() -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    """Local address used for the default route."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.connect(("8.8.8.8", 80))
        local = sock.getsockname()[0]
    return ipaddress.ip_address(local)


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // b
    return quotient if a >= 0 else -quotient


def convert_duration(start: datetime, end: datetime) -> str:
    """Format the whole seconds between two times as ``Xh Ym Zs``."""
    delta = end - start
    micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    total = _trunc_div(micros, 1_000_000)
    minutes = _trunc_div(total, 60)
    seconds = total - 60 * minutes
    hours = 0
    if minutes > 0:
        hours = minutes // 60
        minutes %= 60
    result = ""
    if hours > 0:
        result = f"{hours}h "
    if minutes > 0 or hours > 0:
        result += f"{minutes}m "
    return result + f"{seconds}s"


def shuffle(values: list[Any]) -> list[Any]:
    """Return a shuffled copy, leaving ``values`` untouched."""
    return random.sample(list(values), len(values))
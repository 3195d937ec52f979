"""Transparent decryption of ``ENC(...)`` wrapped values inside configuration objects."""

from __future__ import annotations

import dataclasses
import types
from typing import Any

from ckman.aes import aes_decrypt_ecb

PREFIX_DEFAULT = "ENC("
SUFFIX_DEFAULT = ")"
ALGORITHM = "AESWITHHEXANDBASE64"


class Gosypt:
    """Decrypts strings wrapped in a prefix/suffix pair, recursively through containers."""

    def __init__(
        self,
        prefix: str = PREFIX_DEFAULT,
        suffix: str = SUFFIX_DEFAULT,
        algorithm: str = ALGORITHM,
    ) -> None:
        self.prefix = prefix
        self.suffix = suffix
        self.algorithm = algorithm

    def ensure_password(self, password: str) -> str:
        """Return the decrypted value if wrapped, otherwise the value unchanged."""
        if not (password.startswith(self.prefix) and password.endswith(self.suffix)):
            return password
        inner = password[len(self.prefix):]
        if self.suffix and inner.endswith(self.suffix):
            inner = inner[: -len(self.suffix)]
        if self.algorithm == ALGORITHM:
            return aes_decrypt_ecb(inner)
        return password

    def set_attribution(self, prefix: str, suffix: str, algorithm: str) -> None:
        self.prefix = prefix
        self.suffix = suffix
        self.algorithm = algorithm

    def unmarshal(self, value: Any) -> Any:
        """Decrypt every wrapped string found in ``value``.

        Lists, dicts and objects are updated in place; the (possibly new)
        value is returned so that bare strings and tuples work too.
        """
        if isinstance(value, str):
            return self.ensure_password(value)
        if isinstance(value, list):
            value[:] = [self.unmarshal(item) for item in value]
            return value
        if isinstance(value, tuple):
            return tuple(self.unmarshal(item) for item in value)
        if isinstance(value, dict):
            for key in list(value):
                value[key] = self.unmarshal(value[key])
            return value
        if isinstance(value, (type, types.ModuleType)) or callable(value):
            return value
        if dataclasses.is_dataclass(value):
            for field in dataclasses.fields(value):
                setattr(value, field.name, self.unmarshal(getattr(value, field.name)))
            return value
        if hasattr(value, "__dict__"):
            for name, attr in list(vars(value).items()):
                setattr(value, name, self.unmarshal(attr))
        return value


GSYPT = Gosypt()
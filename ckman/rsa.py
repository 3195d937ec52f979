"""Raw RSA token encoding: sign-style encryption with a private key, decryption with the public key.

The portal encrypts a token with its private key (PKCS#1 v1.5 type 1
padding); this side only needs the public key to recover it.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Iterator
from dataclasses import dataclass

from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import (
    load_der_private_key,
    load_der_public_key,
)

PUB_KEY_PREFIX = "-----BEGIN RSA Public Key-----\n"
PRI_KEY_PREFIX = "-----BEGIN RSA Private Key-----\n"
PUB_KEY_SUFFIX = "\n-----END RSA Public Key-----"
PRI_KEY_SUFFIX = "\n-----END RSA Private Key-----"

_PADDING_OVERHEAD = 11


class RSAError(ValueError):
    """Raised when a key cannot be loaded or data cannot be encoded or decoded."""


@dataclass
class UserTokenModel:
    duration: int = 0
    random_padding_value: str = ""
    user_id: int = 0
    timestamp: int = 0


def _pem_body(text: bytes, prefix: str, suffix: str) -> bytes:
    body = text.decode("ascii", errors="replace")
    body = body.removeprefix(prefix).removesuffix(suffix)
    try:
        return base64.b64decode("".join(body.split()), validate=True)
    except (binascii.Error, ValueError):
        return b""


def _chunks(data: bytes, size: int) -> Iterator[bytes]:
    for start in range(0, len(data), size):
        yield data[start:start + size]


def _key_size(n: int) -> int:
    return (n.bit_length() + 7) // 8


def _public_decrypt(n: int, e: int, chunk: bytes) -> bytes:
    k = _key_size(n)
    if len(chunk) != k:
        raise RSAError("data length error")
    m = int.from_bytes(chunk, "big")
    if m > n:
        raise RSAError("message too long for RSA public key size")
    d = pow(m, e, n).to_bytes(k, "big")
    if d[0] != 0:
        raise RSAError("data broken, first byte is not zero")
    if d[1] not in (0, 1):
        raise RSAError("data is not encrypted by the private key")
    separator = d.find(b"\x00", 2)
    if separator < 0:
        raise RSAError("decryption error")
    return d[separator + 1:]


def _private_encrypt(n: int, d: int, chunk: bytes) -> bytes:
    k = _key_size(n)
    if k < len(chunk) + _PADDING_OVERHEAD:
        raise RSAError("data length error")
    em = b"\x00\x01" + b"\xff" * (k - len(chunk) - 3) + b"\x00" + chunk
    m = int.from_bytes(em, "big")
    if m > n:
        raise RSAError("decryption error")
    return pow(m, d, n).to_bytes(k, "big")


class RSAEncryption:
    """Encode and decode data with bare base64 RSA keys (no PEM armour)."""

    def gen_public_key(self, public_key: str) -> bytes:
        return f"{PUB_KEY_PREFIX}{public_key}{PUB_KEY_SUFFIX}".encode()

    def gen_private_key(self, private_key: str) -> bytes:
        return f"{PRI_KEY_PREFIX}{private_key}{PRI_KEY_SUFFIX}".encode()

    def get_public_key(self, public_key: str) -> rsa.RSAPublicKey:
        """Load a base64 SubjectPublicKeyInfo RSA key."""
        der = _pem_body(self.gen_public_key(public_key), PUB_KEY_PREFIX, PUB_KEY_SUFFIX)
        if not der:
            raise RSAError("get public key error")
        try:
            key = load_der_public_key(der)
        except ValueError as exc:
            raise RSAError(f"get public key error: {exc}") from exc
        if not isinstance(key, rsa.RSAPublicKey):
            raise RSAError("get public key error: not an RSA key")
        return key

    def get_private_key(self, private_key: str) -> rsa.RSAPrivateKey:
        """Load a base64 PKCS#1 or PKCS#8 RSA private key."""
        der = _pem_body(self.gen_private_key(private_key), PRI_KEY_PREFIX, PRI_KEY_SUFFIX)
        if not der:
            raise RSAError("get private key error")
        try:
            key = load_der_private_key(der, password=None)
        except (ValueError, TypeError) as exc:
            raise RSAError(f"get private key error: {exc}") from exc
        if not isinstance(key, rsa.RSAPrivateKey):
            raise RSAError("get private key error: not an RSA key")
        return key

    def decode(self, encoded: bytes | str, public_key: str) -> bytes:
        """Decrypt base64 data produced by :meth:`encode` using the public key."""
        if isinstance(encoded, str):
            encoded = encoded.encode("ascii", errors="replace")
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            data = b""
        try:
            key = self.get_public_key(public_key)
        except RSAError:
            raise RSAError("Please set the public key in advance") from None
        numbers = key.public_numbers()
        k = _key_size(numbers.n)
        return b"".join(_public_decrypt(numbers.n, numbers.e, chunk) for chunk in _chunks(data, k))

    def encode(self, data: bytes | str, private_key: str) -> bytes:
        """Encrypt with the private key and return base64 bytes."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        try:
            key = self.get_private_key(private_key)
        except RSAError:
            raise RSAError("Please set the private key in advance") from None
        numbers = key.private_numbers()
        n = numbers.public_numbers.n
        size = _key_size(n) - _PADDING_OVERHEAD
        raw = b"".join(_private_encrypt(n, numbers.d, chunk) for chunk in _chunks(data, size))
        return base64.b64encode(raw)
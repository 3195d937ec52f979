"""AES-128-ECB helpers compatible with MySQL's ``aes_encrypt``/``aes_decrypt``."""

from __future__ import annotations

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

_SALT = "656f6974656b"
_BLOCK_SIZE = 16
_KEY_SIZE = 16


def _generate_key(key: bytes) -> bytes:
    """Fold an arbitrary-length key into 16 bytes the way MySQL does."""
    folded = bytearray(key[:_KEY_SIZE].ljust(_KEY_SIZE, b"\0"))
    for offset, byte in enumerate(key[_KEY_SIZE:]):
        folded[offset % _KEY_SIZE] ^= byte
    return bytes(folded)


_KEY = _generate_key(bytes.fromhex(_SALT))


def _cipher() -> Cipher:
    return Cipher(algorithms.AES(_KEY), modes.ECB())


def _lenient_unhex(text: str) -> bytes:
    """Decode hex digits pairwise, stopping at the first invalid pair."""
    out = bytearray()
    for start in range(0, len(text) - 1, 2):
        try:
            out.append(int(text[start:start + 2], 16))
        except ValueError:
            break
        if not all(c in "0123456789abcdefABCDEF" for c in text[start:start + 2]):
            out.pop()
            break
    return bytes(out)


def aes_encrypt_ecb(orig_data: str) -> str:
    """Encrypt text and return it as upper-case hex; empty text stays empty."""
    if orig_data == "":
        return orig_data
    data = orig_data.encode("utf-8")
    pad = _BLOCK_SIZE - len(data) % _BLOCK_SIZE
    plain = data + bytes([pad]) * pad
    encryptor = _cipher().encryptor()
    encrypted = encryptor.update(plain) + encryptor.finalize()
    return encrypted.hex().upper()


def aes_decrypt_ecb(encrypted: str) -> str:
    """Decrypt upper- or lower-case hex produced by :func:`aes_encrypt_ecb`.

    The plain text ends at the first byte below 0x20, which strips padding.
    """
    if encrypted == "":
        return encrypted
    raw = _lenient_unhex(encrypted)
    if len(raw) % _BLOCK_SIZE:
        raise ValueError("encrypted data is not a whole number of AES blocks")
    decryptor = _cipher().decryptor()
    decrypted = decryptor.update(raw) + decryptor.finalize()
    end = next((i for i, byte in enumerate(decrypted) if byte < 32), len(decrypted))
    return decrypted[:end].decode("utf-8", errors="replace")
import base64
import json
import time
from dataclasses import asdict

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa as crsa

from ckman.rsa import RSAEncryption, RSAError, UserTokenModel


def _key_pair(private_format=serialization.PrivateFormat.TraditionalOpenSSL):
    private = crsa.generate_private_key(public_exponent=65537, key_size=1024)
    private_der = private.private_bytes(
        serialization.Encoding.DER, private_format, serialization.NoEncryption()
    )
    public_der = private.public_key().public_bytes(
        serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
    )
    return base64.b64encode(public_der).decode(), base64.b64encode(private_der).decode()


@pytest.fixture(scope="module")
def keys():
    return _key_pair()


def test_abc_round_trip(keys):
    public_text, private_text = keys
    codec = RSAEncryption()
    encoded = codec.encode(b"abc", private_text)
    assert codec.decode(encoded, public_text) == b"abc"


def test_user_model_round_trip(keys):
    public_text, private_text = keys
    codec = RSAEncryption()
    user_record = UserTokenModel(
        duration=3600,
        random_padding_value="abc",
        user_id=123456789,
        timestamp=time.time_ns() // 1_000_000,
    )
    encoded = codec.encode(json.dumps(asdict(user_record)).encode(), private_text)
    decoded = codec.decode(encoded, public_text)
    assert UserTokenModel(**json.loads(decoded)) == user_record


def test_long_data_is_split_into_blocks(keys):
    public_text, private_text = keys
    codec = RSAEncryption()
    data = bytes(range(256)) + b"x" * 44
    encoded = codec.encode(data, private_text)
    assert len(base64.b64decode(encoded)) == 3 * 128
    assert codec.decode(encoded, public_text) == data


def test_empty_data(keys):
    public_text, private_text = keys
    codec = RSAEncryption()
    assert codec.encode(b"", private_text) == b""
    assert codec.decode(b"", public_text) == b""


def test_pkcs8_private_key_is_accepted():
    public_text, private_text = _key_pair(serialization.PrivateFormat.PKCS8)
    codec = RSAEncryption()
    assert codec.decode(codec.encode("hello", private_text), public_text) == b"hello"


def test_gen_public_key_wraps_text():
    assert RSAEncryption().gen_public_key("abc") == (
        b"-----BEGIN RSA Public Key-----\nabc\n-----END RSA Public Key-----"
    )


def test_gen_private_key_wraps_text():
    assert RSAEncryption().gen_private_key("abc") == (
        b"-----BEGIN RSA Private Key-----\nabc\n-----END RSA Private Key-----"
    )


def test_invalid_public_key(keys):
    _, private_text = keys
    codec = RSAEncryption()
    encoded = codec.encode(b"abc", private_text)
    with pytest.raises(RSAError, match="public key in advance"):
        codec.decode(encoded, "not a key!!")


def test_invalid_private_key():
    with pytest.raises(RSAError, match="private key in advance"):
        RSAEncryption().encode(b"abc", "bm90IGEga2V5")


def test_get_public_key_rejects_garbage():
    with pytest.raises(RSAError):
        RSAEncryption().get_public_key("####")


def test_truncated_block_fails(keys):
    public_text, private_text = keys
    codec = RSAEncryption()
    raw = base64.b64decode(codec.encode(b"abc", private_text))
    with pytest.raises(RSAError, match="data length error"):
        codec.decode(base64.b64encode(raw[:-1]), public_text)


def test_mismatched_key_fails(keys):
    _, private_text = keys
    other_public, _ = _key_pair()
    codec = RSAEncryption()
    with pytest.raises(RSAError):
        codec.decode(codec.encode(b"abc", private_text), other_public)
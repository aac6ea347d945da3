from unittest.mock import patch

import nacl.signing
import pytest

from valheimbot.exceptions import AuthenticationError, InvalidPublicKeyError
from valheimbot.host.signature import SignatureVerifier

BODY = b'{"type":1}'
TIMESTAMP = "1700000000"


def sign(signing_key: nacl.signing.SigningKey, timestamp: str, body: bytes) -> str:
    return signing_key.sign(timestamp.encode() + body).signature.hex()


@pytest.fixture
def verifier(signing_key) -> SignatureVerifier:
    return SignatureVerifier(signing_key.verify_key.encode().hex())


def test_valid_signature(verifier, signing_key):
    assert verifier.verify(sign(signing_key, TIMESTAMP, BODY), TIMESTAMP, BODY)


def test_tampered_body(verifier, signing_key):
    signature = sign(signing_key, TIMESTAMP, BODY)

    assert not verifier.verify(signature, TIMESTAMP, b'{"type":2}')


def test_tampered_timestamp(verifier, signing_key):
    signature = sign(signing_key, TIMESTAMP, BODY)

    assert not verifier.verify(signature, "1700000001", BODY)


def test_signed_by_someone_else(verifier):
    other_key = nacl.signing.SigningKey.generate()

    assert not verifier.verify(sign(other_key, TIMESTAMP, BODY), TIMESTAMP, BODY)


@pytest.mark.parametrize(
    "signature,timestamp",
    [
        (None, TIMESTAMP),
        ("", TIMESTAMP),
        ("zz" * 64, TIMESTAMP),
        # right encoding, wrong length
        ("ab" * 10, TIMESTAMP),
        ("ab" * 64, None),
    ],
)
def test_malformed_headers_are_a_mismatch(verifier, signature, timestamp):
    assert not verifier.verify(signature, timestamp, BODY)


@pytest.mark.parametrize(
    "public_key_hex",
    [
        "not hex at all",
        "abcd",
        "",
    ],
)
def test_malformed_public_key(signing_key, public_key_hex):
    verifier = SignatureVerifier(public_key_hex)

    with pytest.raises(InvalidPublicKeyError) as exc_info:
        verifier.verify(sign(signing_key, TIMESTAMP, BODY), TIMESTAMP, BODY)

    assert isinstance(exc_info.value, AuthenticationError)


def test_malformed_public_key_is_reported_before_headers(signing_key):
    verifier = SignatureVerifier("xyz")

    with pytest.raises(InvalidPublicKeyError):
        verifier.verify(None, None, BODY)


def test_public_key_is_decoded_once(verifier, signing_key):
    signature = sign(signing_key, TIMESTAMP, BODY)

    with patch(
        "valheimbot.host.signature.nacl.signing.VerifyKey",
        wraps=nacl.signing.VerifyKey,
    ) as verify_key_class:
        assert verifier.verify(signature, TIMESTAMP, BODY)
        assert verifier.verify(signature, TIMESTAMP, BODY)
        assert not verifier.verify(signature, TIMESTAMP, b"{}")

    verify_key_class.assert_called_once()

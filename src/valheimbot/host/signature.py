import logging
from typing import Optional

import nacl.exceptions
import nacl.signing

from valheimbot.exceptions import InvalidPublicKeyError

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Signature-Ed25519"
TIMESTAMP_HEADER = "X-Signature-Timestamp"


class SignatureVerifier:
    """
    Checks that an interaction request was signed by Discord.

    Discord signs ``timestamp + raw body`` with the application's Ed25519 key
    and sends the hex signature and the timestamp as headers.
    """

    def __init__(self, public_key_hex: str) -> None:
        self._public_key_hex = public_key_hex
        self._verify_key: Optional[nacl.signing.VerifyKey] = None

    def _get_verify_key(self) -> nacl.signing.VerifyKey:
        if self._verify_key is not None:
            return self._verify_key
        try:
            key_bytes = bytes.fromhex(self._public_key_hex)
        except ValueError as e:
            raise InvalidPublicKeyError("not valid hex") from e
        try:
            self._verify_key = nacl.signing.VerifyKey(key_bytes)
        except (nacl.exceptions.ValueError, nacl.exceptions.TypeError) as e:
            raise InvalidPublicKeyError(str(e)) from e
        return self._verify_key

    def verify(
        self, signature_hex: Optional[str], timestamp: Optional[str], body: bytes
    ) -> bool:
        """
        Return True when the signature matches.

        :raises InvalidPublicKeyError: if the configured key is malformed
        """
        verify_key = self._get_verify_key()

        if not signature_hex or not timestamp:
            logger.info("request is missing signature headers")
            return False

        try:
            signature = bytes.fromhex(signature_hex)
        except ValueError:
            logger.info("request signature is not valid hex")
            return False

        try:
            verify_key.verify(timestamp.encode() + body, signature)
        except (nacl.exceptions.BadSignatureError, nacl.exceptions.ValueError):
            return False
        return True

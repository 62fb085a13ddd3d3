"""
Request signers for the legacy HMAC and derived-key (AWS Signature V4) schemes
"""

import base64
import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .error import ConfigurationException

DERIVED_KEY_ALGORITHM = "AWS4-HMAC-SHA256"
LEGACY_SIGNATURE_METHOD = "HmacSHA256"
LEGACY_SIGNATURE_VERSION = "2"
SCOPE_TERMINATOR = "aws4_request"


class SignatureScheme(str, Enum):
    LEGACY = "legacy"
    DERIVED_KEY = "derived-key"


@dataclass(frozen=True)
class SigningContext:
    """Time and scope a signature is bound to."""

    timestamp: datetime
    region: str
    service: str

    @property
    def amz_date(self) -> str:
        return self.timestamp.strftime("%Y%m%dT%H%M%SZ")

    @property
    def datestamp(self) -> str:
        return self.timestamp.strftime("%Y%m%d")

    @property
    def iso_timestamp(self) -> str:
        return self.timestamp.strftime("%Y-%m-%dT%H:%M:%SZ")

    @property
    def scope(self) -> str:
        return f"{self.datestamp}/{self.region}/{self.service}/{SCOPE_TERMINATOR}"


def _hmac(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def sha256_hex(payload: bytes) -> str:
    return hashlib.sha256(payload).hexdigest()


class LegacyHmacSigner:
    """
    Signature Version 2: base64(HMAC-SHA256(secret, string_to_sign)).

    The signature travels as the ``Signature`` request parameter.
    """

    scheme = SignatureScheme.LEGACY

    def __init__(self, secret_key: str):
        self._secret = secret_key.encode("utf-8")

    def string_to_sign(self, request, context: SigningContext) -> str:
        return "\n".join([
            request.verb.upper(),
            request.host.lower(),
            request.path,
            request.canonical_query,
        ])

    def sign(self, string_to_sign: str, context: SigningContext) -> str:
        digest = hmac.new(self._secret, string_to_sign.encode("utf-8"), hashlib.sha256).digest()
        return base64.b64encode(digest).decode("ascii")


class DerivedKeySigner:
    """
    Signature Version 4.

    The signing key is derived from the secret through four chained
    HMAC-SHA256 steps over date, region, service and the scope terminator.
    """

    scheme = SignatureScheme.DERIVED_KEY
    algorithm = DERIVED_KEY_ALGORITHM

    def __init__(self, secret_key: str):
        if not secret_key:
            raise ConfigurationException(
                "A secret key is required to derive request signing keys."
            )
        self._secret = secret_key

    def derive_signing_key(self, datestamp: str, region: str, service: str) -> bytes:
        k_date = _hmac(f"AWS4{self._secret}".encode("utf-8"), datestamp)
        k_region = _hmac(k_date, region)
        k_service = _hmac(k_region, service)
        return _hmac(k_service, SCOPE_TERMINATOR)

    def string_to_sign(self, request, context: SigningContext) -> str:
        return "\n".join([
            self.algorithm,
            context.amz_date,
            context.scope,
            sha256_hex(request.text.encode("utf-8")),
        ])

    def sign(self, string_to_sign: str, context: SigningContext) -> str:
        signing_key = self.derive_signing_key(context.datestamp, context.region, context.service)
        return hmac.new(
            signing_key,
            string_to_sign.encode("utf-8"),
            hashlib.sha256
        ).hexdigest()


_SIGNERS = {
    SignatureScheme.LEGACY: LegacyHmacSigner,
    SignatureScheme.DERIVED_KEY: DerivedKeySigner,
}


def create_signer(scheme: SignatureScheme, secret_key: str):
    """Return the signer for ``scheme``; the set of schemes is closed."""
    return _SIGNERS[SignatureScheme(scheme)](secret_key)

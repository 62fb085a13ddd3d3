"""
Request builder: turns verb, URL, headers, parameters and payload into a
signed request.

The host and path computed here are used both for the string that is signed
and for the request that is sent, so the two can never disagree.
"""

import re
from datetime import datetime, UTC
from typing import Iterable, Optional, Tuple
from urllib.parse import parse_qsl, urlsplit

from ._canonical import (
    PairsInput,
    as_pairs,
    canonical_query_for_signing,
    canonicalize_headers,
    encode_path,
    query_for_transmission,
)
from ._signer import (
    LEGACY_SIGNATURE_METHOD,
    LEGACY_SIGNATURE_VERSION,
    SignatureScheme,
    SigningContext,
    create_signer,
    sha256_hex,
)
from .config import ClientConfig, ServiceFamily
from .dispatcher import FORM_CONTENT_TYPE, decide_shape
from .models import CanonicalRequest, RequestShape, SignedRequest

CONTENT_SHA256_HEADER = "x-amz-content-sha256"
DATE_HEADER = "x-amz-date"

_DNS_BUCKET = re.compile(r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$")


def is_virtual_hostable(bucket: str) -> bool:
    return bool(_DNS_BUCKET.match(bucket)) and ".." not in bucket


def _has_header(headers, name: str) -> bool:
    name = name.lower()
    return any(key.lower() == name for key, _ in headers)


def _header(headers, name: str) -> Optional[str]:
    name = name.lower()
    for key, value in headers:
        if key.lower() == name:
            return value
    return None


class RequestBuilder:
    """Builds and signs requests for one client configuration."""

    def __init__(self, config: ClientConfig):
        self._config = config
        self._scheme = config.signature_scheme
        self._signer = create_signer(self._scheme, config.credentials.secret_key)

    @property
    def scheme(self) -> SignatureScheme:
        return self._scheme

    def resolve_target(self, url: str) -> Tuple[str, str, str, Tuple[Tuple[str, str], ...]]:
        """
        Split ``url`` (absolute, or a path relative to the endpoint) into
        scheme, host, encoded path and its own query parameters. When the
        endpoint is virtual-host style, a leading bucket segment moves into
        the host name.
        """
        endpoint = self._config.endpoint
        parts = urlsplit(url)
        protocol = parts.scheme or endpoint.protocol.value
        host = parts.netloc or endpoint.host
        path = parts.path or "/"
        query = tuple(parse_qsl(parts.query, keep_blank_values=True))

        if (
            endpoint.virtual_host_style
            and self._config.family is ServiceFamily.STORAGE
            and host == endpoint.host
        ):
            bucket, _, rest = path.lstrip("/").partition("/")
            if bucket and is_virtual_hostable(bucket):
                host = f"{bucket}.{host}"
                path = "/" + rest

        return protocol, host, encode_path(path), query

    def build_and_sign(
        self,
        verb: str,
        url: str,
        headers: PairsInput = None,
        params: PairsInput = None,
        body: Optional[bytes] = None,
        timestamp: Optional[datetime] = None,
        signed_headers: Iterable[str] = (),
    ) -> SignedRequest:
        """
        Assemble and sign a request.

        ``signed_headers`` names extra headers that must be present and signed
        in addition to the scheme's required ones.
        """
        config = self._config
        protocol, host, path, url_params = self.resolve_target(url)
        params = url_params + as_pairs(params)
        headers = tuple(
            (name, value) for name, value in as_pairs(headers) if name.lower() != "host"
        )
        headers = (("Host", host),) + headers

        shape = decide_shape(body, config.family.form_encoded)
        verb = "POST" if shape is RequestShape.FORM_BODY else verb.upper()
        if shape is RequestShape.FORM_BODY and not _has_header(headers, "content-type"):
            headers += (("Content-Type", FORM_CONTENT_TYPE),)

        context = SigningContext(
            timestamp=timestamp or datetime.now(UTC),
            region=config.endpoint.region,
            service=config.endpoint.service_name,
        )

        if self._scheme is SignatureScheme.LEGACY:
            params += (
                ("AWSAccessKeyId", config.credentials.access_key),
                ("SignatureMethod", LEGACY_SIGNATURE_METHOD),
                ("SignatureVersion", LEGACY_SIGNATURE_VERSION),
                ("Timestamp", context.iso_timestamp),
            )

        if shape is RequestShape.FORM_BODY:
            payload = query_for_transmission(params).encode("utf-8")
        else:
            payload = body or b""

        payload_hash = _header(headers, CONTENT_SHA256_HEADER) or sha256_hex(payload)
        if self._scheme is SignatureScheme.DERIVED_KEY:
            headers = tuple(
                (name, value) for name, value in headers
                if name.lower() not in (DATE_HEADER, CONTENT_SHA256_HEADER)
            )
            headers += ((DATE_HEADER, context.amz_date), (CONTENT_SHA256_HEADER, payload_hash))

        canonical_headers = canonicalize_headers(
            headers, tuple(config.required_headers) + tuple(signed_headers)
        )
        # Form parameters travel in the body; only the legacy scheme signs them there.
        signing_params = params
        if shape is RequestShape.FORM_BODY and self._scheme is SignatureScheme.DERIVED_KEY:
            signing_params = ()

        canonical = CanonicalRequest(
            verb=verb,
            host=host,
            path=path,
            canonical_query=canonical_query_for_signing(signing_params),
            canonical_headers=canonical_headers.block,
            signed_headers=canonical_headers.signed_headers,
            payload_hash=payload_hash,
        )
        string_to_sign = self._signer.string_to_sign(canonical, context)
        signature = self._signer.sign(string_to_sign, context)

        authorization = None
        if self._scheme is SignatureScheme.DERIVED_KEY:
            authorization = (
                f"{self._signer.algorithm} "
                f"Credential={config.credentials.access_key}/{context.scope},"
                f"SignedHeaders={canonical_headers.signed_headers},"
                f"Signature={signature}"
            )

        return SignedRequest(
            verb=verb,
            url=f"{protocol}://{host}{path}",
            host=host,
            path=path,
            headers=headers,
            params=params,
            body=body if shape is RequestShape.ENTITY_BODY else None,
            shape=shape,
            scheme=self._scheme,
            signature=signature,
            canonical_request=canonical,
            string_to_sign=string_to_sign,
            authorization=authorization,
        )

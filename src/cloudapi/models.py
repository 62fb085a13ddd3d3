"""
Data models for the cloudapi client
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ._signer import SignatureScheme
from .error import ServerException

Pairs = Tuple[Tuple[str, str], ...]


class RequestShape(str, Enum):
    """How parameters and payload are placed on the wire."""

    ENTITY_BODY = "entity-body"
    FORM_BODY = "form-body"
    QUERY_STRING = "query-string"


@dataclass(frozen=True)
class CanonicalRequest:
    verb: str
    host: str
    path: str
    canonical_query: str
    canonical_headers: str
    signed_headers: str
    payload_hash: str

    @property
    def text(self) -> str:
        return "\n".join([
            self.verb,
            self.path,
            self.canonical_query,
            self.canonical_headers,
            "",
            self.signed_headers,
            self.payload_hash,
        ])


@dataclass(frozen=True)
class SignedRequest:
    """A request with its signature computed but not yet placed on the wire."""

    verb: str
    url: str
    host: str
    path: str
    headers: Pairs
    params: Pairs
    body: Optional[bytes]
    shape: RequestShape
    scheme: SignatureScheme
    signature: str
    canonical_request: CanonicalRequest
    string_to_sign: str
    authorization: Optional[str] = None


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    PROVIDER_ERROR = "provider-error"
    MALFORMED_BODY = "malformed-body"
    TRANSPORT_FAILURE = "transport-failure"


@dataclass(frozen=True)
class ErrorDiagnostics:
    """Error code, message and request id reported by the provider."""

    code: str = ""
    message: str = ""
    request_id: str = ""


@dataclass(frozen=True)
class ResponseOutcome:
    """
    Result of one dispatched request.

    Network-observable failures are reported here rather than raised:
    ``kind`` tells a provider error from a transport failure, and
    ``diagnostics`` holds whatever the error parser could recover.
    """

    kind: OutcomeKind
    status_code: Optional[int] = None
    status_message: str = ""
    headers: Pairs = ()
    body: bytes = b""
    diagnostics: Optional[ErrorDiagnostics] = None
    transport_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @property
    def request_id(self) -> Optional[str]:
        if self.diagnostics and self.diagnostics.request_id:
            return self.diagnostics.request_id
        return self.header("x-amz-request-id")

    def header(self, name: str) -> Optional[str]:
        values = self.header_values(name)
        return values[0] if values else None

    def header_values(self, name: str) -> List[str]:
        name = name.lower()
        return [value for key, value in self.headers if key.lower() == name]

    def raise_for_status(self) -> "ResponseOutcome":
        if self.ok:
            return self
        if self.kind is OutcomeKind.TRANSPORT_FAILURE:
            raise ServerException(f"Request failed before a response was received: {self.transport_error}")
        diagnostics = self.diagnostics or ErrorDiagnostics()
        message = diagnostics.message or f"Request failed with status {self.status_code}"
        raise ServerException(
            message,
            status_code=self.status_code,
            error_code=diagnostics.code or None,
            request_id=diagnostics.request_id or None,
        )


@dataclass(frozen=True)
class Part:
    """One uploaded part of a multipart upload."""

    part_number: int
    etag: str
    size: int = 0


@dataclass
class Bucket:
    """Represents a storage bucket."""
    name: str
    creation_date: Optional[datetime] = None


@dataclass
class ObjectMetadata:
    """Represents object metadata."""
    object_name: str
    bucket_name: str
    size: int = 0
    etag: Optional[str] = None
    last_modified: Optional[datetime] = None
    content_type: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass
class PutObjectResult:
    """Represents the result of a put object operation."""
    bucket_name: str
    object_name: str
    etag: Optional[str]
    version_id: Optional[str] = None


@dataclass
class QueueMessage:
    message_id: str
    receipt_handle: str
    body: str
    md5_of_body: Optional[str] = None


@dataclass
class TableItem:
    name: str
    attributes: Dict[str, List[str]] = field(default_factory=dict)

"""
cloudapi - request signing and dispatch client for storage, queue and table REST services
"""

__version__ = "1.0.0"

from ._errors import classify_error
from .client import ServiceClient
from .config import ClientConfig, Credentials, Endpoint, Protocol, ServiceFamily
from ._signer import SignatureScheme
from .models import (
    Bucket,
    ErrorDiagnostics,
    ObjectMetadata,
    OutcomeKind,
    Part,
    PutObjectResult,
    QueueMessage,
    ResponseOutcome,
    SignedRequest,
    TableItem,
)
from .lifecycle import LifecycleConfiguration, LifecycleRule, LifecycleTransition, StorageClass
from .multipart import MultipartUploadCoordinator, UploadState
from .pagination import CursorLocation, Page, extract_cursor, paginate
from .queue import QueueClient
from .service import StorageService
from .storage import StorageClient
from .table import TableClient
from .error import (
    CloudApiException,
    ConfigurationException,
    CanonicalizationException,
    MultipartUploadException,
    ServerException,
    BucketNotFoundException,
    ObjectNotFoundException,
)

__all__ = [
    "ServiceClient",
    "StorageClient",
    "StorageService",
    "QueueClient",
    "TableClient",
    "ClientConfig",
    "Credentials",
    "Endpoint",
    "Protocol",
    "ServiceFamily",
    "SignatureScheme",
    "classify_error",
    "Bucket",
    "ErrorDiagnostics",
    "ObjectMetadata",
    "OutcomeKind",
    "Part",
    "PutObjectResult",
    "QueueMessage",
    "ResponseOutcome",
    "SignedRequest",
    "TableItem",
    "LifecycleConfiguration",
    "LifecycleRule",
    "LifecycleTransition",
    "StorageClass",
    "MultipartUploadCoordinator",
    "UploadState",
    "CursorLocation",
    "Page",
    "extract_cursor",
    "paginate",
    "CloudApiException",
    "ConfigurationException",
    "CanonicalizationException",
    "MultipartUploadException",
    "ServerException",
    "BucketNotFoundException",
    "ObjectNotFoundException",
]

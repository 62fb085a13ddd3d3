"""
Client configuration: credentials, endpoints and service family defaults
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Optional, Tuple

from ._signer import SignatureScheme
from .error import ConfigurationException


class Protocol(str, Enum):
    HTTP = "http"
    HTTPS = "https"


class ServiceFamily(str, Enum):
    """The REST service families sharing one signing and dispatch engine."""

    STORAGE = "storage"
    QUEUE = "queue"
    TABLE = "table"

    @property
    def service_name(self) -> str:
        return _SERVICE_NAMES[self]

    @property
    def default_scheme(self) -> SignatureScheme:
        if self is ServiceFamily.STORAGE:
            return SignatureScheme.DERIVED_KEY
        return SignatureScheme.LEGACY

    @property
    def form_encoded(self) -> bool:
        """Query-style services send parameter-only requests as a POST form."""
        return self is not ServiceFamily.STORAGE

    @property
    def api_version(self) -> Optional[str]:
        return _API_VERSIONS.get(self)


_SERVICE_NAMES = {
    ServiceFamily.STORAGE: "s3",
    ServiceFamily.QUEUE: "sqs",
    ServiceFamily.TABLE: "sdb",
}

_API_VERSIONS = {
    ServiceFamily.QUEUE: "2012-11-05",
    ServiceFamily.TABLE: "2009-04-15",
}

DEFAULT_REGION = "us-east-1"


@lru_cache(maxsize=None)
def required_header_names(scheme: SignatureScheme) -> Tuple[str, ...]:
    """Header names every request signed with ``scheme`` must carry."""
    if scheme is SignatureScheme.DERIVED_KEY:
        return ("host", "x-amz-content-sha256", "x-amz-date")
    return ("host",)


@dataclass(frozen=True)
class Credentials:
    """Access key pair. The secret never leaves this process."""

    access_key: str
    secret_key: str = field(repr=False)

    def __post_init__(self):
        if not self.access_key or not self.access_key.strip():
            raise ConfigurationException("Credentials.access_key must be a non-empty string.")


@dataclass(frozen=True)
class Endpoint:
    host: str
    protocol: Protocol = Protocol.HTTPS
    region: str = DEFAULT_REGION
    service_name: str = "s3"
    virtual_host_style: bool = False

    def __post_init__(self):
        if not self.host or not self.host.strip():
            raise ConfigurationException("Endpoint.host must be a non-empty string.")
        try:
            object.__setattr__(self, "protocol", Protocol(self.protocol))
        except ValueError:
            raise ConfigurationException(
                f"Unsupported protocol '{self.protocol}'. Use 'http' or 'https'."
            )

    @property
    def base_url(self) -> str:
        return f"{self.protocol.value}://{self.host}"

    @classmethod
    def for_region(
        cls,
        family: ServiceFamily,
        region: str = DEFAULT_REGION,
        protocol: Protocol = Protocol.HTTPS,
        virtual_host_style: bool = False,
    ) -> "Endpoint":
        """Build the provider's default endpoint for ``family`` in ``region``."""
        name = family.service_name
        if region == DEFAULT_REGION and family is not ServiceFamily.QUEUE:
            host = f"{name}.amazonaws.com"
        else:
            host = f"{name}.{region}.amazonaws.com"
        return cls(
            host=host,
            protocol=protocol,
            region=region,
            service_name=name,
            virtual_host_style=virtual_host_style,
        )


@dataclass(frozen=True)
class ClientConfig:
    """
    Everything one client instance needs. Each client owns its own value,
    so several independently configured clients can live in one process.
    """

    credentials: Credentials
    endpoint: Endpoint
    family: ServiceFamily = ServiceFamily.STORAGE
    scheme: Optional[SignatureScheme] = None
    timeout: float = 30.0
    main_bucket: Optional[str] = None

    @property
    def signature_scheme(self) -> SignatureScheme:
        return self.scheme or self.family.default_scheme

    @property
    def required_headers(self) -> Tuple[str, ...]:
        return required_header_names(self.signature_scheme)

    @classmethod
    def from_env(cls, family: ServiceFamily = ServiceFamily.STORAGE, environ=None) -> "ClientConfig":
        """
        Load a configuration from ``CLOUDAPI_*`` environment variables.

        ``CLOUDAPI_HOST`` overrides the regional default host name.
        """
        env = os.environ if environ is None else environ
        credentials = Credentials(
            access_key=env.get("CLOUDAPI_ACCESS_KEY", ""),
            secret_key=env.get("CLOUDAPI_SECRET_KEY", ""),
        )
        region = env.get("CLOUDAPI_REGION", DEFAULT_REGION)
        protocol = env.get("CLOUDAPI_PROTOCOL", Protocol.HTTPS.value).lower()
        endpoint = Endpoint.for_region(family, region, protocol)
        host = env.get("CLOUDAPI_HOST")
        if host:
            endpoint = Endpoint(
                host=host,
                protocol=endpoint.protocol,
                region=region,
                service_name=family.service_name,
            )
        return cls(
            credentials=credentials,
            endpoint=endpoint,
            family=family,
            main_bucket=env.get("CLOUDAPI_MAIN_BUCKET") or None,
        )

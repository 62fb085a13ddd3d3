"""
Exception classes for the cloudapi client
"""


class CloudApiException(Exception):
    """
    Base exception for all cloudapi errors.
    """

    def __init__(self, message: str, status_code: int = None, error_code: str = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class ConfigurationException(CloudApiException):
    """Thrown when the client configuration cannot produce valid signatures."""

    def __init__(self, message: str):
        super().__init__(message, error_code="InvalidConfiguration")


class CanonicalizationException(CloudApiException):
    """Thrown when a header that must be signed is missing from the request."""

    def __init__(self, header_name: str):
        super().__init__(
            f"Required header '{header_name}' is missing from the request.",
            error_code="MissingSignedHeader",
        )
        self.header_name = header_name


class MultipartUploadException(CloudApiException):
    """Thrown when a multipart operation is issued without an upload id."""

    def __init__(self, message: str):
        super().__init__(message, error_code="NoUploadId")


class ServerException(CloudApiException):
    """Thrown when the server returns an error."""

    def __init__(self, message: str, status_code: int = None, error_code: str = None,
                 request_id: str = None):
        super().__init__(message, status_code, error_code)
        self.request_id = request_id


class BucketNotFoundException(ServerException):
    """Thrown when a bucket is not found."""

    def __init__(self, bucket_name: str):
        super().__init__(
            f"Bucket '{bucket_name}' not found.",
            status_code=404,
            error_code="NoSuchBucket"
        )


class ObjectNotFoundException(ServerException):
    """Thrown when an object is not found."""

    def __init__(self, bucket_name: str, object_name: str):
        super().__init__(
            f"Object '{object_name}' not found in bucket '{bucket_name}'.",
            status_code=404,
            error_code="NoSuchKey"
        )

"""
StorageService - file-level convenience facade over StorageClient
"""

import logging
import mimetypes
import os
from typing import List, Optional

from .error import BucketNotFoundException, ObjectNotFoundException, ServerException
from .models import ObjectMetadata, PutObjectResult, ResponseOutcome
from .pagination import paginate
from .storage import StorageClient

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(file_name: str) -> str:
    content_type, _ = mimetypes.guess_type(file_name)
    return content_type or DEFAULT_CONTENT_TYPE


class StorageService:
    """
    Upload, download and delete files in a default ("main") bucket.

    Unlike the engine, this facade raises ``ServerException`` subclasses
    when the provider rejects a call.

    Example:
        with StorageClient(ClientConfig.from_env()) as client:
            service = StorageService(client)
            service.upload_file("/tmp/report.pdf")
            data = service.download_file("report.pdf")
    """

    def __init__(self, client: StorageClient, main_bucket: Optional[str] = None):
        self.client = client
        self.main_bucket = main_bucket or client.config.main_bucket
        self._logger = logging.getLogger(__name__)

    def _bucket(self, bucket_name: Optional[str]) -> str:
        bucket = bucket_name if bucket_name and bucket_name.strip() else self.main_bucket
        if not bucket or not bucket.strip():
            raise ValueError("No bucket name given and no main bucket is configured.")
        return bucket

    @staticmethod
    def _check(outcome: ResponseOutcome) -> ResponseOutcome:
        return outcome.raise_for_status()

    def list_bucket_names(self) -> List[str]:
        page = self.client.list_buckets()
        self._check(page.outcome)
        return [bucket.name for bucket in page.items]

    def get_bucket(self, bucket_name: Optional[str] = None, prefix: str = "") -> List[ObjectMetadata]:
        """Every object in the bucket, following continuation cursors to the end."""
        bucket = self._bucket(bucket_name)
        objects: List[ObjectMetadata] = []
        for page in paginate(lambda cursor: self.client.list_objects(bucket, prefix=prefix, cursor=cursor)):
            if page.outcome.status_code == 404:
                raise BucketNotFoundException(bucket)
            self._check(page.outcome)
            objects.extend(page.items)
        return objects

    def create_bucket(self, bucket_name: str) -> None:
        self._check(self.client.create_bucket(bucket_name))

    def delete_bucket(self, bucket_name: str) -> None:
        outcome = self.client.delete_bucket(bucket_name)
        if outcome.status_code == 404:
            raise BucketNotFoundException(bucket_name)
        self._check(outcome)

    def upload_bytes(
        self,
        data: bytes,
        file_name: str,
        bucket_name: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> PutObjectResult:
        bucket = self._bucket(bucket_name)
        outcome = self.client.put_object(
            bucket,
            file_name,
            data,
            content_type=content_type or guess_content_type(file_name),
        )
        try:
            self._check(outcome)
        except ServerException as ex:
            raise ServerException(
                f"Could not upload '{file_name}': {ex}",
                status_code=ex.status_code,
                error_code=ex.error_code,
                request_id=ex.request_id,
            ) from ex

        self._logger.info("[CloudApi][Upload] bucket=%s object=%s size=%s", bucket, file_name, len(data))
        etag = outcome.header("ETag")
        return PutObjectResult(
            bucket_name=bucket,
            object_name=file_name,
            etag=etag.strip('"') if etag else None,
            version_id=outcome.header("x-amz-version-id"),
        )

    def upload_file(self, file_path: str, bucket_name: Optional[str] = None) -> PutObjectResult:
        """Upload a local file under its base name."""
        if not os.path.isfile(file_path):
            raise FileNotFoundError(f"File '{file_path}' does not exist.")
        with open(file_path, "rb") as f:
            data = f.read()
        return self.upload_bytes(data, os.path.basename(file_path), bucket_name)

    def download_file(self, file_name: str, bucket_name: Optional[str] = None) -> bytes:
        bucket = self._bucket(bucket_name)
        outcome = self.client.get_object(bucket, file_name)
        if outcome.status_code == 404:
            raise ObjectNotFoundException(bucket, file_name)
        self._check(outcome)
        return outcome.body

    def delete_file(self, file_name: str, bucket_name: Optional[str] = None) -> None:
        bucket = self._bucket(bucket_name)
        self._check(self.client.delete_object(bucket, file_name))

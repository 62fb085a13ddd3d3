"""
Multipart upload coordination
"""

import logging
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .error import MultipartUploadException
from .models import Part, ResponseOutcome
from .storage import StorageClient, parse_upload_id


class UploadState(str, Enum):
    UNINITIATED = "uninitiated"
    INITIATED = "initiated"
    COMPLETED = "completed"
    ABORTED = "aborted"


class MultipartUploadCoordinator:
    """
    Sequences Initiate, UploadPart and Complete or Abort for one object and
    remembers the parts uploaded so far.

    Example:
        upload = MultipartUploadCoordinator(storage, "backups", "db.tar")
        if upload.initiate():
            for number, chunk in enumerate(chunks, start=1):
                upload.upload_part(number, chunk)
            if not upload.complete():
                upload.abort()

    The part bookkeeping is not synchronized. Parts may be uploaded from
    several threads, but sharing one coordinator between them requires
    external locking. An upload that is neither completed nor aborted keeps
    its parts stored on the provider side.
    """

    def __init__(
        self,
        storage: StorageClient,
        bucket_name: str,
        object_name: str,
        upload_id: Optional[str] = None,
    ):
        self.storage = storage
        self.bucket_name = bucket_name
        self.object_name = object_name
        self.upload_id = upload_id
        self.state = UploadState.INITIATED if upload_id else UploadState.UNINITIATED
        self.last_outcome: Optional[ResponseOutcome] = None
        self._parts: Dict[int, Part] = {}
        self._logger = logging.getLogger(__name__)

    @property
    def parts(self) -> List[Part]:
        """Uploaded parts in ascending part-number order."""
        return [self._parts[number] for number in sorted(self._parts)]

    def _require_upload_id(self) -> str:
        if not self.upload_id:
            raise MultipartUploadException(
                f"No multipart upload has been initiated for '{self.bucket_name}/{self.object_name}'."
            )
        return self.upload_id

    def initiate(
        self,
        content_type: str = "application/octet-stream",
        metadata: Optional[Dict[str, str]] = None,
    ) -> Optional[str]:
        """Start the upload and return its id, or None when the provider refused."""
        outcome = self.storage.initiate_multipart_upload(
            self.bucket_name, self.object_name, content_type=content_type, metadata=metadata
        )
        self.last_outcome = outcome
        upload_id = parse_upload_id(outcome) if outcome.ok else None
        if not upload_id:
            return None

        self.upload_id = upload_id
        self.state = UploadState.INITIATED
        self._parts.clear()
        self._logger.info(
            "[CloudApi][Multipart] initiated bucket=%s object=%s uploadId=%s",
            self.bucket_name,
            self.object_name,
            upload_id,
        )
        return upload_id

    def upload_part(self, part_number: int, data: bytes) -> Optional[Part]:
        """
        Upload one part. Re-uploading a part number replaces the earlier part.
        Returns None when the provider rejected it (see ``last_outcome``).
        """
        upload_id = self._require_upload_id()
        outcome = self.storage.upload_part(
            self.bucket_name, self.object_name, upload_id, part_number, data
        )
        self.last_outcome = outcome
        if not outcome.ok:
            return None

        part = Part(part_number=part_number, etag=outcome.header("ETag") or "", size=len(data))
        self._parts[part_number] = part
        return part

    def complete(self, parts: Optional[Sequence[Part]] = None) -> bool:
        """
        Stitch the upload together from ``parts`` (all uploaded parts when
        omitted). Parts left out are discarded by the provider.
        """
        upload_id = self._require_upload_id()
        selected = self.parts if parts is None else sorted(parts, key=lambda p: p.part_number)
        outcome = self.storage.complete_multipart_upload(
            self.bucket_name, self.object_name, upload_id, selected
        )
        self.last_outcome = outcome
        # Completion can fail after a 200 status; the error is then in the body.
        if not outcome.ok or (outcome.diagnostics and outcome.diagnostics.code):
            return False

        self.state = UploadState.COMPLETED
        self._logger.info(
            "[CloudApi][Multipart] completed bucket=%s object=%s uploadId=%s parts=%s",
            self.bucket_name,
            self.object_name,
            upload_id,
            len(selected),
        )
        return True

    def abort(self) -> bool:
        """
        Release every part stored for this upload. A part upload still in
        flight may land after the abort; issue abort again if that matters.
        """
        upload_id = self._require_upload_id()
        outcome = self.storage.abort_multipart_upload(self.bucket_name, self.object_name, upload_id)
        self.last_outcome = outcome
        if not outcome.ok:
            return False

        self.state = UploadState.ABORTED
        self._parts.clear()
        self._logger.info(
            "[CloudApi][Multipart] aborted bucket=%s object=%s uploadId=%s",
            self.bucket_name,
            self.object_name,
            upload_id,
        )
        return True

"""
StorageClient - object storage operations over the signing engine
"""

import base64
import hashlib
import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Dict, List, Optional, Sequence
from urllib.parse import quote

from ._errors import child_text, local_name, parse_xml
from .client import ServiceClient
from .config import DEFAULT_REGION, ClientConfig, ServiceFamily
from .error import ConfigurationException
from .lifecycle import LifecycleConfiguration
from .models import Bucket, ObjectMetadata, Part, ResponseOutcome
from .pagination import CursorLocation, Page, extract_cursor

OBJECTS_CURSOR = CursorLocation.in_body("NextContinuationToken")
PARTS_CURSOR = CursorLocation.in_body("NextPartNumberMarker")

MIN_PART_NUMBER = 1
MAX_PART_NUMBER = 10000


def _parse_time(text: str) -> Optional[datetime]:
    if not text:
        return None
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _size(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        return 0


def _content_md5(payload: bytes) -> str:
    return base64.b64encode(hashlib.md5(payload).digest()).decode("ascii")


def parse_upload_id(outcome: ResponseOutcome) -> Optional[str]:
    """Upload id from an InitiateMultipartUploadResult body."""
    root = parse_xml(outcome.body)
    if root is None:
        return None
    return child_text(root, "UploadId") or None


def object_path(bucket_name: str, object_name: str = "") -> str:
    path = f"/{bucket_name}"
    if object_name:
        path += "/" + quote(object_name, safe="/-_.~")
    return path


class StorageClient(ServiceClient):
    """
    Object storage client.

    Listings return a ``Page``; every other call returns the raw
    ``ResponseOutcome`` so callers decide what a failure means.
    """

    def __init__(self, config: ClientConfig, **kwargs):
        if config.family is not ServiceFamily.STORAGE:
            raise ConfigurationException("StorageClient requires a storage service configuration.")
        super().__init__(config, **kwargs)

    # Bucket operations

    def list_buckets(self) -> Page[Bucket]:
        outcome = self.request("GET", "/")
        buckets = []
        root = parse_xml(outcome.body) if outcome.ok else None
        if root is not None:
            for node in root.iter():
                if local_name(node.tag) == "Bucket":
                    buckets.append(
                        Bucket(
                            name=child_text(node, "Name"),
                            creation_date=_parse_time(child_text(node, "CreationDate")),
                        )
                    )
        return Page(items=buckets, outcome=outcome)

    def create_bucket(self, bucket_name: str, region: Optional[str] = None) -> ResponseOutcome:
        """Create a bucket; outside the default region a location constraint is sent."""
        region = region or self.config.endpoint.region
        body = None
        headers = {}
        if region != DEFAULT_REGION:
            root = ET.Element("CreateBucketConfiguration")
            constraint = ET.SubElement(root, "LocationConstraint")
            constraint.text = region
            body = ET.tostring(root, encoding="utf-8", method="xml")
            headers["Content-Type"] = "application/xml"
        return self.request("PUT", object_path(bucket_name), headers=headers, body=body)

    def delete_bucket(self, bucket_name: str) -> ResponseOutcome:
        return self.request("DELETE", object_path(bucket_name))

    # Object operations

    def put_object(
        self,
        bucket_name: str,
        object_name: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        metadata: Optional[Dict[str, str]] = None,
    ) -> ResponseOutcome:
        """Upload an object to the bucket."""
        headers = {"Content-Type": content_type}
        if metadata:
            for key, value in metadata.items():
                headers[f"x-amz-meta-{key}"] = value
        return self.request("PUT", object_path(bucket_name, object_name), headers=headers, body=data)

    def get_object(self, bucket_name: str, object_name: str) -> ResponseOutcome:
        return self.request("GET", object_path(bucket_name, object_name))

    def head_object(self, bucket_name: str, object_name: str) -> ResponseOutcome:
        return self.request("HEAD", object_path(bucket_name, object_name))

    def delete_object(self, bucket_name: str, object_name: str) -> ResponseOutcome:
        return self.request("DELETE", object_path(bucket_name, object_name))

    def list_objects(
        self,
        bucket_name: str,
        prefix: str = "",
        delimiter: str = "",
        max_keys: int = 1000,
        cursor: Optional[str] = None,
    ) -> Page[ObjectMetadata]:
        """List one page of objects; pass the returned cursor to continue."""
        params = [("list-type", "2")]
        if prefix:
            params.append(("prefix", prefix))
        if delimiter:
            params.append(("delimiter", delimiter))
        if max_keys:
            params.append(("max-keys", str(max_keys)))
        if cursor is not None:
            params.append(("continuation-token", cursor))

        outcome = self.request("GET", object_path(bucket_name), params=params)
        objects = []
        root = parse_xml(outcome.body) if outcome.ok else None
        if root is not None:
            for node in list(root):
                if local_name(node.tag) != "Contents":
                    continue
                objects.append(
                    ObjectMetadata(
                        object_name=child_text(node, "Key"),
                        bucket_name=bucket_name,
                        size=_size(child_text(node, "Size")),
                        etag=child_text(node, "ETag").strip('"') or None,
                        last_modified=_parse_time(child_text(node, "LastModified")),
                    )
                )
        return Page(items=objects, next_cursor=extract_cursor(outcome, OBJECTS_CURSOR), outcome=outcome)

    # Multipart upload primitives

    def initiate_multipart_upload(
        self,
        bucket_name: str,
        object_name: str,
        content_type: str = "application/octet-stream",
        metadata: Optional[Dict[str, str]] = None,
    ) -> ResponseOutcome:
        headers = {"Content-Type": content_type}
        if metadata:
            for key, value in metadata.items():
                headers[f"x-amz-meta-{key}"] = value
        return self.request(
            "POST",
            object_path(bucket_name, object_name),
            headers=headers,
            params=[("uploads", "")],
        )

    def upload_part(
        self,
        bucket_name: str,
        object_name: str,
        upload_id: str,
        part_number: int,
        data: bytes,
    ) -> ResponseOutcome:
        if not MIN_PART_NUMBER <= part_number <= MAX_PART_NUMBER:
            raise ValueError(
                f"Part number must be between {MIN_PART_NUMBER} and {MAX_PART_NUMBER}, got {part_number}."
            )
        return self.request(
            "PUT",
            object_path(bucket_name, object_name),
            params=[("partNumber", str(part_number)), ("uploadId", upload_id)],
            body=data,
        )

    def complete_multipart_upload(
        self,
        bucket_name: str,
        object_name: str,
        upload_id: str,
        parts: Sequence[Part],
    ) -> ResponseOutcome:
        """Complete the upload; parts are submitted in ascending part-number order."""
        root = ET.Element("CompleteMultipartUpload")
        for part in sorted(parts, key=lambda p: p.part_number):
            part_el = ET.SubElement(root, "Part")
            num_el = ET.SubElement(part_el, "PartNumber")
            num_el.text = str(part.part_number)
            etag_el = ET.SubElement(part_el, "ETag")
            etag_value = part.etag
            if etag_value and not etag_value.startswith('"'):
                etag_value = f'"{etag_value}"'
            etag_el.text = etag_value

        payload = ET.tostring(root, encoding="utf-8", method="xml")
        return self.request(
            "POST",
            object_path(bucket_name, object_name),
            headers={"Content-Type": "application/xml"},
            params=[("uploadId", upload_id)],
            body=payload,
        )

    def abort_multipart_upload(self, bucket_name: str, object_name: str, upload_id: str) -> ResponseOutcome:
        return self.request(
            "DELETE",
            object_path(bucket_name, object_name),
            params=[("uploadId", upload_id)],
        )

    def list_parts(
        self,
        bucket_name: str,
        object_name: str,
        upload_id: str,
        cursor: Optional[str] = None,
    ) -> Page[Part]:
        params = [("uploadId", upload_id)]
        if cursor is not None:
            params.append(("part-number-marker", cursor))
        outcome = self.request("GET", object_path(bucket_name, object_name), params=params)

        parts: List[Part] = []
        root = parse_xml(outcome.body) if outcome.ok else None
        if root is not None:
            for node in list(root):
                if local_name(node.tag) != "Part":
                    continue
                parts.append(
                    Part(
                        part_number=_size(child_text(node, "PartNumber")),
                        etag=child_text(node, "ETag"),
                        size=_size(child_text(node, "Size")),
                    )
                )
        next_cursor = None
        if root is not None and child_text(root, "IsTruncated").lower() == "true":
            next_cursor = extract_cursor(outcome, PARTS_CURSOR)
        return Page(items=parts, next_cursor=next_cursor, outcome=outcome)

    # Lifecycle configuration

    def put_bucket_lifecycle(self, bucket_name: str, configuration: LifecycleConfiguration) -> ResponseOutcome:
        payload = configuration.to_xml()
        return self.request(
            "PUT",
            object_path(bucket_name),
            headers={"Content-Type": "application/xml", "Content-MD5": _content_md5(payload)},
            params=[("lifecycle", "")],
            body=payload,
        )

    def get_bucket_lifecycle(self, bucket_name: str) -> ResponseOutcome:
        return self.request("GET", object_path(bucket_name), params=[("lifecycle", "")])

    def delete_bucket_lifecycle(self, bucket_name: str) -> ResponseOutcome:
        return self.request("DELETE", object_path(bucket_name), params=[("lifecycle", "")])

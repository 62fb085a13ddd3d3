import httpx
import pytest

from cloudapi.error import MultipartUploadException
from cloudapi.models import Part
from cloudapi.multipart import MultipartUploadCoordinator, UploadState
from cloudapi.storage import StorageClient

from conftest import error_xml, make_config, xml_response


def _upload(storage_client, upload_id=None):
    return MultipartUploadCoordinator(storage_client, "photos", "backup.tar", upload_id=upload_id)


def test_full_upload_lifecycle(storage_client, storage_provider):
    upload = _upload(storage_client)
    assert upload.state is UploadState.UNINITIATED

    upload_id = upload.initiate()
    assert upload_id == "upload-1"
    assert upload.state is UploadState.INITIATED

    for number, chunk in enumerate([b"first", b"second", b"third"], start=1):
        part = upload.upload_part(number, chunk)
        assert part.part_number == number
        assert part.etag.startswith('"')
        assert part.size == len(chunk)

    assert upload.complete()
    assert upload.state is UploadState.COMPLETED
    assert storage_provider.completed == {"/photos/backup.tar": [1, 2, 3]}


def test_initiate_sends_uploads_subresource(storage_client, storage_provider):
    _upload(storage_client).initiate()

    request = storage_provider.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/photos/backup.tar"
    assert request.url.query == b"uploads="


def test_part_after_complete_reports_no_such_upload(storage_client):
    upload = _upload(storage_client)
    upload.initiate()
    upload.upload_part(1, b"data")
    assert upload.complete()

    assert upload.upload_part(2, b"late") is None
    assert upload.last_outcome.status_code == 404
    assert upload.last_outcome.diagnostics.code == "NoSuchUpload"


def test_part_after_abort_reports_no_such_upload(storage_client, storage_provider):
    upload = _upload(storage_client)
    upload.initiate()
    upload.upload_part(1, b"data")

    assert upload.abort()
    assert upload.state is UploadState.ABORTED
    assert upload.parts == []
    assert storage_provider.uploads == {}

    assert upload.upload_part(2, b"late") is None
    assert upload.last_outcome.diagnostics.code == "NoSuchUpload"


def test_complete_with_a_part_never_uploaded_fails(storage_client):
    upload = _upload(storage_client)
    upload.initiate()
    uploaded = upload.upload_part(1, b"data")

    assert not upload.complete([uploaded, Part(part_number=2, etag='"missing"')])
    assert upload.last_outcome.diagnostics.code == "InvalidPart"
    assert upload.state is UploadState.INITIATED


def test_reuploading_a_part_replaces_it(storage_client, storage_provider):
    upload = _upload(storage_client)
    upload.initiate()
    first = upload.upload_part(1, b"old bytes")
    second = upload.upload_part(1, b"new bytes")

    assert first.etag != second.etag
    assert upload.parts == [second]
    assert upload.complete()
    assert storage_provider.completed["/photos/backup.tar"] == [1]


def test_parts_are_submitted_in_ascending_order(storage_client, storage_provider):
    upload = _upload(storage_client)
    upload.initiate()
    for number in (3, 1, 2):
        upload.upload_part(number, f"chunk {number}".encode())

    assert [part.part_number for part in upload.parts] == [1, 2, 3]
    assert upload.complete(list(reversed(upload.parts)))
    assert storage_provider.completed["/photos/backup.tar"] == [1, 2, 3]


def test_operations_without_upload_id_raise(storage_client, storage_provider):
    upload = _upload(storage_client)

    with pytest.raises(MultipartUploadException):
        upload.upload_part(1, b"data")
    with pytest.raises(MultipartUploadException):
        upload.complete()
    with pytest.raises(MultipartUploadException):
        upload.abort()
    assert storage_provider.requests == []


def test_part_numbers_outside_the_provider_range_are_rejected(storage_client, storage_provider):
    upload = _upload(storage_client)
    upload.initiate()

    with pytest.raises(ValueError):
        upload.upload_part(0, b"data")
    with pytest.raises(ValueError):
        upload.upload_part(10001, b"data")
    assert len(storage_provider.requests) == 1


def test_resuming_an_existing_upload_id(storage_client, storage_provider):
    first = _upload(storage_client)
    upload_id = first.initiate()

    resumed = _upload(storage_client, upload_id=upload_id)
    assert resumed.state is UploadState.INITIATED
    assert resumed.upload_part(1, b"data") is not None
    assert resumed.complete()


def test_complete_reporting_an_error_with_status_200_fails():
    def handler(request):
        if "uploads" in request.url.params:
            return xml_response(200, "<InitiateMultipartUploadResult><UploadId>u-9</UploadId></InitiateMultipartUploadResult>")
        if request.method == "PUT":
            return httpx.Response(200, headers={"ETag": '"abc"'})
        return xml_response(200, error_xml("InternalError", "We encountered an internal error. Please try again."))

    with StorageClient(make_config(), transport=httpx.MockTransport(handler)) as client:
        upload = MultipartUploadCoordinator(client, "photos", "big.bin")
        upload.initiate()
        upload.upload_part(1, b"data")

        assert not upload.complete()
        assert upload.last_outcome.ok
        assert upload.last_outcome.diagnostics.code == "InternalError"
        assert upload.state is UploadState.INITIATED


def test_refused_initiate_returns_none():
    def handler(request):
        return xml_response(403, error_xml("AccessDenied", "Access Denied"))

    with StorageClient(make_config(), transport=httpx.MockTransport(handler)) as client:
        upload = MultipartUploadCoordinator(client, "photos", "big.bin")

        assert upload.initiate() is None
        assert upload.upload_id is None
        assert upload.last_outcome.diagnostics.code == "AccessDenied"

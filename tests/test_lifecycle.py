import base64
import hashlib
import xml.etree.ElementTree as ET

import httpx
import pytest

from cloudapi.lifecycle import LifecycleConfiguration, LifecycleRule, StorageClass
from cloudapi.storage import StorageClient

from conftest import make_config, xml_response


def _archive_rule():
    rule = LifecycleRule(id="archive-logs", prefix="logs/", expiration_days=365)
    rule.add_transition(30, StorageClass.STANDARD_IA)
    rule.add_transition(90, StorageClass.GLACIER)
    return rule


def test_rule_document_layout():
    root = ET.fromstring(LifecycleConfiguration([_archive_rule()]).to_xml())

    assert root.tag == "LifecycleConfiguration"
    rule = root.find("Rule")
    assert rule.findtext("ID") == "archive-logs"
    assert rule.findtext("Prefix") == "logs/"
    assert rule.findtext("Status") == "Enabled"
    assert [t.findtext("StorageClass") for t in rule.findall("Transition")] == ["STANDARD_IA", "GLACIER"]
    assert rule.findtext("Expiration/Days") == "365"
    assert rule.find("NoncurrentVersionTransition") is None
    assert rule.find("NoncurrentVersionExpiration") is None


def test_disabled_rule_with_noncurrent_actions():
    rule = LifecycleRule(
        id="versions",
        enabled=False,
        noncurrent_version_transition_days=7,
        noncurrent_version_transition_storage_class=StorageClass.GLACIER,
        noncurrent_version_expiration_days=30,
    )

    node = rule.to_element()

    assert node.findtext("Status") == "Disabled"
    assert node.findtext("NoncurrentVersionTransition/NoncurrentDays") == "7"
    assert node.findtext("NoncurrentVersionTransition/StorageClass") == "GLACIER"
    assert node.findtext("NoncurrentVersionExpiration/NoncurrentDays") == "30"
    assert node.find("Expiration") is None


def test_parsing_a_provider_document():
    body = (
        '<LifecycleConfiguration xmlns="http://s3.amazonaws.com/doc/2006-03-01/">'
        "<Rule><ID>archive-logs</ID><Prefix>logs/</Prefix><Status>Enabled</Status>"
        "<Transition><Days>30</Days><StorageClass>STANDARD_IA</StorageClass></Transition>"
        "<Expiration><Days>365</Days></Expiration></Rule>"
        "<Rule><ID>tmp</ID><Prefix>tmp/</Prefix><Status>Disabled</Status>"
        "<Transition><Days>1</Days><StorageClass>DEEP_FREEZE</StorageClass></Transition></Rule>"
        "</LifecycleConfiguration>"
    )

    configuration = LifecycleConfiguration.from_xml(body)

    first, second = configuration.rules
    assert first.id == "archive-logs"
    assert first.enabled
    assert first.transitions[0].days == 30
    assert first.transitions[0].storage_class is StorageClass.STANDARD_IA
    assert first.expiration_days == 365
    assert not second.enabled
    assert second.transitions[0].storage_class is StorageClass.STANDARD


def test_non_lifecycle_bodies_are_not_parsed():
    assert LifecycleConfiguration.from_xml("<Error><Code>NoSuchLifecycleConfiguration</Code></Error>") is None
    assert LifecycleConfiguration.from_xml(b"") is None


def test_rule_and_transition_editing():
    configuration = LifecycleConfiguration()
    assert configuration.add_rule(_archive_rule()) == 0
    assert configuration.add_rule(LifecycleRule(id="second")) == 1

    configuration.delete_rule(0)
    assert [rule.id for rule in configuration.rules] == ["second"]
    with pytest.raises(IndexError):
        configuration.delete_rule(5)

    rule = _archive_rule()
    rule.delete_transition(0)
    assert [t.days for t in rule.transitions] == [90]
    with pytest.raises(IndexError):
        rule.delete_transition(-1)


def test_rule_id_length_is_limited():
    LifecycleRule(id="x" * 255)
    with pytest.raises(ValueError):
        LifecycleRule(id="x" * 256)


def test_put_lifecycle_sends_signed_content_md5():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200)

    configuration = LifecycleConfiguration([_archive_rule()])
    with StorageClient(make_config(), transport=httpx.MockTransport(handler)) as client:
        outcome = client.put_bucket_lifecycle("photos", configuration)

    assert outcome.ok
    request = seen[0]
    payload = configuration.to_xml()
    assert request.content == payload
    assert request.url.query == b"lifecycle="
    assert request.headers["content-md5"] == base64.b64encode(hashlib.md5(payload).digest()).decode()
    assert "content-md5" in request.headers["authorization"]


def test_get_lifecycle_round_trips_through_the_client():
    document = LifecycleConfiguration([_archive_rule()]).to_xml().decode("utf-8")

    def handler(request):
        return xml_response(200, document)

    with StorageClient(make_config(), transport=httpx.MockTransport(handler)) as client:
        outcome = client.get_bucket_lifecycle("photos")

    parsed = LifecycleConfiguration.from_xml(outcome.body)
    assert parsed.rules[0].id == "archive-logs"
    assert len(parsed.rules[0].transitions) == 2

import itertools

import pytest

from cloudapi._canonical import (
    as_pairs,
    canonical_query_for_signing,
    canonicalize_headers,
    encode_path,
    query_for_transmission,
)
from cloudapi.error import CanonicalizationException


REQUIRED = ("host", "x-amz-content-sha256", "x-amz-date")

HEADERS = [
    ("Host", "examplebucket.s3.amazonaws.com"),
    ("X-Amz-Date", "20130524T000000Z"),
    ("x-amz-content-sha256", "UNSIGNED-PAYLOAD"),
    ("Content-Type", "text/plain"),
    ("x-amz-meta-owner", "  ops   team "),
    ("User-Agent", "cloudapi-tests"),
]


def test_header_canonicalization_is_independent_of_input_order():
    expected = canonicalize_headers(HEADERS, REQUIRED)
    for permutation in itertools.permutations(HEADERS):
        assert canonicalize_headers(list(permutation), REQUIRED) == expected


def test_signed_header_set_is_required_plus_provider_and_content_headers():
    canonical = canonicalize_headers(HEADERS, REQUIRED)

    assert canonical.signed_headers == "content-type;host;x-amz-content-sha256;x-amz-date;x-amz-meta-owner"
    assert "user-agent" not in canonical.names
    assert canonical.block.splitlines() == [
        "content-type:text/plain",
        "host:examplebucket.s3.amazonaws.com",
        "x-amz-content-sha256:UNSIGNED-PAYLOAD",
        "x-amz-date:20130524T000000Z",
        "x-amz-meta-owner:ops team",
    ]


def test_duplicate_header_names_collapse_into_one_entry():
    canonical = canonicalize_headers(
        [("Host", "h"), ("X-Amz-Meta-Tag", "b"), ("x-amz-meta-tag", "a")],
        ("host",),
    )

    assert canonical.signed_headers == "host;x-amz-meta-tag"
    assert "x-amz-meta-tag:a,b" in canonical.block


def test_missing_required_header_is_a_canonicalization_error():
    with pytest.raises(CanonicalizationException, match="x-amz-date") as info:
        canonicalize_headers([("Host", "h"), ("x-amz-content-sha256", "abc")], REQUIRED)

    assert info.value.header_name == "x-amz-date"


def test_signing_query_is_sorted_by_byte_order():
    params = [("prefix", "J"), ("max-keys", "2"), ("Action", "List"), ("AWSAccessKeyId", "AKID")]

    assert canonical_query_for_signing(params) == "AWSAccessKeyId=AKID&Action=List&max-keys=2&prefix=J"


def test_signing_query_is_independent_of_input_order():
    params = [("b", "2"), ("a", "1"), ("a", "0"), ("c", "x y"), ("empty", "")]
    expected = canonical_query_for_signing(params)
    for permutation in itertools.permutations(params):
        assert canonical_query_for_signing(list(permutation)) == expected


def test_repeated_names_merge_when_signing_but_stay_separate_when_sent():
    params = [("tag", "red"), ("tag", "blue")]

    assert canonical_query_for_signing(params) == "tag=blue,red"
    assert query_for_transmission(params) == "tag=red&tag=blue"


def test_transmission_keeps_caller_order():
    assert query_for_transmission([("z", "1"), ("a", "2")]) == "z=1&a=2"


def test_every_parameter_carries_an_equals_sign():
    parameter_sets = [
        [("uploads", "")],
        [("lifecycle", ""), ("versionId", "")],
        [("a", "1"), ("b", ""), ("c", None)],
        {"delete": "", "prefix": "logs/"},
    ]
    for params in parameter_sets:
        count = len(as_pairs(params))
        assert canonical_query_for_signing(params).count("=") >= count
        assert query_for_transmission(params).count("=") >= count


def test_no_parameters_yield_an_empty_string():
    assert canonical_query_for_signing(None) == ""
    assert canonical_query_for_signing([]) == ""
    assert query_for_transmission({}) == ""


def test_values_use_rfc3986_encoding():
    query = canonical_query_for_signing([("Timestamp", "2013-05-24T00:00:00Z"), ("key", "a b/c~d*")])

    assert query == "Timestamp=2013-05-24T00%3A00%3A00Z&key=a%20b%2Fc~d%2A"


def test_path_encoding_keeps_separators_and_existing_escapes():
    assert encode_path("") == "/"
    assert encode_path("/bucket/my photo.jpg") == "/bucket/my%20photo.jpg"
    assert encode_path("/bucket/already%20encoded") == "/bucket/already%20encoded"


def test_dot_segments_are_escaped():
    assert encode_path("/photos/a/../b.txt") == "/photos/a/%2E%2E/b.txt"
    assert encode_path("/photos/./b.txt") == "/photos/%2E/b.txt"
    assert encode_path("/photos/.hidden/a..b") == "/photos/.hidden/a..b"

"""
Deterministic canonical forms of headers and query parameters.

Both signing schemes hash these strings, so the output must match the
provider byte for byte. Every function here is pure.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import quote

from .error import CanonicalizationException

Pairs = Tuple[Tuple[str, str], ...]
PairsInput = Optional[Union[Mapping[str, object], Sequence[Tuple[str, object]]]]

# RFC 3986 unreserved characters, the only ones left unescaped when signing.
UNRESERVED = "-_.~"
PROVIDER_HEADER_PREFIX = "x-amz-"
CONTENT_HEADERS = ("content-type", "content-md5")
_DOT_SEGMENTS = {".": "%2E", "..": "%2E%2E"}


@dataclass(frozen=True)
class CanonicalHeaders:
    block: str
    signed_headers: str

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self.signed_headers.split(";")) if self.signed_headers else ()


def as_pairs(values: PairsInput) -> Pairs:
    """Freeze a mapping or pair sequence into an ordered tuple of string pairs."""
    if not values:
        return ()
    items = values.items() if isinstance(values, Mapping) else values
    return tuple(
        (str(name), "" if value is None else str(value)) for name, value in items
    )


def percent_encode(value: str, safe: str = UNRESERVED) -> str:
    return quote(value, safe=safe)


def encode_path(path: str) -> str:
    """Percent-encode a resource path, leaving separators and already-escaped octets."""
    if not path:
        return "/"
    segments = quote(path, safe="/%" + UNRESERVED).split("/")
    # Literal dot segments would be collapsed by the HTTP client before sending.
    return "/".join(_DOT_SEGMENTS.get(segment, segment) for segment in segments)


def normalize_header_value(value: str) -> str:
    return " ".join(value.strip().split())


def canonicalize_headers(
    headers: PairsInput,
    required: Iterable[str] = (),
    prefix: str = PROVIDER_HEADER_PREFIX,
) -> CanonicalHeaders:
    """
    Build the canonical header block and the signed header list.

    The signed set is the union of ``required``, every header starting with
    ``prefix`` and the content headers when present. Names are lower-cased and
    repeated names collapse into one comma-joined entry.
    """
    collected: Dict[str, List[str]] = defaultdict(list)
    for name, value in as_pairs(headers):
        collected[name.strip().lower()].append(normalize_header_value(value))

    selected = set()
    for name in required:
        name = name.lower()
        if name not in collected:
            raise CanonicalizationException(name)
        selected.add(name)
    selected.update(name for name in collected if name.startswith(prefix))
    selected.update(name for name in CONTENT_HEADERS if name in collected)

    names = sorted(selected)
    block = "\n".join(f"{name}:{','.join(sorted(collected[name]))}" for name in names)
    return CanonicalHeaders(block=block, signed_headers=";".join(names))


def canonical_query_for_signing(params: PairsInput) -> str:
    """
    Query string in the form both signing schemes hash.

    Names and values are RFC 3986 encoded and sorted by encoded name in byte
    order. Repeated names are merged into a single comma-joined value.
    """
    grouped: Dict[str, List[str]] = defaultdict(list)
    for name, value in as_pairs(params):
        grouped[percent_encode(name)].append(percent_encode(value))
    return "&".join(
        f"{name}={','.join(sorted(grouped[name]))}" for name in sorted(grouped)
    )


def query_for_transmission(params: PairsInput) -> str:
    """URL-safe query string in caller order, repeated names kept apart."""
    return "&".join(
        f"{percent_encode(name)}={percent_encode(value)}"
        for name, value in as_pairs(params)
    )

"""
Continuation cursors for paginated listings.

A cursor is opaque: it is read from a response exactly as the provider sent
it and replayed on the next call without any change. No cursor on a
response means the listing is complete.
"""

from dataclasses import dataclass, field
from typing import Callable, Generic, Iterator, List, Optional, TypeVar

from ._errors import local_name, parse_xml
from .models import ResponseOutcome

T = TypeVar("T")


@dataclass(frozen=True)
class CursorLocation:
    """Where a service places its next-page cursor."""

    header: Optional[str] = None
    element: Optional[str] = None

    @classmethod
    def in_header(cls, name: str) -> "CursorLocation":
        return cls(header=name)

    @classmethod
    def in_body(cls, element: str) -> "CursorLocation":
        return cls(element=element)


def extract_cursor(outcome: ResponseOutcome, location: CursorLocation) -> Optional[str]:
    if not outcome.ok:
        return None
    if location.header:
        value = outcome.header(location.header)
    else:
        value = None
        root = parse_xml(outcome.body)
        if root is not None:
            for node in root.iter():
                if local_name(node.tag) == location.element:
                    value = node.text
                    break
    return value or None


@dataclass
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    next_cursor: Optional[str] = None
    outcome: Optional[ResponseOutcome] = None

    @property
    def ok(self) -> bool:
        return self.outcome is None or self.outcome.ok


def paginate(fetch: Callable[[Optional[str]], Page[T]], cursor: Optional[str] = None) -> Iterator[Page[T]]:
    """
    Call ``fetch`` repeatedly, feeding each page's cursor into the next call.

    Stops after a page without a cursor, or after a failed page (which is
    still yielded so the caller can inspect its outcome).
    """
    while True:
        page = fetch(cursor)
        yield page
        if not page.ok or page.next_cursor is None:
            return
        cursor = page.next_cursor

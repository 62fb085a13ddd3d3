"""
Error envelope sniffing for provider response bodies.

Three envelope shapes are recognised:

    storage   <Error><Code/><Message/><RequestId/></Error>
    queue     <ErrorResponse><Error><Code/><Message/></Error><RequestId/></ErrorResponse>
    table     <Response><Errors><Error><Code/><Message/></Error></Errors><RequestID/></Response>

Parsing never raises; anything unrecognised yields no diagnostics.
"""

import xml.etree.ElementTree as ET
from typing import Optional, Union

from .models import ErrorDiagnostics

Body = Union[str, bytes, None]


def local_name(tag: str) -> str:
    return tag.split("}")[-1]


def parse_xml(body: Body) -> Optional[ET.Element]:
    if not body or not body.strip():
        return None
    try:
        return ET.fromstring(body)
    except (ET.ParseError, ValueError, LookupError):
        return None


def find_child(node: ET.Element, name: str) -> Optional[ET.Element]:
    name = name.lower()
    for child in list(node):
        if local_name(child.tag).lower() == name:
            return child
    return None


def child_text(node: Optional[ET.Element], name: str) -> str:
    if node is None:
        return ""
    child = find_child(node, name)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _error_node(root: ET.Element):
    """Locate the error element and the element holding the request id."""
    tag = local_name(root.tag)
    if tag == "Error":
        return root, root
    if tag == "ErrorResponse":
        return find_child(root, "Error"), root
    if tag == "Response":
        errors = find_child(root, "Errors")
        if errors is not None:
            return find_child(errors, "Error"), root
    return None, None


def classify_error(body: Body) -> Optional[ErrorDiagnostics]:
    """Return the provider's error diagnostics, or None for any other body."""
    root = parse_xml(body)
    if root is None:
        return None

    error, holder = _error_node(root)
    code = child_text(error, "Code")
    if not code:
        return None

    request_id = child_text(holder, "RequestId") or child_text(error, "RequestId")
    return ErrorDiagnostics(
        code=code,
        message=child_text(error, "Message"),
        request_id=request_id,
    )


def extract_request_id(body: Body) -> Optional[str]:
    """Request tracing id embedded in a success body (``ResponseMetadata/RequestId``)."""
    root = parse_xml(body)
    if root is None:
        return None
    for node in root.iter():
        if local_name(node.tag).lower() == "requestid" and node.text:
            return node.text.strip()
    return None

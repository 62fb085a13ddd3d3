"""
Dispatcher: places a signed request on the wire and classifies the outcome
"""

import logging
from typing import Optional, Sequence, Tuple

import httpx

from ._canonical import query_for_transmission
from ._errors import classify_error, extract_request_id
from ._http import HttpClient
from ._signer import SignatureScheme
from .models import ErrorDiagnostics, OutcomeKind, RequestShape, ResponseOutcome, SignedRequest

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"


def decide_shape(body: Optional[bytes], form_encoded: bool) -> RequestShape:
    """
    A supplied body is always sent as the entity. Without one, query-style
    services carry their parameters in a form POST and storage keeps them
    in the URL.
    """
    if body is not None:
        return RequestShape.ENTITY_BODY
    if form_encoded:
        return RequestShape.FORM_BODY
    return RequestShape.QUERY_STRING


def render_request(signed: SignedRequest) -> Tuple[str, str, Tuple[Tuple[str, str], ...], Optional[bytes]]:
    """Attach the signature and lay out the final verb, URL, headers and body."""
    params = signed.params
    headers = signed.headers
    if signed.scheme is SignatureScheme.LEGACY:
        params = params + (("Signature", signed.signature),)
    else:
        headers = headers + (("Authorization", signed.authorization),)

    if signed.shape is RequestShape.FORM_BODY:
        return signed.verb, signed.url, headers, query_for_transmission(params).encode("utf-8")

    query = query_for_transmission(params)
    url = f"{signed.url}?{query}" if query else signed.url
    return signed.verb, url, headers, signed.body


def build_outcome(
    status_code: int,
    status_message: str,
    headers: Sequence[Tuple[str, str]],
    body: bytes,
) -> ResponseOutcome:
    """
    Classify a received response. Success is decided by status alone; the
    body is still parsed so success responses surface their request id.
    """
    diagnostics = classify_error(body)
    headers = tuple((str(k), str(v)) for k, v in headers)

    if 200 <= status_code < 300:
        kind = OutcomeKind.SUCCESS
        if diagnostics is None:
            request_id = extract_request_id(body)
            if request_id:
                diagnostics = ErrorDiagnostics(request_id=request_id)
    elif diagnostics is not None or not body.strip():
        kind = OutcomeKind.PROVIDER_ERROR
    else:
        kind = OutcomeKind.MALFORMED_BODY

    return ResponseOutcome(
        kind=kind,
        status_code=status_code,
        status_message=status_message,
        headers=headers,
        body=body,
        diagnostics=diagnostics,
    )


class Dispatcher:
    """Issues exactly one network exchange per signed request."""

    def __init__(self, http: HttpClient):
        self._http = http

    def dispatch(self, signed: SignedRequest) -> ResponseOutcome:
        verb, url, headers, body = render_request(signed)
        try:
            response = self._http.execute(verb, url, headers, body)
        except httpx.RequestError as ex:
            logger.warning(
                "[CloudApi][Dispatch] verb=%s host=%s path=%s transportError=%s",
                verb,
                signed.host,
                signed.path,
                ex,
            )
            return ResponseOutcome(
                kind=OutcomeKind.TRANSPORT_FAILURE,
                transport_error=str(ex) or type(ex).__name__,
            )

        outcome = build_outcome(
            response.status_code,
            response.reason_phrase,
            response.headers.multi_items(),
            response.content,
        )
        logger.debug(
            "[CloudApi][Dispatch] verb=%s host=%s path=%s status=%s",
            verb,
            signed.host,
            signed.path,
            outcome.status_code,
        )
        if outcome.kind is OutcomeKind.PROVIDER_ERROR and outcome.diagnostics:
            logger.info(
                "[CloudApi][ProviderError] status=%s code=%s requestId=%s",
                outcome.status_code,
                outcome.diagnostics.code,
                outcome.diagnostics.request_id,
            )
        return outcome

"""
Response normalizer: raw (status, body, headers) -> ApiResponse.

Decision table:

    status  shape          data
    ------  -------------  ----------------------------------------------
    200     RAW            decoded JSON, read-only
    200     SINGLE / LIST  strict decode into the declared record(s)
    400     any            BaseResponse (the server's one error shape)
    other   any            best-effort JSON; body text if not JSON

Malformed 200/400 bodies raise DecodeError. Other statuses never raise:
the server makes no promise about their bodies.

Pure functions, no I/O. The same inputs always produce equal outputs.
Decoded JSON and headers are handed out as read-only views (mapping
proxies and tuples), so an ApiResponse cannot change once built.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from silamoney_client.canonical_json import recanonicalize
from silamoney_client.errors import DecodeError
from silamoney_client.responses import BaseResponse, decode_list, freeze_json

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_BAD_REQUEST = 400

Decoder = Callable[[Any], Any]


class ShapeKind(StrEnum):
    RAW = "RAW"
    SINGLE = "SINGLE"
    LIST = "LIST"


@dataclass(frozen=True)
class ExpectedShape:
    """The success payload an operation decodes on HTTP 200.

    Attributes:
        kind: RAW (opaque JSON), SINGLE (one record) or LIST (array of records).
        decoder: Record decoder for SINGLE/LIST. None for RAW.
        canonicalize: Round-trip the body through canonical JSON before
            decoding, so the result does not depend on server key order.
    """

    kind: ShapeKind
    decoder: Decoder | None = None
    canonicalize: bool = False

    def __post_init__(self) -> None:
        if self.kind is ShapeKind.RAW and self.decoder is not None:
            raise ValueError("RAW shape takes no decoder")
        if self.kind is not ShapeKind.RAW and self.decoder is None:
            raise ValueError(f"{self.kind} shape requires a decoder")

    @classmethod
    def raw(cls, canonicalize: bool = False) -> ExpectedShape:
        return cls(ShapeKind.RAW, canonicalize=canonicalize)

    @classmethod
    def single(cls, decoder: Decoder) -> ExpectedShape:
        return cls(ShapeKind.SINGLE, decoder)

    @classmethod
    def list_of(cls, decoder: Decoder) -> ExpectedShape:
        return cls(ShapeKind.LIST, decoder)


@dataclass(frozen=True)
class ApiResponse:
    """Uniform result of every operation.

    Attributes:
        status_code: HTTP status returned by the server.
        headers: Response headers, name -> all values in arrival order.
        data: Typed record(s) on 200, BaseResponse on 400, read-only JSON
            (or body text) otherwise.
    """

    status_code: int
    headers: Mapping[str, tuple[str, ...]]
    data: Any

    @property
    def ok(self) -> bool:
        return self.status_code == HTTP_OK


def _decode_json(body: bytes) -> Any:
    try:
        return json.loads(body)
    except ValueError as e:
        raise DecodeError(
            "Response was not valid JSON",
            error_code="INVALID_JSON",
            details={"body_preview": body[:200].decode("utf-8", "replace")},
        ) from e


def _decode_best_effort(status_code: int, body: bytes) -> Any:
    if not body.strip():
        return None
    try:
        return freeze_json(json.loads(body))
    except ValueError:
        logger.warning("HTTP %d body is not JSON; returning text", status_code)
        return body.decode("utf-8", "replace")


def _copy_headers(headers: Mapping[str, Sequence[str]]) -> Mapping[str, tuple[str, ...]]:
    return MappingProxyType({name: tuple(values) for name, values in headers.items()})


def normalize(
    status_code: int,
    body: bytes,
    headers: Mapping[str, Sequence[str]],
    shape: ExpectedShape,
) -> ApiResponse:
    """Classify and decode a raw response.

    Raises:
        DecodeError: If a 200 or 400 body is not JSON or does not match
            the expected record shape.
    """
    logger.debug("Normalizing HTTP %d response as %s", status_code, shape.kind)

    if shape.canonicalize and status_code in (HTTP_OK, HTTP_BAD_REQUEST):
        body = recanonicalize(body)

    data: Any
    if status_code == HTTP_OK:
        decoded = _decode_json(body)
        decoder = shape.decoder
        if decoder is None:
            data = freeze_json(decoded)
        elif shape.kind is ShapeKind.SINGLE:
            data = decoder(decoded)
        else:
            data = tuple(decode_list(decoded, decoder, "list"))
    elif status_code == HTTP_BAD_REQUEST:
        data = BaseResponse.from_dict(_decode_json(body))
    else:
        data = _decode_best_effort(status_code, body)

    return ApiResponse(status_code=status_code, headers=_copy_headers(headers), data=data)

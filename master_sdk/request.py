"""Request builder - Accumulates one outgoing master API request.

A RequestBuilder collects method, path, query parameters, headers and body
through chained calls. Mutators never raise: the first failure is recorded
on the builder (err) and surfaces only when the sender calls check().

Usage:
    req = (
        new_request("GET", "/admin/getCluster")
        .add_param("name", "cluster1")
        .add_param_any("count", 5)
    )
    req.check()  # raises the first recorded error, if any
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any, NamedTuple, Union

from pydantic import BaseModel

from master_sdk.version import REQ_HEADER_UA

HEADER_USER_AGENT = "User-Agent"

# Closed set of scalar kinds accepted by add_param_any. Python cannot close a
# union at runtime, so _encode_param still checks the type explicitly.
ParamValue = Union[str, bool, int, float]


class RequestBuildError(Exception):
    """Base class for errors deferred on a RequestBuilder."""


class UnsupportedParamTypeError(RequestBuildError):
    """Raised when a parameter value is not one of the supported scalar kinds."""


class BodyMarshalError(RequestBuildError):
    """Raised when a structured body cannot be serialized to JSON."""


class AnyParam(NamedTuple):
    """One heterogeneous key/value pair for RequestBuilder.with_params."""

    key: str
    val: Any


def _format_float(value: float) -> str:
    """Fixed-point with 6 fractional digits; non-finite values use the server spelling."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return f"{value:.6f}"


def _encode_param(value: Any) -> str | None:
    """Canonicalize a parameter value. Returns None for unsupported types."""
    if isinstance(value, str):
        return value
    # bool subclasses int, so it must be matched first
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        return _format_float(value)
    return None


def _pair_up(added: tuple[str, ...]) -> list[tuple[str, str]]:
    """Group a flat key/value list into pairs. A trailing unpaired key is dropped."""
    if len(added) % 2 == 1:
        added = added[:-1]
    return [(added[idx], added[idx + 1]) for idx in range(0, len(added), 2)]


class RequestBuilder:
    """Mutable, single-owner description of one request to the master service.

    Fields read by the sender:
        method, path: fixed at construction.
        params: query parameters (str -> str), last write wins.
        headers: request headers (str -> str), last write wins.
        body: raw payload, None until set.
        err: first deferred error, never overwritten once set.
    """

    def __init__(self, method: str, path: str, user_agent: str = REQ_HEADER_UA) -> None:
        self._method = method
        self._path = path
        self.params: dict[str, str] = {}
        self.headers: dict[str, str] = {HEADER_USER_AGENT: user_agent}
        self.body: bytes | None = None
        self.err: RequestBuildError | None = None

    def __repr__(self) -> str:
        return (
            f"RequestBuilder(method={self._method!r}, path={self._path!r}, "
            f"params={self.params!r}, err={self.err!r})"
        )

    @property
    def method(self) -> str:
        return self._method

    @property
    def path(self) -> str:
        return self._path

    def _record_error(self, err: RequestBuildError) -> None:
        if self.err is None:
            self.err = err

    def add_param_any(self, key: str, value: ParamValue) -> RequestBuilder:
        """Store a scalar parameter in its canonical string form.

        Unsupported values leave params untouched and record an
        UnsupportedParamTypeError unless an error is already recorded.
        """
        encoded = _encode_param(value)
        if encoded is None:
            self._record_error(UnsupportedParamTypeError(
                f"unknown param type {type(value).__name__}: {value!r}"
            ))
            return self
        self.params[key] = encoded
        return self

    def add_param(self, key: str, value: str) -> RequestBuilder:
        self.params[key] = value
        return self

    def add_header(self, key: str, value: str) -> RequestBuilder:
        self.headers[key] = value
        return self

    def set_body(self, body: bytes) -> RequestBuilder:
        self.body = body
        return self

    def with_params(self, *params: AnyParam | tuple[str, Any]) -> RequestBuilder:
        """Apply add_param_any to each (key, value) pair in order.

        A failing pair records the deferred error; the remaining pairs are
        still added. An element that is not a 2-item pair is skipped and
        recorded as an UnsupportedParamTypeError.
        """
        for param in params:
            if not isinstance(param, tuple) or len(param) != 2:
                self._record_error(UnsupportedParamTypeError(
                    f"param must be a (key, value) pair, got {param!r}"
                ))
                continue
            self.add_param_any(param[0], param[1])
        return self

    def with_headers(
        self,
        headers: Mapping[str, str] | None,
        *added: str,
    ) -> RequestBuilder:
        """Copy headers, then apply added as alternating key/value pairs.

        An odd-length added list silently loses its last element.
        """
        if headers:
            self.headers.update(headers)
        for key, value in _pair_up(added):
            self.headers[key] = value
        return self

    def with_body(self, body: Any) -> RequestBuilder:
        """Store raw bytes verbatim, or the compact JSON encoding of anything else.

        On encoding failure the body is left as it was and a BodyMarshalError
        is recorded unless an error is already recorded.
        """
        if isinstance(body, (bytes, bytearray)):
            self.body = bytes(body)
            return self

        try:
            if isinstance(body, BaseModel):
                encoded = body.model_dump_json()
            else:
                encoded = json.dumps(
                    body,
                    separators=(",", ":"),
                    ensure_ascii=False,
                    allow_nan=False,
                )
            # Lone surrogates survive json.dumps but not UTF-8
            payload = encoded.encode("utf-8")
        except (TypeError, ValueError, UnicodeEncodeError) as e:
            self._record_error(BodyMarshalError(f"body json marshal {e}"))
            return self

        self.body = payload
        return self

    def check(self) -> RequestBuilder:
        """Raise the recorded deferred error, if any."""
        if self.err is not None:
            raise self.err
        return self


def new_request(method: str, path: str, user_agent: str | None = None) -> RequestBuilder:
    """Create a builder carrying only the identity header.

    user_agent defaults to the process-wide REQ_HEADER_UA.
    """
    return RequestBuilder(method, path, user_agent if user_agent is not None else REQ_HEADER_UA)


def merge_headers(headers: Mapping[str, str] | None, *added: str) -> dict[str, str]:
    """Return a new dict of headers overlaid with added key/value pairs.

    Same rules as RequestBuilder.with_headers; headers is not modified.
    """
    merged = dict(headers) if headers else {}
    for key, value in _pair_up(added):
        merged[key] = value
    return merged

"""Master client - Sends finished RequestBuilders to a master endpoint.

The client is the single consumer of a RequestBuilder: it checks the
deferred error first, then sends params as the query string and body as raw
content, and decodes the {"code", "msg", "data"} reply envelope.

Talks to one configured endpoint. Leader discovery, failover and retries
belong to the caller.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import httpx
from pydantic import ValidationError

from master_sdk.models import BuildInfo, MasterConfig, MasterReply
from master_sdk.request import RequestBuilder, merge_headers, new_request
from master_sdk.version import REQ_HEADER_UA

logger = logging.getLogger(__name__)


class MasterClientError(Exception):
    """Base class for master client errors."""


class RequestError(MasterClientError):
    """Raised when a request fails (connection error, timeout, etc.)."""


class StatusError(MasterClientError):
    """Raised when the master answers with a non-200 HTTP status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class ReplyError(MasterClientError):
    """Raised when the reply envelope is malformed or reports a failure code."""

    def __init__(self, message: str, code: int | None = None, msg: str = "") -> None:
        super().__init__(message)
        self.code = code
        self.msg = msg


class MasterClient:
    """Sends requests to one master endpoint.

    Usage:
        with MasterClient(config) as client:
            req = client.request("GET", "/admin/getCluster").add_param("name", "c1")
            data = client.serve_request(req)
    """

    def __init__(self, config: MasterConfig, build_info: BuildInfo | None = None) -> None:
        self._config = config
        self._user_agent = build_info.user_agent() if build_info is not None else REQ_HEADER_UA
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def __enter__(self) -> "MasterClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @property
    def user_agent(self) -> str:
        return self._user_agent

    def request(self, method: str, path: str) -> RequestBuilder:
        """Create a builder carrying this client's identity header."""
        return new_request(method, path, user_agent=self._user_agent)

    def send(self, req: RequestBuilder) -> httpx.Response:
        """Send a finished builder and return the raw response.

        Raises:
            RequestBuildError: The builder recorded a deferred error; nothing is sent.
            RequestError: Transport failure.
        """
        if req.err is not None:
            logger.warning("Not sending %s %s: %s", req.method, req.path, req.err)
        req.check()

        # Builder headers take precedence over the configured defaults
        headers = merge_headers(self._config.headers)
        headers.update(req.headers)

        logger.debug("Request: %s %s params=%s", req.method, req.path, req.params)

        try:
            start_time = time.perf_counter()
            response = self._client.request(
                method=req.method,
                url=req.path,
                params=req.params if req.params else None,
                headers=headers,
                content=req.body,
            )
            elapsed_ms = (time.perf_counter() - start_time) * 1000
        except httpx.TimeoutException as e:
            raise RequestError(f"{req.method} {req.path} request timeout: {e}") from e
        except httpx.ConnectError as e:
            raise RequestError(f"{req.method} {req.path} connection error: {e}") from e
        except httpx.RequestError as e:
            raise RequestError(f"{req.method} {req.path} request error: {e}") from e

        logger.debug(
            "Response: %s %s -> %d (%.1f ms)",
            req.method, req.path, response.status_code, elapsed_ms,
        )
        return response

    def serve_request(self, req: RequestBuilder) -> Any:
        """Send a builder and return the data field of a successful reply.

        Raises:
            RequestBuildError: The builder recorded a deferred error.
            RequestError: Transport failure.
            StatusError: HTTP status other than 200.
            ReplyError: Malformed envelope or non-zero reply code.
        """
        response = self.send(req)

        if response.status_code != httpx.codes.OK:
            raise StatusError(
                f"{req.method} {req.path} failed: status {response.status_code}: "
                f"{response.text.strip()}",
                response.status_code,
            )

        reply = decode_reply(response.content)
        if not reply.ok:
            raise ReplyError(
                f"{req.method} {req.path} failed: code {reply.code}: {reply.msg}",
                code=reply.code,
                msg=reply.msg,
            )
        return reply.data


def decode_reply(content: bytes) -> MasterReply:
    """Parse a master reply envelope. Raises ReplyError if it is not one."""
    try:
        raw = json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ReplyError(f"reply is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise ReplyError(f"reply must be a JSON object, got {type(raw).__name__}")

    try:
        return MasterReply.model_validate(raw)
    except ValidationError as e:
        raise ReplyError(f"invalid reply envelope: {e}") from e

"""HTTP transport: sends JSON envelopes to Plaid and hands back raw responses"""

import time
from dataclasses import dataclass
from typing import Optional

import httpx
from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from plaid_client.domain.exceptions import (
    BodyReadError,
    NetworkError,
    RequestTimeoutError,
    SerializationError,
)
from plaid_client.domain.models import Environment
from plaid_client.infrastructure.observability.logging import log_request, log_transport_failure
from plaid_client.infrastructure.observability.metrics import (
    request_latency_histogram,
    transport_failure_counter,
)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "plaid-python-client"

BODY_METHODS = frozenset({"POST", "PATCH", "DELETE"})


@dataclass(frozen=True)
class RawResponse:
    """Status code and fully read body, ready for the decoder"""

    status_code: int
    body: bytes


class Transport:
    """
    Issues one blocking request per call against a fixed environment.

    Pass ``http_client`` to share a connection pool or to run where a
    default client is not allowed; a client passed in is never closed here.
    """

    def __init__(
        self,
        environment: Environment,
        http_client: Optional[httpx.Client] = None,
        timeout: float | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.environment = environment
        self.timeout = timeout if timeout is not None else DEFAULT_TIMEOUT_SECONDS
        self.user_agent = user_agent
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=self.timeout)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def url_for(self, path: str) -> str:
        return f"{self.environment.value}{path}"

    def send(
        self,
        method: str,
        path: str,
        envelope: BaseModel,
        timeout: float | None = None,
    ) -> RawResponse:
        """
        Serialize ``envelope`` and send it as the JSON body.

        Args:
            method: POST, PATCH or DELETE
            path: Endpoint path, e.g. "/transactions/get"
            envelope: Request body; None-valued optional fields are omitted
            timeout: Per-call deadline in seconds, overriding the default

        Raises:
            SerializationError: Envelope could not be encoded
            NetworkError: Request failed or timed out before a response
            BodyReadError: Response body could not be read
        """
        if method not in BODY_METHODS:
            raise ValueError(f"Unsupported method for an authenticated call: {method}")

        try:
            content = envelope.model_dump_json(exclude_none=True).encode("utf-8")
        except PydanticSerializationError as e:
            self._fail(method, path, "serialization", e)
            raise SerializationError(f"Could not serialize {type(envelope).__name__}: {e}") from e

        request = self._http.build_request(
            method,
            self.url_for(path),
            content=content,
            headers={"Content-Type": "application/json", "User-Agent": self.user_agent},
            timeout=timeout if timeout is not None else self.timeout,
        )
        return self._dispatch(request, path)

    def get(self, path: str, timeout: float | None = None) -> RawResponse:
        """Unauthenticated GET; same failure mapping as ``send``"""
        request = self._http.build_request(
            "GET",
            self.url_for(path),
            headers={"User-Agent": self.user_agent},
            timeout=timeout if timeout is not None else self.timeout,
        )
        return self._dispatch(request, path)

    def _dispatch(self, request: httpx.Request, path: str) -> RawResponse:
        start_time = time.time()

        try:
            response = self._http.send(request, stream=True)
        except httpx.TimeoutException as e:
            self._fail(request.method, path, "timeout", e)
            raise RequestTimeoutError(f"Plaid {request.method} {path} timed out") from e
        except httpx.HTTPError as e:
            self._fail(request.method, path, "network", e)
            raise NetworkError(f"Plaid {request.method} {path} failed: {e}") from e

        try:
            body = response.read()
        except httpx.HTTPError as e:
            self._fail(request.method, path, "body_read", e)
            raise BodyReadError(f"Could not read Plaid response body for {path}: {e}") from e
        finally:
            response.close()

        duration = time.time() - start_time
        request_latency_histogram.labels(method=request.method, endpoint=path).observe(duration)
        log_request(request.method, path, response.status_code, duration * 1000)

        return RawResponse(status_code=response.status_code, body=body)

    def _fail(self, method: str, path: str, kind: str, error: Exception) -> None:
        transport_failure_counter.labels(endpoint=path, kind=kind).inc()
        log_transport_failure(method, path, kind, error)

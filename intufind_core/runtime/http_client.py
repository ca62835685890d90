"""
Async HTTP client for the Intufind API.

This module provides the request engine used by the resource layer: it
builds authenticated requests, enforces per-attempt timeouts, retries
transient failures with exponential backoff, maps error responses onto the
error taxonomy and unwraps the success envelope.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, AsyncIterator, Awaitable, TypeVar

import httpx
from loguru import logger

from .cancellation import ABORTED, TIMEOUT, CancelSignal, run_cancellable
from .context import ClientConfig
from .errors import ErrorCode, NetworkError, RequestAbortedError, error_from_response
from .models import ApiResponse, RequestSpec, StreamChunk
from .retry import retry_async
from .streaming import StreamDecoder

T = TypeVar("T")

REQUEST_ID_HEADER = "x-request-id"


def parse_body(text: str) -> Any:
    """Parse a response body without ever failing.

    Empty bodies become ``{}``; text that is not JSON is wrapped as
    ``{"message": text}``.
    """
    if not text:
        return {}
    try:
        return json.loads(text)
    except ValueError:
        return {"message": text}


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class ApiHttpClient:
    """Request engine shared by all API resources.

    Features:
    - Connection pooling via httpx.AsyncClient
    - Bearer auth, custom, per-request and workspace headers
    - Per-attempt timeout combined with an optional caller CancelSignal
    - Retry with exponential backoff for retryable errors
    - Success envelope unwrapping and typed errors

    Example:
        config = ClientConfig(api_key="if_live_...")
        async with ApiHttpClient(config) as client:
            result = await client.get("/products/abc")
            print(result.data)
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        max_connections: int = 100,
        max_keepalive: int = 20,
    ):
        """Initialize the client.

        Args:
            config: Immutable client configuration.
            transport: Optional httpx transport (e.g. httpx.MockTransport).
            max_connections: Maximum total connections in pool.
            max_keepalive: Maximum keepalive connections.
        """
        self.config = config
        self._transport = transport
        self._limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive,
            keepalive_expiry=30.0,
        )
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the pooled httpx.AsyncClient."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                limits=self._limits,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release connections."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ApiHttpClient":
        await self._get_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def with_workspace_id(self, workspace_id: str) -> "ApiHttpClient":
        """Return a new client scoped to another workspace.

        The new client has its own connection pool; this client is not
        modified.
        """
        return ApiHttpClient(
            self.config.with_workspace_id(workspace_id),
            transport=self._transport,
        )

    def _build_url(self, endpoint: str, path: str) -> str:
        path = path.lstrip("/")
        return f"{endpoint}/{path}"

    def _log(self, message: str) -> None:
        if self.config.debug:
            logger.debug(f"[Intufind] {message}")

    async def _guarded(
        self,
        awaitable: Awaitable[T],
        signal: CancelSignal | None,
        timeout: float,
    ) -> T:
        """Run one network sub-operation under a deadline and the caller's signal.

        A fresh controller is created for every call. The deadline timer and
        the link to the caller's signal are removed as soon as the
        sub-operation finishes, so nothing leaks into a later attempt.

        Raises:
            NetworkError: On timeout or any other httpx request failure
                (transport, redirect loop, undecodable body).
            RequestAbortedError: When the caller's signal fired.
        """
        controller = CancelSignal()
        loop = asyncio.get_running_loop()
        timer = loop.call_later(timeout, controller.cancel, TIMEOUT)

        def _on_abort(_reason: str) -> None:
            controller.cancel(ABORTED)

        if signal is not None:
            signal.add_callback(_on_abort)

        try:
            return await run_cancellable(awaitable, controller)
        except asyncio.CancelledError:
            if not controller.cancelled:
                raise
            if controller.reason == TIMEOUT:
                raise NetworkError(
                    f"Request timed out after {timeout}s",
                    code=ErrorCode.TIMEOUT,
                ) from None
            raise RequestAbortedError(code=ErrorCode.ABORTED) from None
        except httpx.TimeoutException as e:
            raise NetworkError(
                f"Request timed out after {timeout}s",
                code=ErrorCode.TIMEOUT,
            ) from e
        except httpx.RequestError as e:
            raise NetworkError(
                f"Failed to reach service: {e}",
                code=ErrorCode.CONNECTION_ERROR,
            ) from e
        finally:
            timer.cancel()
            if signal is not None:
                signal.remove_callback(_on_abort)

    async def _exchange(
        self,
        client: httpx.AsyncClient,
        spec: RequestSpec,
        content: str | None,
        timeout: float,
    ) -> tuple[httpx.Response, str]:
        response = await client.request(
            method=spec.method,
            url=spec.url,
            headers=spec.headers,
            content=content,
            timeout=timeout,
        )
        return response, response.text

    async def _attempt(
        self,
        spec: RequestSpec,
        content: str | None,
        attempt: int,
    ) -> ApiResponse:
        client = await self._get_client()
        timeout = spec.timeout if spec.timeout is not None else self.config.timeout

        self._log(f"{spec.method} {spec.url} (attempt {attempt + 1})")

        response, text = await self._guarded(
            self._exchange(client, spec, content, timeout),
            spec.signal,
            timeout,
        )

        request_id = response.headers.get(REQUEST_ID_HEADER)
        parsed = parse_body(text)

        self._log(f"Response {response.status_code} (request_id={request_id}): {parsed!r}")

        if not _is_success(response.status_code):
            raise error_from_response(response.status_code, parsed, request_id)

        return ApiResponse.from_body(parsed)

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        headers: dict[str, str] | None = None,
        signal: CancelSignal | None = None,
        timeout: float | None = None,
    ) -> ApiResponse:
        """Execute one logical request, retrying transient failures.

        Args:
            method: HTTP method (GET, POST, etc.).
            path: Path appended to the API endpoint.
            body: Optional JSON-serializable body.
            headers: Per-request headers (override custom headers).
            signal: Optional caller cancellation signal.
            timeout: Per-attempt timeout in seconds, overriding the config.

        Returns:
            The unwrapped ApiResponse.

        Raises:
            ApiError: The classified error of the failing (last) attempt.
            TypeError: If the body is not JSON-serializable.
        """
        spec = RequestSpec(
            method=method.upper(),
            url=self._build_url(self.config.api_endpoint, path),
            body=body,
            headers=self.config.get_headers(headers),
            signal=signal,
            timeout=timeout,
        )
        content = None if spec.body is None else json.dumps(spec.body)

        return await retry_async(
            lambda attempt: self._attempt(spec, content, attempt),
            self.config.retry_policy,
            label=f"{spec.method} {spec.url}",
        )

    async def get(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        signal: CancelSignal | None = None,
        timeout: float | None = None,
    ) -> ApiResponse:
        """Make a GET request."""
        return await self.request("GET", path, headers=headers, signal=signal, timeout=timeout)

    async def post(
        self,
        path: str,
        body: Any = None,
        *,
        headers: dict[str, str] | None = None,
        signal: CancelSignal | None = None,
        timeout: float | None = None,
    ) -> ApiResponse:
        """Make a POST request."""
        return await self.request("POST", path, body, headers=headers, signal=signal, timeout=timeout)

    async def put(
        self,
        path: str,
        body: Any = None,
        *,
        headers: dict[str, str] | None = None,
        signal: CancelSignal | None = None,
        timeout: float | None = None,
    ) -> ApiResponse:
        """Make a PUT request."""
        return await self.request("PUT", path, body, headers=headers, signal=signal, timeout=timeout)

    async def patch(
        self,
        path: str,
        body: Any = None,
        *,
        headers: dict[str, str] | None = None,
        signal: CancelSignal | None = None,
        timeout: float | None = None,
    ) -> ApiResponse:
        """Make a PATCH request."""
        return await self.request("PATCH", path, body, headers=headers, signal=signal, timeout=timeout)

    async def delete(
        self,
        path: str,
        body: Any = None,
        *,
        headers: dict[str, str] | None = None,
        signal: CancelSignal | None = None,
        timeout: float | None = None,
    ) -> ApiResponse:
        """Make a DELETE request. A body is sent only when given."""
        return await self.request("DELETE", path, body, headers=headers, signal=signal, timeout=timeout)

    async def stream_request(
        self,
        path: str,
        body: Any,
        signal: CancelSignal | None = None,
    ) -> httpx.Response:
        """Open a streaming POST against the streaming endpoint.

        There is no retry. The deadline covers the wait for the response
        headers only; the returned response is live and must be consumed
        with a StreamDecoder (or closed by the caller).

        Args:
            path: Path appended to the streaming endpoint.
            body: JSON-serializable request body.
            signal: Optional caller cancellation signal.

        Returns:
            The open httpx.Response.

        Raises:
            ApiError: For non-success statuses and transport failures.
        """
        client = await self._get_client()
        url = self._build_url(self.config.streaming_endpoint, path)
        timeout = self.config.timeout

        self._log(f"STREAM POST {url}")

        request = client.build_request(
            "POST",
            url,
            headers=self.config.get_headers(),
            content=json.dumps(body),
            timeout=httpx.Timeout(timeout, read=None),
        )
        response = await self._guarded(client.send(request, stream=True), signal, timeout)

        if not _is_success(response.status_code):
            try:
                await self._guarded(response.aread(), signal, timeout)
                text = response.text
            finally:
                await response.aclose()
            request_id = response.headers.get(REQUEST_ID_HEADER)
            parsed = parse_body(text)
            self._log(f"Stream response {response.status_code} (request_id={request_id}): {parsed!r}")
            raise error_from_response(response.status_code, parsed, request_id)

        return response

    async def stream(
        self,
        path: str,
        body: Any,
        signal: CancelSignal | None = None,
    ) -> AsyncIterator[StreamChunk]:
        """Open a stream and yield its decoded chunks.

        The underlying response is released when the stream ends, when the
        signal fires, or when the consumer stops early.
        """
        response = await self.stream_request(path, body, signal)
        async with StreamDecoder(response, signal) as decoder:
            async for chunk in decoder:
                yield chunk

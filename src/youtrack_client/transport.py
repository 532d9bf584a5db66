import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import httpx

from .config import ClientConfig
from .errors import (
    ApiError,
    MalformedResponseError,
    UnreachableError,
    error_class_for_status,
)
from .observability import log_event

USER_AGENT = "youtrack-client/0.1.0"

ParamValue = Union[str, int, float, bool, Sequence[str]]

# Network-level failures worth another attempt on idempotent calls.
NETWORK_ERRORS = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


@dataclass(frozen=True)
class RetryConfig:
    max_retries: int = 3  # extra attempts after the first one
    backoff_base_seconds: float = 0.2  # 0.2, 0.4, 0.8...
    backoff_factor: float = 2.0
    backoff_max_seconds: float = 5.0
    retry_methods: frozenset[str] = frozenset({"GET"})

    def delay_for(self, attempt: int, retry_after: Optional[float] = None) -> float:
        delay = self.backoff_base_seconds * (self.backoff_factor**attempt)
        if retry_after is not None:
            delay = max(delay, retry_after)
        return min(delay, self.backoff_max_seconds)


@dataclass(frozen=True)
class RequestDescriptor:
    method: str
    path: str
    params: Mapping[str, ParamValue] = field(default_factory=dict)
    json: Optional[Any] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())


class Transport:
    """
    Shared HTTP transport for the YouTrack REST API.
    - Handles bearer auth, base URL, timeouts, retries
    - Returns parsed JSON payloads (object, array, or None on empty body)
    - Normalizes every failure into an ApiError subclass
    - Holds no per-call state, so concurrent calls need no locking
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        retry: Optional[RetryConfig] = None,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self.retry = retry if retry is not None else RetryConfig()
        self.log = logger or logging.getLogger("youtrack_client.transport")

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(timeout=config.timeout_seconds)

    @staticmethod
    def default_headers(config: ClientConfig) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {config.token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }

    def url_for(self, path: str) -> str:
        # Absolute URLs keep injected clients pointed at the configured server.
        return f"{self.config.base_url}/{path.lstrip('/')}"

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def send(
        self, descriptor: RequestDescriptor, *, operation: Optional[str] = None
    ) -> Any:
        """
        Core request method.
        - Retries GETs on 429/5xx and network failures with exponential backoff
        - Never retries mutating methods
        - Raises an ApiError subclass on any non-2xx outcome
        - Raises MalformedResponseError if a 2xx body isn't valid JSON
        Cancellation propagates untouched and is never retried.
        """
        method = descriptor.method
        can_retry = method in self.retry.retry_methods
        attempt = 0

        url = self.url_for(descriptor.path)
        headers = self.default_headers(self.config)

        while True:
            start = time.perf_counter()
            try:
                resp = await self.http.request(
                    method,
                    url,
                    params=dict(descriptor.params) or None,
                    json=descriptor.json,
                    headers=headers,
                    timeout=self.config.timeout_seconds,
                )
            except NETWORK_ERRORS as exc:
                self._log_call(descriptor, operation, attempt, start, exc=exc)
                error = UnreachableError(
                    f"Network/timeout error calling {method} {descriptor.path}: {exc}",
                    method=method,
                    url=url,
                )
                if can_retry and attempt < self.retry.max_retries:
                    await self._backoff(descriptor, operation, attempt, error)
                    attempt += 1
                    continue
                raise error from exc
            except httpx.HTTPError as exc:
                # Request could not be built or dispatched; retrying won't help.
                self._log_call(descriptor, operation, attempt, start, exc=exc)
                raise UnreachableError(
                    f"HTTPX error calling {method} {descriptor.path}: {exc}",
                    method=method,
                    url=url,
                    retryable=False,
                ) from exc

            self._log_call(descriptor, operation, attempt, start, resp=resp)

            if 200 <= resp.status_code < 300:
                return self._safe_json(resp)

            error = self._to_api_error(resp, method=method)
            if error.retryable and can_retry and attempt < self.retry.max_retries:
                await self._backoff(
                    descriptor,
                    operation,
                    attempt,
                    error,
                    retry_after=_retry_after_seconds(resp),
                )
                attempt += 1
                continue
            raise error

    async def get(
        self,
        path: str,
        *,
        params: Optional[Mapping[str, ParamValue]] = None,
        operation: Optional[str] = None,
    ) -> Any:
        return await self.send(
            RequestDescriptor("GET", path, params=params or {}), operation=operation
        )

    async def post(
        self,
        path: str,
        *,
        json: Any,
        params: Optional[Mapping[str, ParamValue]] = None,
        operation: Optional[str] = None,
    ) -> Any:
        return await self.send(
            RequestDescriptor("POST", path, params=params or {}, json=json),
            operation=operation,
        )

    async def delete(self, path: str, *, operation: Optional[str] = None) -> Any:
        return await self.send(RequestDescriptor("DELETE", path), operation=operation)

    async def _backoff(
        self,
        descriptor: RequestDescriptor,
        operation: Optional[str],
        attempt: int,
        error: ApiError,
        retry_after: Optional[float] = None,
    ) -> None:
        delay = self.retry.delay_for(attempt, retry_after)
        log_event(
            "api_retry",
            self.log,
            level=logging.WARNING,
            operation=operation,
            method=descriptor.method,
            endpoint=descriptor.path,
            status=error.http_status,
            attempt=attempt,
            delay_s=round(delay, 3),
            error_type=error.kind.value,
        )
        await asyncio.sleep(delay)

    def _log_call(
        self,
        descriptor: RequestDescriptor,
        operation: Optional[str],
        attempt: int,
        start: float,
        *,
        resp: Optional[httpx.Response] = None,
        exc: Optional[BaseException] = None,
    ) -> None:
        log_event(
            "api_call",
            self.log,
            level=logging.DEBUG,
            operation=operation,
            method=descriptor.method,
            endpoint=descriptor.path,
            status=resp.status_code if resp is not None else "exception",
            duration_ms=int((time.perf_counter() - start) * 1000),
            attempt=attempt,
            error_type=type(exc).__name__ if exc is not None else None,
        )

    def _safe_json(self, resp: httpx.Response) -> Any:
        # Handle empty responses (204 No Content, etc.)
        if not resp.content:
            return None

        try:
            return resp.json()
        except ValueError as exc:
            snippet = (resp.text or "")[:500]
            raise MalformedResponseError(
                f"Expected JSON from {resp.request.method} "
                f"{resp.request.url}, got non-JSON body snippet: "
                f"{snippet!r}",
                http_status=resp.status_code,
                method=resp.request.method,
                url=str(resp.request.url),
                response_text=snippet,
            ) from exc

    def _to_api_error(self, resp: httpx.Response, *, method: str) -> ApiError:
        url = str(resp.request.url)
        # Try JSON first; fall back to text snippet.
        response_json: Optional[Dict[str, Any]] = None
        response_text: Optional[str] = None
        message = resp.reason_phrase or "request failed"

        try:
            parsed = resp.json() if resp.content else None
        except ValueError:
            parsed = None
            response_text = (resp.text or "")[:500]

        if isinstance(parsed, dict):
            response_json = parsed
            # YouTrack errors carry error/error_description; some proxies use message
            message = (
                parsed.get("error_description")
                or parsed.get("error")
                or parsed.get("message")
                or message
            )

        error_cls = error_class_for_status(resp.status_code)
        return error_cls(
            str(message),
            http_status=resp.status_code,
            method=method,
            url=url,
            response_json=response_json,
            response_text=response_text,
        )


def _retry_after_seconds(resp: httpx.Response) -> Optional[float]:
    raw = resp.headers.get("Retry-After")
    if not raw:
        return None
    try:
        return max(0.0, float(raw))
    except ValueError:
        return None


__all__ = ["Transport", "RetryConfig", "RequestDescriptor", "NETWORK_ERRORS"]

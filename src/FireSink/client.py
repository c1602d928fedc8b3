# ============================================================================
# FireSink - Firebase REST Client
#
# Purpose: Long-lived handle used for every remote write: timeout, retry,
#          auth-token generation/refresh and shutdown
# Inputs: FirebaseOutputConfig, (path, operation, payload) writes
# Outputs: WriteResult delivered through a completion callback / Future
# Dependencies: requests, tenacity, config, operations
# Usage: client = setup_client(config.output); client.put("/a", {"x": 1}); shutdown_client(client)
#
# Changelog:
#   2026-09-04: Initial client on requests.Session
#   2026-09-08: Retries moved to tenacity (IOError / OSError / Timeout)
#   2026-09-11: Optional thread pool for asynchronous writes (pool_size > 0)
#   2026-09-15: Legacy secret -> HS256 auth token with TTL based refresh
#   2026-09-29: Redact the auth token from transport error details
#   2026-10-19: Bind the auth token per write at submit time; queued writes survive close()
# ============================================================================

import base64
import functools
import hashlib
import hmac
import json
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Type, Union
from urllib.parse import urlsplit

import requests
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_none,
)

from FireSink.config import FirebaseOutputConfig
from FireSink.errors import (
    ClientClosedError,
    FirebaseResponseError,
    FireSinkError,
    SetupError,
    TransportError,
)
from FireSink.logging_utils import get_logger, log_context
from FireSink.operations import OperationKind

logger = get_logger(__name__)

# I/O, system-call and timeout failures. OSError is IOError; requests.RequestException derives from it.
RETRY_EXCEPTIONS: Tuple[Type[BaseException], ...] = (OSError, requests.exceptions.Timeout)

DEFAULT_AUTH_TTL = 82800
DEFAULT_AUTH_DATA: Dict[str, Any] = {"auth_data": "firesink"}

CompletionCallback = Callable[["WriteResult"], None]


@dataclass(frozen=True)
class WriteResult:
    """Outcome of one remote write, handed to completion callbacks."""

    path: str
    operation: OperationKind
    data: Any = None
    status_code: Optional[int] = None
    error: Optional[BaseException] = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def generate_auth_token(secret: str, auth_data: Any, issued_at: float) -> str:
    """
    Build a Firebase legacy custom token (HS256 JWT) from a database secret.

    Claims are ``{"v": 0, "iat": <issued_at>, "d": <auth_data>}``.
    """
    header = {"typ": "JWT", "alg": "HS256"}
    claims = {"v": 0, "iat": int(issued_at), "d": auth_data}
    signing_input = ".".join(
        _b64url(json.dumps(part, separators=(",", ":")).encode("utf-8")) for part in (header, claims)
    )
    signature = hmac.new(secret.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256).digest()
    return f"{signing_input}.{_b64url(signature)}"


def _noop(_: Any) -> None:
    return None


class FirebaseClient:
    """
    Shared handle for Firebase REST writes.

    Safe to use from several threads: configuration is read-only after
    construction and the auth token is only touched under a lock. Writes run
    in the calling thread unless ``pool_size > 0``, in which case they run on
    a thread pool and the completion callback fires on a worker thread.
    """

    def __init__(
        self,
        url: str,
        secret: Optional[str] = None,
        *,
        timeout: float = 10,
        max_retries: int = 3,
        auth_ttl: Optional[float] = DEFAULT_AUTH_TTL,
        auth_data: Optional[Dict[str, Any]] = None,
        retry_exceptions: Tuple[Type[BaseException], ...] = RETRY_EXCEPTIONS,
        retry_wait: float = 0.0,
        pool_size: int = -1,
        log_callback: Optional[Callable[[str], None]] = None,
        error_callback: Optional[Callable[[BaseException], None]] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            url: Database URL, e.g. https://test.firebaseio.com
            secret: Database secret used to sign auth tokens (None = no auth)
            timeout: Per-request timeout in seconds
            max_retries: Retries after the first attempt on ``retry_exceptions``
            auth_ttl: Seconds before the auth token is regenerated; None disables refresh
            auth_data: ``d`` claim of generated tokens
            retry_exceptions: Exception types that qualify for a retry
            retry_wait: Exponential backoff multiplier in seconds (0 = retry immediately)
            pool_size: Worker threads for asynchronous writes; <= 0 writes synchronously
            log_callback: Receives informational lifecycle messages
            error_callback: Receives every failed attempt
            session: Preconfigured requests session (tests, proxies)
            clock: Wall clock used for token timestamps

        Raises:
            SetupError: If ``url`` is not an absolute http(s) URL
        """
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise SetupError(f"Invalid Firebase URL: '{url}'", details="expected an absolute http(s) URL")
        if max_retries < 0:
            raise SetupError(f"max_retries must be >= 0, got {max_retries}")

        self.url = url.rstrip("/")
        self.secret = secret
        self.timeout = timeout
        self.max_retries = max_retries
        self.auth_ttl = auth_ttl if auth_ttl is not None and auth_ttl >= 0 else None
        self.auth_data = auth_data if auth_data is not None else dict(DEFAULT_AUTH_DATA)
        self.retry_exceptions = retry_exceptions
        self.retry_wait = retry_wait

        self._log = log_callback or _noop
        self._error = error_callback or _noop
        self._clock = clock
        self._session = session if session is not None else requests.Session()
        self._executor: Optional[ThreadPoolExecutor] = None
        if pool_size > 0:
            self._executor = ThreadPoolExecutor(max_workers=pool_size, thread_name_prefix="firesink")

        self._auth: Optional[str] = None
        self._auth_issued_at: Optional[float] = None
        self._auth_lock = threading.RLock()
        self._close_lock = threading.Lock()
        self._closed = False

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def auth(self) -> Optional[str]:
        return self._auth

    @auth.setter
    def auth(self, value: Optional[str]) -> None:
        with self._auth_lock:
            self._auth = value
            self._auth_issued_at = self._clock() if value is not None else None

    def refresh_auth(self) -> Optional[str]:
        """Regenerate the auth token from the secret. Returns None without a secret."""
        if self.secret is None:
            return None
        with self._auth_lock:
            issued_at = self._clock()
            self._auth = generate_auth_token(self.secret, self.auth_data, issued_at)
            self._auth_issued_at = issued_at
        self._log(f"Firebase auth token refreshed for {self.url}")
        return self._auth

    def _auth_expired(self) -> bool:
        if self.auth_ttl is None or self._auth_issued_at is None:
            return False
        return self._clock() - self._auth_issued_at >= self.auth_ttl

    def _current_auth(self) -> Optional[str]:
        with self._auth_lock:
            if self.secret is not None and not self._closed:
                if self._auth is None or self._auth_expired():
                    self.refresh_auth()
            return self._auth

    @staticmethod
    def _redact(text: str, token: Optional[str]) -> str:
        if token:
            text = text.replace(token, "[REDACTED]")
        return text

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def _build_url(self, path: str) -> str:
        parts = urlsplit(path)
        resource = parts.path.lstrip("/")
        if not resource.endswith(".json"):
            resource += ".json"
        url = f"{self.url}/{resource}"
        if parts.query:
            url = f"{url}?{parts.query}"
        return url

    def _send(
        self, operation: OperationKind, url: str, body: Optional[str], auth: Optional[str]
    ) -> requests.Response:
        kwargs: Dict[str, Any] = {"timeout": self.timeout}
        if auth:
            kwargs["params"] = {"auth": auth}
        if body is not None:
            kwargs["data"] = body
            kwargs["headers"] = {"Content-Type": "application/json"}
        return self._session.request(operation.http_method, url, **kwargs)

    def _before_retry(self, auth: Optional[str], retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        self._error(
            TransportError(
                f"Attempt {retry_state.attempt_number} of {self.max_retries + 1} failed, retrying",
                details=self._redact(f"{type(exc).__name__}: {exc}", auth),
            )
        )

    def _retrying(self, auth: Optional[str]) -> Retrying:
        return Retrying(
            retry=retry_if_exception_type(self.retry_exceptions),
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.retry_wait, max=30) if self.retry_wait > 0 else wait_none(),
            before_sleep=functools.partial(self._before_retry, auth),
            reraise=True,
        )

    @staticmethod
    def _decode_body(response: requests.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        body = FirebaseClient._decode_body(response)
        if isinstance(body, dict) and "error" in body:
            return str(body["error"])
        return str(body) if body is not None else (response.reason or "")

    def _perform(self, path: str, operation: OperationKind, payload: Any, auth: Optional[str]) -> WriteResult:
        started = time.monotonic()
        url = self._build_url(path)

        body = None
        if operation.sends_body:
            try:
                body = json.dumps(payload if payload is not None else {}, separators=(",", ":"))
            except (TypeError, ValueError) as e:
                error = FireSinkError("Payload is not JSON serializable", details=str(e))
                self._error(error)
                return WriteResult(path, operation, error=error)

        retrying = self._retrying(auth)
        try:
            response = retrying(self._send, operation, url, body, auth)
        except self.retry_exceptions as e:
            attempts = retrying.statistics.get("attempt_number", self.max_retries + 1)
            error = TransportError(
                f"{operation.http_method} {url} failed after {attempts} attempt(s)",
                details=self._redact(f"{type(e).__name__}: {e}", auth),
            )
            error.__cause__ = e
            self._error(error)
            return WriteResult(path, operation, error=error, elapsed=time.monotonic() - started)
        except Exception as e:
            # Surfaced through the completion callback rather than the caller
            self._error(e)
            return WriteResult(path, operation, error=e, elapsed=time.monotonic() - started)

        elapsed = time.monotonic() - started
        logger.debug(f"Firebase: {operation.http_method} {url} {response.status_code} ({elapsed:.3f}s)")

        if response.status_code >= 400:
            error = FirebaseResponseError(
                f"Firebase returned HTTP {response.status_code} for {operation.http_method} {url}",
                status_code=response.status_code,
                details=self._error_message(response),
            )
            self._error(error)
            return WriteResult(path, operation, status_code=response.status_code, error=error, elapsed=elapsed)

        return WriteResult(
            path,
            operation,
            data=self._decode_body(response),
            status_code=response.status_code,
            elapsed=elapsed,
        )

    def write(
        self,
        path: str,
        operation: Union[OperationKind, str],
        payload: Any = None,
        on_complete: Optional[CompletionCallback] = None,
    ) -> "Future[WriteResult]":
        """
        Write ``payload`` at ``path`` with the given operation.

        Failures never raise here: they arrive as ``WriteResult.error`` both in
        the returned Future and in ``on_complete``, which fires exactly once.

        Args:
            path: Relative database path
            operation: OperationKind or its verb (put, patch, post, delete)
            payload: JSON-serializable body; ignored for DELETE
            on_complete: Called with the WriteResult, possibly on another thread

        Raises:
            ClientClosedError: If the client has been closed
            InvalidOperationError: If ``operation`` is an unknown verb
        """
        if self._closed:
            raise ClientClosedError(f"Firebase client for {self.url} is closed")
        if not isinstance(operation, OperationKind):
            operation = OperationKind.from_verb(operation)
        # Queued writes keep this token even after close()
        auth = self._current_auth()

        future: "Future[WriteResult]"
        if self._executor is not None:
            try:
                future = self._executor.submit(self._perform, path, operation, payload, auth)
            except RuntimeError as e:
                raise ClientClosedError(f"Firebase client for {self.url} is closed") from e
        else:
            future = Future()
            future.set_result(self._perform(path, operation, payload, auth))

        if on_complete is not None:
            future.add_done_callback(lambda done: on_complete(done.result()))
        return future

    def put(self, path: str, payload: Any, on_complete: Optional[CompletionCallback] = None) -> "Future[WriteResult]":
        return self.write(path, OperationKind.REPLACE, payload, on_complete)

    def patch(self, path: str, payload: Any, on_complete: Optional[CompletionCallback] = None) -> "Future[WriteResult]":
        return self.write(path, OperationKind.MERGE, payload, on_complete)

    def post(self, path: str, payload: Any, on_complete: Optional[CompletionCallback] = None) -> "Future[WriteResult]":
        return self.write(path, OperationKind.APPEND, payload, on_complete)

    def delete(self, path: str, on_complete: Optional[CompletionCallback] = None) -> "Future[WriteResult]":
        return self.write(path, OperationKind.DELETE, None, on_complete)

    def close(self) -> None:
        """
        Clear the auth token and release pooled resources.

        In-flight and queued writes are neither awaited nor cancelled; they
        still carry the token bound when they were submitted. Calling close()
        again is a no-op.
        """
        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        self.auth = None
        if self._executor is not None:
            self._executor.shutdown(wait=False)
        self._session.close()
        self._log(f"Firebase client for {self.url} closed")


def _log_hook(message: str) -> None:
    logger.info(message)


def _error_hook(error: BaseException) -> None:
    logger.error(f"Firebase client error: {error}", extra=log_context(error=type(error).__name__))


def setup_client(
    config: FirebaseOutputConfig,
    *,
    session: Optional[requests.Session] = None,
    clock: Optional[Callable[[], float]] = None,
) -> FirebaseClient:
    """
    Build the shared client from the output configuration.

    The auth token starts unset and is generated on first use when a secret
    is configured.

    Raises:
        SetupError: If the client cannot be constructed
    """
    logger.info("Setting up firebase client")
    try:
        return FirebaseClient(
            config.url,
            config.secret,
            timeout=config.firebase_timeout,
            max_retries=config.firebase_retries,
            auth_ttl=config.auth_refresh_interval,
            pool_size=config.firebase_pool_size,
            log_callback=_log_hook,
            error_callback=_error_hook,
            session=session,
            clock=clock or time.time,
        )
    except SetupError:
        raise
    except Exception as e:
        raise SetupError(f"Failed to set up Firebase client for {config.url}", details=str(e)) from e


def shutdown_client(client: FirebaseClient) -> None:
    """Invalidate the client's credential and release its resources."""
    client.close()

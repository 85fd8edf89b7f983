from concurrent.futures import Future
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Optional
from threading import Lock
from requests.structures import CaseInsensitiveDict
import requests
import logging
import json
import os
import re

from .cancellation import CancellationToken
from .config import ClientSettings
from .exceptions import UploadError
from .fallback import OfflineFallback
from .models import ApiResponse
from .token_store import FileTokenStore, TokenStore


AUTH_ENDPOINTS = frozenset({
    "/auth/login",
    "/auth/logout",
    "/auth/refresh",
    "/auth/validate",
})

_BEARER_PREFIX = re.compile(r"^Bearer\s+", re.IGNORECASE)


def strip_bearer_prefix(token: str) -> str:
    return _BEARER_PREFIX.sub("", token.strip()).strip()


def build_auth_header(token: str, variant: str = "bearer") -> str:
    """
    Build an Authorization header value.

    Parameters
    ----------
    token : str
        Stored token, with or without a `Bearer ` prefix.
    variant : str
        "bearer" yields `Bearer <token>` and never double-prefixes;
        "raw" yields the bare token.
    """
    if variant == "raw":
        return strip_bearer_prefix(token)

    trimmed = token.strip()
    if _BEARER_PREFIX.match(trimmed):
        return trimmed
    return f"Bearer {trimmed}"


def is_auth_endpoint(endpoint: str) -> bool:
    return endpoint in AUTH_ENDPOINTS


@dataclass(frozen=True)
class RequestMeta:
    """
    Per-call pipeline flags.

    Attributes
    ----------
    refreshed : bool
        Set on the single retry after a token refresh.
    auth_variant : str, optional
        Overrides the client's default header variant.
    suppress_auth_clear : bool
        Never clear the stored token because of this call.
    skip_refresh : bool
        Never start a token refresh because of this call.
    timeout : float, optional
        Overrides the client's default timeout, in seconds.
    cancel_token : CancellationToken, optional
        Checked before sending, refreshing and retrying.
    """

    refreshed: bool = False
    auth_variant: Optional[str] = None
    suppress_auth_clear: bool = False
    skip_refresh: bool = False
    timeout: Optional[float] = None
    cancel_token: Optional[CancellationToken] = None


class BaseAPIClient:
    """
    Authenticated HTTP client for the KonataBlog backend.

    Every endpoint wrapper goes through `request()`, which:
      • reads the bearer token from the token store on each call,
      • recovers from 401 responses with a single-flight token refresh
        and one retry,
      • checks whether a rejected token is really invalid before
        clearing it,
      • serves canned data from an offline fallback when the backend
        cannot be reached.

    One instance is shared by all endpoint sub-clients, so the pending
    refresh handle is shared too.

    Attributes
    ----------
    base_url : str
        Backend root, without trailing slash.
    token_store : TokenStore
        Where the bearer token lives.
    session : requests.Session
        Transport used for every call.
    fallback : OfflineFallback, optional
        Provider of canned responses for connection failures.
    timeout : float
        Default per-request deadline in seconds.
    auth_variant : str
        Default Authorization header variant ("bearer" or "raw").
    """

    def __init__(
        self,
        *,
        base_url: str,
        token_store: TokenStore,
        session: Optional[requests.Session] = None,
        fallback: Optional[OfflineFallback] = None,
        timeout: float = 30.0,
        auth_variant: str = "bearer"
    ):
        self.base_url = base_url.rstrip("/")
        self.token_store = token_store
        self.session = session or requests.Session()
        self.fallback = fallback
        self.timeout = timeout
        self.auth_variant = auth_variant

        self._refresh_lock = Lock()
        self._pending_refresh: Optional[Future] = None

        self.logger = logging.getLogger("konata_blog.http")
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            fmt = logging.Formatter(
                "%(asctime)s [%(levelname)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            )
            handler.setFormatter(fmt)
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)
        self.logger.propagate = False

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        *,
        token_store: Optional[TokenStore] = None,
        session: Optional[requests.Session] = None,
        fallback: Optional[OfflineFallback] = None
    ) -> "BaseAPIClient":
        if fallback is None and settings.offline_fallback:
            fallback = OfflineFallback()

        return cls(
            base_url=settings.base_url,
            token_store=token_store or FileTokenStore(settings.token_file),
            session=session,
            fallback=fallback,
            timeout=settings.timeout_seconds,
            auth_variant=settings.auth_variant,
        )

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    def _build_headers(
        self,
        token: Optional[str],
        auth_variant: str,
        headers: Optional[Dict[str, str]],
        *,
        has_body: bool,
        multipart: bool
    ) -> CaseInsensitiveDict:
        merged = CaseInsensitiveDict(headers or {})

        # The transport writes its own multipart boundary header.
        if has_body and not multipart and "Content-Type" not in merged:
            merged["Content-Type"] = "application/json"

        if token:
            merged["Authorization"] = build_auth_header(token, auth_variant)

        return merged

    @staticmethod
    def _parse_envelope(response: requests.Response) -> ApiResponse:
        """Parse the body, or synthesize an envelope from the status."""
        content_type = response.headers.get("content-type") or ""
        payload = None
        if "application/json" in content_type:
            try:
                payload = response.json()
            except ValueError:
                payload = None

        if not isinstance(payload, dict):
            return ApiResponse(success=response.ok, data=None)

        return ApiResponse.from_dict(payload)

    @staticmethod
    def _failure(
        response: requests.Response,
        envelope: ApiResponse
    ) -> ApiResponse:
        error = envelope.error
        code = (error.code if error else "") or str(response.status_code)
        message = (
            (error.message if error else "")
            or envelope.message
            or response.reason
            or "Request failed"
        )
        return ApiResponse.failure(code, message)

    def _can_refresh(
        self,
        endpoint: str,
        token: Optional[str],
        meta: RequestMeta
    ) -> bool:
        return (
            not meta.skip_refresh
            and not meta.refreshed
            and bool(token)
            and not is_auth_endpoint(endpoint)
        )

    def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        json_body: Any = None,
        data: Any = None,
        files: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        meta: Optional[RequestMeta] = None
    ) -> ApiResponse:
        """
        Execute one backend call through the authentication pipeline.

        Parameters
        ----------
        endpoint : str
            Path appended to `base_url`, including any query string.
        method : str
            HTTP verb.
        json_body : Any, optional
            Serialised as JSON when not None.
        data : Any, optional
            Raw body, or extra form fields when `files` is given.
        files : dict, optional
            Multipart file fields; disables the JSON content type.
        headers : dict, optional
            Header overrides.
        meta : RequestMeta, optional
            Pipeline flags for this call.

        Returns
        -------
        ApiResponse
            The server envelope, a synthesized one for unreadable bodies,
            a failure envelope for non-2xx replies, or an offline reply.

        Raises
        ------
        requests.exceptions.ConnectionError
            If the backend is unreachable and no offline reply exists.
        requests.exceptions.RequestException
            For other transport errors such as read timeouts.
        RequestCancelledError
            If `meta.cancel_token` was cancelled.
        """
        meta = meta or RequestMeta()
        cancel = meta.cancel_token
        if cancel is not None:
            cancel.raise_if_cancelled(f"{method} {endpoint}")

        stored_token = self.token_store.get_token()
        auth_variant = meta.auth_variant or self.auth_variant
        body = json.dumps(json_body) if json_body is not None else data

        request_headers = self._build_headers(
            stored_token,
            auth_variant,
            headers,
            has_body=body is not None,
            multipart=files is not None,
        )

        try:
            response = self.session.request(
                method,
                self._url(endpoint),
                headers=dict(request_headers),
                data=body,
                files=files,
                timeout=meta.timeout or self.timeout,
            )
        except requests.exceptions.ConnectionError as exc:
            self.logger.warning(
                f"Backend unreachable for {method} {endpoint}: {exc}"
            )
            if self.fallback is not None:
                offline = self.fallback.respond(method, endpoint, json_body)
                if offline is not None:
                    self.logger.info(f"Serving offline data for {endpoint}")
                    return offline
            raise

        envelope = self._parse_envelope(response)
        if response.ok:
            return envelope

        if response.status_code == 401:
            if self._can_refresh(endpoint, stored_token, meta):
                if cancel is not None:
                    cancel.raise_if_cancelled("token refresh")

                if self.try_refresh_token():
                    if cancel is not None:
                        cancel.raise_if_cancelled(f"{method} {endpoint}")
                    return self.request(
                        endpoint,
                        method=method,
                        json_body=json_body,
                        data=data,
                        files=files,
                        headers=headers,
                        meta=replace(meta, refreshed=True),
                    )

            if not meta.suppress_auth_clear:
                self._handle_rejected_token(
                    endpoint, stored_token, auth_variant, meta
                )

        return self._failure(response, envelope)

    def _handle_rejected_token(
        self,
        endpoint: str,
        token: Optional[str],
        auth_variant: str,
        meta: RequestMeta
    ) -> None:
        """Clear the stored token only once it is known to be invalid."""
        if not token or is_auth_endpoint(endpoint):
            self.token_store.remove_token()
            return

        try:
            validation = self.request(
                "/auth/validate",
                method="GET",
                meta=RequestMeta(
                    suppress_auth_clear=True,
                    skip_refresh=True,
                    auth_variant=auth_variant,
                    timeout=meta.timeout,
                ),
            )
        except requests.exceptions.RequestException as exc:
            # A network blip is not proof the token is bad.
            self.logger.warning(
                f"Could not validate token after 401 on {endpoint}: {exc}"
            )
            return

        if not (validation.success and validation.data is True):
            self.logger.warning(
                f"Stored token rejected after 401 on {endpoint}; clearing it."
            )
            self.token_store.remove_token()

    def refresh_token(self) -> ApiResponse:
        """
        Exchange the stored token for a new one via `POST /auth/refresh`.

        The new token is stored on success. On failure the store is left
        as it was.
        """
        response = self.request(
            "/auth/refresh",
            method="POST",
            meta=RequestMeta(suppress_auth_clear=True, skip_refresh=True),
        )
        if response.success and response.data:
            self.token_store.set_token(str(response.data))
        return response

    def try_refresh_token(self) -> bool:
        """
        Refresh the token, joining a refresh already in flight.

        Only one refresh call is outstanding at any time. Threads that
        arrive while it runs wait for the same outcome instead of issuing
        their own.

        Returns
        -------
        bool
            True if the refresh produced a new token.
        """
        with self._refresh_lock:
            pending = self._pending_refresh
            leader = pending is None
            if leader:
                pending = Future()
                self._pending_refresh = pending

        if not leader:
            return pending.result()

        refreshed = False
        try:
            response = self.refresh_token()
            refreshed = bool(response.success and response.data)
        except Exception as exc:
            self.logger.warning(f"Token refresh failed: {exc}")
        finally:
            with self._refresh_lock:
                self._pending_refresh = None
            pending.set_result(refreshed)

        return refreshed

    @staticmethod
    def _parsed(
        response: ApiResponse,
        parse: Optional[Callable[[Any], Any]]
    ) -> ApiResponse:
        if parse is None:
            return response
        return response.map_data(parse)

    def get(
        self,
        endpoint: str,
        *,
        parse: Optional[Callable[[Any], Any]] = None,
        meta: Optional[RequestMeta] = None
    ) -> ApiResponse:
        return self._parsed(
            self.request(endpoint, method="GET", meta=meta), parse
        )

    def post(
        self,
        endpoint: str,
        body: Any = None,
        *,
        parse: Optional[Callable[[Any], Any]] = None,
        meta: Optional[RequestMeta] = None
    ) -> ApiResponse:
        return self._parsed(
            self.request(endpoint, method="POST", json_body=body, meta=meta),
            parse,
        )

    def put(
        self,
        endpoint: str,
        body: Any = None,
        *,
        parse: Optional[Callable[[Any], Any]] = None,
        meta: Optional[RequestMeta] = None
    ) -> ApiResponse:
        return self._parsed(
            self.request(endpoint, method="PUT", json_body=body, meta=meta),
            parse,
        )

    def patch(
        self,
        endpoint: str,
        body: Any = None,
        *,
        parse: Optional[Callable[[Any], Any]] = None,
        meta: Optional[RequestMeta] = None
    ) -> ApiResponse:
        return self._parsed(
            self.request(endpoint, method="PATCH", json_body=body, meta=meta),
            parse,
        )

    def delete(
        self,
        endpoint: str,
        *,
        parse: Optional[Callable[[Any], Any]] = None,
        meta: Optional[RequestMeta] = None
    ) -> ApiResponse:
        return self._parsed(
            self.request(endpoint, method="DELETE", meta=meta), parse
        )

    def upload_file(
        self,
        endpoint: str,
        file: Any,
        additional_data: Optional[Dict[str, str]] = None,
        field_name: str = "file",
        *,
        parse: Optional[Callable[[Any], Any]] = None,
        meta: Optional[RequestMeta] = None
    ) -> ApiResponse:
        """
        POST a multipart form with one file field and extra string fields.

        Parameters
        ----------
        endpoint : str
            Upload path.
        file : str | os.PathLike | file object | tuple
            A path is opened in binary mode; anything else is handed to
            `requests` as the file field value.
        additional_data : dict, optional
            Extra form fields.
        field_name : str
            Name of the file field.

        Returns
        -------
        ApiResponse
            The server envelope.

        Raises
        ------
        UploadError
            On a non-2xx reply or a body that is not JSON.
        requests.exceptions.RequestException
            On transport failure; uploads have no offline fallback.
        """
        if isinstance(file, (str, os.PathLike)):
            with open(file, "rb") as fh:
                return self.upload_file(
                    endpoint,
                    (os.path.basename(os.fspath(file)), fh),
                    additional_data,
                    field_name,
                    parse=parse,
                    meta=meta,
                )

        meta = meta or RequestMeta()
        if meta.cancel_token is not None:
            meta.cancel_token.raise_if_cancelled(f"upload to {endpoint}")

        token = self.token_store.get_token()
        headers = self._build_headers(
            token,
            meta.auth_variant or self.auth_variant,
            None,
            has_body=True,
            multipart=True,
        )

        response = self.session.request(
            "POST",
            self._url(endpoint),
            headers=dict(headers),
            data=dict(additional_data or {}),
            files={field_name: file},
            timeout=meta.timeout or self.timeout,
        )

        try:
            payload = response.json()
        except ValueError:
            self.logger.error(
                f"Upload to {endpoint} returned a non-JSON body "
                f"(status {response.status_code})"
            )
            raise UploadError(
                "Upload failed", status_code=response.status_code
            )

        envelope = (
            ApiResponse.from_dict(payload) if isinstance(payload, dict)
            else ApiResponse(success=response.ok, data=None)
        )

        if not response.ok:
            error = envelope.error
            message = (error.message if error else "") or "Upload failed"
            self.logger.error(
                f"Upload to {endpoint} failed {response.status_code}: "
                f"{message}"
            )
            raise UploadError(
                message, status_code=response.status_code, error=error
            )

        return self._parsed(envelope, parse)

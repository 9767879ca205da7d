from __future__ import annotations

import logging
import time
from typing import Any, Collection, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from . import config as _config
from .errors import PapiClientError, PapiDecodeError, PapiTransportError, normalize_error
from .query import literal_bool

T = TypeVar("T", bound=BaseModel)

USE_PREFIXES_HEADER = "PAPI-Use-Prefixes"


class PapiClient:
    """
    Shared HTTP client for the Property Manager API.
    - Owns base URL, timeouts and the use-prefixes setting
    - Request signing is delegated to the httpx auth (or an injected AsyncClient)
    - No retries; one failed call surfaces one error
    - Resource modules own validation, URLs and response shapes
    """

    def __init__(
        self,
        *,
        base_url: str,
        auth: Optional[httpx.Auth] = None,
        use_prefixes: bool = True,
        timeout_seconds: float = 10.0,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        base_url = (base_url or "").strip().rstrip("/")
        if not base_url:
            raise ValueError("base_url must be provided.")

        self.base_url = base_url
        self.use_prefixes = use_prefixes
        self.timeout_seconds = timeout_seconds
        self.log = logger or logging.getLogger("papi_client.client")

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            base_url=self.base_url,
            auth=auth,
            headers={"Accept": "application/json"},
            timeout=timeout_seconds,
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> "PapiClient":
        settings = _config.load_env_config()
        if not settings.base_url:
            raise ValueError("Missing PAPI_BASE_URL in environment.")
        kwargs.setdefault("use_prefixes", settings.use_prefixes)
        kwargs.setdefault("timeout_seconds", settings.timeout_seconds)
        return cls(base_url=settings.base_url, **kwargs)

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "PapiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def send(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
        operation: Optional[str] = None,
    ) -> httpx.Response:
        """
        Execute one request and return the raw response, whatever its status.
        - url is a path below base_url (query string included)
        - raises PapiTransportError on network/timeout failures
        """
        method = method.upper()
        req_headers = {USE_PREFIXES_HEADER: literal_bool(self.use_prefixes)}
        if headers:
            req_headers.update(headers)

        start = time.perf_counter()
        try:
            resp = await self.http.request(
                method, self.base_url + url, json=json, headers=req_headers
            )
        except httpx.HTTPError as exc:
            raise PapiTransportError(
                f"error calling {method} {url}: {exc}", operation=operation
            ) from exc

        duration_ms = int((time.perf_counter() - start) * 1000)
        # no bodies or credentials in logs
        self.log.debug(
            "papi.request",
            extra={
                "operation": operation,
                "method": method,
                "url": str(resp.request.url),
                "status": resp.status_code,
                "duration_ms": duration_ms,
            },
        )
        return resp

    async def call(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        expect: Collection[int] = (200,),
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """send() plus the status check: anything outside `expect` is normalized."""
        resp = await self.send(
            method, url, json=json, headers=headers, operation=operation
        )
        if resp.status_code not in expect:
            raise normalize_error(
                resp.status_code, resp.content, operation=operation, logger=self.log
            )
        return resp

    def decode(self, resp: httpx.Response, model: Type[T], *, operation: str) -> T:
        try:
            return model.model_validate_json(resp.content)
        except ValidationError as exc:
            snippet = (resp.text or "")[:500]
            raise PapiDecodeError(
                f"response did not match {model.__name__}: {exc}; body: {snippet!r}",
                operation=operation,
            ) from exc

    async def request_model(
        self,
        model: Type[T],
        method: str,
        url: str,
        *,
        operation: str,
        expect: Collection[int] = (200,),
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> T:
        resp = await self.call(
            method, url, operation=operation, expect=expect, json=json, headers=headers
        )
        return self.decode(resp, model, operation=operation)


__all__ = ["PapiClient", "PapiClientError", "USE_PREFIXES_HEADER"]

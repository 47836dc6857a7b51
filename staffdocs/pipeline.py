# staffdocs/pipeline.py
"""
Request pipeline.

Every call to the backend goes through a pipeline, which
- attaches the bearer token on authenticated requests,
- turns error responses into ``staffdocs.errors`` exceptions,
- on a 401 refreshes the token pair once and re-issues the request,
- clears the tokens and reports an expired session when that fails.

Concurrent 401s share a single refresh: whoever takes the refresh lock
second sees that the stored access token has changed and retries with it.
"""

import inspect
import asyncio
import logging
import threading
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import httpx

from .errors import (
    AuthenticationError,
    NetworkError,
    SessionExpiredError,
    StaffDocsError,
    error_for_response,
)
from .models import TokenPair
from .tokens import TokenStore

logger = logging.getLogger(__name__)


REFRESH_PATH = "/users/refresh"

SessionExpiredCallback = Callable[[], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class RequestDescriptor:
    """One outbound request plus its own retry state."""
    method: str
    path: str
    params: Optional[Dict[str, Any]] = None
    json: Any = None
    data: Optional[Dict[str, Any]] = None
    files: Optional[Dict[str, Any]] = None
    authenticated: bool = True
    refresh: bool = True
    attempt: int = 0

    def retry(self) -> "RequestDescriptor":
        return replace(self, attempt=self.attempt + 1)

    @property
    def can_refresh(self) -> bool:
        return self.authenticated and self.refresh and self.attempt == 0


def _auth_headers(token: Optional[str]) -> Dict[str, str]:
    if token:
        return {"Authorization": f"Bearer {token}"}
    return {}


def _refresh_descriptor(access: Optional[str], refresh: str) -> RequestDescriptor:
    return RequestDescriptor(
        method="POST",
        path=REFRESH_PATH,
        json={"accessToken": access or "", "refreshToken": refresh},
        authenticated=False,
    )


def _parse_token_pair(response: httpx.Response) -> TokenPair:
    if response.status_code >= 400:
        raise error_for_response(response)
    try:
        return TokenPair.model_validate(response.json())
    except ValueError as e:
        logger.error(f"Malformed token response from {response.request.url}: {e}")
        raise AuthenticationError("Malformed token response", status_code=response.status_code) from e


class RequestPipeline:
    """Blocking pipeline on top of ``httpx.Client``."""

    def __init__(
        self,
        http: httpx.Client,
        tokens: TokenStore,
        on_session_expired: Optional[Callable[[], None]] = None,
    ):
        self._http = http
        self.tokens = tokens
        self._on_session_expired = on_session_expired
        self._refresh_lock = threading.Lock()

    def request(self, method: str, path: str, authenticated: bool = True, **kwargs) -> httpx.Response:
        """Shortcut for ``send(RequestDescriptor(...))``."""
        return self.send(
            RequestDescriptor(method=method.upper(), path=path, authenticated=authenticated, **kwargs)
        )

    def send(self, descriptor: RequestDescriptor) -> httpx.Response:
        token = self.tokens.get() if descriptor.authenticated else None
        response = self._dispatch(descriptor, token)

        if response.status_code < 400:
            return response

        if response.status_code == 401 and descriptor.can_refresh:
            logger.info(f"401 on {descriptor.method} {descriptor.path}, refreshing session")
            self._recover_session(token)
            return self.send(descriptor.retry())

        raise error_for_response(response)

    def refresh_tokens(self) -> TokenPair:
        """Exchange the stored pair for a new one and store it."""
        refresh = self.tokens.get_refresh()
        if not refresh:
            raise AuthenticationError("No refresh token stored")
        response = self._dispatch(_refresh_descriptor(self.tokens.get(), refresh), None)
        pair = _parse_token_pair(response)
        self.tokens.set(pair.access_token, pair.refresh_token)
        logger.info("Session tokens refreshed")
        return pair

    def end_session(self) -> None:
        """Drop the tokens and tell the application to show the sign-in screen."""
        self.tokens.clear()
        logger.warning("Session ended, sign-in required")
        if self._on_session_expired:
            self._on_session_expired()

    def _recover_session(self, used_token: Optional[str]) -> None:
        with self._refresh_lock:
            current = self.tokens.get()
            if current != used_token:
                if current:
                    logger.debug("Token already refreshed by another request")
                    return
                # another request already ended the session
                raise SessionExpiredError(status_code=401)

            if not self.tokens.get_refresh():
                self.end_session()
                raise SessionExpiredError(status_code=401)

            try:
                self.refresh_tokens()
            except StaffDocsError as e:
                logger.warning(f"Token refresh failed: {e.message}")
                self.end_session()
                raise SessionExpiredError(status_code=401) from e

    def _dispatch(self, descriptor: RequestDescriptor, token: Optional[str]) -> httpx.Response:
        try:
            return self._http.request(
                descriptor.method,
                descriptor.path,
                params=descriptor.params,
                json=descriptor.json,
                data=descriptor.data,
                files=descriptor.files,
                headers=_auth_headers(token),
            )
        except httpx.TransportError as e:
            logger.error(f"Network error on {descriptor.method} {descriptor.path}: {e!r}")
            raise NetworkError() from e


class AsyncRequestPipeline:
    """Async pipeline on top of ``httpx.AsyncClient``."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        tokens: TokenStore,
        on_session_expired: Optional[SessionExpiredCallback] = None,
    ):
        self._http = http
        self.tokens = tokens
        self._on_session_expired = on_session_expired
        self._refresh_lock = asyncio.Lock()

    async def request(self, method: str, path: str, authenticated: bool = True, **kwargs) -> httpx.Response:
        """Shortcut for ``send(RequestDescriptor(...))``."""
        return await self.send(
            RequestDescriptor(method=method.upper(), path=path, authenticated=authenticated, **kwargs)
        )

    async def send(self, descriptor: RequestDescriptor) -> httpx.Response:
        token = self.tokens.get() if descriptor.authenticated else None
        response = await self._dispatch(descriptor, token)

        if response.status_code < 400:
            return response

        if response.status_code == 401 and descriptor.can_refresh:
            logger.info(f"401 on {descriptor.method} {descriptor.path}, refreshing session")
            await self._recover_session(token)
            return await self.send(descriptor.retry())

        raise error_for_response(response)

    async def refresh_tokens(self) -> TokenPair:
        """Exchange the stored pair for a new one and store it."""
        refresh = self.tokens.get_refresh()
        if not refresh:
            raise AuthenticationError("No refresh token stored")
        response = await self._dispatch(_refresh_descriptor(self.tokens.get(), refresh), None)
        pair = _parse_token_pair(response)
        self.tokens.set(pair.access_token, pair.refresh_token)
        logger.info("Session tokens refreshed")
        return pair

    async def end_session(self) -> None:
        """Drop the tokens and tell the application to show the sign-in screen."""
        self.tokens.clear()
        logger.warning("Session ended, sign-in required")
        if self._on_session_expired:
            result = self._on_session_expired()
            if inspect.isawaitable(result):
                await result

    async def _recover_session(self, used_token: Optional[str]) -> None:
        async with self._refresh_lock:
            current = self.tokens.get()
            if current != used_token:
                if current:
                    logger.debug("Token already refreshed by another request")
                    return
                raise SessionExpiredError(status_code=401)

            if not self.tokens.get_refresh():
                await self.end_session()
                raise SessionExpiredError(status_code=401)

            try:
                await self.refresh_tokens()
            except StaffDocsError as e:
                logger.warning(f"Token refresh failed: {e.message}")
                await self.end_session()
                raise SessionExpiredError(status_code=401) from e

    async def _dispatch(self, descriptor: RequestDescriptor, token: Optional[str]) -> httpx.Response:
        try:
            return await self._http.request(
                descriptor.method,
                descriptor.path,
                params=descriptor.params,
                json=descriptor.json,
                data=descriptor.data,
                files=descriptor.files,
                headers=_auth_headers(token),
            )
        except httpx.TransportError as e:
            logger.error(f"Network error on {descriptor.method} {descriptor.path}: {e!r}")
            raise NetworkError() from e

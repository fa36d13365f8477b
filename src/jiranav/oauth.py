"""Atlassian OAuth 2.0 (3LO) authorization-code flow and token refresh."""

from __future__ import annotations

import dataclasses
import logging
import queue
import secrets
import threading
import time
import webbrowser
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

import orjson
import requests

from jiranav.constants import (
    API_BASE,
    AUTH_BASE,
    CALLBACK_HOST,
    CALLBACK_PATH,
    CALLBACK_PORT,
    CALLBACK_TIMEOUT_SECONDS,
    HTTP_TIMEOUT_SECONDS,
    REDIRECT_URI,
    TOKEN_REFRESH_BUFFER_MS,
)
from jiranav.errors import AuthError, TransportError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    import uvicorn

    from jiranav.models import JiraConfig
    from jiranav.web.callback import CallbackResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OAuthTokenSet:
    """Tokens returned by the token endpoint."""

    access_token: str
    refresh_token: str
    expires_at: int  # epoch milliseconds
    scope: str = ""


@dataclass(frozen=True)
class AccessibleResource:
    """A Jira site the authorized account can reach."""

    id: str
    name: str
    url: str
    scopes: tuple[str, ...] = ()


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def needs_token_refresh(expires_at: int, now: int | None = None) -> bool:
    """Check if a token expiring at *expires_at* is within the refresh buffer."""
    current = now_ms() if now is None else now
    return current + TOKEN_REFRESH_BUFFER_MS >= expires_at


def build_authorize_url(client_id: str, scopes: Sequence[str], state: str) -> str:
    """Build the consent-screen URL for the authorization-code flow."""
    params = {
        "audience": "api.atlassian.com",
        "client_id": client_id,
        "scope": " ".join(scopes),
        "redirect_uri": REDIRECT_URI,
        "response_type": "code",
        "prompt": "consent",
        "state": state,
    }
    return f"{AUTH_BASE}/authorize?{urlencode(params)}"


def _decode(response: requests.Response) -> Any:
    try:
        return orjson.loads(response.content)
    except orjson.JSONDecodeError as e:
        msg = f"Unexpected response from {response.url}: {e}"
        raise TransportError(msg, status=response.status_code) from e


def _request_token(body: dict[str, str]) -> OAuthTokenSet:
    try:
        response = requests.post(
            f"{AUTH_BASE}/oauth/token",
            json=body,
            timeout=HTTP_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        msg = f"OAuth token request failed: {e}"
        raise TransportError(msg) from e

    if not response.ok:
        msg = f"OAuth token request failed ({response.status_code}): {response.text}"
        raise AuthError(msg, status=response.status_code)

    payload = _decode(response)
    if not isinstance(payload, dict) or not payload.get("access_token"):
        msg = "OAuth server did not return an access token"
        raise AuthError(msg, status=response.status_code)

    refresh_token = payload.get("refresh_token")
    if not refresh_token and body["grant_type"] == "refresh_token":
        msg = "OAuth server did not return a refresh token"
        raise AuthError(msg)

    expires_in = int(payload.get("expires_in", 0))
    return OAuthTokenSet(
        access_token=payload["access_token"],
        refresh_token=refresh_token or body.get("refresh_token", ""),
        expires_at=now_ms() + max(expires_in - 60, 0) * 1000,
        scope=payload.get("scope", ""),
    )


def exchange_code_for_tokens(
    client_id: str,
    client_secret: str,
    code: str,
) -> OAuthTokenSet:
    """Trade an authorization code for an access/refresh token pair."""
    return _request_token(
        {
            "grant_type": "authorization_code",
            "client_id": client_id,
            "client_secret": client_secret,
            "code": code,
            "redirect_uri": REDIRECT_URI,
        },
    )


def refresh_access_token(
    client_id: str,
    client_secret: str,
    refresh_token: str,
) -> OAuthTokenSet:
    """Obtain a fresh access token using a refresh token."""
    return _request_token(
        {
            "grant_type": "refresh_token",
            "client_id": client_id,
            "client_secret": client_secret,
            "refresh_token": refresh_token,
        },
    )


def fetch_accessible_resources(access_token: str) -> list[AccessibleResource]:
    """List the Jira sites the token can access."""
    try:
        response = requests.get(
            f"{API_BASE}/oauth/token/accessible-resources",
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
            timeout=HTTP_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        msg = f"Failed to fetch accessible resources: {e}"
        raise TransportError(msg) from e

    if not response.ok:
        msg = (
            f"Failed to fetch accessible resources ({response.status_code}): "
            f"{response.text}"
        )
        raise TransportError(msg, status=response.status_code)

    return [
        AccessibleResource(
            id=item["id"],
            name=item.get("name", ""),
            url=item.get("url", ""),
            scopes=tuple(item.get("scopes", ())),
        )
        for item in _decode(response)
    ]


class CallbackListener:
    """Runs the callback web app on a background uvicorn server.

    Use as a context manager: the server is listening once ``__enter__``
    returns and is shut down on exit.
    """

    def __init__(
        self,
        expected_state: str,
        host: str = CALLBACK_HOST,
        port: int = CALLBACK_PORT,
    ) -> None:
        self.expected_state = expected_state
        self.host = host
        self.port = port
        self.results: queue.Queue[CallbackResult] = queue.Queue()
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None

    def __enter__(self) -> CallbackListener:
        import uvicorn

        from jiranav.web.callback import create_app

        app = create_app(self.expected_state, self.results)
        config = uvicorn.Config(
            app, host=self.host, port=self.port, log_level="warning"
        )
        self._server = uvicorn.Server(config)
        self._thread = threading.Thread(target=self._server.run, daemon=True)
        self._thread.start()

        while not self._server.started and self._thread.is_alive():
            time.sleep(0.05)
        if not self._server.started:
            msg = f"Could not listen for the OAuth callback on {self.host}:{self.port}."
            raise AuthError(msg)
        logger.info(
            "Waiting for OAuth callback at http://%s:%d%s",
            self.host,
            self.port,
            CALLBACK_PATH,
        )
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._server is not None:
            self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout=5)

    def wait(self, timeout: float = CALLBACK_TIMEOUT_SECONDS) -> str:
        """Block until the callback arrives and return the authorization code.

        Raises:
            AuthError: On a missing code, a state mismatch, or timeout.
        """
        try:
            result = self.results.get(timeout=timeout)
        except queue.Empty:
            msg = "Timed out waiting for the OAuth callback."
            raise AuthError(msg) from None
        if result.error or not result.code:
            raise AuthError(result.error or "OAuth callback did not include a code.")
        return result.code


def open_browser(url: str, echo: Callable[[str], None] = print) -> None:
    """Open *url* in the default browser, or print it when that fails."""
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error:
        opened = False
    if opened:
        echo(f"Opened browser for authentication: {url}")
        return
    echo("Unable to open the browser automatically. Please open this URL manually:")
    echo(url)


def authorize_in_browser(
    client_id: str,
    scopes: Sequence[str],
    echo: Callable[[str], None] = print,
    timeout: float = CALLBACK_TIMEOUT_SECONDS,
) -> str:
    """Run the consent step and return the authorization code."""
    state = secrets.token_hex(32)
    with CallbackListener(state) as listener:
        echo(f"Waiting for OAuth callback at {REDIRECT_URI}")
        open_browser(build_authorize_url(client_id, scopes, state), echo)
        return listener.wait(timeout)


class TokenProvider:
    """Supplies a currently valid access token, refreshing it when needed.

    The refreshed tokens are handed to *persist* so they outlive the call.
    """

    def __init__(
        self,
        get_config: Callable[[], JiraConfig],
        persist: Callable[[JiraConfig], None],
        refresh: Callable[[str, str, str], OAuthTokenSet] = refresh_access_token,
    ) -> None:
        self._get_config = get_config
        self._persist = persist
        self._refresh = refresh

    def get_valid_access_token(self) -> str:
        """Return an access token that is not about to expire.

        Raises:
            AuthError: If the token expired and cannot be refreshed.
        """
        config = self._get_config()
        if not needs_token_refresh(config.expires_at):
            return config.access_token
        if not config.refresh_token:
            msg = (
                "Access token expired and no refresh token is available. "
                "Re-run `jnav setup`."
            )
            raise AuthError(msg)

        logger.debug("Refreshing access token")
        try:
            tokens = self._refresh(
                config.client_id,
                config.client_secret,
                config.refresh_token,
            )
        except AuthError:
            raise
        except TransportError as e:
            msg = f"Failed to refresh the access token: {e}"
            raise AuthError(msg, status=e.status) from e

        updated = dataclasses.replace(
            config,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_at=tokens.expires_at,
        )
        self._persist(updated)
        return updated.access_token

    __call__ = get_valid_access_token

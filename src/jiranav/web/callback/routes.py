"""Routes for the OAuth callback server."""

from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, PlainTextResponse

from jiranav.constants import CALLBACK_PATH
from jiranav.web.callback import CallbackResult

logger = logging.getLogger(__name__)

router = APIRouter()

SUCCESS_PAGE = (
    "<html><body><h2>Authentication successful.</h2>"
    "<p>You can close this tab and return to the CLI.</p></body></html>"
)


@router.get(CALLBACK_PATH, response_model=None)
async def oauth_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
) -> HTMLResponse | PlainTextResponse:
    """Accept the authorization code redirected from the consent screen."""
    results = request.app.state.results
    expected_state: str = request.app.state.expected_state

    if not code:
        logger.warning("OAuth callback without a code")
        results.put(CallbackResult(error="OAuth callback did not include a code."))
        return PlainTextResponse("Missing code.", status_code=400)

    if not state or not hmac.compare_digest(state, expected_state):
        logger.warning("OAuth callback with mismatched state")
        results.put(CallbackResult(error="State mismatch in OAuth callback."))
        return PlainTextResponse("State mismatch.", status_code=400)

    results.put(CallbackResult(code=code))
    return HTMLResponse(SUCCESS_PAGE)

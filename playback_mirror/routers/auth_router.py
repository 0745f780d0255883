"""Login routes: start the PKCE round-trip and land the redirect."""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from playback_mirror.dependencies import get_auth_flow
from playback_mirror.logging_config import get_logger, log_with_context
from playback_mirror.models import AuthStatusResponse
from playback_mirror.services.auth_flow import AuthFlow

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)
logger = get_logger(__name__)


def _status(auth_flow: AuthFlow) -> AuthStatusResponse:
    return AuthStatusResponse(
        logged_in=auth_flow.is_logged_in(),
        state=auth_flow.state,
        client_id=auth_flow.client_id,
    )


@router.get(
    "/",
    response_model=AuthStatusResponse,
    summary="Redirect landing",
    description="""
    Spotify sends the user back here after the consent screen.

    With a `code` query parameter the code is exchanged for an access token and
    the browser is redirected (303) to the same URL without the code, so a reload
    does not replay it. Without one, the current login status is returned.
    """,
    responses={
        303: {"description": "Login completed, code removed from the URL"},
    },
)
async def redirect_landing(
    request: Request,
    auth_flow: AuthFlow = Depends(get_auth_flow),
):
    if await auth_flow.resume_from_redirect(request.query_params):
        clean_url = request.url.remove_query_params(["code", "state"])
        return RedirectResponse(url=str(clean_url), status_code=303)

    return _status(auth_flow)


@router.get(
    "/auth/login",
    summary="Start Spotify login",
    description="""
    Starts the Authorization Code flow with PKCE and redirects the browser to the
    Spotify consent screen. The client ID is remembered for the next visit.

    **Rate Limited:** 10 requests/minute
    """,
    responses={
        307: {"description": "Redirect to the Spotify authorize page"},
        400: {"description": "Missing client ID"},
    },
)
@limiter.limit("10/minute")
async def login(
    request: Request,
    client_id: str = Query(default="", description="Spotify application client ID"),
    auth_flow: AuthFlow = Depends(get_auth_flow),
) -> RedirectResponse:
    """Redirect to the Spotify authorize URL.

    Raises:
        ValidationException: If client_id is empty (handled as 400)
    """
    authorization = auth_flow.begin_login(client_id)

    log_with_context(
        logger,
        "info",
        "Redirecting to Spotify for authorization",
        client_id=auth_flow.client_id,
        event_type="auth_redirect",
    )
    return RedirectResponse(url=authorization.authorization_url, status_code=307)


@router.get("/auth/status", response_model=AuthStatusResponse)
async def auth_status(auth_flow: AuthFlow = Depends(get_auth_flow)) -> AuthStatusResponse:
    """Report whether a Spotify session is active."""
    return _status(auth_flow)


@router.post("/auth/logout", response_model=AuthStatusResponse)
async def logout(auth_flow: AuthFlow = Depends(get_auth_flow)) -> AuthStatusResponse:
    """Forget the access token and stop mirroring playback."""
    auth_flow.logout()
    return _status(auth_flow)

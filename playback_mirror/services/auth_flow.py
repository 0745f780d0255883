"""Spotify login via the OAuth2 Authorization Code flow with PKCE."""

from collections.abc import Callable, Mapping
from urllib.parse import urlencode

import httpx

from playback_mirror.config import Settings
from playback_mirror.exceptions import AuthException, MirrorException, ValidationException
from playback_mirror.logging_config import get_logger, log_with_context
from playback_mirror.models.session import AuthorizationRequest, AuthState, Session
from playback_mirror.pkce import derive_challenge, generate_verifier
from playback_mirror.services import spotify_api
from playback_mirror.session_store import SessionSlot, SessionStore
from playback_mirror.state_managers import StateManager

logger = get_logger(__name__)

AuthListener = Callable[[AuthState], None]


class AuthFlow(StateManager):
    """Owns the login Session and drives the PKCE handshake.

    LOGGED_OUT -> AUTHORIZING -> EXCHANGING_CODE -> LOGGED_IN. A denied or
    failed login falls back to LOGGED_OUT, or to LOGGED_IN while an earlier
    token is still held. Listeners are told about every transition.
    """

    def __init__(self, client: httpx.AsyncClient, store: SessionStore, settings: Settings):
        self._client = client
        self._store = store
        self._settings = settings
        self._session = Session(client_id=settings.spotify_client_id)
        self._state = AuthState.LOGGED_OUT
        self._listeners: list[AuthListener] = []

    async def initialize(self) -> None:
        """Restore the session persisted before the last restart."""
        self._session = self._store.load()
        if not self._session.client_id:
            self._session.client_id = self._settings.spotify_client_id

        if self._session.access_token:
            self._state = AuthState.LOGGED_IN
        elif self._session.code_verifier:
            self._state = AuthState.AUTHORIZING
        else:
            self._state = AuthState.LOGGED_OUT

        log_with_context(
            logger,
            "info",
            "Session restored",
            auth_state=self._state.value,
            event_type="auth_session_restored",
        )

    async def cleanup(self) -> None:
        """Drop listeners; the persisted session is kept for the next start."""
        self._listeners.clear()

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def client_id(self) -> str:
        return self._session.client_id

    @property
    def access_token(self) -> str | None:
        return self._session.access_token

    def is_logged_in(self) -> bool:
        """True iff an access token is held."""
        return bool(self._session.access_token)

    def add_listener(self, listener: AuthListener) -> None:
        """Register a callback invoked with the new state on every transition."""
        self._listeners.append(listener)

    def _transition(self, new_state: AuthState) -> None:
        old_state = self._state
        self._state = new_state
        log_with_context(
            logger,
            "info",
            "Auth state changed",
            from_state=old_state.value,
            to_state=new_state.value,
            event_type="auth_state_change",
        )
        for listener in list(self._listeners):
            listener(new_state)

    def _discard_verifier(self) -> None:
        self._session.code_verifier = None
        self._store.clear(SessionSlot.CODE_VERIFIER)

    def _abandon_login(self) -> None:
        """End a login attempt that produced no token.

        A token obtained earlier stays valid, so the state returns to
        LOGGED_IN rather than LOGGED_OUT.
        """
        self._discard_verifier()
        self._transition(AuthState.LOGGED_IN if self.is_logged_in() else AuthState.LOGGED_OUT)

    def begin_login(self, client_id: str) -> AuthorizationRequest:
        """Start a login round-trip.

        Persists the client ID and a fresh code verifier, then builds the
        authorize URL the user must be redirected to. Execution resumes in
        resume_from_redirect once Spotify sends the user back.

        Args:
            client_id: Spotify application client ID

        Returns:
            AuthorizationRequest holding the authorize URL

        Raises:
            ValidationException: If client_id is empty or whitespace
        """
        client_id = (client_id or "").strip()
        if not client_id:
            raise ValidationException("Please enter your Spotify Client ID")

        self._store.set(SessionSlot.CLIENT_ID, client_id)
        self._session.client_id = client_id

        code_verifier = generate_verifier(self._settings.verifier_length)
        code_challenge = derive_challenge(code_verifier)

        self._store.set(SessionSlot.CODE_VERIFIER, code_verifier)
        self._session.code_verifier = code_verifier

        params = {
            "response_type": "code",
            "client_id": client_id,
            "scope": " ".join(self._settings.scopes),
            "redirect_uri": self._settings.spotify_redirect_uri,
            "code_challenge_method": "S256",
            "code_challenge": code_challenge,
        }
        authorization_url = f"{self._settings.spotify_authorize_url}?{urlencode(params)}"

        self._transition(AuthState.AUTHORIZING)

        return AuthorizationRequest(
            code_verifier=code_verifier,
            code_challenge=code_challenge,
            authorization_url=authorization_url,
        )

    async def resume_from_redirect(self, query_params: Mapping[str, str]) -> bool:
        """Finish a login after Spotify redirects back.

        Args:
            query_params: Query parameters of the landing request

        Returns:
            True if a code was exchanged for a token. The caller should then
            strip the code from the visible URL.
        """
        error = query_params.get("error")
        if error:
            log_with_context(
                logger,
                "warning",
                "Spotify authorization was not granted",
                error=error,
                event_type="auth_denied",
            )
            self._abandon_login()
            return False

        code = query_params.get("code")
        if not code:
            return False

        client_id = self._store.get(SessionSlot.CLIENT_ID)
        code_verifier = self._store.get(SessionSlot.CODE_VERIFIER)

        if not client_id or not code_verifier:
            exc = AuthException(
                "Authorization code received without a pending login",
                details={"has_client_id": bool(client_id), "has_code_verifier": bool(code_verifier)},
            )
            log_with_context(
                logger,
                "warning",
                exc.message,
                error_code=exc.code.value,
                event_type="auth_missing_pending_login",
                **exc.details,
            )
            if not self.is_logged_in():
                self._transition(AuthState.LOGGED_OUT)
            return False

        return await self.exchange_code(code, client_id, code_verifier)

    async def exchange_code(self, code: str, client_id: str, code_verifier: str) -> bool:
        """Exchange the authorization code for an access token.

        Failures are logged and the code is not retried. The user is left
        logged out unless a token from an earlier login is still held. The
        verifier is discarded either way.

        Returns:
            True if an access token was obtained and persisted
        """
        self._transition(AuthState.EXCHANGING_CODE)

        try:
            access_token = await spotify_api.exchange_code_for_token(
                self._client, self._settings, code, client_id, code_verifier
            )
        except MirrorException as e:
            log_with_context(
                logger,
                "error",
                "Token exchange failed",
                error=e.message,
                error_code=e.code.value,
                event_type="auth_exchange_failed",
            )
            self._abandon_login()
            return False

        self._store.set(SessionSlot.ACCESS_TOKEN, access_token)
        self._session.access_token = access_token
        self._discard_verifier()
        self._transition(AuthState.LOGGED_IN)
        return True

    def invalidate(self) -> None:
        """Forget the access token, e.g. after Spotify answered 401."""
        self._store.clear(SessionSlot.ACCESS_TOKEN)
        self._session.access_token = None
        self._transition(AuthState.LOGGED_OUT)

    def logout(self) -> None:
        """User-initiated logout."""
        log_with_context(logger, "info", "User logged out", event_type="auth_logout")
        self.invalidate()

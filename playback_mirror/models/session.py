"""Login session models."""

from enum import Enum

from pydantic import BaseModel


class AuthState(str, Enum):
    """Steps of the PKCE login handshake."""

    LOGGED_OUT = "logged_out"
    AUTHORIZING = "authorizing"
    EXCHANGING_CODE = "exchanging_code"
    LOGGED_IN = "logged_in"


class Session(BaseModel):
    """Credentials held between page loads.

    A code verifier only exists while a login round-trip is pending; an
    access token means the user is logged in.
    """

    client_id: str = ""
    code_verifier: str | None = None
    access_token: str | None = None


class AuthorizationRequest(BaseModel):
    """One login round-trip: the verifier, its challenge and where to send the user."""

    code_verifier: str
    code_challenge: str
    authorization_url: str


class AuthStatusResponse(BaseModel):
    """Login status exposed to the front end."""

    logged_in: bool
    state: AuthState
    client_id: str = ""

"""PKCE (Proof Key for Code Exchange) verifier and challenge generation"""

import base64
import hashlib
import secrets
import string

# 62-symbol verifier alphabet
VERIFIER_ALPHABET = string.ascii_letters + string.digits


def generate_verifier(length: int = 64) -> str:
    """Generate a random PKCE code verifier

    Characters are drawn uniformly from [A-Za-z0-9] using the OS CSPRNG.

    Args:
        length: Number of characters in the verifier

    Returns:
        Verifier string of exactly ``length`` characters

    Raises:
        ValueError: If length is not positive
    """
    if length <= 0:
        raise ValueError(f"Verifier length must be positive, got {length}")

    return "".join(secrets.choice(VERIFIER_ALPHABET) for _ in range(length))


def derive_challenge(verifier: str) -> str:
    """Derive the S256 code challenge for a verifier

    Args:
        verifier: PKCE code verifier

    Returns:
        SHA-256 digest of the verifier, base64url encoded without padding
    """
    digest = hashlib.sha256(verifier.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")

# mcp_promptgate/oauth/pkce.py
import secrets
import hashlib
import base64
import re

# RFC 7636 allows between 43 and 128 characters
CODE_VERIFIER_LENGTH = 64
CODE_CHALLENGE_METHOD = "S256"

_VERIFIER_PATTERN = re.compile(r"^[A-Za-z0-9\-._~]+$")


def generate_code_verifier(length: int = CODE_VERIFIER_LENGTH) -> str:
    """
    Generates a cryptographically random PKCE code verifier.
    The verifier is an unreserved string with a minimum length of 43 characters
    and a maximum length of 128 characters. (RFC 7636 - Section 4.1)
    """
    if not (43 <= length <= 128):
        raise ValueError("PKCE code verifier length must be between 43 and 128 characters.")

    # token_urlsafe expands by 4/3, so request enough bytes and truncate
    verifier = secrets.token_urlsafe(length)
    return verifier[:length]


def generate_code_challenge(code_verifier: str) -> str:
    """
    Derives the S256 code challenge: BASE64URL(SHA256(ASCII(code_verifier))),
    without padding. (RFC 7636 - Section 4.2)
    """
    hashed_verifier = hashlib.sha256(code_verifier.encode('ascii')).digest()
    return base64.urlsafe_b64encode(hashed_verifier).rstrip(b'=').decode('ascii')


def is_valid_code_verifier(code_verifier: str) -> bool:
    """Checks length and the unreserved character set of a code verifier."""
    if not (43 <= len(code_verifier) <= 128):
        return False
    return bool(_VERIFIER_PATTERN.match(code_verifier))

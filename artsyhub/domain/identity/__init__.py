"""Identity domain (accounts and session tokens)."""

from .service import AuthResult, IdentityService, gravatar_url
from .tokens import Identity, SessionTokens, extract_token

__all__ = [
    "AuthResult",
    "Identity",
    "IdentityService",
    "SessionTokens",
    "extract_token",
    "gravatar_url",
]

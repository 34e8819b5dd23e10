"""
Authentication management for Gofile SDK.

Gofile authenticates with a single account token. Depending on the endpoint
it travels as a query parameter, a JSON body field, a multipart form field or
(for content downloads) the ``accountToken`` cookie. This module keeps that
threading in one place.
"""

import os
from typing import Optional, Dict, Any

from .exceptions import AuthenticationError

TOKEN_ENV_VAR = "GOFILE_TOKEN"


class TokenAuth:
    """
    Holds the account token and threads it into outgoing requests.

    Without a token the client runs in guest mode: uploads still work and
    return a guest token, everything account scoped raises
    :class:`AuthenticationError` before any request is sent.
    """

    def __init__(self, token: Optional[str] = None, use_env: bool = True):
        """
        Initialize the token holder.

        Args:
            token: Account token. Falls back to the GOFILE_TOKEN env var.
            use_env: Whether to read GOFILE_TOKEN when ``token`` is not given
        """
        if token is None and use_env:
            token = os.getenv(TOKEN_ENV_VAR)
        self.token = token or None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def require(self) -> str:
        """Return the token, or raise if running as a guest."""
        if self.token is None:
            raise AuthenticationError(
                f"Account token is required. Provide it as parameter or {TOKEN_ENV_VAR} env var."
            )
        return self.token

    def params(self, **extra: Any) -> Dict[str, Any]:
        """Query parameters for an account-scoped GET."""
        params = {key: str(value) for key, value in extra.items() if value is not None}
        params["token"] = self.require()
        return params

    def form_fields(self, **extra: Any) -> Dict[str, str]:
        """Multipart text fields for an upload; the token is optional here."""
        fields = {key: str(value) for key, value in extra.items() if value is not None}
        if self.token is not None:
            fields["token"] = self.token
        return fields

    def cookies(self) -> Dict[str, str]:
        """Cookies for downloading from a content link."""
        if self.token is None:
            return {}
        return {"accountToken": self.token}

    def mask(self) -> str:
        """Redacted token suitable for logs."""
        if self.token is None:
            return "<guest>"
        if len(self.token) <= 8:
            return "****"
        return f"{self.token[:4]}...{self.token[-4:]}"

"""Max Jeune booking API client."""

from .client import MaxJeuneClient
from .errors import ApiRequestError, AuthExpiredError, CredentialStoreError, MaxJeuneError, RefreshFailedError

__all__ = [
    "ApiRequestError",
    "AuthExpiredError",
    "CredentialStoreError",
    "MaxJeuneClient",
    "MaxJeuneError",
    "RefreshFailedError",
]

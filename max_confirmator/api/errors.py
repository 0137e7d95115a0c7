from __future__ import annotations


class MaxJeuneError(Exception):
    """Base class for every error raised by this project."""


class CredentialStoreError(MaxJeuneError):
    """Stored credentials are missing or cannot be decoded."""

    def __init__(self, message: str, *, parameter_name: str | None = None) -> None:
        super().__init__(message)
        self.parameter_name = parameter_name


class ApiRequestError(MaxJeuneError):
    """A booking API call did not succeed.

    ``status`` is ``None`` when no HTTP response was received at all.
    """

    def __init__(self, message: str, *, endpoint: str, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.status = status
        self.body = body

    @classmethod
    def from_response(cls, endpoint: str, status: int, body: str) -> "ApiRequestError":
        return cls(f"API request to {endpoint} failed ({status}): {body}", endpoint=endpoint, status=status, body=body)


class AuthExpiredError(ApiRequestError):
    """The API kept rejecting the token, or the token could not be refreshed."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str,
        status: int | None = None,
        body: str = "",
        refresh_error: "RefreshFailedError | None" = None,
    ) -> None:
        super().__init__(message, endpoint=endpoint, status=status, body=body)
        self.refresh_error = refresh_error


class RefreshFailedError(MaxJeuneError):
    """The refresh endpoint failed or did not rotate the token."""

    def __init__(self, message: str, *, endpoint: str, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.status = status
        self.body = body

from typing import Optional


class KonataClientError(Exception):
    """Base class for errors raised by the KonataBlog client."""


class ConfigurationError(KonataClientError, ValueError):
    pass


class AuthenticationError(KonataClientError):
    """Credentials were rejected without a backend to ask."""


class RequestCancelledError(KonataClientError):
    pass


class UploadError(KonataClientError):
    """
    A multipart upload was rejected or returned an unreadable body.

    Other calls return a failed envelope; uploads raise this instead.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        error=None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error = error

    @property
    def code(self) -> Optional[str]:
        return self.error.code if self.error else None

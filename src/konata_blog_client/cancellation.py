from threading import Event

from .exceptions import RequestCancelledError


class CancellationToken:
    """
    Cooperative cancellation flag shared between a caller and the request
    pipeline.

    The pipeline checks the flag before sending a request, before starting
    a token refresh and before retrying. A transport call already in
    flight is bounded by its timeout, not interrupted.
    """

    def __init__(self) -> None:
        self._event = Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, what: str = "request") -> None:
        if self._event.is_set():
            raise RequestCancelledError(f"{what} was cancelled")

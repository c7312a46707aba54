"""Notifier port. Interface for delivering verification codes."""

from typing import Protocol


class Notifier(Protocol):
    """Port for out-of-band code delivery.

    Implementations are blocking and raise on delivery failure; the
    application layer runs them in a worker thread with a timeout.
    """

    def send_code(self, code: str, email: str) -> None:
        """Deliver ``code`` to ``email``.

        Parameters
        ----------
        code
            The raw verification code
        email
            Recipient address
        """
        ...

"""Email port: outbound delivery of confirmation messages."""

from typing import Protocol


class EmailAdapter(Protocol):
    """Port for sending email.

    send_email() is fire-and-forget: it returns before delivery completes
    and never raises delivery failures to the caller.
    """

    def validate(self) -> None:
        """Raise ConfigurationError if the adapter cannot send mail."""
        ...

    def send_email(
        self,
        send_from: str,
        to: str,
        text: str,
        html: str,
        subject: str,
    ) -> None: ...

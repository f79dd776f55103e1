"""In-memory implementation of EmailAdapter for testing."""

from dataclasses import dataclass

from domain.model.errors import ConfigurationError


@dataclass(frozen=True)
class SentEmail:
    send_from: str
    to: str
    text: str
    html: str
    subject: str


class FakeEmailAdapter:
    def __init__(self, valid: bool = True):
        self.valid = valid
        self.sent: list[SentEmail] = []

    def validate(self) -> None:
        if not self.valid:
            raise ConfigurationError("Fake email adapter is not configured")

    def send_email(self, send_from: str, to: str, text: str, html: str, subject: str) -> None:
        self.sent.append(SentEmail(send_from, to, text, html, subject))

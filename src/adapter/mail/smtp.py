"""SMTP implementation of EmailAdapter.

Messages are handed to a small thread pool so the request returns
before delivery. Only establishing the session (connect, STARTTLS, login)
is retried, and only on connection-level errors. Once the message has
been handed to the server it is never sent again. Final failures are
logged and never reach the caller.
"""

import logging
import smtplib
from concurrent.futures import Future, ThreadPoolExecutor
from email.message import EmailMessage

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from domain.model.errors import ConfigurationError

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 10.0
MAX_DELIVERY_WORKERS = 4

# Permanent SMTP replies (auth failures, refused recipients) are not listed.
TRANSIENT_ERRORS = (
    smtplib.SMTPServerDisconnected,
    smtplib.SMTPConnectError,
    ConnectionError,
    TimeoutError,
)


class SmtpEmailAdapter:
    def __init__(
        self,
        host: str | None,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        executor: ThreadPoolExecutor | None = None,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self._executor = executor

    def validate(self) -> None:
        if not self.host:
            raise ConfigurationError(
                "SMTP_HOST is required when email confirmation is enabled"
            )
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"SMTP port {self.port} is out of range")
        if bool(self.username) != bool(self.password):
            raise ConfigurationError(
                "SMTP_USERNAME and SMTP_PASSWORD must be set together"
            )

    @property
    def executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=MAX_DELIVERY_WORKERS, thread_name_prefix="smtp",
            )
        return self._executor

    def send_email(self, send_from: str, to: str, text: str, html: str, subject: str) -> None:
        message = build_message(send_from, to, text, html, subject)
        future = self.executor.submit(self._deliver, message)
        future.add_done_callback(lambda f: _log_delivery(f, to))

    def _deliver(self, message: EmailMessage) -> None:
        smtp = self._connect()
        try:
            smtp.send_message(message)
        finally:
            _close(smtp)

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        reraise=True,
    )
    def _connect(self) -> smtplib.SMTP:
        smtp = smtplib.SMTP(self.host, self.port, timeout=SMTP_TIMEOUT_SECONDS)
        try:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password)
        except Exception:
            smtp.close()
            raise
        return smtp

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None


def build_message(send_from: str, to: str, text: str, html: str, subject: str) -> EmailMessage:
    """Build a multipart/alternative message with text and HTML bodies."""
    message = EmailMessage()
    message['From'] = send_from
    message['To'] = to
    message['Subject'] = subject
    message.set_content(text)
    message.add_alternative(html, subtype='html')
    return message


def _close(smtp: smtplib.SMTP) -> None:
    """Say QUIT; a failure here cannot undo a message the server already took."""
    try:
        smtp.quit()
    except OSError as e:
        logger.warning("SMTP QUIT failed", extra={"error": str(e)[:200]})
        smtp.close()


def _log_delivery(future: Future, to: str) -> None:
    error = future.exception()
    if error is None:
        logger.info("Email delivered", extra={"to": to})
    else:
        logger.error("Email delivery failed", extra={
            "to": to, "error": str(error)[:200], "errorType": type(error).__name__,
        })

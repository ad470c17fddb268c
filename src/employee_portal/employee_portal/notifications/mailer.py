from __future__ import annotations

import logging
import re
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional, Protocol, Sequence, Union

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")


@dataclass(frozen=True)
class SmtpSettings:
    host: str
    port: int = 587
    secure: bool = False
    user: str = ""
    password: str = ""
    from_email: str = "noreply@example.com"
    from_name: str = "Employee Portal"


@dataclass(frozen=True)
class SendResult:
    success: bool
    error: Optional[str] = None


class Mailer(Protocol):
    def send(
        self,
        *,
        to: Union[str, Sequence[str]],
        subject: str,
        html: str,
        text: Optional[str] = None,
    ) -> SendResult:
        """Deliver one message; never raises."""

        raise NotImplementedError


def html_to_text(html: str) -> str:
    return _TAG_RE.sub("", html)


class SmtpMailer(Mailer):
    """Plain SMTP delivery (STARTTLS on 587, implicit TLS when ``secure``)."""

    def __init__(self, settings: SmtpSettings, *, timeout: float = 30.0):
        self._settings = settings
        self._timeout = timeout

    def send(
        self,
        *,
        to: Union[str, Sequence[str]],
        subject: str,
        html: str,
        text: Optional[str] = None,
    ) -> SendResult:
        recipients = [to] if isinstance(to, str) else [r for r in to if r]
        if not recipients:
            return SendResult(success=False, error="No recipients")

        s = self._settings
        msg = MIMEMultipart("alternative")
        msg["From"] = formataddr((s.from_name, s.from_email))
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject
        msg.attach(MIMEText(text or html_to_text(html), "plain", "utf-8"))
        msg.attach(MIMEText(html, "html", "utf-8"))

        try:
            if s.secure:
                server = smtplib.SMTP_SSL(s.host, s.port, timeout=self._timeout)
            else:
                server = smtplib.SMTP(s.host, s.port, timeout=self._timeout)
            with server:
                if not s.secure:
                    server.starttls()
                if s.user:
                    server.login(s.user, s.password)
                server.send_message(msg, to_addrs=recipients)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email %r to %s: %s", subject, recipients, e)
            return SendResult(success=False, error=str(e) or e.__class__.__name__)

        logger.info("Email sent: %r -> %s", subject, recipients)
        return SendResult(success=True)

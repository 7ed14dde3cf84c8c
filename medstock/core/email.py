# medstock/core/email.py
#
# Email transports for restock requests. SMTP when a host is configured, the
# HTTP relay when an API key is configured, otherwise log only.

from email.message import EmailMessage
from email.utils import formataddr
import logging
import smtplib
from ssl import create_default_context

import requests

from medstock.core.config import settings

logger = logging.getLogger("medstock")


class OutgoingEmail:
    def __init__(self, to: str, subject: str, html: str, text: str | None = None):
        self.to = to
        self.subject = subject
        self.html = html
        self.text = text


class EmailTransport:
    name = "base"

    def send(self, message: OutgoingEmail) -> bool:
        raise NotImplementedError


class LogTransport(EmailTransport):
    """Used when nothing is configured. Pretends delivery succeeded."""

    name = "log"

    def send(self, message: OutgoingEmail) -> bool:
        logger.info(
            f"Email transport not configured - would have sent to {message.to}: "
            f"{message.subject}"
        )
        return True


class SMTPTransport(EmailTransport):
    name = "smtp"

    def __init__(
        self,
        host: str,
        port: int,
        username: str | None,
        password: str | None,
        use_tls: bool,
        use_ssl: bool,
        sender: str,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.use_ssl = use_ssl
        self.sender = sender

    def _build_message(self, message: OutgoingEmail) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = message.subject
        msg["From"] = self.sender
        msg["To"] = message.to
        msg.set_content(message.text or "Deze email bevat HTML inhoud.")
        msg.add_alternative(message.html, subtype="html")
        return msg

    def send(self, message: OutgoingEmail) -> bool:
        msg = self._build_message(message)
        context = create_default_context()

        try:
            if self.use_ssl:
                server = smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=30)
            else:
                server = smtplib.SMTP(self.host, self.port, timeout=30)

            with server:
                if self.use_tls and not self.use_ssl:
                    server.starttls(context=context)
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)

        except (smtplib.SMTPException, OSError) as exc:
            logger.error(f"SMTP delivery to {message.to} failed: {exc}")
            return False

        logger.info(f"Email sent via SMTP to {message.to}: {message.subject}")
        return True


class RelayTransport(EmailTransport):
    """HTTP email relay speaking the Resend API."""

    name = "relay"

    def __init__(self, api_key: str, url: str, sender: str):
        self.api_key = api_key
        self.url = url
        self.sender = sender

    def send(self, message: OutgoingEmail) -> bool:
        payload = {
            "from": self.sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        if message.text:
            payload["text"] = message.text

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(self.url, json=payload, headers=headers, timeout=30)
        except requests.RequestException as exc:
            logger.error(f"Email relay request failed: {exc}")
            return False

        if response.status_code >= 400:
            logger.error(f"Email sending failed: {response.status_code} {response.text}")
            return False

        logger.info(f"Email sent via relay to {message.to}: {message.subject}")
        return True


def build_transport(config=settings) -> EmailTransport:
    sender = formataddr((config.EMAIL_FROM_NAME, config.EMAIL_FROM))
    choice = config.EMAIL_TRANSPORT

    if choice == "auto":
        if config.SMTP_HOST:
            choice = "smtp"
        elif config.RESEND_API_KEY:
            choice = "relay"
        else:
            choice = "log"

    if choice == "smtp":
        if not config.SMTP_HOST:
            raise RuntimeError("SMTP_HOST must be configured to send email over SMTP")
        return SMTPTransport(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            username=config.SMTP_USERNAME,
            password=config.SMTP_PASSWORD,
            use_tls=config.SMTP_USE_TLS,
            use_ssl=config.SMTP_USE_SSL,
            sender=sender,
        )

    if choice == "relay":
        if not config.RESEND_API_KEY:
            raise RuntimeError("RESEND_API_KEY must be configured to use the email relay")
        return RelayTransport(
            api_key=config.RESEND_API_KEY,
            url=config.RESEND_API_URL,
            sender=sender,
        )

    return LogTransport()


_transport: EmailTransport | None = None


def get_email_transport() -> EmailTransport:
    global _transport
    if _transport is None:
        _transport = build_transport()
    return _transport

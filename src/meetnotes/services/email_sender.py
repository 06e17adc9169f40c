"""Email delivery of meeting summaries over SMTP."""

# ruff: noqa: E501 - HTML email template contains long lines due to inline CSS

import asyncio
import html
import logging
import smtplib
from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

import markdown as md

from meetnotes.config import Settings, get_settings

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Meeting Summary"
MARKDOWN_EXTENSIONS = ["extra", "sane_lists"]


@dataclass(frozen=True)
class EmailResult:
    """Outcome of a send attempt.

    ``body_html`` is the exact HTML that went out, empty on failure.
    """

    success: bool
    body_html: str = ""
    message_id: str | None = None
    error: str | None = None


def render_markdown(text: str) -> str:
    """Convert summary markdown to an HTML fragment."""
    return md.markdown(text, extensions=MARKDOWN_EXTENSIONS)


def build_email_html(summary_html: str, summary_id: str, generated_at: datetime | None = None) -> str:
    """Wrap rendered summary HTML in the branded email template."""
    generated_at = generated_at or datetime.now()
    generated_on = generated_at.strftime("%A, %B %d, %Y, %I:%M %p")
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Meeting Summary</title>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif; line-height: 1.6; color: #333; max-width: 800px; margin: 0 auto; padding: 20px; background-color: #f8f9fa; }}
        .container {{ background-color: white; padding: 30px; border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }}
        .header {{ border-bottom: 2px solid #e9ecef; padding-bottom: 20px; margin-bottom: 30px; }}
        .header h1 {{ color: #2c3e50; margin: 0; font-size: 28px; }}
        .summary-content {{ line-height: 1.8; }}
        .summary-content h1, .summary-content h2, .summary-content h3 {{ color: #2c3e50; margin-top: 30px; margin-bottom: 15px; }}
        .summary-content ul, .summary-content ol {{ padding-left: 25px; }}
        .summary-content li {{ margin-bottom: 8px; }}
        .summary-content blockquote {{ border-left: 4px solid #3498db; margin: 20px 0; background-color: #f8f9fa; padding: 15px 20px; border-radius: 4px; }}
        .summary-content code {{ background-color: #f1f3f4; padding: 2px 6px; border-radius: 3px; font-family: 'Courier New', Courier, monospace; }}
        .summary-content pre {{ background-color: #f8f9fa; padding: 15px; border-radius: 6px; overflow-x: auto; border: 1px solid #e9ecef; }}
        .footer {{ margin-top: 40px; padding-top: 20px; border-top: 1px solid #e9ecef; text-align: center; color: #6c757d; font-size: 14px; }}
        .summary-id {{ font-family: 'Courier New', Courier, monospace; background-color: #f8f9fa; padding: 4px 8px; border-radius: 4px; font-size: 12px; }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>Meeting Summary</h1>
            <p style="margin: 10px 0 0 0; color: #6c757d;">
                Summary ID: <span class="summary-id">{html.escape(summary_id)}</span>
            </p>
        </div>

        <div class="summary-content">
            {summary_html}
        </div>

        <div class="footer">
            <p>This summary was generated by AI and sent from the Meeting Notes Summarizer.</p>
            <p>Generated on {generated_on}</p>
        </div>
    </div>
</body>
</html>
"""


class EmailService:
    """Service for sending summary emails via SMTP."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Read SMTP configuration and warn about anything missing."""
        self.settings = settings or get_settings()
        self.smtp_host = self.settings.smtp_host
        self.smtp_port = self.settings.smtp_port
        self.smtp_user = self.settings.smtp_user
        self.smtp_pass = self.settings.smtp_pass
        self.mail_from = self.settings.mail_from
        self.timeout = self.settings.smtp_timeout_seconds

        for field in self.settings.missing_smtp_fields():
            logger.warning(f"{field} environment variable is not set. Email functionality may not work.")

    def _connect(self) -> smtplib.SMTP:
        """Open an authenticated SMTP connection.

        Port 465 uses implicit TLS; other ports upgrade with STARTTLS when offered.
        """
        if self.smtp_port == 465:
            server: smtplib.SMTP = smtplib.SMTP_SSL(self.smtp_host, self.smtp_port, timeout=self.timeout)
        else:
            server = smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout)
            server.ehlo()
            if server.has_extn("STARTTLS"):
                server.starttls()
                server.ehlo()

        if self.smtp_user and self.smtp_pass:
            server.login(self.smtp_user, self.smtp_pass)
        return server

    def _build_message(
        self,
        recipients: list[str],
        subject: str,
        text_body: str,
        html_body: str,
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject or DEFAULT_SUBJECT
        msg["From"] = formataddr(("Meeting Notes Summarizer", self.mail_from))
        msg["To"] = ", ".join(recipients)
        msg["Message-ID"] = make_msgid(domain=self.mail_from.rpartition("@")[2] or None)
        msg.set_content(text_body)
        msg.add_alternative(html_body, subtype="html")
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        with self._connect() as server:
            server.send_message(msg)

    async def send_summary(
        self,
        recipients: list[str],
        subject: str,
        summary: str,
        summary_id: str,
    ) -> EmailResult:
        """Render and send a summary to every recipient in one message.

        Never raises: transport failures come back as ``success=False``.
        """
        logger.info(
            f"Sending summary email (summary_id={summary_id}, recipients={len(recipients)}, "
            f"subject={subject!r})"
        )
        try:
            body_html = build_email_html(render_markdown(summary), summary_id)
            msg = self._build_message(recipients, subject, summary, body_html)
            await asyncio.to_thread(self._deliver, msg)
        except Exception as e:
            logger.error(f"Failed to send email for summary {summary_id}: {e}")
            return EmailResult(success=False, error=str(e))

        message_id = msg["Message-ID"]
        logger.info(f"Email sent successfully (summary_id={summary_id}, message_id={message_id})")
        return EmailResult(success=True, body_html=body_html, message_id=message_id)

    def _verify(self) -> None:
        with self._connect() as server:
            server.noop()

    async def verify_config(self) -> bool:
        """Check that the SMTP server accepts a connection with our credentials."""
        if not self.smtp_host:
            logger.error("Email configuration verification failed: SMTP_HOST is not set")
            return False
        try:
            await asyncio.to_thread(self._verify)
        except Exception as e:
            logger.error(f"Email configuration verification failed: {e}")
            return False
        logger.info("Email configuration verified successfully")
        return True


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Get or create the email service singleton."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service

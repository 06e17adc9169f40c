"""Tests for EmailService: message construction, SMTP transport, failures."""

import logging
from datetime import datetime
from email import message_from_string
from unittest.mock import patch

import pytest

from meetnotes.config import Settings
from meetnotes.services.email_sender import (
    EmailService,
    build_email_html,
    render_markdown,
)


def _settings(**kwargs) -> Settings:
    defaults = {
        "smtp_host": "smtp.example.com",
        "smtp_port": 587,
        "smtp_user": "mailer",
        "smtp_pass": "secret",
        "mail_from": "notes@example.com",
    }
    defaults.update(kwargs)
    return Settings(_env_file=None, **defaults)


class TestRendering:
    def test_render_markdown_lists_and_headings(self):
        out = render_markdown("## Decisions\n\n- Ship Friday\n- Update docs")
        assert "<h2>Decisions</h2>" in out
        assert "<li>Ship Friday</li>" in out

    def test_template_contains_id_and_footer(self):
        html = build_email_html("<p>hi</p>", "abc-123", generated_at=datetime(2026, 3, 7, 14, 5))
        assert "<h1>Meeting Summary</h1>" in html
        assert "abc-123" in html
        assert "<p>hi</p>" in html
        assert "Generated on Saturday, March 07, 2026, 02:05 PM" in html

    def test_template_escapes_summary_id(self):
        html = build_email_html("<p>hi</p>", "<script>")
        assert "&lt;script&gt;" in html


class TestSendSummary:
    @pytest.mark.asyncio
    async def test_success_sends_one_message(self):
        service = EmailService(_settings())
        with patch("meetnotes.services.email_sender.smtplib.SMTP") as smtp_cls:
            server = smtp_cls.return_value.__enter__.return_value
            result = await service.send_summary(
                ["a@x.com", "b@x.com"], "Weekly sync", "## Notes\n- one", "sum-1"
            )

        assert result.success
        assert result.message_id and result.message_id.startswith("<")
        assert "<h2>Notes</h2>" in result.body_html
        smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=30)
        smtp_cls.return_value.starttls.assert_called_once()
        smtp_cls.return_value.login.assert_called_once_with("mailer", "secret")

        sent = server.send_message.call_args.args[0]
        assert sent["To"] == "a@x.com, b@x.com"
        assert sent["Subject"] == "Weekly sync"
        assert sent["Message-ID"] == result.message_id
        parsed = message_from_string(sent.as_string())
        assert parsed.is_multipart()
        assert [p.get_content_type() for p in parsed.get_payload()] == ["text/plain", "text/html"]

    @pytest.mark.asyncio
    async def test_implicit_tls_on_465(self):
        service = EmailService(_settings(smtp_port=465))
        with patch("meetnotes.services.email_sender.smtplib.SMTP_SSL") as ssl_cls:
            result = await service.send_summary(["a@x.com"], "s", "text", "sum-1")

        assert result.success
        ssl_cls.assert_called_once_with("smtp.example.com", 465, timeout=30)

    @pytest.mark.asyncio
    async def test_no_login_without_credentials(self):
        service = EmailService(_settings(smtp_user="", smtp_pass=""))
        with patch("meetnotes.services.email_sender.smtplib.SMTP") as smtp_cls:
            await service.send_summary(["a@x.com"], "s", "text", "sum-1")

        smtp_cls.return_value.login.assert_not_called()

    @pytest.mark.asyncio
    async def test_transport_failure_returns_result(self):
        service = EmailService(_settings())
        with patch(
            "meetnotes.services.email_sender.smtplib.SMTP",
            side_effect=OSError("Connection refused"),
        ):
            result = await service.send_summary(["a@x.com"], "s", "text", "sum-1")

        assert not result.success
        assert result.error == "Connection refused"
        assert result.body_html == ""
        assert result.message_id is None


class TestVerifyConfig:
    def test_warns_for_missing_fields(self, caplog):
        with caplog.at_level(logging.WARNING):
            EmailService(_settings(smtp_user="", mail_from=""))
        assert "SMTP_USER environment variable is not set" in caplog.text
        assert "MAIL_FROM environment variable is not set" in caplog.text

    @pytest.mark.asyncio
    async def test_no_host(self):
        assert await EmailService(_settings(smtp_host="")).verify_config() is False

    @pytest.mark.asyncio
    async def test_connection_ok(self):
        service = EmailService(_settings())
        with patch("meetnotes.services.email_sender.smtplib.SMTP") as smtp_cls:
            assert await service.verify_config() is True
        smtp_cls.return_value.__enter__.return_value.noop.assert_called_once()

    @pytest.mark.asyncio
    async def test_connection_error(self):
        service = EmailService(_settings())
        with patch("meetnotes.services.email_sender.smtplib.SMTP", side_effect=OSError("nope")):
            assert await service.verify_config() is False

"""
Tests for Email Service

Tests template lookup, rendering and SMTP delivery.
"""

from unittest.mock import MagicMock, patch

import pytest

from content_engine.exceptions import NotFoundError
from content_engine.models import EmailCategory, EmailContent, Language
from content_engine.schemas.notification import SendEmailRequest
from content_engine.services.email_service import EmailService


@pytest.fixture
async def approve_category(test_db):
    """'Approve' category with an English admin template"""
    category = EmailCategory(title="Approve")
    test_db.add(category)
    await test_db.flush()
    test_db.add(
        EmailContent(
            email_category_id=category.id,
            language=Language.EN,
            label="email_to_admin",
            send_from_email="cms@example.com",
            send_from_name="CMS",
            cc_email="lead@example.com",
            bcc_email="audit@example.com",
            subject="Approve {{ pageTitle }}",
            header="{{ pageTitle }} needs approval",
            paragraph='<a href="{{ urlPreview }}">Preview</a>',
            footer="Sent by {{ author }}",
        )
    )
    await test_db.commit()
    return category


def make_request(**overrides):
    values = {
        "email_category": "Approve",
        "content_label": "email_to_admin",
        "language": "en",
        "recipients": ["approver@example.com"],
        "data": {"pageTitle": "Summer & Sale", "urlPreview": "https://web.example/preview", "author": "Jane"},
    }
    values.update(overrides)
    return SendEmailRequest(**values)


class TestEmailService:
    """Test email service functionality"""

    @pytest.fixture
    def mock_smtp(self):
        """Mock SMTP server"""
        with patch("content_engine.services.email_service.smtplib.SMTP") as mock:
            smtp_instance = MagicMock()
            mock.return_value.__enter__.return_value = smtp_instance
            yield smtp_instance

    @pytest.fixture
    def email_svc(self, test_db):
        """Create email service instance"""
        return EmailService(test_db)

    @pytest.mark.asyncio
    async def test_email_service_initialization(self, email_svc):
        """Test email service initializes correctly"""
        assert email_svc.smtp_host is not None
        assert email_svc.smtp_port is not None

    @pytest.mark.asyncio
    async def test_get_template_by_title(self, email_svc, approve_category):
        """Test a template is found by category title, label and language"""
        template = await email_svc.get_template(make_request())

        assert template.email_category_id == approve_category.id
        assert template.label == "email_to_admin"

    @pytest.mark.asyncio
    async def test_get_template_by_category_id(self, email_svc, approve_category):
        """Test the category may also be given by id"""
        template = await email_svc.get_template(make_request(email_category=str(approve_category.id)))

        assert template.label == "email_to_admin"

    @pytest.mark.asyncio
    async def test_get_template_missing(self, email_svc, approve_category):
        """Test a missing language raises NotFoundError"""
        with pytest.raises(NotFoundError):
            await email_svc.get_template(make_request(language="th"))

    @pytest.mark.asyncio
    async def test_render_escapes_data(self, email_svc, approve_category):
        """Test template variables are HTML escaped while template markup is kept"""
        template = await email_svc.get_template(make_request())

        subject, html_body, text_body = email_svc.render(template, make_request().data)

        assert "Summer &amp; Sale needs approval" in html_body
        assert '<a href="https://web.example/preview">Preview</a>' in html_body
        assert "Sent by Jane" in text_body
        assert subject.startswith("Approve Summer")

    @pytest.mark.asyncio
    async def test_send_email_success(self, email_svc, approve_category, mock_smtp):
        """Test a rendered email goes to recipients, cc and bcc"""
        result = await email_svc.send_email(make_request())

        assert result is True
        mock_smtp.starttls.assert_called_once()
        mock_smtp.send_message.assert_called_once()
        message = mock_smtp.send_message.call_args.args[0]
        assert message["To"] == "approver@example.com"
        assert message["Cc"] == "lead@example.com"
        assert "cms@example.com" in message["From"]
        assert mock_smtp.send_message.call_args.kwargs["to_addrs"] == [
            "approver@example.com",
            "lead@example.com",
            "audit@example.com",
        ]

    @pytest.mark.asyncio
    async def test_send_email_failure(self, email_svc, approve_category):
        """Test SMTP failures are reported as False"""
        with patch("content_engine.services.email_service.smtplib.SMTP") as mock_smtp:
            mock_smtp.side_effect = OSError("SMTP connection failed")

            result = await email_svc.send_email(make_request())

        assert result is False

    @pytest.mark.asyncio
    async def test_send_email_with_credentials(self, email_svc, approve_category, mock_smtp):
        """Test SMTP login when credentials are configured"""
        with (
            patch.object(email_svc, "smtp_user", "user@example.com"),
            patch.object(email_svc, "smtp_password", "password123"),
        ):
            await email_svc.send_email(make_request())

        mock_smtp.login.assert_called_once_with("user@example.com", "password123")

    @pytest.mark.asyncio
    async def test_send_email_without_credentials(self, email_svc, approve_category, mock_smtp):
        """Test no SMTP login without credentials"""
        with patch.object(email_svc, "smtp_user", None), patch.object(email_svc, "smtp_password", None):
            await email_svc.send_email(make_request())

        mock_smtp.login.assert_not_called()

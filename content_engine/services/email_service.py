"""
Email Service

Sends template-based emails. Templates live in the email_contents table and
are rendered with Jinja2; delivery goes over SMTP in a worker thread so the
event loop is never blocked.
"""

import asyncio
import logging
import smtplib
import uuid
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

from jinja2 import Environment, select_autoescape
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from content_engine.config import settings
from content_engine.exceptions import NotFoundError
from content_engine.models.email import EmailCategory, EmailContent
from content_engine.schemas.notification import SendEmailRequest

logger = logging.getLogger(__name__)

HTML_LAYOUT = """\
<html>
  <body>
    {% if top_img_link %}<img src="{{ top_img_link }}" alt="">{% endif %}
    <h2>{{ header | safe }}</h2>
    <p>{{ paragraph | safe }}</p>
    <footer>{{ footer | safe }}</footer>
    {% if footer_image_link %}<img src="{{ footer_image_link }}" alt="">{% endif %}
  </body>
</html>
"""


class EmailService:
    """Service for sending emails from stored templates"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.env = Environment(autoescape=select_autoescape(default_for_string=True))

        self.smtp_host = settings.smtp_host
        self.smtp_port = settings.smtp_port
        self.smtp_user = settings.smtp_user
        self.smtp_password = settings.smtp_password
        self.smtp_from = settings.smtp_from

    async def get_template(self, request: SendEmailRequest) -> EmailContent:
        """Find the template for a category (title or id), label and language."""
        try:
            category_filter = EmailCategory.id == uuid.UUID(request.email_category)
        except ValueError:
            category_filter = EmailCategory.title == request.email_category

        result = await self.db.execute(
            select(EmailContent)
            .join(EmailCategory, EmailCategory.id == EmailContent.email_category_id)
            .where(
                category_filter,
                EmailContent.label == request.content_label,
                EmailContent.language == request.language,
            )
        )
        template = result.scalars().first()
        if template is None:
            raise NotFoundError(
                resource_type="EmailContent",
                message=(
                    f"Email template '{request.content_label}' ({request.language.value}) "
                    f"not found in category '{request.email_category}'"
                ),
            )
        return template

    def render(self, template: EmailContent, data: dict[str, str]) -> tuple[str, str, str]:
        """
        Render a stored template.

        Returns:
            (subject, html_body, text_body)
        """
        subject = self.env.from_string(template.subject).render(**data)
        parts = {
            "header": self.env.from_string(template.header).render(**data),
            "paragraph": self.env.from_string(template.paragraph).render(**data),
            "footer": self.env.from_string(template.footer).render(**data),
        }
        html_body = self.env.from_string(HTML_LAYOUT).render(
            top_img_link=template.top_img_link,
            footer_image_link=template.footer_image_link,
            **parts,
        )
        text_body = "\n\n".join(part for part in parts.values() if part)
        return subject, html_body, text_body

    async def send_email(self, request: SendEmailRequest) -> bool:
        """
        Render the requested template and send it to the request's recipients.

        Returns:
            bool: True if email sent successfully, False otherwise

        Raises:
            NotFoundError: If no template matches the request
        """
        template = await self.get_template(request)
        subject, html_body, text_body = self.render(template, request.data)

        sender = formataddr((template.send_from_name, template.send_from_email or self.smtp_from))
        cc = [address.strip() for address in template.cc_email.split(",") if address.strip()]
        bcc = [address.strip() for address in template.bcc_email.split(",") if address.strip()]

        return await asyncio.to_thread(
            self._send_email,
            to_email=request.recipients,
            subject=subject,
            html_body=html_body,
            text_body=text_body,
            sender=sender,
            cc=cc,
            bcc=bcc,
        )

    def _send_email(
        self,
        to_email: str | list[str],
        subject: str,
        html_body: str,
        text_body: str | None = None,
        sender: str | None = None,
        cc: list[str] | None = None,
        bcc: list[str] | None = None,
    ) -> bool:
        """
        Send an email using SMTP.

        Args:
            to_email: Recipient email address(es)
            subject: Email subject
            html_body: HTML email body
            text_body: Plain text email body (optional)
            sender: From header, defaults to the configured sender
            cc: Carbon copy recipients
            bcc: Blind carbon copy recipients

        Returns:
            bool: True if email sent successfully, False otherwise
        """
        recipients = [to_email] if isinstance(to_email, str) else list(to_email)
        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = sender or self.smtp_from
            msg["To"] = ", ".join(recipients)
            if cc:
                msg["Cc"] = ", ".join(cc)

            if text_body:
                msg.attach(MIMEText(text_body, "plain"))
            msg.attach(MIMEText(html_body, "html"))

            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                if self.smtp_user and self.smtp_password:
                    server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg, to_addrs=recipients + (cc or []) + (bcc or []))

            logger.info(f"Email '{subject}' sent to {len(recipients)} recipient(s)")
            return True

        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email '{subject}': {e}")
            return False

"""
Notification Dispatcher

Approval notifications are a side effect of a committed update and must never
slow it down or roll it back. The lifecycle engine hands a job to the
dispatcher, which queues it on a bounded asyncio.Queue; a fixed pool of
worker tasks drains the queue and runs the handler (by default the approval
mailer). A full queue drops the job with a warning.

Classes:
    ApprovalMailer          -- resolves templates and recipients, sends emails
    NotificationDispatcher  -- start / stop / submit / join

Module-level singleton:
    notification_dispatcher        -- shared instance, started by the app lifespan
    get_notification_dispatcher()  -- getter (dependency-injection friendly)
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from email.utils import parseaddr
from typing import Any, Optional

from sqlalchemy import select

from content_engine.config import settings
from content_engine.database import AsyncSessionLocal
from content_engine.models.email import EmailCategory, EmailContent
from content_engine.schemas.notification import ApprovalNotification, SendEmailRequest
from content_engine.services.email_service import EmailService

logger = logging.getLogger(__name__)

ADMIN_LABEL = "email_to_admin"
USER_LABEL = "email_to_user"


def parse_author(author: Optional[str]) -> tuple[str, str]:
    """
    Split a revision author into (name, email).

    "Jane Doe <jane@example.com>" gives both parts; a bare string is used for
    both; an empty author falls back to a generic name and the configured
    default address.
    """
    if not author:
        return "CMS User", settings.default_author_email
    if "<" in author and ">" in author:
        name, email = parseaddr(author)
        return name or author.split("<")[0].strip(), email
    return author, author


def build_notification_urls(notification: ApprovalNotification) -> tuple[str, str]:
    """Preview link on the public site and edit link in the CMS."""
    language = notification.language.value
    web_base = settings.web_base_url.rstrip("/")
    cms_base = settings.cms_base_url.rstrip("/")

    preview_url = f"{web_base}/preview/{language}/{notification.kind}?id={notification.content_id}"
    cms_url = (
        f"{cms_base}/{notification.kind}-pages/{notification.page_id}"
        f"/content/{notification.content_id}/edit?lang={language}"
    )
    return preview_url, cms_url


class ApprovalMailer:
    """
    Sends the "Approve" category templates for a content row that reached the
    approval gate.

    Every failure is logged and swallowed; nothing propagates to the worker.
    """

    def __init__(
        self,
        session_factory=AsyncSessionLocal,
        email_service_factory: Callable[[Any], EmailService] = EmailService,
        category_title: Optional[str] = None,
    ):
        self.session_factory = session_factory
        self.email_service_factory = email_service_factory
        self.category_title = category_title or settings.approval_email_category

    @staticmethod
    def select_recipients(template: EmailContent, notification: ApprovalNotification) -> list[str]:
        if template.label == ADMIN_LABEL:
            return list(notification.approval_email)
        if template.label == USER_LABEL:
            _, email = parse_author(notification.author)
            return [email] if email else []
        return [address.strip() for address in (template.send_to or "").split(",") if address.strip()]

    async def __call__(self, notification: ApprovalNotification) -> int:
        """Returns the number of emails handed to the email service successfully."""
        try:
            async with self.session_factory() as db:
                return await self._send(db, notification)
        except Exception:
            logger.exception(f"Approval notification for content {notification.content_id} failed")
            return 0

    async def _send(self, db, notification: ApprovalNotification) -> int:
        result = await db.execute(select(EmailCategory).where(EmailCategory.title == self.category_title))
        category = result.scalars().first()
        if category is None:
            logger.error(f"Email category '{self.category_title}' not found; approval notifications not sent")
            return 0

        result = await db.execute(
            select(EmailContent).where(
                EmailContent.email_category_id == category.id,
                EmailContent.language == notification.language,
            )
        )
        templates = list(result.scalars().all())
        if not templates:
            logger.warning(
                f"No '{self.category_title}' templates for language '{notification.language.value}'; nothing sent"
            )
            return 0

        preview_url, cms_url = build_notification_urls(notification)
        author_name, _ = parse_author(notification.author)
        data = {
            "urlPreview": preview_url,
            "urlCms": cms_url,
            "pageTitle": notification.title,
            "author": author_name,
        }

        email_service = self.email_service_factory(db)
        sent = 0
        for template in templates:
            recipients = self.select_recipients(template, notification)
            if not recipients:
                logger.warning(f"Skipping template '{template.label}': no recipients")
                continue

            request = SendEmailRequest(
                email_category=self.category_title,
                content_label=template.label,
                language=template.language,
                recipients=recipients,
                data=data,
            )
            try:
                if await email_service.send_email(request):
                    sent += 1
                    logger.info(f"Sent '{template.label}' approval email to {recipients}")
                else:
                    logger.warning(f"Email service did not send '{template.label}' approval email")
            except Exception:
                logger.exception(f"Error sending email using template '{template.label}'")

        return sent


class NotificationDispatcher:
    """
    Bounded queue plus a fixed pool of worker tasks.

    ``submit`` never blocks and never raises for a full or stopped
    dispatcher; it returns whether the job was accepted.
    """

    def __init__(
        self,
        handler: Optional[Callable[[Any], Awaitable[Any]]] = None,
        max_queue_size: Optional[int] = None,
        workers: Optional[int] = None,
    ) -> None:
        self._handler = handler
        self._max_queue_size = max_queue_size or settings.notification_queue_size
        self._worker_count = workers or settings.notification_workers
        self._queue: Optional[asyncio.Queue] = None
        self._workers: list[asyncio.Task] = []

    @property
    def handler(self) -> Callable[[Any], Awaitable[Any]]:
        if self._handler is None:
            self._handler = ApprovalMailer()
        return self._handler

    @property
    def running(self) -> bool:
        return bool(self._workers)

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    async def start(self) -> None:
        if self.running:
            return
        self._queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._workers = [
            asyncio.create_task(self._worker(index), name=f"notification-worker-{index}")
            for index in range(self._worker_count)
        ]
        logger.info("Notification dispatcher started with %d worker(s)", self._worker_count)

    async def stop(self, timeout: float = 5.0) -> None:
        """Drain pending jobs (up to ``timeout`` seconds), then cancel the workers."""
        if not self.running:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Notification queue not drained in %.1fs; %d job(s) dropped", timeout, self._queue.qsize())

        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._queue = None
        logger.info("Notification dispatcher stopped")

    # ── Public API ────────────────────────────────────────────────────────────

    def submit(self, job: Any) -> bool:
        """Queue a job without waiting. Returns False when it was dropped."""
        if not self.running:
            logger.warning("Notification dispatcher not running; dropping %s", type(job).__name__)
            return False
        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull:
            logger.warning("Notification queue full; dropping %s", type(job).__name__)
            return False
        return True

    async def join(self) -> None:
        """Wait until every queued job has been processed."""
        if self._queue is not None:
            await self._queue.join()

    def pending(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    # ── Internals ─────────────────────────────────────────────────────────────

    async def _worker(self, index: int) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self.handler(job)
            except Exception:
                logger.exception("Notification worker %d failed on %s", index, type(job).__name__)
            finally:
                self._queue.task_done()


# ── Module-level singleton ────────────────────────────────────────────────────

notification_dispatcher = NotificationDispatcher()


def get_notification_dispatcher() -> NotificationDispatcher:
    """Return the global NotificationDispatcher singleton."""
    return notification_dispatcher

"""
Notification Gateway and Outbox Dispatcher
==========================================

Workflow writes never send email inline. The lifecycle service records a
notification intent (NotificationOutbox row) in the same transaction as the
submission change; the dispatcher claims and delivers rows after commit, either
right after the request (BackgroundTasks) or from the periodic loop started
in the application lifespan.

Delivery failures are recorded on the row and logged. They never reach the
request that caused the notification.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Dict, Optional

from sqlalchemy import select, update, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from internship.core.config import settings
from internship.core.database import AsyncSessionLocal
from internship.core.exceptions import NotificationDeliveryError
from internship.core.logging_config import logger
from internship.models.notification import NotificationOutbox, NotificationKind, NotificationStatus
from internship.services.email_service import EmailService, email_service


class NotificationGateway:
    """Renders and sends workflow notifications, and records them in the outbox"""

    def __init__(self, db: Optional[AsyncSession] = None, email: Optional[EmailService] = None):
        self.db = db
        self.email = email or email_service

    # =====================================================
    # DIRECT DELIVERY
    # =====================================================

    async def notify_tutor(self, tutor_email: str, student_name: str, roll_number: Optional[str]) -> bool:
        subject, html, text = self.email.render_tutor_notification(student_name, roll_number)
        return await self.email.send_email(tutor_email, subject, html, text)

    async def notify_student(self, student_email: str, student_name: str, decision: str, remarks: str) -> bool:
        subject, html, text = self.email.render_student_notification(student_name, decision, remarks)
        return await self.email.send_email(student_email, subject, html, text)

    async def deliver(self, row: NotificationOutbox) -> None:
        """Send one outbox row. Raises NotificationDeliveryError when the transport reports failure."""
        payload = row.payload or {}

        if row.kind == NotificationKind.TUTOR_NEW_SUBMISSION:
            delivered = await self.notify_tutor(
                row.recipient, payload.get("student_name", ""), payload.get("roll_number")
            )
        elif row.kind == NotificationKind.STUDENT_DECISION:
            delivered = await self.notify_student(
                row.recipient,
                payload.get("student_name", ""),
                payload.get("decision", ""),
                payload.get("remarks") or "No remarks provided",
            )
        else:
            raise NotificationDeliveryError(row.recipient, f"Unknown notification kind {row.kind}")

        if not delivered:
            raise NotificationDeliveryError(row.recipient, "Email transport did not accept the message")

    # =====================================================
    # OUTBOX
    # =====================================================

    def _enqueue(self, kind: NotificationKind, recipient: str, payload: Dict,
                 submission_id: Optional[str]) -> NotificationOutbox:
        if self.db is None:
            raise RuntimeError("NotificationGateway needs a session to enqueue notifications")
        row = NotificationOutbox(
            kind=kind,
            recipient=recipient,
            payload=payload,
            submission_id=submission_id,
            status=NotificationStatus.PENDING,
            attempts=0,
        )
        self.db.add(row)
        return row

    def enqueue_tutor_notification(self, tutor_email: str, student_name: str,
                                   roll_number: Optional[str],
                                   submission_id: Optional[str] = None) -> NotificationOutbox:
        return self._enqueue(
            NotificationKind.TUTOR_NEW_SUBMISSION,
            tutor_email,
            {"student_name": student_name, "roll_number": roll_number},
            submission_id,
        )

    def enqueue_student_notification(self, student_email: str, student_name: str,
                                     decision: str, remarks: Optional[str],
                                     submission_id: Optional[str] = None) -> NotificationOutbox:
        return self._enqueue(
            NotificationKind.STUDENT_DECISION,
            student_email,
            {
                "student_name": student_name,
                "decision": decision,
                "remarks": remarks or "No remarks provided",
            },
            submission_id,
        )


class NotificationDispatcher:
    """Claims and delivers outbox rows, and records the outcome on each row"""

    def __init__(self, db: AsyncSession, gateway: Optional[NotificationGateway] = None,
                 max_attempts: Optional[int] = None):
        self.db = db
        self.gateway = gateway or NotificationGateway(db)
        self.max_attempts = max_attempts or settings.NOTIFICATION_MAX_ATTEMPTS

    def _claimable(self, now: datetime):
        """Pending rows, failed rows with attempts left, and abandoned claims"""
        abandoned_before = now - timedelta(seconds=settings.NOTIFICATION_CLAIM_TIMEOUT_SECONDS)
        return and_(
            NotificationOutbox.attempts < self.max_attempts,
            or_(
                NotificationOutbox.status.in_([NotificationStatus.PENDING, NotificationStatus.FAILED]),
                and_(
                    NotificationOutbox.status == NotificationStatus.SENDING,
                    NotificationOutbox.claimed_at < abandoned_before,
                ),
            ),
        )

    async def _claim(self, row_id: str) -> bool:
        """
        Mark one row SENDING and count the attempt, committed before delivery.

        The conditional UPDATE only matches while the row is still claimable,
        so when two dispatchers race for the same row exactly one wins.
        """
        now = datetime.utcnow()
        result = await self.db.execute(
            update(NotificationOutbox)
            .where(NotificationOutbox.id == row_id, self._claimable(now))
            .values(
                status=NotificationStatus.SENDING,
                claimed_at=now,
                attempts=NotificationOutbox.attempts + 1,
            )
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount == 1

    async def drain(self, batch_size: Optional[int] = None) -> Dict[str, int]:
        """
        Attempt delivery of up to `batch_size` rows, oldest first.

        Each row is claimed and committed before it is sent, and its outcome
        is committed right after. Rows claimed by another dispatcher in the
        meantime are skipped and not counted.
        """
        limit = batch_size or settings.NOTIFICATION_BATCH_SIZE
        result = await self.db.execute(
            select(NotificationOutbox.id)
            .where(self._claimable(datetime.utcnow()))
            .order_by(NotificationOutbox.created_at)
            .limit(limit)
        )
        row_ids = list(result.scalars().all())

        counts = {"sent": 0, "failed": 0}
        for row_id in row_ids:
            if not await self._claim(row_id):
                logger.debug(f"[Notifications] Outbox row {row_id} already claimed, skipping")
                continue
            row = await self.db.get(NotificationOutbox, row_id, populate_existing=True)

            try:
                await self.gateway.deliver(row)
            except NotificationDeliveryError as e:
                row.status = NotificationStatus.FAILED
                row.last_error = e.message
                counts["failed"] += 1
                logger.log_notification_event(
                    row.kind.value, row.recipient, delivered=False, reason=e.message,
                    attempts=row.attempts, submission_ref=row.submission_id,
                )
            except Exception as e:
                row.status = NotificationStatus.FAILED
                row.last_error = f"{type(e).__name__}: {e}"
                counts["failed"] += 1
                logger.log_error_with_context(e, context="notification_dispatch", recipient=row.recipient)
            else:
                row.status = NotificationStatus.SENT
                row.sent_at = datetime.utcnow()
                row.last_error = None
                counts["sent"] += 1
                logger.log_notification_event(
                    row.kind.value, row.recipient, delivered=True,
                    attempts=row.attempts, submission_ref=row.submission_id,
                )
            await self.db.commit()

        return counts


async def dispatch_pending_notifications(batch_size: Optional[int] = None) -> Dict[str, int]:
    """Drain the outbox in a dedicated session. Never raises."""
    try:
        async with AsyncSessionLocal() as session:
            dispatcher = NotificationDispatcher(session)
            counts = await dispatcher.drain(batch_size)
    except Exception as e:
        logger.error(f"[Notifications] Outbox dispatch failed: {e}", exc_info=True)
        return {"sent": 0, "failed": 0}

    if counts["sent"] or counts["failed"]:
        logger.info(f"[Notifications] Dispatched outbox: {counts['sent']} sent, {counts['failed']} failed")
    return counts


async def run_dispatch_loop(interval_seconds: int) -> None:
    """Periodic outbox drain, cancelled on application shutdown"""
    logger.info(f"[Notifications] Dispatch loop started (every {interval_seconds}s)")
    while True:
        await asyncio.sleep(interval_seconds)
        await dispatch_pending_notifications()

"""
Unit Tests for notifications
Tests for: email templates, gateway delivery, outbox dispatch
"""
import asyncio
import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from internship.core.exceptions import NotificationDeliveryError
from internship.models import NotificationKind, NotificationOutbox, NotificationStatus
from internship.services.email_service import EmailService
from internship.services.notification_service import NotificationDispatcher, NotificationGateway


@pytest.fixture
def mock_email():
    """EmailService with real templates and a mocked transport"""
    email = EmailService()
    email.send_email = AsyncMock(return_value=True)
    return email


async def all_rows(db):
    result = await db.execute(select(NotificationOutbox).order_by(NotificationOutbox.created_at))
    return list(result.scalars().all())


class TestTemplates:
    def test_tutor_notification_mentions_student(self):
        subject, html, text = EmailService().render_tutor_notification("Student S", "21MX101")

        assert subject == "New internship submission from Student S (21MX101)"
        assert "21MX101" in html
        assert "Student S" in text

    def test_tutor_notification_without_roll(self):
        subject, _, _ = EmailService().render_tutor_notification("Student S", None)

        assert "(N/A)" in subject

    def test_student_notification_has_decision_and_remarks(self):
        subject, html, text = EmailService().render_student_notification("Student S", "declined", "Offer unclear")

        assert subject == "Your internship submission has been declined"
        assert "Offer unclear" in html
        assert "Remarks: Offer unclear" in text

    def test_remarks_markup_is_escaped_in_html(self):
        _, html, text = EmailService().render_student_notification(
            "Student <b>S</b>", "declined", '<script>alert("x")</script>'
        )

        assert "<script>" not in html
        assert "&lt;script&gt;alert(&quot;x&quot;)&lt;/script&gt;" in html
        assert "Dear Student &lt;b&gt;S&lt;/b&gt;," in html
        assert '<script>alert("x")</script>' in text

    def test_student_name_is_escaped_for_tutor(self):
        _, html, _ = EmailService().render_tutor_notification("O'Brien & <Co>", "21MX101")

        assert "O&#x27;Brien &amp; &lt;Co&gt;" in html


class TestEmailTransport:
    async def test_unconfigured_smtp_skips_send(self):
        email = EmailService()
        email.smtp_user = ""

        with patch("internship.services.email_service.aiosmtplib.send", new_callable=AsyncMock) as send:
            assert await email.send_email("t1@psgtech.ac.in", "s", "<p>x</p>") is False

        send.assert_not_called()

    async def test_smtp_failure_returns_false(self):
        email = EmailService()
        email.smtp_host, email.smtp_user, email.smtp_password = "smtp.test", "user", "pw"

        with patch(
            "internship.services.email_service.aiosmtplib.send",
            new_callable=AsyncMock,
            side_effect=OSError("connection refused"),
        ):
            assert await email.send_email("t1@psgtech.ac.in", "s", "<p>x</p>", "x") is False

    async def test_smtp_success(self):
        email = EmailService()
        email.smtp_host, email.smtp_user, email.smtp_password = "smtp.test", "user", "pw"

        with patch("internship.services.email_service.aiosmtplib.send", new_callable=AsyncMock) as send:
            assert await email.send_email("t1@psgtech.ac.in", "s", "<p>x</p>") is True

        assert send.await_count == 1
        message = send.await_args.args[0]
        assert message["To"] == "t1@psgtech.ac.in"


class TestGateway:
    async def test_deliver_tutor_row(self, mock_email):
        gateway = NotificationGateway(email=mock_email)
        row = NotificationOutbox(
            kind=NotificationKind.TUTOR_NEW_SUBMISSION,
            recipient="t1@psgtech.ac.in",
            payload={"student_name": "Student S", "roll_number": "21MX101"},
        )

        await gateway.deliver(row)

        to_email, subject = mock_email.send_email.await_args.args[:2]
        assert to_email == "t1@psgtech.ac.in"
        assert "Student S" in subject

    async def test_deliver_student_row(self, mock_email):
        gateway = NotificationGateway(email=mock_email)
        row = NotificationOutbox(
            kind=NotificationKind.STUDENT_DECISION,
            recipient="21mx101@psgtech.ac.in",
            payload={"student_name": "Student S", "decision": "accepted", "remarks": "Looks good"},
        )

        await gateway.deliver(row)

        assert mock_email.send_email.await_args.args[1] == "Your internship submission has been accepted"

    async def test_transport_refusal_raises(self, mock_email):
        mock_email.send_email.return_value = False
        gateway = NotificationGateway(email=mock_email)
        row = NotificationOutbox(
            kind=NotificationKind.STUDENT_DECISION,
            recipient="21mx101@psgtech.ac.in",
            payload={"student_name": "Student S", "decision": "declined"},
        )

        with pytest.raises(NotificationDeliveryError):
            await gateway.deliver(row)

    def test_enqueue_without_session_fails(self, mock_email):
        with pytest.raises(RuntimeError):
            NotificationGateway(email=mock_email).enqueue_tutor_notification("t1@psgtech.ac.in", "S", "R")

    async def test_enqueue_student_defaults_remarks(self, db_session, mock_email):
        gateway = NotificationGateway(db_session, email=mock_email)

        row = gateway.enqueue_student_notification("21mx101@psgtech.ac.in", "Student S", "declined", None)
        await db_session.flush()

        assert row.status == NotificationStatus.PENDING
        assert row.attempts == 0
        assert row.payload["remarks"] == "No remarks provided"


class TestDispatcher:
    async def test_drain_marks_rows_sent(self, db_session, mock_email):
        gateway = NotificationGateway(db_session, email=mock_email)
        gateway.enqueue_tutor_notification("t1@psgtech.ac.in", "Student S", "21MX101")
        gateway.enqueue_student_notification("21mx101@psgtech.ac.in", "Student S", "accepted", "ok")
        await db_session.commit()

        counts = await NotificationDispatcher(db_session, gateway).drain()

        assert counts == {"sent": 2, "failed": 0}
        for row in await all_rows(db_session):
            assert row.status == NotificationStatus.SENT
            assert row.attempts == 1
            assert row.sent_at is not None
        assert mock_email.send_email.await_count == 2

    async def test_failed_delivery_recorded_and_retried(self, db_session, mock_email):
        mock_email.send_email.return_value = False
        gateway = NotificationGateway(db_session, email=mock_email)
        gateway.enqueue_tutor_notification("t1@psgtech.ac.in", "Student S", "21MX101")
        await db_session.commit()
        dispatcher = NotificationDispatcher(db_session, gateway, max_attempts=3)

        first = await dispatcher.drain()
        mock_email.send_email.return_value = True
        second = await dispatcher.drain()

        assert first == {"sent": 0, "failed": 1}
        assert second == {"sent": 1, "failed": 0}
        row = (await all_rows(db_session))[0]
        assert row.status == NotificationStatus.SENT
        assert row.attempts == 2
        assert row.last_error is None

    async def test_exhausted_rows_are_skipped(self, db_session, mock_email):
        mock_email.send_email.return_value = False
        gateway = NotificationGateway(db_session, email=mock_email)
        gateway.enqueue_tutor_notification("t1@psgtech.ac.in", "Student S", "21MX101")
        await db_session.commit()
        dispatcher = NotificationDispatcher(db_session, gateway, max_attempts=2)

        await dispatcher.drain()
        await dispatcher.drain()
        third = await dispatcher.drain()

        assert third == {"sent": 0, "failed": 0}
        row = (await all_rows(db_session))[0]
        assert row.status == NotificationStatus.FAILED
        assert row.attempts == 2
        assert "t1@psgtech.ac.in" in row.last_error

    async def test_unexpected_error_is_contained(self, db_session, mock_email):
        mock_email.send_email.side_effect = ValueError("bad header")
        gateway = NotificationGateway(db_session, email=mock_email)
        gateway.enqueue_tutor_notification("t1@psgtech.ac.in", "Student S", "21MX101")
        await db_session.commit()

        counts = await NotificationDispatcher(db_session, gateway).drain()

        assert counts == {"sent": 0, "failed": 1}
        row = (await all_rows(db_session))[0]
        assert row.last_error == "ValueError: bad header"

    async def test_batch_size_limits_work(self, db_session, mock_email):
        gateway = NotificationGateway(db_session, email=mock_email)
        for i in range(3):
            gateway.enqueue_tutor_notification("t1@psgtech.ac.in", f"Student {i}", None)
        await db_session.commit()

        counts = await NotificationDispatcher(db_session, gateway).drain(batch_size=2)

        assert counts["sent"] == 2
        statuses = [row.status for row in await all_rows(db_session)]
        assert statuses.count(NotificationStatus.PENDING) == 1

    async def test_empty_outbox(self, db_session, mock_email):
        counts = await NotificationDispatcher(db_session, NotificationGateway(db_session, email=mock_email)).drain()

        assert counts == {"sent": 0, "failed": 0}


    async def test_concurrent_drains_send_each_row_once(self, db_session, mock_email):
        NotificationGateway(db_session).enqueue_tutor_notification("t1@psgtech.ac.in", "Student S", "21MX101")
        await db_session.commit()

        async def slow_send(*args, **kwargs):
            await asyncio.sleep(0.05)
            return True

        mock_email.send_email = AsyncMock(side_effect=slow_send)
        sessions = async_sessionmaker(bind=db_session.bind, expire_on_commit=False)

        async with sessions() as first, sessions() as second:
            results = await asyncio.gather(
                NotificationDispatcher(first, NotificationGateway(email=mock_email)).drain(),
                NotificationDispatcher(second, NotificationGateway(email=mock_email)).drain(),
            )

        assert mock_email.send_email.await_count == 1
        assert sorted(counts["sent"] for counts in results) == [0, 1]
        result = await db_session.execute(
            select(NotificationOutbox).execution_options(populate_existing=True)
        )
        row = result.scalar_one()
        assert row.status == NotificationStatus.SENT
        assert row.attempts == 1

    async def test_row_in_flight_is_not_claimed(self, db_session, mock_email):
        gateway = NotificationGateway(db_session, email=mock_email)
        row = gateway.enqueue_tutor_notification("t1@psgtech.ac.in", "Student S", "21MX101")
        row.status = NotificationStatus.SENDING
        row.claimed_at = datetime.utcnow()
        row.attempts = 1
        await db_session.commit()

        counts = await NotificationDispatcher(db_session, gateway).drain()

        assert counts == {"sent": 0, "failed": 0}
        mock_email.send_email.assert_not_awaited()

    async def test_abandoned_claim_is_retried(self, db_session, mock_email):
        gateway = NotificationGateway(db_session, email=mock_email)
        row = gateway.enqueue_tutor_notification("t1@psgtech.ac.in", "Student S", "21MX101")
        row.status = NotificationStatus.SENDING
        row.claimed_at = datetime.utcnow() - timedelta(hours=1)
        row.attempts = 1
        await db_session.commit()

        counts = await NotificationDispatcher(db_session, gateway).drain()

        assert counts == {"sent": 1, "failed": 0}
        row = (await all_rows(db_session))[0]
        assert row.status == NotificationStatus.SENT
        assert row.attempts == 2

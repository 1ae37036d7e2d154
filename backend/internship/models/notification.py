from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Text, JSON
from datetime import datetime
import enum

from internship.core.database import Base, generate_uuid


class NotificationKind(str, enum.Enum):
    TUTOR_NEW_SUBMISSION = "tutor_new_submission"
    STUDENT_DECISION = "student_decision"


class NotificationStatus(str, enum.Enum):
    PENDING = "pending"
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"


class NotificationOutbox(Base):
    """
    Notification intent written in the same transaction as the change that
    caused it. The dispatcher claims a row (status SENDING) before delivery,
    so concurrent dispatchers never send the same row twice, then records the
    outcome here. A claim older than NOTIFICATION_CLAIM_TIMEOUT_SECONDS is
    treated as abandoned and may be claimed again.
    """
    __tablename__ = "notification_outbox"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    kind = Column(SQLEnum(NotificationKind), nullable=False)
    recipient = Column(String(255), nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    submission_id = Column(String(36), nullable=True, index=True)

    status = Column(SQLEnum(NotificationStatus), default=NotificationStatus.PENDING, nullable=False, index=True)
    attempts = Column(Integer, default=0, nullable=False)
    last_error = Column(Text, nullable=True)
    claimed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    sent_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<NotificationOutbox {self.kind} -> {self.recipient} ({self.status})>"

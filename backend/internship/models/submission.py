from sqlalchemy import Column, String, Boolean, DateTime, Date, Enum as SQLEnum, Integer, Text, Float, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from internship.core.database import Base, generate_uuid


class SubmissionStatus(str, enum.Enum):
    """Submission status"""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class Submission(Base):
    """
    Internship submission.

    Company, supervisor, dates, stipend, course fields, student and tutor are
    fixed at creation. Only status, processed, remarks and decided_at change,
    and only through a tutor decision. processed is True exactly when status
    is not pending.
    """
    __tablename__ = "submissions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    student_id = Column(String(36), ForeignKey("students.id"), nullable=False, index=True)
    tutor_id = Column(String(36), ForeignKey("staff.id"), nullable=False, index=True)

    # Company & role
    company_name = Column(String(255), nullable=False)
    company_address = Column(Text, nullable=True)
    role = Column(String(255), nullable=False)
    supervisor_name = Column(String(255), nullable=False)
    supervisor_email = Column(String(255), nullable=False)
    department_guide = Column(String(255), nullable=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    stipend = Column(Float, default=0.0, nullable=False)
    description = Column(Text, nullable=True)

    # Academic details
    pending_redo_courses = Column(Text, nullable=True)
    pending_ra_courses = Column(Text, nullable=True)
    pending_current_courses = Column(Text, nullable=True)

    # Decision
    status = Column(SQLEnum(SubmissionStatus), default=SubmissionStatus.PENDING, nullable=False, index=True)
    processed = Column(Boolean, default=False, nullable=False)
    remarks = Column(Text, nullable=True)
    decided_at = Column(DateTime, nullable=True)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    student = relationship("Student", back_populates="submissions")
    tutor = relationship("Staff")

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Submission {self.company_name} ({self.status})>"

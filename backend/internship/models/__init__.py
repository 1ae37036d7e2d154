# Re-export all models for convenient imports
from internship.models.directory import Department, Staff, StudentClass, Student
from internship.models.submission import Submission, SubmissionStatus
from internship.models.notification import NotificationOutbox, NotificationKind, NotificationStatus

__all__ = [
    # Directory
    "Department",
    "Staff",
    "StudentClass",
    "Student",
    # Submissions
    "Submission",
    "SubmissionStatus",
    # Notifications
    "NotificationOutbox",
    "NotificationKind",
    "NotificationStatus",
]

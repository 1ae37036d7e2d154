from internship.services.email_service import EmailService, email_service
from internship.services.directory_store import DirectoryStore
from internship.services.submission_repository import SubmissionRepository
from internship.services.notification_service import NotificationGateway, NotificationDispatcher
from internship.services.submission_service import SubmissionLifecycleService, get_submission_service
from internship.services.profile_service import ProfileService, get_profile_service

__all__ = [
    # Storage
    "DirectoryStore",
    "SubmissionRepository",
    # Notifications
    "EmailService",
    "email_service",
    "NotificationGateway",
    "NotificationDispatcher",
    # Workflow
    "SubmissionLifecycleService",
    "get_submission_service",
    "ProfileService",
    "get_profile_service",
]

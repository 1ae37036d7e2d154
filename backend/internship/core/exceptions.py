"""
Custom Exceptions for the Internship Undertaking Service
========================================================

Every error a request can surface derives from InternshipError and carries the
HTTP status it maps to. The application registers a single handler that turns
them into JSON responses (see internship.main).

Usage:
    from internship.core.exceptions import SubmissionNotFoundError, ForbiddenError

    if not submission:
        raise SubmissionNotFoundError(submission_id)

    if submission.tutor_id != staff.id:
        raise ForbiddenError("Only the assigned tutor can update this submission")
"""

from typing import Optional, Any, Dict


class InternshipError(Exception):
    """Base exception for all service errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class UnauthorizedError(InternshipError):
    """Missing principal or wrong role for the operation"""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, code="UNAUTHORIZED")


class ForbiddenError(InternshipError):
    """Authenticated, but not the entitled actor"""

    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, code="FORBIDDEN")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(InternshipError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"{resource_type} '{resource_id}' not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class StudentNotFoundError(ResourceNotFoundError):
    def __init__(self, email: str):
        super().__init__("Student", email, message="Student not found")


class StaffNotFoundError(ResourceNotFoundError):
    def __init__(self, email: str):
        super().__init__("Staff", email, message="Tutor not found")


class SubmissionNotFoundError(ResourceNotFoundError):
    def __init__(self, submission_id: str):
        super().__init__("Submission", submission_id, message="Submission not found")


class DepartmentNotFoundError(ResourceNotFoundError):
    def __init__(self, department: str):
        super().__init__("Department", department, message="Department not found")


# ============================================
# Validation Errors (400-type)
# ============================================

class InvalidInputError(InternshipError):
    """Malformed or referentially invalid request field"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="INVALID_INPUT", details=details)


class UnknownTutorError(InvalidInputError):
    """Tutor email on a submission does not match any staff record"""

    def __init__(self, tutor_email: str):
        super().__init__("Tutor email does not exist in staff records", field="tutor_email")
        self.code = "UNKNOWN_TUTOR"
        self.details["tutor_email"] = tutor_email


class UnknownDepartmentError(InvalidInputError):
    """Department id on a profile request does not exist"""

    def __init__(self, department_id: str, message: str = "Department not found"):
        super().__init__(message, field="departmentId")
        self.code = "UNKNOWN_DEPARTMENT"
        self.details["department_id"] = department_id


# ============================================
# Concurrency Errors (409-type)
# ============================================

class ConflictError(InternshipError):
    """A concurrent writer changed the row first"""

    status_code = 409

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} '{resource_id}' was modified concurrently, reload and retry",
            code="CONFLICT",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


# ============================================
# Document & Notification Errors
# ============================================

class DocumentGenerationError(InternshipError):
    """Undertaking PDF could not be rendered"""

    def __init__(self, message: str, submission_id: Optional[str] = None):
        super().__init__(message, code="DOCUMENT_GENERATION_FAILED")
        if submission_id:
            self.details["submission_id"] = submission_id


class NotificationDeliveryError(InternshipError):
    """Email delivery failed. Recorded on the outbox row, never returned to a caller."""

    def __init__(self, recipient: str, message: str = "Delivery failed"):
        super().__init__(f"Failed to notify {recipient}: {message}", code="NOTIFICATION_FAILED")
        self.details["recipient"] = recipient


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: InternshipError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "detail": error.message,
        "error": error.to_dict()
    }

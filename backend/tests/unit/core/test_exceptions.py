"""
Unit Tests for the error taxonomy
"""
from internship.core.exceptions import (
    ConflictError,
    DocumentGenerationError,
    ForbiddenError,
    InternshipError,
    InvalidInputError,
    NotificationDeliveryError,
    StaffNotFoundError,
    StudentNotFoundError,
    SubmissionNotFoundError,
    UnauthorizedError,
    UnknownDepartmentError,
    UnknownTutorError,
    error_response,
)


class TestStatusCodes:
    """Each error maps to the HTTP status it is surfaced with"""

    def test_auth_errors(self):
        assert UnauthorizedError().status_code == 401
        assert ForbiddenError().status_code == 403

    def test_not_found_errors(self):
        assert StudentNotFoundError("a@b.edu").status_code == 404
        assert StaffNotFoundError("t@b.edu").status_code == 404
        assert SubmissionNotFoundError("abc").status_code == 404

    def test_invalid_input_errors(self):
        assert InvalidInputError("bad").status_code == 400
        assert UnknownTutorError("t@b.edu").status_code == 400
        assert UnknownDepartmentError("d-1").status_code == 400

    def test_conflict_and_document_errors(self):
        assert ConflictError("Submission", "abc").status_code == 409
        assert DocumentGenerationError("boom").status_code == 500

    def test_explicit_status_override(self):
        error = InternshipError("teapot", status_code=418)
        assert error.status_code == 418


class TestMessages:
    def test_not_found_messages(self):
        assert StudentNotFoundError("a@b.edu").message == "Student not found"
        assert StaffNotFoundError("t@b.edu").message == "Tutor not found"
        assert SubmissionNotFoundError("abc").message == "Submission not found"

    def test_unknown_tutor(self):
        error = UnknownTutorError("ghost@psgtech.ac.in")

        assert error.message == "Tutor email does not exist in staff records"
        assert error.code == "UNKNOWN_TUTOR"
        assert error.details == {"field": "tutor_email", "tutor_email": "ghost@psgtech.ac.in"}

    def test_unknown_department_custom_message(self):
        error = UnknownDepartmentError("d-9", message="Invalid department ID")

        assert error.message == "Invalid department ID"
        assert error.details["department_id"] == "d-9"

    def test_notification_error_carries_recipient(self):
        error = NotificationDeliveryError("t1@psgtech.ac.in", "SMTP down")

        assert "t1@psgtech.ac.in" in error.message
        assert error.details["recipient"] == "t1@psgtech.ac.in"


class TestErrorResponse:
    def test_error_response_shape(self):
        body = error_response(ForbiddenError("Only the assigned tutor can update this submission"))

        assert body["success"] is False
        assert body["detail"] == "Only the assigned tutor can update this submission"
        assert body["error"] == {
            "code": "FORBIDDEN",
            "message": "Only the assigned tutor can update this submission",
            "details": {},
        }

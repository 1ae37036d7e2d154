# Pydantic schemas
from internship.schemas.submission import (
    SubmissionCreate,
    DecisionRequest,
    SubmissionAck,
    SubmissionBrief,
    AcceptedSubmissionBrief,
    SubmissionWithTutor,
    OverviewEntry,
    PendingSubmissionsResponse,
    AcceptedSubmissionsResponse,
    MySubmissionsResponse,
    AdminOverviewResponse,
)
from internship.schemas.profile import (
    SelectDepartmentRequest,
    UpdateProfileRequest,
    StudentProfile,
    UpdatedStudent,
    ProfileResponse,
    ProfileUpdatedResponse,
    DepartmentSelectedResponse,
    DepartmentOut,
    DepartmentListResponse,
)

__all__ = [
    # Submissions
    "SubmissionCreate",
    "DecisionRequest",
    "SubmissionAck",
    "SubmissionBrief",
    "AcceptedSubmissionBrief",
    "SubmissionWithTutor",
    "OverviewEntry",
    "PendingSubmissionsResponse",
    "AcceptedSubmissionsResponse",
    "MySubmissionsResponse",
    "AdminOverviewResponse",
    # Profile
    "SelectDepartmentRequest",
    "UpdateProfileRequest",
    "StudentProfile",
    "UpdatedStudent",
    "ProfileResponse",
    "ProfileUpdatedResponse",
    "DepartmentSelectedResponse",
    "DepartmentOut",
    "DepartmentListResponse",
]

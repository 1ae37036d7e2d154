from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from typing import Dict, List, Literal, Optional
from datetime import date


# Upper bounds for text printed on the undertaking; all at once still fit one A4 page
NAME_MAX_LENGTH = 120
COMPANY_NAME_MAX_LENGTH = 200
ADDRESS_MAX_LENGTH = 300
COURSES_MAX_LENGTH = 100
REMARKS_MAX_LENGTH = 500
DESCRIPTION_MAX_LENGTH = 2000


class SubmissionCreate(BaseModel):
    """Internship details entered by a student"""
    company_name: str = Field(..., min_length=1, max_length=COMPANY_NAME_MAX_LENGTH)
    company_address: str = Field(..., min_length=1, max_length=ADDRESS_MAX_LENGTH)
    role: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    supervisor_name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    supervisor_email: EmailStr
    department_guide: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    start_date: date
    end_date: date
    stipend: float = Field(0, ge=0)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    pending_redo_courses: Optional[str] = Field(None, max_length=COURSES_MAX_LENGTH)
    pending_ra_courses: Optional[str] = Field(None, max_length=COURSES_MAX_LENGTH)
    pending_current_courses: Optional[str] = Field(None, max_length=COURSES_MAX_LENGTH)
    tutor_email: EmailStr

    @field_validator(
        "company_name", "company_address", "role", "supervisor_name", "department_guide"
    )
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator(
        "description", "pending_redo_courses", "pending_ra_courses", "pending_current_courses"
    )
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode='after')
    def validate_period(self):
        """Internship cannot end before it starts"""
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class DecisionRequest(BaseModel):
    status: Literal["accepted", "declined"]
    remarks: Optional[str] = Field(None, max_length=REMARKS_MAX_LENGTH)


# ============================================
# Responses
# ============================================

class SubmissionAck(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    submission_id: Optional[str] = Field(None, alias="submissionId")


class SubmissionBrief(BaseModel):
    """Row shown in a tutor's queue"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    student_name: str = Field(..., alias="studentName")
    roll_number: Optional[str] = Field(None, alias="rollNumber")
    company_name: str
    role: str
    start_date: date
    end_date: date
    stipend: float


class AcceptedSubmissionBrief(SubmissionBrief):
    class_name: str = Field("Unknown", alias="class")


class SubmissionWithTutor(BaseModel):
    """Row shown in a student's own history"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    company_name: str
    role: str
    start_date: date
    end_date: date
    tutor_email: str = Field(..., alias="tutorEmail")
    status: str
    remarks: str
    stipend: float


class OverviewEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    student_name: str = Field(..., alias="studentName")
    company_name: str = Field(..., alias="companyName")


class PendingSubmissionsResponse(BaseModel):
    success: bool = True
    submissions: List[SubmissionBrief]


class AcceptedSubmissionsResponse(BaseModel):
    success: bool = True
    count: int
    submissions: List[AcceptedSubmissionBrief]


class MySubmissionsResponse(BaseModel):
    success: bool = True
    submissions: List[SubmissionWithTutor]


class AdminOverviewResponse(BaseModel):
    """department name -> class name -> accepted entries"""
    success: bool = True
    overview: Dict[str, Dict[str, List[OverviewEntry]]]

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class SelectDepartmentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    department_id: str = Field(..., alias="departmentId", min_length=1)


class UpdateProfileRequest(BaseModel):
    """Only fields that are sent are applied"""
    model_config = ConfigDict(populate_by_name=True)

    roll_number: Optional[str] = Field(None, alias="rollNumber")
    year: Optional[int] = Field(None, ge=1, le=10)
    department_id: Optional[str] = Field(None, alias="departmentId")


class StudentProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str
    name: str
    roll_number: Optional[str] = Field(None, alias="rollNumber")
    year: Optional[int] = None
    department: Optional[str] = None
    class_name: Optional[str] = Field(None, alias="class")


class UpdatedStudent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str
    name: str
    roll_number: Optional[str] = Field(None, alias="rollNumber")
    year: Optional[int] = None
    department: str = "Unknown"


class ProfileResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    student: StudentProfile


class ProfileUpdatedResponse(BaseModel):
    success: bool = True
    message: str = "Profile updated successfully"
    student: UpdatedStudent


class DepartmentSelectedResponse(BaseModel):
    success: bool = True
    message: str = "Department selected successfully"
    department: str


class DepartmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    code: Optional[str] = None


class DepartmentListResponse(BaseModel):
    success: bool = True
    departments: List[DepartmentOut]

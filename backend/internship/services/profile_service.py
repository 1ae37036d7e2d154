"""
Profile Service
Student profile, department selection and lazy class (cohort) assignment.
"""

from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from internship.core.config import settings
from internship.core.exceptions import (
    ConflictError,
    StudentNotFoundError,
    UnauthorizedError,
    UnknownDepartmentError,
)
from internship.core.logging_config import logger
from internship.core.security import Principal
from internship.models.directory import Student
from internship.schemas.profile import (
    DepartmentListResponse,
    DepartmentOut,
    DepartmentSelectedResponse,
    ProfileResponse,
    ProfileUpdatedResponse,
    StudentProfile,
    UpdatedStudent,
    UpdateProfileRequest,
)
from internship.services.cohort import CohortResolver, prefix_cohort_resolver
from internship.services.directory_store import DirectoryStore


class ProfileService:
    """Service for student profile operations"""

    def __init__(self, db: AsyncSession, cohort_resolver: Optional[CohortResolver] = None):
        self.db = db
        self.directory = DirectoryStore(db)
        self.resolve_cohort = cohort_resolver or prefix_cohort_resolver(settings.COHORT_PREFIX_LENGTH)

    async def _require_student(self, principal: Principal, action: str) -> Student:
        if not principal.is_student:
            raise UnauthorizedError(f"Unauthorized: Only students can {action}")
        student = await self.directory.get_student_by_email(principal.email)
        if not student:
            raise StudentNotFoundError(principal.email)
        return student

    async def get_profile(self, principal: Principal) -> ProfileResponse:
        """
        Profile with department and class.

        The class is derived from the email through the cohort resolver and
        created inside the student's department on first view.
        """
        student = await self._require_student(principal, "view profile")

        if student.department is None:
            return ProfileResponse(
                message="Please select a department before viewing or creating a class",
                student=StudentProfile(
                    id=student.id,
                    email=student.email,
                    name=student.name,
                    roll_number=student.roll_number,
                    year=student.year,
                ),
            )

        class_name = self.resolve_cohort(principal.email)
        try:
            student_class = await self.directory.upsert_class(class_name, student.department)
            if student.class_id != student_class.id:
                student.class_id = student_class.id
                student.student_class = student_class
                logger.info(f"[Profile] Bound {student.email} to class {class_name} ({student.department.name})")
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Class", class_name)

        return ProfileResponse(
            student=StudentProfile(
                id=student.id,
                email=student.email,
                name=student.name,
                roll_number=student.roll_number,
                year=student.year,
                department=student.department.name,
                class_name=student_class.name,
            ),
        )

    async def select_department(self, principal: Principal, department_id: str) -> DepartmentSelectedResponse:
        student = await self._require_student(principal, "select department")

        department = await self.directory.get_department(department_id)
        if not department:
            raise UnknownDepartmentError(department_id)

        student.department_id = department.id
        student.department = department
        await self.db.commit()

        logger.info(f"[Profile] {student.email} selected department {department.name}")
        return DepartmentSelectedResponse(department=department.name)

    async def update_profile(self, principal: Principal, data: UpdateProfileRequest) -> ProfileUpdatedResponse:
        """Apply only the fields present in the request"""
        student = await self._require_student(principal, "update profile")
        sent = data.model_fields_set

        if "roll_number" in sent:
            student.roll_number = data.roll_number
        if "year" in sent:
            student.year = data.year
        if "department_id" in sent and data.department_id is not None:
            department = await self.directory.get_department(data.department_id)
            if not department:
                raise UnknownDepartmentError(data.department_id, message="Invalid department ID")
            student.department_id = department.id
            student.department = department

        await self.db.commit()

        return ProfileUpdatedResponse(
            student=UpdatedStudent(
                id=student.id,
                email=student.email,
                name=student.name,
                roll_number=student.roll_number,
                year=student.year,
                department=student.department.name if student.department else "Unknown",
            ),
        )

    async def list_departments(self) -> DepartmentListResponse:
        departments = await self.directory.list_departments()
        return DepartmentListResponse(
            departments=[DepartmentOut.model_validate(d) for d in departments]
        )


def get_profile_service(db: AsyncSession) -> ProfileService:
    """Factory function to create ProfileService instance"""
    return ProfileService(db)

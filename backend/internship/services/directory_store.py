"""
Directory Store
Read access to students, staff, departments and classes, plus the few writes
the submission and profile flows need (class tutor binding, lazy class
creation) and the provisioning helpers used by the admin CLI.
"""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from internship.models.directory import Department, Staff, StudentClass, Student


class DirectoryStore:
    """Lookup and persistence of directory records"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =====================================================
    # STUDENTS
    # =====================================================

    async def get_student_by_email(self, email: str) -> Optional[Student]:
        """Student with department and class loaded"""
        result = await self.db.execute(
            select(Student)
            .where(Student.email == email)
            .options(
                selectinload(Student.department),
                selectinload(Student.student_class),
            )
        )
        return result.scalar_one_or_none()

    async def add_student(
        self,
        email: str,
        name: str,
        roll_number: Optional[str] = None,
        year: Optional[int] = None,
        department: Optional[Department] = None,
    ) -> Student:
        student = Student(
            email=email,
            name=name,
            roll_number=roll_number,
            year=year,
            department_id=department.id if department else None,
        )
        self.db.add(student)
        await self.db.flush()
        return student

    # =====================================================
    # STAFF
    # =====================================================

    async def get_staff_by_email(self, email: str) -> Optional[Staff]:
        result = await self.db.execute(select(Staff).where(Staff.email == email))
        return result.scalar_one_or_none()

    async def get_staff_by_id(self, staff_id: str) -> Optional[Staff]:
        result = await self.db.execute(select(Staff).where(Staff.id == staff_id))
        return result.scalar_one_or_none()

    async def add_staff(self, email: str, name: str) -> Staff:
        staff = Staff(email=email, name=name)
        self.db.add(staff)
        await self.db.flush()
        return staff

    # =====================================================
    # DEPARTMENTS
    # =====================================================

    async def get_department(self, department_id: str) -> Optional[Department]:
        result = await self.db.execute(select(Department).where(Department.id == department_id))
        return result.scalar_one_or_none()

    async def get_department_by_name(self, name: str) -> Optional[Department]:
        result = await self.db.execute(select(Department).where(Department.name == name))
        return result.scalar_one_or_none()

    async def list_departments(self) -> List[Department]:
        result = await self.db.execute(select(Department).order_by(Department.name))
        return list(result.scalars().all())

    async def add_department(self, name: str, code: Optional[str] = None) -> Department:
        department = Department(name=name, code=code)
        self.db.add(department)
        await self.db.flush()
        return department

    # =====================================================
    # CLASSES
    # =====================================================

    async def get_class_with_tutor(self, class_id: str) -> Optional[StudentClass]:
        """Fresh read of a class row and its current tutor"""
        result = await self.db.execute(
            select(StudentClass)
            .where(StudentClass.id == class_id)
            .options(selectinload(StudentClass.tutor))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_class(self, department_id: str, name: str) -> Optional[StudentClass]:
        result = await self.db.execute(
            select(StudentClass).where(
                StudentClass.department_id == department_id,
                StudentClass.name == name,
            )
        )
        return result.scalar_one_or_none()

    async def upsert_class(self, name: str, department: Department) -> StudentClass:
        """
        Find the class `name` in `department`, creating it if missing.

        The (department_id, name) unique constraint rejects a duplicate created
        by a concurrent request; the caller maps that IntegrityError.
        """
        student_class = await self.find_class(department.id, name)
        if student_class is None:
            student_class = StudentClass(name=name, department_id=department.id)
            self.db.add(student_class)
            await self.db.flush()
        return student_class

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from internship.models.directory import Student, StudentClass
from internship.models.submission import Submission, SubmissionStatus


class SubmissionRepository:
    """Persistence of internship submissions"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, submission: Submission) -> Submission:
        self.db.add(submission)
        await self.db.flush()
        return submission

    async def get(self, submission_id: str) -> Optional[Submission]:
        """Submission with its student (department, class and class department) and tutor"""
        result = await self.db.execute(
            select(Submission)
            .where(Submission.id == submission_id)
            .options(
                selectinload(Submission.student).selectinload(Student.department),
                selectinload(Submission.student)
                .selectinload(Student.student_class)
                .selectinload(StudentClass.department),
                selectinload(Submission.tutor),
            )
        )
        return result.scalar_one_or_none()

    async def list_for_tutor(self, tutor_id: str, status: SubmissionStatus) -> List[Submission]:
        result = await self.db.execute(
            select(Submission)
            .where(Submission.tutor_id == tutor_id, Submission.status == status)
            .options(selectinload(Submission.student).selectinload(Student.student_class))
            .order_by(Submission.created_at)
        )
        return list(result.scalars().all())

    async def list_for_student(self, student_id: str) -> List[Submission]:
        result = await self.db.execute(
            select(Submission)
            .where(Submission.student_id == student_id)
            .options(selectinload(Submission.tutor))
            .order_by(Submission.created_at)
        )
        return list(result.scalars().all())

    async def list_by_status(self, status: SubmissionStatus) -> List[Submission]:
        result = await self.db.execute(
            select(Submission)
            .where(Submission.status == status)
            .options(
                selectinload(Submission.student)
                .selectinload(Student.student_class)
                .selectinload(StudentClass.department)
            )
            .order_by(Submission.created_at)
        )
        return list(result.scalars().all())

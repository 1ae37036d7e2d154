"""
Submission Lifecycle Service
============================

Business rules for internship submissions:

- Students create submissions naming their tutor by email. The tutor must
  exist in staff records, and becomes the tutor bound to the student's class.
- Only the tutor recorded on a submission may accept or decline it.
- Tutors see their pending queue and their accepted submissions; students
  see their own history; the overview groups accepted submissions by
  department and class.

Writes to Submission and StudentClass rows are guarded by their version
column. A writer that lost the race gets ConflictError and nothing it
changed is kept. Notifications are recorded in the outbox within the same
transaction and delivered after commit.
"""

from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from internship.core.exceptions import (
    ConflictError,
    ForbiddenError,
    StaffNotFoundError,
    StudentNotFoundError,
    SubmissionNotFoundError,
    UnauthorizedError,
    UnknownTutorError,
)
from internship.core.logging_config import logger, set_submission_id
from internship.core.security import Principal
from internship.models.directory import Staff, Student
from internship.models.submission import Submission, SubmissionStatus
from internship.schemas.submission import (
    AcceptedSubmissionBrief,
    AcceptedSubmissionsResponse,
    AdminOverviewResponse,
    DecisionRequest,
    MySubmissionsResponse,
    OverviewEntry,
    PendingSubmissionsResponse,
    SubmissionAck,
    SubmissionBrief,
    SubmissionCreate,
    SubmissionWithTutor,
)
from internship.services.directory_store import DirectoryStore
from internship.services.notification_service import NotificationGateway
from internship.services.submission_repository import SubmissionRepository
from internship.services.undertaking_pdf import UndertakingData


CREATED_MESSAGE = "Submission recorded successfully and tutor assigned to class"
UNKNOWN_DEPARTMENT = "Unknown Department"
UNKNOWN_CLASS = "Unknown Class"


class SubmissionLifecycleService:
    """Service for the submission workflow"""

    def __init__(self, db: AsyncSession, notifications: Optional[NotificationGateway] = None):
        self.db = db
        self.directory = DirectoryStore(db)
        self.submissions = SubmissionRepository(db)
        self.notifications = notifications or NotificationGateway(db)

    async def _require_tutor(self, principal: Principal, message: str) -> Staff:
        if not principal.is_staff:
            raise UnauthorizedError(message)
        staff = await self.directory.get_staff_by_email(principal.email)
        if not staff:
            raise StaffNotFoundError(principal.email)
        return staff

    async def _require_student(self, principal: Principal, message: str) -> Student:
        if not principal.is_student:
            raise UnauthorizedError(message)
        student = await self.directory.get_student_by_email(principal.email)
        if not student:
            raise StudentNotFoundError(principal.email)
        return student

    # =====================================================
    # STUDENT OPERATIONS
    # =====================================================

    async def create_submission(self, principal: Principal, data: SubmissionCreate) -> SubmissionAck:
        """
        Record a new pending submission for the calling student.

        Side effect: the student's class is bound to the named tutor when it
        has no tutor or a different one. Same tutor leaves the class untouched.
        """
        student = await self._require_student(principal, "Unauthorized: Only students can submit")

        tutor = await self.directory.get_staff_by_email(data.tutor_email)
        if not tutor:
            raise UnknownTutorError(data.tutor_email)

        submission = Submission(
            student_id=student.id,
            tutor_id=tutor.id,
            company_name=data.company_name,
            company_address=data.company_address,
            role=data.role,
            supervisor_name=data.supervisor_name,
            supervisor_email=data.supervisor_email,
            department_guide=data.department_guide,
            start_date=data.start_date,
            end_date=data.end_date,
            stipend=data.stipend,
            description=data.description,
            pending_redo_courses=data.pending_redo_courses,
            pending_ra_courses=data.pending_ra_courses,
            pending_current_courses=data.pending_current_courses,
            status=SubmissionStatus.PENDING,
            processed=False,
            remarks=None,
        )

        try:
            if student.class_id:
                await self._bind_class_tutor(student.class_id, tutor)
            await self.submissions.add(submission)
            self.notifications.enqueue_tutor_notification(
                tutor.email, student.name, student.roll_number, submission_id=submission.id
            )
            await self.db.commit()
        except StaleDataError:
            await self.db.rollback()
            logger.warning(f"[Submissions] Class {student.class_id} tutor binding changed concurrently")
            raise ConflictError("Class", student.class_id or "")

        set_submission_id(submission.id)
        logger.log_submission_event(
            submission.id, "created", student_email=student.email, tutor_email=tutor.email
        )
        return SubmissionAck(message=CREATED_MESSAGE, submission_id=submission.id)

    async def _bind_class_tutor(self, class_id: str, tutor: Staff) -> None:
        student_class = await self.directory.get_class_with_tutor(class_id)
        if student_class is None or student_class.tutor_id == tutor.id:
            return

        if student_class.tutor_id is not None:
            previous = student_class.tutor.email if student_class.tutor else student_class.tutor_id
            logger.warning(
                f"[Submissions] Class {student_class.name} tutor reassigned from {previous} to {tutor.email}"
            )
        student_class.tutor_id = tutor.id
        student_class.tutor = tutor
        await self.db.flush()

    async def list_mine(self, principal: Principal) -> MySubmissionsResponse:
        student = await self._require_student(
            principal, "Unauthorized: Only students can view their submissions"
        )
        submissions = await self.submissions.list_for_student(student.id)

        return MySubmissionsResponse(
            submissions=[
                SubmissionWithTutor(
                    id=s.id,
                    company_name=s.company_name,
                    role=s.role,
                    start_date=s.start_date,
                    end_date=s.end_date,
                    tutor_email=s.tutor.email if s.tutor else "Unassigned",
                    status=s.status.value,
                    remarks=s.remarks or "No remarks",
                    stipend=s.stipend,
                )
                for s in submissions
            ]
        )

    # =====================================================
    # TUTOR OPERATIONS
    # =====================================================

    async def list_pending(self, principal: Principal) -> PendingSubmissionsResponse:
        tutor = await self._require_tutor(
            principal, "Unauthorized: Only tutors can view pending submissions"
        )
        submissions = await self.submissions.list_for_tutor(tutor.id, SubmissionStatus.PENDING)

        return PendingSubmissionsResponse(
            submissions=[
                SubmissionBrief(
                    id=s.id,
                    student_name=s.student.name,
                    roll_number=s.student.roll_number,
                    company_name=s.company_name,
                    role=s.role,
                    start_date=s.start_date,
                    end_date=s.end_date,
                    stipend=s.stipend,
                )
                for s in submissions
            ]
        )

    async def list_accepted_by_tutor(self, principal: Principal) -> AcceptedSubmissionsResponse:
        tutor = await self._require_tutor(principal, "Unauthorized: Only tutors can access this")
        submissions = await self.submissions.list_for_tutor(tutor.id, SubmissionStatus.ACCEPTED)

        entries = [
            AcceptedSubmissionBrief(
                id=s.id,
                student_name=s.student.name,
                roll_number=s.student.roll_number,
                class_name=s.student.student_class.name if s.student.student_class else "Unknown",
                company_name=s.company_name,
                role=s.role,
                start_date=s.start_date,
                end_date=s.end_date,
                stipend=s.stipend,
            )
            for s in submissions
        ]
        return AcceptedSubmissionsResponse(count=len(entries), submissions=entries)

    async def decide(self, principal: Principal, submission_id: str,
                     decision: DecisionRequest) -> SubmissionAck:
        """
        Accept or decline a submission.

        Only the tutor recorded on the submission may decide. A decision on an
        already decided submission replaces it.
        """
        if not principal.is_staff:
            raise UnauthorizedError("Unauthorized: Only tutors can update decisions")

        submission = await self.submissions.get(submission_id)
        if not submission:
            raise SubmissionNotFoundError(submission_id)

        staff = await self.directory.get_staff_by_email(principal.email)
        if not staff or submission.tutor_id != staff.id:
            logger.warning(
                f"[Submissions] {principal.email} attempted to decide submission {submission_id} "
                f"assigned to another tutor"
            )
            raise ForbiddenError("Only the assigned tutor can update this submission")

        status = SubmissionStatus(decision.status)
        submission.status = status
        submission.processed = True
        submission.remarks = decision.remarks or ""
        submission.decided_at = datetime.utcnow()

        student = submission.student
        self.notifications.enqueue_student_notification(
            student.email,
            student.name,
            status.value,
            decision.remarks or "No remarks provided",
            submission_id=submission.id,
        )

        try:
            await self.db.commit()
        except StaleDataError:
            await self.db.rollback()
            logger.warning(f"[Submissions] Decision on {submission_id} lost to a concurrent update")
            raise ConflictError("Submission", submission_id)

        logger.log_submission_event(submission.id, status.value, tutor_email=staff.email)
        return SubmissionAck(
            message=f"Submission {status.value} successfully",
            submission_id=submission.id,
        )

    # =====================================================
    # REPORTING
    # =====================================================

    async def admin_overview(self) -> AdminOverviewResponse:
        """Accepted submissions grouped by department name, then class name"""
        submissions = await self.submissions.list_by_status(SubmissionStatus.ACCEPTED)

        grouped: Dict[str, Dict[str, List[OverviewEntry]]] = defaultdict(lambda: defaultdict(list))
        for s in submissions:
            student_class = s.student.student_class
            department = student_class.department if student_class else None
            dept_name = department.name if department else UNKNOWN_DEPARTMENT
            class_name = student_class.name if student_class else UNKNOWN_CLASS

            grouped[dept_name][class_name].append(
                OverviewEntry(student_name=s.student.name, company_name=s.company_name)
            )

        return AdminOverviewResponse(
            overview={dept: dict(classes) for dept, classes in grouped.items()}
        )

    async def get_document_context(self, submission_id: str) -> UndertakingData:
        """Everything the undertaking PDF prints for a submission"""
        submission = await self.submissions.get(submission_id)
        if not submission:
            raise SubmissionNotFoundError(submission_id)

        student = submission.student
        return UndertakingData(
            student_name=student.name,
            roll_number=student.roll_number,
            department_name=student.department.name if student.department else None,
            company_name=submission.company_name,
            company_address=submission.company_address,
            start_date=submission.start_date,
            end_date=submission.end_date,
            supervisor_name=submission.supervisor_name,
            supervisor_email=submission.supervisor_email,
            department_guide=submission.department_guide,
            stipend=submission.stipend,
            pending_redo_courses=submission.pending_redo_courses,
            pending_ra_courses=submission.pending_ra_courses,
            pending_current_courses=submission.pending_current_courses,
            remarks=submission.remarks,
            submission_id=submission.id,
        )


def get_submission_service(db: AsyncSession) -> SubmissionLifecycleService:
    """Factory function to create SubmissionLifecycleService instance"""
    return SubmissionLifecycleService(db)

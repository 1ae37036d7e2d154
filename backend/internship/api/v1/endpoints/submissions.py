"""
Submission API Endpoints

Student, tutor and admin views of internship submissions, the student
profile/department endpoints and the undertaking PDF download.

Fixed paths (/admin/overview, /pending, /me, ...) are declared before the
/{submission_id} routes so they are never captured as ids.
"""

from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from internship.core.config import settings
from internship.core.database import get_db
from internship.core.exceptions import InvalidInputError, SubmissionNotFoundError
from internship.core.rate_limiter import pdf_rate_limit
from internship.core.security import Principal
from internship.modules.auth.dependencies import get_current_principal, get_overview_reader
from internship.schemas.profile import (
    DepartmentListResponse,
    DepartmentSelectedResponse,
    ProfileResponse,
    ProfileUpdatedResponse,
    SelectDepartmentRequest,
    UpdateProfileRequest,
)
from internship.schemas.submission import (
    AcceptedSubmissionsResponse,
    AdminOverviewResponse,
    DecisionRequest,
    MySubmissionsResponse,
    PendingSubmissionsResponse,
    SubmissionAck,
    SubmissionCreate,
)
from internship.services.notification_service import dispatch_pending_notifications
from internship.services.profile_service import get_profile_service
from internship.services.submission_service import get_submission_service
from internship.services.undertaking_pdf import render_undertaking

router = APIRouter(prefix="/submissions", tags=["Submissions"])


def _schedule_dispatch(background_tasks: BackgroundTasks) -> None:
    if settings.NOTIFICATION_DISPATCH_ON_REQUEST:
        background_tasks.add_task(dispatch_pending_notifications)


# ==================== Student ====================

@router.post("", response_model=SubmissionAck, status_code=status.HTTP_201_CREATED)
async def create_submission(
    data: SubmissionCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Submit internship details; the named tutor is bound to the student's class"""
    service = get_submission_service(db)
    ack = await service.create_submission(principal, data)
    _schedule_dispatch(background_tasks)
    return ack


@router.get("/me", response_model=MySubmissionsResponse)
async def get_my_submissions(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Submissions of the calling student with their tutor's email"""
    return await get_submission_service(db).list_mine(principal)


@router.get("/me/profile", response_model=ProfileResponse)
async def get_my_profile(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    return await get_profile_service(db).get_profile(principal)


@router.post("/me/select-department", response_model=DepartmentSelectedResponse)
async def select_department(
    body: SelectDepartmentRequest,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    return await get_profile_service(db).select_department(principal, body.department_id)


@router.patch("/me/update-profile", response_model=ProfileUpdatedResponse)
async def update_my_profile(
    body: UpdateProfileRequest,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Update roll number, year and/or department"""
    return await get_profile_service(db).update_profile(principal, body)


@router.get("/departments", response_model=DepartmentListResponse)
async def list_departments(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    return await get_profile_service(db).list_departments()


# ==================== Tutor ====================

@router.get("/pending", response_model=PendingSubmissionsResponse)
async def get_pending_submissions(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Pending submissions assigned to the calling tutor"""
    return await get_submission_service(db).list_pending(principal)


@router.get("/accepted-submissions/class", response_model=AcceptedSubmissionsResponse)
async def get_accepted_submissions(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Accepted submissions of the calling tutor, with each student's class"""
    return await get_submission_service(db).list_accepted_by_tutor(principal)


# ==================== Admin ====================

@router.get("/admin/overview", response_model=AdminOverviewResponse)
async def get_admin_overview(
    db: AsyncSession = Depends(get_db),
    reader: Optional[Principal] = Depends(get_overview_reader)
):
    """Accepted submissions grouped by department and class"""
    return await get_submission_service(db).admin_overview()


# ==================== Per submission ====================

@router.patch("/{submission_id}/decision", response_model=SubmissionAck)
async def update_submission_decision(
    submission_id: str,
    decision: DecisionRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Accept or decline a submission (assigned tutor only)"""
    service = get_submission_service(db)
    ack = await service.decide(principal, submission_id, decision)
    _schedule_dispatch(background_tasks)
    return ack


@router.get("/{submission_id}/download-pdf")
@pdf_rate_limit()
async def download_pdf(
    request: Request,
    submission_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Download the two-page undertaking for a submission"""
    service = get_submission_service(db)
    try:
        data = await service.get_document_context(submission_id)
    except SubmissionNotFoundError:
        raise InvalidInputError("Submission not accepted yet", field="submission_id")

    pdf_bytes = await run_in_threadpool(render_undertaking, data)

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={data.filename}"}
    )

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from simhire.api.deps import get_pagination, paginated
from simhire.api.jobs import PUBLIC_STATUSES
from simhire.auth import CurrentUser, get_current_user, require_candidate, require_company
from simhire.database import get_db, utcnow
from simhire.errors import bad_request, forbidden, not_found
from simhire.middleware.metrics import record_stage_transition
from simhire.models import Application, Job
from simhire.schemas import (
    ApplicationCreate,
    ApplicationResponse,
    ApplicationStatusUpdate,
    Pagination,
    success_response,
)
from simhire.services.pipeline import JOB_POLICY, ApplicationStage
from simhire.services.stats import application_summary

logger = logging.getLogger(__name__)
router = APIRouter()


def append_note(existing: Optional[str], stage: str, text: str) -> str:
    """Reviewer notes are kept as one line per status change."""
    line = f"[{utcnow().isoformat(timespec='seconds')}] {stage}: {text}"
    return f"{existing}\n{line}" if existing else line


async def _get_application(db: AsyncSession, application_id: str) -> Application:
    result = await db.execute(select(Application).where(Application.id == application_id))
    application = result.scalar_one_or_none()
    if not application:
        raise not_found("Application")
    return application


def _responses(applications) -> list[ApplicationResponse]:
    return [ApplicationResponse.model_validate(a) for a in applications]


@router.post("/apply", status_code=201)
async def apply_for_job(
    payload: ApplicationCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_candidate),
):
    result = await db.execute(select(Job).where(Job.id == payload.job_id))
    job = result.scalar_one_or_none()
    if not job:
        raise not_found("Job")
    if job.status not in PUBLIC_STATUSES:
        raise bad_request("This job is no longer accepting applications.")

    existing = await db.execute(
        select(Application.id).where(
            Application.candidate_id == user.id,
            Application.job_id == payload.job_id,
        )
    )
    if existing.scalar_one_or_none():
        raise bad_request("You have already applied for this job.")

    application = Application(
        candidate_id=user.id,
        company_id=job.company_id,
        stage=ApplicationStage.APPLIED.value,
        notes=append_note(None, "applied", JOB_POLICY.message_for("applied")),
        **payload.model_dump(),
    )
    db.add(application)
    await db.commit()
    await db.refresh(application)

    logger.info(f"Candidate {user.id} applied to job {job.id}")
    return success_response(
        {"application": ApplicationResponse.model_validate(application)},
        "Application submitted successfully!",
    )


@router.get("/my-applications")
async def list_my_applications(
    pagination: Optional[Pagination] = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_candidate),
):
    result = await db.execute(
        select(Application)
        .where(Application.candidate_id == user.id)
        .order_by(Application.applied_at.desc())
    )
    applications = _responses(result.scalars().all())
    return success_response(paginated("applications", applications, pagination))


@router.get("/company")
async def list_company_applications(
    job_id: Optional[str] = Query(None),
    status: Optional[ApplicationStage] = Query(None),
    pagination: Optional[Pagination] = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_company),
):
    query = select(Application).where(Application.company_id == user.id)
    if job_id:
        query = query.where(Application.job_id == job_id)
    if status:
        query = query.where(Application.stage == status.value)

    result = await db.execute(query.order_by(Application.applied_at.desc()))
    applications = _responses(result.scalars().all())
    return success_response(paginated("applications", applications, pagination))


@router.get("/stats")
async def get_application_stats(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    owner = Application.candidate_id if user.role == "candidate" else Application.company_id
    result = await db.execute(select(Application).where(owner == user.id))
    return success_response({"stats": application_summary(result.scalars().all())})


@router.get("/{application_id}")
async def get_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    application = await _get_application(db, application_id)
    owner = application.candidate_id if user.role == "candidate" else application.company_id
    if owner != user.id:
        raise forbidden("Access denied.")
    return success_response({"application": ApplicationResponse.model_validate(application)})


@router.put("/{application_id}/status")
async def update_application_status(
    application_id: str,
    update: ApplicationStatusUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_company),
):
    application = await _get_application(db, application_id)
    if application.company_id != user.id:
        raise forbidden("Access denied.")

    stage = update.status.value
    previous = application.stage
    application.stage = stage
    application.last_stage_change = utcnow()
    application.notes = append_note(
        application.notes, stage, update.notes or JOB_POLICY.message_for(stage)
    )

    await db.commit()
    await db.refresh(application)

    record_stage_transition("job", stage)
    logger.info(f"Application {application_id} moved {previous} -> {stage} by company {user.id}")
    return success_response(
        {"application": ApplicationResponse.model_validate(application)},
        "Application status updated successfully!",
    )


@router.delete("/{application_id}/withdraw")
async def withdraw_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_candidate),
):
    application = await _get_application(db, application_id)
    if application.candidate_id != user.id:
        raise forbidden("Access denied.")
    if JOB_POLICY.is_terminal(application.stage):
        raise bad_request("Cannot withdraw application with current status.")

    await db.delete(application)
    await db.commit()

    logger.info(f"Candidate {user.id} withdrew application {application_id}")
    return success_response(message="Application withdrawn successfully.")

"""
Internship application endpoints.

Internship applications carry no company column; ownership is resolved
through the internship they were submitted to.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from simhire.api.applications import append_note
from simhire.api.deps import get_pagination, paginated
from simhire.api.internships import get_internship_or_404
from simhire.auth import CurrentUser, get_current_user, require_candidate, require_company
from simhire.database import get_db, utcnow
from simhire.errors import already_exists, bad_request, forbidden, not_found
from simhire.middleware.metrics import record_stage_transition
from simhire.models import Internship, InternshipApplication
from simhire.schemas import (
    InternshipApplicationCreate,
    InternshipApplicationResponse,
    InternshipStatusUpdate,
    Pagination,
    success_response,
)
from simhire.services.pipeline import INTERNSHIP_POLICY, InternshipStage
from simhire.services.stats import internship_summary

logger = logging.getLogger(__name__)
router = APIRouter()


async def _get_application(db: AsyncSession, application_id: str) -> InternshipApplication:
    result = await db.execute(
        select(InternshipApplication).where(InternshipApplication.id == application_id)
    )
    application = result.scalar_one_or_none()
    if not application:
        raise not_found("Application")
    return application


async def _check_company_owns(db: AsyncSession, application: InternshipApplication, user: CurrentUser):
    internship = await get_internship_or_404(db, application.internship_id)
    if internship.company_id != user.id:
        raise forbidden("You do not have permission to access this application.")


def _company_applications_query(company_id: str):
    return (
        select(InternshipApplication)
        .join(Internship, Internship.id == InternshipApplication.internship_id)
        .where(Internship.company_id == company_id)
    )


def _responses(applications) -> list[InternshipApplicationResponse]:
    return [InternshipApplicationResponse.model_validate(a) for a in applications]


@router.post("", status_code=201)
@router.post("/apply", status_code=201)
async def apply_for_internship(
    payload: InternshipApplicationCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_candidate),
):
    internship = await get_internship_or_404(db, payload.internship_id)
    if internship.status != "active":
        raise bad_request("This internship is no longer accepting applications.")

    existing = await db.execute(
        select(InternshipApplication.id).where(
            InternshipApplication.candidate_id == user.id,
            InternshipApplication.internship_id == payload.internship_id,
        )
    )
    if existing.scalar_one_or_none():
        raise already_exists("You have already applied for this internship.")

    application = InternshipApplication(
        candidate_id=user.id,
        stage=InternshipStage.APPLIED.value,
        **payload.model_dump(),
    )
    db.add(application)
    await db.commit()
    await db.refresh(application)

    logger.info(f"Candidate {user.id} applied to internship {internship.id}")
    return success_response(
        {"application": InternshipApplicationResponse.model_validate(application)},
        "Application submitted successfully",
    )


@router.get("/candidate/my-applications")
@router.get("/my-applications")
async def list_my_applications(
    pagination: Optional[Pagination] = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_candidate),
):
    result = await db.execute(
        select(InternshipApplication)
        .where(InternshipApplication.candidate_id == user.id)
        .order_by(InternshipApplication.applied_at.desc())
    )
    applications = _responses(result.scalars().all())
    return success_response(paginated("applications", applications, pagination))


@router.get("/company/applications")
@router.get("/company")
async def list_company_applications(
    internship_id: Optional[str] = Query(None),
    status: Optional[InternshipStage] = Query(None),
    pagination: Optional[Pagination] = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_company),
):
    query = _company_applications_query(user.id)
    if internship_id:
        query = query.where(InternshipApplication.internship_id == internship_id)
    if status:
        query = query.where(InternshipApplication.stage == status.value)

    result = await db.execute(query.order_by(InternshipApplication.applied_at.desc()))
    applications = _responses(result.scalars().all())
    return success_response(paginated("applications", applications, pagination))


@router.get("/company/stats")
async def get_application_stats(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_company),
):
    result = await db.execute(_company_applications_query(user.id))
    return success_response({"stats": internship_summary(result.scalars().all())})


@router.put("/{application_id}/status")
async def update_application_status(
    application_id: str,
    update: InternshipStatusUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_company),
):
    application = await _get_application(db, application_id)
    await _check_company_owns(db, application, user)

    stage = update.status.value
    previous = application.stage
    application.stage = stage
    application.reviewed_at = utcnow()
    application.notes = append_note(
        application.notes, stage, update.notes or INTERNSHIP_POLICY.message_for(stage)
    )
    if update.interview_schedule:
        application.interview_schedule = update.interview_schedule

    await db.commit()
    await db.refresh(application)

    record_stage_transition("internship", stage)
    logger.info(
        f"Internship application {application_id} moved {previous} -> {stage} by company {user.id}"
    )
    return success_response(
        {"application": InternshipApplicationResponse.model_validate(application)},
        "Application status updated successfully",
    )


@router.get("/{application_id}")
async def get_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    application = await _get_application(db, application_id)
    if user.role == "candidate":
        if application.candidate_id != user.id:
            raise forbidden("Access denied.")
    else:
        await _check_company_owns(db, application, user)
    return success_response(
        {"application": InternshipApplicationResponse.model_validate(application)}
    )


@router.delete("/{application_id}")
async def delete_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_company),
):
    application = await _get_application(db, application_id)
    await _check_company_owns(db, application, user)

    await db.delete(application)
    await db.commit()

    logger.info(f"Company {user.id} deleted internship application {application_id}")
    return success_response(message="Application deleted successfully")

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from simhire.auth import CurrentUser, get_current_user
from simhire.database import get_db
from simhire.models import Application, Job, SimulasiResult
from simhire.schemas import success_response
from simhire.services.stats import candidate_metrics, company_metrics

router = APIRouter()


@router.get("/stats")
async def get_dashboard_stats(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """
    Overview numbers for the caller's dashboard.

    Companies get job and hiring metrics over their own postings;
    candidates get their application pipeline and simulasi progress.
    """
    if user.role == "company":
        jobs = await db.execute(select(Job).where(Job.company_id == user.id))
        applications = await db.execute(select(Application).where(Application.company_id == user.id))
        stats = company_metrics(jobs.scalars().all(), applications.scalars().all())
    else:
        applications = await db.execute(select(Application).where(Application.candidate_id == user.id))
        results = await db.execute(select(SimulasiResult).where(SimulasiResult.user_id == user.id))
        stats = candidate_metrics(applications.scalars().all(), results.scalars().all())

    return success_response({"stats": stats, "role": user.role})

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from simhire.api.deps import get_pagination, paginated
from simhire.auth import CurrentUser, get_optional_user, require_company
from simhire.database import get_db, utcnow
from simhire.errors import forbidden, not_found, validation_error
from simhire.models import Application, Job
from simhire.schemas import JobCreate, JobResponse, JobUpdate, Pagination, success_response

logger = logging.getLogger(__name__)
router = APIRouter()

PUBLIC_STATUSES = ("open", "active")


def _split(value: Optional[str]) -> list[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


async def _application_counts(db: AsyncSession, job_ids: list[str]) -> dict[str, int]:
    if not job_ids:
        return {}
    query = (
        select(Application.job_id, func.count(Application.id))
        .where(Application.job_id.in_(job_ids))
        .group_by(Application.job_id)
    )
    result = await db.execute(query)
    return {row[0]: row[1] for row in result.all()}


async def _to_responses(db: AsyncSession, jobs: list[Job]) -> list[JobResponse]:
    counts = await _application_counts(db, [job.id for job in jobs])
    return [
        JobResponse.model_validate(job).model_copy(update={"application_count": counts.get(job.id, 0)})
        for job in jobs
    ]


async def _get_owned_job(db: AsyncSession, job_id: str, user: CurrentUser) -> Job:
    result = await db.execute(select(Job).where(Job.id == job_id))
    job = result.scalar_one_or_none()
    if not job:
        raise not_found("Job")
    if job.company_id != user.id:
        raise forbidden("You do not have permission to modify this job.")
    return job


@router.get("")
async def list_jobs(
    search: Optional[str] = Query(None, min_length=1, max_length=200),
    q: Optional[str] = Query(None, min_length=1, max_length=200),
    location: Optional[str] = Query(None),
    employment_type: Optional[str] = Query(None),
    experience_level: Optional[str] = Query(None),
    skills: Optional[str] = Query(None),
    remote: Optional[bool] = Query(None),
    salary_min: Optional[float] = Query(None, ge=0),
    salary_max: Optional[float] = Query(None, ge=0),
    company_id: Optional[str] = Query(None),
    pagination: Optional[Pagination] = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
    user: Optional[CurrentUser] = Depends(get_optional_user),
):
    query = select(Job)

    # Drafts and closed postings are only listed for companies
    if user is None or user.role != "company":
        query = query.where(Job.status.in_(PUBLIC_STATUSES))

    # `q` is the short form of `search`
    search = search or q
    if search:
        term = f"%{search}%"
        query = query.where(Job.title.ilike(term) | Job.description.ilike(term))

    if location:
        query = query.where(Job.location.ilike(f"%{location}%"))

    if employment_type:
        query = query.where(Job.employment_type.in_(_split(employment_type)))

    if experience_level:
        query = query.where(Job.experience_level.in_(_split(experience_level)))

    if remote is not None:
        query = query.where(Job.location_mode == ("remote" if remote else "on-site"))

    if salary_min is not None:
        query = query.where(func.coalesce(Job.salary_min, 0) >= salary_min)

    if salary_max is not None:
        query = query.where(func.coalesce(Job.salary_max, 0) <= salary_max)

    if company_id:
        query = query.where(Job.company_id == company_id)

    result = await db.execute(query.order_by(Job.created_at.desc()))
    jobs = list(result.scalars().all())

    # Skills live in a JSON column; match any requested skill case-insensitively
    wanted = {s.lower() for s in _split(skills)}
    if wanted:
        jobs = [job for job in jobs if wanted & {s.lower() for s in job.skills or []}]

    return success_response(paginated("jobs", await _to_responses(db, jobs), pagination))


@router.get("/company/my-jobs")
async def list_company_jobs(
    status: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_company),
):
    query = select(Job).where(Job.company_id == user.id)
    if status:
        query = query.where(Job.status == status)
    result = await db.execute(query.order_by(Job.created_at.desc()))
    jobs = await _to_responses(db, list(result.scalars().all()))
    return success_response({"jobs": jobs, "total": len(jobs)})


@router.get("/{job_id}")
async def get_job(
    job_id: str,
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(Job).where(Job.id == job_id))
    job = result.scalar_one_or_none()
    if not job:
        raise not_found("Job")
    (response,) = await _to_responses(db, [job])
    return success_response({"job": response})


@router.post("", status_code=201)
async def create_job(
    payload: JobCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_company),
):
    data = payload.model_dump(exclude={"salary_range"})
    job = Job(company_id=user.id, **data)
    db.add(job)
    await db.commit()
    await db.refresh(job)

    logger.info(f"Company {user.id} created job {job.id}")
    return success_response({"job": JobResponse.model_validate(job)}, "Job created successfully!")


@router.put("/{job_id}")
async def update_job(
    job_id: str,
    update: JobUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_company),
):
    job = await _get_owned_job(db, job_id, user)

    update_data = update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(job, field, value)

    # A partial update can still invert the stored range
    if job.salary_min is not None and job.salary_max is not None and job.salary_max < job.salary_min:
        await db.rollback()
        raise validation_error(
            "Validation failed",
            [{"field": "salary_max", "message": "Maximum salary must be greater than or equal to minimum salary"}],
        )

    await db.commit()
    await db.refresh(job)

    (response,) = await _to_responses(db, [job])
    return success_response({"job": response}, "Job updated successfully!")


@router.put("/{job_id}/close")
async def close_job(
    job_id: str,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_company),
):
    job = await _get_owned_job(db, job_id, user)
    job.status = "closed"
    job.closed_at = utcnow()
    await db.commit()
    await db.refresh(job)

    (response,) = await _to_responses(db, [job])
    return success_response({"job": response}, "Job closed successfully.")


@router.delete("/{job_id}")
async def delete_job(
    job_id: str,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_company),
):
    job = await _get_owned_job(db, job_id, user)
    await db.delete(job)
    await db.commit()

    logger.info(f"Company {user.id} deleted job {job_id}")
    return success_response(message="Job deleted successfully.")

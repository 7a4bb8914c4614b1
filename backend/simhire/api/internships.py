import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from simhire.api.deps import get_pagination, paginated
from simhire.auth import CurrentUser, require_company
from simhire.database import get_db
from simhire.errors import forbidden, not_found
from simhire.models import Internship, InternshipApplication
from simhire.schemas import (
    InternshipCreate,
    InternshipResponse,
    InternshipUpdate,
    Pagination,
    success_response,
)

logger = logging.getLogger(__name__)
router = APIRouter()


async def _to_responses(db: AsyncSession, internships: list[Internship]) -> list[InternshipResponse]:
    ids = [i.id for i in internships]
    counts: dict[str, int] = {}
    if ids:
        result = await db.execute(
            select(InternshipApplication.internship_id, func.count(InternshipApplication.id))
            .where(InternshipApplication.internship_id.in_(ids))
            .group_by(InternshipApplication.internship_id)
        )
        counts = {row[0]: row[1] for row in result.all()}
    return [
        InternshipResponse.model_validate(i).model_copy(update={"application_count": counts.get(i.id, 0)})
        for i in internships
    ]


async def get_internship_or_404(db: AsyncSession, internship_id: str) -> Internship:
    result = await db.execute(select(Internship).where(Internship.id == internship_id))
    internship = result.scalar_one_or_none()
    if not internship:
        raise not_found("Internship")
    return internship


async def _get_owned_internship(db: AsyncSession, internship_id: str, user: CurrentUser) -> Internship:
    internship = await get_internship_or_404(db, internship_id)
    if internship.company_id != user.id:
        raise forbidden("You do not have permission to modify this internship.")
    return internship


@router.get("")
async def list_internships(
    search: Optional[str] = Query(None, min_length=1, max_length=200),
    location: Optional[str] = Query(None),
    duration: Optional[str] = Query(None),
    is_paid: Optional[bool] = Query(None),
    remote: Optional[bool] = Query(None),
    tags: Optional[list[str]] = Query(None),
    pagination: Optional[Pagination] = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
):
    query = select(Internship).where(Internship.status == "active")

    if search:
        term = f"%{search}%"
        query = query.where(Internship.position.ilike(term) | Internship.description.ilike(term))
    if location:
        query = query.where(Internship.location.ilike(f"%{location}%"))
    if duration:
        query = query.where(Internship.duration == duration)
    if is_paid is not None:
        query = query.where(Internship.is_paid == is_paid)
    if remote is not None:
        query = query.where(Internship.remote == remote)

    result = await db.execute(query.order_by(Internship.created_at.desc()))
    internships = list(result.scalars().all())

    if tags:
        wanted = set(tags)
        internships = [i for i in internships if wanted & set(i.tags or [])]

    return success_response(
        paginated("internships", await _to_responses(db, internships), pagination)
    )


@router.get("/company/my-internships")
async def list_company_internships(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_company),
):
    result = await db.execute(
        select(Internship)
        .where(Internship.company_id == user.id)
        .order_by(Internship.created_at.desc())
    )
    internships = await _to_responses(db, list(result.scalars().all()))
    return success_response({"internships": internships, "total": len(internships)})


@router.get("/{internship_id}")
async def get_internship(
    internship_id: str,
    db: AsyncSession = Depends(get_db),
):
    internship = await get_internship_or_404(db, internship_id)
    (response,) = await _to_responses(db, [internship])
    return success_response({"internship": response})


@router.post("", status_code=201)
async def create_internship(
    payload: InternshipCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_company),
):
    internship = Internship(company_id=user.id, **payload.model_dump())
    db.add(internship)
    await db.commit()
    await db.refresh(internship)

    logger.info(f"Company {user.id} created internship {internship.id}")
    return success_response(
        {"internship": InternshipResponse.model_validate(internship)},
        "Internship created successfully",
    )


@router.put("/{internship_id}")
async def update_internship(
    internship_id: str,
    update: InternshipUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_company),
):
    internship = await _get_owned_internship(db, internship_id, user)

    for field, value in update.model_dump(exclude_unset=True).items():
        setattr(internship, field, value)

    await db.commit()
    await db.refresh(internship)

    (response,) = await _to_responses(db, [internship])
    return success_response({"internship": response}, "Internship updated successfully")


@router.delete("/{internship_id}")
async def delete_internship(
    internship_id: str,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_company),
):
    internship = await _get_owned_internship(db, internship_id, user)
    await db.delete(internship)
    await db.commit()

    logger.info(f"Company {user.id} deleted internship {internship_id}")
    return success_response(message="Internship deleted successfully")

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from simhire.auth import CurrentUser, get_current_user, require_candidate, require_company
from simhire.config import get_settings
from simhire.database import get_db
from simhire.errors import bad_request, forbidden, not_found
from simhire.middleware.metrics import record_simulasi_submission
from simhire.models import SimulasiResult
from simhire.schemas import (
    Leaderboard,
    LeaderboardEntry,
    SimulasiCategory,
    SimulasiResultResponse,
    SimulasiStats,
    SimulasiSubmit,
    success_response,
)
from simhire.services.simulasi import CATEGORIES, UnknownCategoryError, evaluate_submission, get_category
from simhire.services.stats import simulasi_summary, top_n

logger = logging.getLogger(__name__)
router = APIRouter()
settings = get_settings()


def _leaderboard(category_id: str, results, limit: int) -> Leaderboard:
    entries = [
        LeaderboardEntry(
            position=ranked.position,
            **SimulasiResultResponse.model_validate(ranked.result).model_dump(),
        )
        for ranked in top_n(results, limit)
    ]
    return Leaderboard(category=SimulasiCategory(**get_category(category_id)), entries=entries)


@router.get("/categories")
async def list_categories():
    categories = [SimulasiCategory(**get_category(category_id)) for category_id in CATEGORIES]
    return success_response({"categories": categories})


@router.post("/submit", status_code=201)
async def submit_simulasi(
    payload: SimulasiSubmit,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_candidate),
):
    try:
        evaluation = evaluate_submission(
            payload.category_id,
            payload.task_results,
            payload.breakdown.model_dump(),
            badge_threshold=settings.badge_threshold,
        )
    except UnknownCategoryError as e:
        raise bad_request(str(e), code="INVALID_CATEGORY")

    result = SimulasiResult(
        user_id=user.id,
        category_id=payload.category_id,
        category_name=evaluation.category_name,
        total_score=evaluation.total_score,
        max_score=evaluation.max_score,
        percentage=evaluation.percentage,
        rank=evaluation.rank,
        badge=evaluation.badge,
        breakdown=payload.breakdown.model_dump(),
        total_time=evaluation.total_time,
        task_results=evaluation.task_results,
    )
    db.add(result)
    await db.commit()
    await db.refresh(result)

    record_simulasi_submission(payload.category_id, evaluation.rank)
    logger.info(
        f"Candidate {user.id} completed {payload.category_id}: "
        f"{evaluation.percentage}% ({evaluation.rank})"
    )
    return success_response(
        {"result": SimulasiResultResponse.model_validate(result)},
        "Simulasi submitted successfully!",
    )


@router.get("/my-results")
async def list_my_results(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_candidate),
):
    result = await db.execute(
        select(SimulasiResult)
        .where(SimulasiResult.user_id == user.id)
        .order_by(SimulasiResult.completed_at.desc())
    )
    results = [SimulasiResultResponse.model_validate(r) for r in result.scalars().all()]
    return success_response({"results": results, "total": len(results)})


@router.get("/stats")
async def get_simulasi_stats(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_candidate),
):
    result = await db.execute(select(SimulasiResult).where(SimulasiResult.user_id == user.id))
    stats = SimulasiStats(**simulasi_summary(result.scalars().all()))
    return success_response({"stats": stats})


@router.get("/results")
async def list_all_results(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_company),
):
    """Every candidate's results, newest first, for company talent review."""
    result = await db.execute(select(SimulasiResult).order_by(SimulasiResult.completed_at.desc()))
    results = [SimulasiResultResponse.model_validate(r) for r in result.scalars().all()]
    return success_response({"results": results, "total": len(results)})


@router.get("/leaderboards")
async def get_all_leaderboards(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(SimulasiResult))
    by_category: dict[str, list[SimulasiResult]] = {category_id: [] for category_id in CATEGORIES}
    for row in result.scalars().all():
        if row.category_id in by_category:
            by_category[row.category_id].append(row)

    leaderboards = {
        category_id: _leaderboard(category_id, rows, settings.leaderboard_preview_size)
        for category_id, rows in by_category.items()
    }
    return success_response({"leaderboards": leaderboards})


@router.get("/leaderboard/{category_id}")
async def get_leaderboard(
    category_id: str,
    limit: int = Query(settings.leaderboard_limit, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    if category_id not in CATEGORIES:
        raise not_found("Category")

    result = await db.execute(
        select(SimulasiResult).where(SimulasiResult.category_id == category_id)
    )
    return success_response(_leaderboard(category_id, result.scalars().all(), limit))


@router.get("/result/{result_id}")
async def get_result(
    result_id: str,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    result = await db.execute(select(SimulasiResult).where(SimulasiResult.id == result_id))
    row = result.scalar_one_or_none()
    if not row:
        raise not_found("Result")
    if user.role == "candidate" and row.user_id != user.id:
        raise forbidden("Access denied.")
    return success_response({"result": SimulasiResultResponse.model_validate(row)})

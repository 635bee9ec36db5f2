"""
Insights API endpoints.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Query

from focusplan.api.deps import CurrentUser, Insights, http_error
from focusplan.core.exceptions import FocusPlanError
from focusplan.models.insights import DailyInsights, WeeklyInsights

router = APIRouter()


@router.get("/daily", response_model=DailyInsights)
async def daily(
    user: CurrentUser,
    insights: Insights,
    day: Optional[date] = Query(None, alias="date"),
    timezone: Optional[str] = Query(None),
):
    """Planned, confirmed and executed minutes for one day."""
    try:
        return await insights.daily(user.id, day, timezone)
    except FocusPlanError as e:
        raise http_error(e) from e


@router.get("/weekly", response_model=WeeklyInsights)
async def weekly(
    user: CurrentUser,
    insights: Insights,
    week_start: Optional[date] = Query(None),
    timezone: Optional[str] = Query(None),
):
    """Seven-day rollup starting at ``week_start`` (defaults to this Monday)."""
    try:
        return await insights.weekly(user.id, week_start, timezone)
    except FocusPlanError as e:
        raise http_error(e) from e

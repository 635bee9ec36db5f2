"""
Planning API endpoints.

Propose a day plan, inspect it, confirm accepted blocks.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query

from focusplan.api.deps import CurrentUser, Planner, http_error
from focusplan.core.exceptions import FocusPlanError
from focusplan.models.calendar import FreeInterval
from focusplan.models.proposal import ConfirmRequest, ConfirmResult, Proposal, ProposeRequest

router = APIRouter()


@router.post("/propose", response_model=Proposal)
async def propose(
    user: CurrentUser,
    planner: Planner,
    request: Optional[ProposeRequest] = None,
):
    """Build a fresh proposal for a day (defaults to today)."""
    plan_date = request.plan_date if request else None
    try:
        return await planner.propose(user.id, plan_date)
    except FocusPlanError as e:
        raise http_error(e) from e


@router.get("/proposals/{proposal_id}", response_model=Proposal)
async def get_proposal(
    proposal_id: UUID,
    user: CurrentUser,
    planner: Planner,
):
    """Get a proposal with its blocks in their current state."""
    try:
        return await planner.get_proposal(user.id, proposal_id)
    except FocusPlanError as e:
        raise http_error(e) from e


@router.post("/confirm", response_model=ConfirmResult)
async def confirm(
    request: ConfirmRequest,
    user: CurrentUser,
    planner: Planner,
):
    """
    Confirm accepted blocks into the calendar.

    Safe to retry with the same body; blocks that already have an event are
    reported as already_confirmed.
    """
    try:
        return await planner.confirm(user.id, request.proposal_id, request.accept_block_ids)
    except FocusPlanError as e:
        raise http_error(e) from e


@router.get("/free-time", response_model=list[FreeInterval])
async def free_time(
    user: CurrentUser,
    planner: Planner,
    plan_date: Optional[date] = Query(None, alias="date"),
):
    """Free intervals inside working hours for a day."""
    try:
        return await planner.free_time(user.id, plan_date)
    except FocusPlanError as e:
        raise http_error(e) from e

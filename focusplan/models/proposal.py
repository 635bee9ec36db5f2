"""Proposal and planned block models for the propose/confirm flow."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from focusplan.models.calendar import BusyInterval
from focusplan.models.enums import BlockState, ProposalStatus


class PlannedBlock(BaseModel):
    """One contiguous scheduled slot assigned to one task."""

    id: UUID = Field(default_factory=uuid4)
    proposal_id: Optional[UUID] = None
    user_id: str = ""
    task_id: UUID
    title: str = ""
    plan_date: Optional[date] = None
    start: datetime
    end: datetime
    state: BlockState = BlockState.PROPOSED
    event_id: Optional[str] = None
    reason: Optional[str] = None
    # Row version for compare-and-set
    version: int = 0
    # Last state change; for a confirmed block without an event, the claim time
    updated_at: Optional[datetime] = None

    @property
    def minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60


class UnplaceableTask(BaseModel):
    task_id: UUID
    reason: str


class Proposal(BaseModel):
    """A point-in-time schedule for one user/day, pending acceptance.

    A new propose call always produces a new proposal; only ``status`` moves
    after creation.
    """

    id: UUID = Field(default_factory=uuid4)
    user_id: str
    plan_date: date
    timezone: str = "UTC"
    status: ProposalStatus = ProposalStatus.PROPOSED
    blocks: list[PlannedBlock] = Field(default_factory=list)
    unplaceable: list[UnplaceableTask] = Field(default_factory=list)
    busy_intervals: list[BusyInterval] = Field(default_factory=list)
    free_minutes: float = 0.0
    created_at: datetime
    expires_at: datetime

    @property
    def planned_minutes(self) -> float:
        return sum(block.minutes for block in self.blocks)


class ProposeRequest(BaseModel):
    plan_date: Optional[date] = None


class ConfirmRequest(BaseModel):
    proposal_id: UUID
    accept_block_ids: list[UUID] = Field(default_factory=list)


class CreatedBlock(BaseModel):
    block_id: UUID
    task_id: UUID
    event_id: str
    start: datetime
    end: datetime


class SkippedBlock(BaseModel):
    block_id: UUID
    task_id: UUID
    reason: str


class ConfirmResult(BaseModel):
    """Result of confirming a proposal."""

    proposal_id: UUID
    created: list[CreatedBlock] = Field(default_factory=list)
    skipped: list[SkippedBlock] = Field(default_factory=list)

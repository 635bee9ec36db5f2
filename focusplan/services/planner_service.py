"""
Planner service: propose a day plan and confirm it into the calendar.

propose runs FreeTime -> Scoring -> Placement and stores the result as a
new proposal. confirm claims each accepted block with a compare-and-set on
its row version, and only the winning caller creates the calendar event.
"""

import asyncio
from datetime import date, timedelta
from typing import Optional
from uuid import UUID, uuid4

from focusplan.core.config import Settings, get_settings
from focusplan.core.exceptions import (
    CalendarTimeoutError,
    ExternalServiceError,
    NotFoundError,
    StaleProposalError,
    ValidationError,
)
from focusplan.core.logger import setup_logger
from focusplan.interfaces.block_repository import IPlannedBlockRepository
from focusplan.interfaces.calendar_provider import ICalendarProvider
from focusplan.interfaces.proposal_repository import IProposalRepository
from focusplan.interfaces.task_repository import ITaskRepository
from focusplan.models.calendar import BusyInterval, CalendarEventCreate, FreeInterval
from focusplan.models.enums import BlockState, ProposalStatus, SkipReason
from focusplan.models.proposal import (
    ConfirmResult,
    CreatedBlock,
    PlannedBlock,
    Proposal,
    SkippedBlock,
)
from focusplan.models.schedule import WorkingHours
from focusplan.services.freetime_service import FreeTimeService
from focusplan.services.placement_service import PlacementService
from focusplan.services.scoring_service import ScoringService
from focusplan.utils.datetime_utils import ensure_utc, get_user_today, now_utc

logger = setup_logger(__name__)

STALE_STATUSES = (ProposalStatus.SUPERSEDED, ProposalStatus.EXPIRED)
# Re-reads after a lost compare-and-set before giving up on a block
CAS_ATTEMPTS = 3


class PlannerService:
    """Orchestrates day proposals and their confirmation."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        calendar_provider: ICalendarProvider,
        proposal_repo: IProposalRepository,
        block_repo: IPlannedBlockRepository,
        settings: Optional[Settings] = None,
        freetime_service: Optional[FreeTimeService] = None,
        scoring_service: Optional[ScoringService] = None,
        placement_service: Optional[PlacementService] = None,
    ):
        self.task_repo = task_repo
        self.calendar_provider = calendar_provider
        self.proposal_repo = proposal_repo
        self.block_repo = block_repo
        self.settings = settings or get_settings()
        self.freetime_service = freetime_service or FreeTimeService()
        self.scoring_service = scoring_service or ScoringService()
        self.placement_service = placement_service or PlacementService()

    # ===========================================
    # Helpers
    # ===========================================

    def default_working_hours(self) -> WorkingHours:
        return WorkingHours(
            start=self.settings.WORKDAY_START,
            end=self.settings.WORKDAY_END,
            timezone=self.settings.DEFAULT_TIMEZONE,
        )

    def _resolve_date(self, plan_date: Optional[date], working_hours: WorkingHours) -> date:
        if plan_date:
            return plan_date
        try:
            return get_user_today(working_hours.timezone)
        except ValueError as e:
            raise ValidationError(str(e)) from e

    async def _with_timeout(self, coro, action: str):
        try:
            return await asyncio.wait_for(coro, timeout=self.settings.CALENDAR_TIMEOUT_SECONDS)
        except asyncio.TimeoutError as e:
            raise CalendarTimeoutError(
                f"Calendar {action} timed out after {self.settings.CALENDAR_TIMEOUT_SECONDS}s"
            ) from e

    async def _list_busy(self, user_id: str, plan_date: date, timezone: str) -> list[BusyInterval]:
        return await self._with_timeout(
            self.calendar_provider.list_busy_intervals(user_id, plan_date, timezone),
            "busy lookup",
        )

    # ===========================================
    # Propose
    # ===========================================

    async def free_time(
        self,
        user_id: str,
        plan_date: Optional[date] = None,
        working_hours: Optional[WorkingHours] = None,
    ) -> list[FreeInterval]:
        """Current free intervals for a day, from a live calendar read."""
        hours = working_hours or self.default_working_hours()
        plan_date = self._resolve_date(plan_date, hours)
        busy = await self._list_busy(user_id, plan_date, hours.timezone)
        return self.freetime_service.compute_free_intervals(
            plan_date, hours, busy, self.settings.BUFFER_MINUTES
        )

    async def propose(
        self,
        user_id: str,
        plan_date: Optional[date] = None,
        working_hours: Optional[WorkingHours] = None,
    ) -> Proposal:
        """
        Build and store a fresh proposal for ``plan_date``.

        Any earlier live proposal for the same user and day is superseded.
        Tasks that already own a confirmed block on that day are left out,
        since their time is already on the calendar.

        Args:
            user_id: Owner user ID
            plan_date: Day to plan (defaults to today in the working timezone)
            working_hours: Override for the configured working hours

        Returns:
            The stored proposal
        """
        hours = working_hours or self.default_working_hours()
        plan_date = self._resolve_date(plan_date, hours)

        busy = await self._list_busy(user_id, plan_date, hours.timezone)
        free = self.freetime_service.compute_free_intervals(
            plan_date, hours, busy, self.settings.BUFFER_MINUTES
        )

        tasks = await self.task_repo.list_eligible(user_id, plan_date)
        confirmed = await self.block_repo.list_by_date(user_id, plan_date, BlockState.CONFIRMED)
        already_planned = {block.task_id for block in confirmed}
        candidates = [task for task in tasks if task.id not in already_planned]

        scored = self.scoring_service.rank(candidates, plan_date)
        placement = self.placement_service.place(
            scored,
            free,
            default_minutes=self.settings.DEFAULT_TASK_MINUTES,
            gap_minutes=self.settings.BREAK_AFTER_TASK_MINUTES,
        )

        created_at = now_utc()
        proposal_id = uuid4()
        blocks = [
            block.model_copy(
                update={
                    "proposal_id": proposal_id,
                    "user_id": user_id,
                    "plan_date": plan_date,
                    "start": ensure_utc(block.start),
                    "end": ensure_utc(block.end),
                }
            )
            for block in placement.blocks
        ]
        proposal = Proposal(
            id=proposal_id,
            user_id=user_id,
            plan_date=plan_date,
            timezone=hours.timezone,
            blocks=blocks,
            unplaceable=placement.unplaceable,
            busy_intervals=busy,
            free_minutes=self.freetime_service.total_minutes(free),
            created_at=created_at,
            expires_at=created_at + timedelta(minutes=self.settings.PROPOSAL_TTL_MINUTES),
        )
        saved = await self.proposal_repo.create(proposal)
        logger.info(
            f"Proposal {saved.id} for {user_id} on {plan_date}: "
            f"{len(saved.blocks)} block(s), {len(saved.unplaceable)} unplaceable, "
            f"{saved.planned_minutes:.0f}/{saved.free_minutes:.0f} free minutes used"
        )
        return saved

    async def get_proposal(self, user_id: str, proposal_id: UUID) -> Proposal:
        """
        Fetch a proposal owned by ``user_id``. A live proposal past its TTL
        is marked expired on read.

        Raises:
            NotFoundError: Unknown proposal or owned by another user
        """
        proposal = await self.proposal_repo.get(proposal_id)
        if not proposal or proposal.user_id != user_id:
            raise NotFoundError(f"Proposal {proposal_id} not found")
        if proposal.status not in STALE_STATUSES and now_utc() >= proposal.expires_at:
            if proposal.status == ProposalStatus.PROPOSED:
                proposal = await self.proposal_repo.update_status(proposal.id, ProposalStatus.EXPIRED)
        return proposal

    # ===========================================
    # Confirm
    # ===========================================

    async def confirm(
        self,
        user_id: str,
        proposal_id: UUID,
        accept_block_ids: list[UUID],
    ) -> ConfirmResult:
        """
        Materialise accepted blocks as calendar events.

        Safe to call repeatedly and concurrently: a block already confirmed
        is reported as ``already_confirmed`` and never gets a second event.
        Calendar failures are per block; the block keeps its prior state and
        a later confirm retries it.

        Raises:
            NotFoundError: Unknown proposal or owned by another user
            StaleProposalError: Proposal superseded or expired
            ValidationError: A block ID does not belong to the proposal
        """
        proposal = await self.proposal_repo.get(proposal_id)
        if not proposal or proposal.user_id != user_id:
            raise NotFoundError(f"Proposal {proposal_id} not found")
        if proposal.status in STALE_STATUSES:
            raise StaleProposalError(f"Proposal {proposal_id} is {proposal.status.value}")
        if now_utc() >= proposal.expires_at:
            # A confirmed proposal keeps its status; only its TTL has lapsed
            if proposal.status == ProposalStatus.PROPOSED:
                await self.proposal_repo.update_status(proposal.id, ProposalStatus.EXPIRED)
            raise StaleProposalError(f"Proposal {proposal_id} has expired")

        block_ids = {block.id for block in proposal.blocks}
        accepted = list(dict.fromkeys(accept_block_ids))
        unknown = [block_id for block_id in accepted if block_id not in block_ids]
        if unknown:
            raise ValidationError(
                f"{len(unknown)} block id(s) do not belong to proposal {proposal_id}",
                details=[str(block_id) for block_id in unknown],
            )

        accepted_ids = set(accepted)
        result = ConfirmResult(proposal_id=proposal.id)
        for block in proposal.blocks:
            if block.id in accepted_ids:
                await self._confirm_block(user_id, block, result)
            else:
                await self._skip_block(block, result)

        await self._mark_confirmed(proposal.id)
        logger.info(
            f"Confirm {proposal.id} for {user_id}: "
            f"{len(result.created)} created, {len(result.skipped)} skipped"
        )
        return result

    async def _reload(self, block: PlannedBlock) -> PlannedBlock:
        current = await self.block_repo.get(block.id)
        return current or block

    async def _confirm_block(self, user_id: str, block: PlannedBlock, result: ConfirmResult) -> None:
        prior = block
        claimed: Optional[PlannedBlock] = None
        for _ in range(CAS_ATTEMPTS):
            if prior.state == BlockState.CONFIRMED and not self._claim_abandoned(prior):
                break
            claimed = await self.block_repo.compare_and_set_state(
                prior.id, prior.state, prior.version, BlockState.CONFIRMED
            )
            if claimed:
                break
            prior = await self._reload(prior)

        if not claimed:
            result.skipped.append(
                SkippedBlock(
                    block_id=block.id,
                    task_id=block.task_id,
                    reason=SkipReason.ALREADY_CONFIRMED.value,
                )
            )
            return

        if prior.state == BlockState.CONFIRMED:
            logger.warning(f"Block {claimed.id}: retrying a claim that never got an event")
        restore_state = BlockState.PROPOSED if prior.state == BlockState.CONFIRMED else prior.state

        try:
            event_id = await self._with_timeout(
                self.calendar_provider.create_event(user_id, self._event_for(claimed)),
                "event creation",
            )
        except asyncio.CancelledError:
            await asyncio.shield(self._release(claimed, restore_state))
            raise
        except CalendarTimeoutError as e:
            logger.warning(f"Block {claimed.id}: {e.message}")
            await self._release(claimed, restore_state)
            result.skipped.append(
                SkippedBlock(
                    block_id=claimed.id,
                    task_id=claimed.task_id,
                    reason=SkipReason.CALENDAR_TIMEOUT.value,
                )
            )
            return
        except Exception as e:
            message = e.message if isinstance(e, ExternalServiceError) else str(e)
            logger.warning(f"Block {claimed.id}: calendar event creation failed: {message}")
            await self._release(claimed, restore_state)
            result.skipped.append(
                SkippedBlock(
                    block_id=claimed.id,
                    task_id=claimed.task_id,
                    reason=f"{SkipReason.CALENDAR_ERROR.value}: {message}",
                )
            )
            return

        stored = await self.block_repo.set_event_id(claimed.id, claimed.version, event_id)
        if not stored:
            logger.warning(f"Block {claimed.id} changed before event {event_id} could be attached")
        result.created.append(
            CreatedBlock(
                block_id=claimed.id,
                task_id=claimed.task_id,
                event_id=event_id,
                start=claimed.start,
                end=claimed.end,
            )
        )

    async def _release(self, claimed: PlannedBlock, prior_state: BlockState) -> None:
        """Undo a confirm claim after the calendar call failed."""
        reverted = await self.block_repo.compare_and_set_state(
            claimed.id, BlockState.CONFIRMED, claimed.version, prior_state
        )
        if not reverted:
            logger.error(f"Could not revert block {claimed.id} to {prior_state.value}")

    def _claim_abandoned(self, block: PlannedBlock) -> bool:
        """Confirmed without an event for longer than any calendar call can take."""
        if block.state != BlockState.CONFIRMED or block.event_id or not block.updated_at:
            return False
        lease = timedelta(seconds=self.settings.CONFIRM_CLAIM_LEASE_SECONDS)
        return now_utc() - block.updated_at > lease

    async def _skip_block(self, block: PlannedBlock, result: ConfirmResult) -> None:
        current = block
        if current.state == BlockState.PROPOSED:
            skipped = await self.block_repo.compare_and_set_state(
                current.id, current.state, current.version, BlockState.SKIPPED
            )
            if not skipped:
                current = await self._reload(current)
        elif self._claim_abandoned(current):
            released = await self.block_repo.compare_and_set_state(
                current.id, current.state, current.version, BlockState.SKIPPED
            )
            current = released or await self._reload(current)

        reason = (
            SkipReason.ALREADY_CONFIRMED
            if current.state == BlockState.CONFIRMED
            else SkipReason.NOT_ACCEPTED
        )
        result.skipped.append(
            SkippedBlock(block_id=block.id, task_id=block.task_id, reason=reason.value)
        )

    async def _mark_confirmed(self, proposal_id: UUID) -> None:
        proposal = await self.proposal_repo.get(proposal_id)
        if not proposal or proposal.status != ProposalStatus.PROPOSED:
            return
        if any(block.state == BlockState.CONFIRMED for block in proposal.blocks):
            await self.proposal_repo.update_status(proposal_id, ProposalStatus.CONFIRMED)

    @staticmethod
    def _event_for(block: PlannedBlock) -> CalendarEventCreate:
        return CalendarEventCreate(
            start=block.start,
            end=block.end,
            summary=block.title or "Focus block",
            description=block.reason or "",
            extended_private={
                "task_id": str(block.task_id),
                "block_id": str(block.id),
            },
        )

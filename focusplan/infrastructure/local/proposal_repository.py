"""SQLite proposal repository implementation."""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, func, select, update

from focusplan.infrastructure.local.block_repository import (
    block_model_to_orm,
    block_orm_to_model,
)
from focusplan.infrastructure.local.database import (
    PlannedBlockORM,
    ProposalORM,
    from_db_datetime,
    get_session_factory,
    to_db_datetime,
)
from focusplan.interfaces.proposal_repository import IProposalRepository
from focusplan.models.calendar import BusyInterval
from focusplan.models.enums import ProposalStatus
from focusplan.models.proposal import Proposal, UnplaceableTask


class SqliteProposalRepository(IProposalRepository):
    """SQLite implementation of proposal repository.

    Blocks are written alongside the proposal row and read back in their
    current state, so a fetched proposal reflects later confirms and skips.
    """

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: ProposalORM, blocks: list[PlannedBlockORM]) -> Proposal:
        return Proposal(
            id=UUID(orm.id),
            user_id=orm.user_id,
            plan_date=orm.plan_date,
            timezone=orm.timezone,
            status=ProposalStatus(orm.status),
            blocks=[block_orm_to_model(block) for block in blocks],
            unplaceable=[UnplaceableTask.model_validate(item) for item in orm.unplaceable_json or []],
            busy_intervals=[BusyInterval.model_validate(item) for item in orm.busy_json or []],
            free_minutes=orm.free_minutes or 0.0,
            created_at=from_db_datetime(orm.created_at),
            expires_at=from_db_datetime(orm.expires_at),
        )

    async def _load_blocks(self, session, proposal_id: str) -> list[PlannedBlockORM]:
        result = await session.execute(
            select(PlannedBlockORM)
            .where(PlannedBlockORM.proposal_id == proposal_id)
            .order_by(PlannedBlockORM.position)
        )
        return list(result.scalars().all())

    async def create(self, proposal: Proposal) -> Proposal:
        """Create a new proposal, superseding older live ones for the same day."""
        async with self._session_factory() as session:
            await session.execute(
                update(ProposalORM)
                .where(
                    and_(
                        ProposalORM.user_id == proposal.user_id,
                        ProposalORM.plan_date == proposal.plan_date,
                        ProposalORM.status.in_(
                            [ProposalStatus.PROPOSED.value, ProposalStatus.CONFIRMED.value]
                        ),
                    )
                )
                .values(status=ProposalStatus.SUPERSEDED.value)
            )
            # Read after the write above so SQLite already holds the write lock
            last_sequence = await session.scalar(
                select(func.max(ProposalORM.sequence)).where(
                    and_(
                        ProposalORM.user_id == proposal.user_id,
                        ProposalORM.plan_date == proposal.plan_date,
                    )
                )
            )

            orm = ProposalORM(
                id=str(proposal.id),
                user_id=proposal.user_id,
                plan_date=proposal.plan_date,
                timezone=proposal.timezone,
                status=proposal.status.value,
                sequence=(last_sequence or 0) + 1,
                unplaceable_json=[item.model_dump(mode="json") for item in proposal.unplaceable],
                busy_json=[item.model_dump(mode="json") for item in proposal.busy_intervals],
                free_minutes=proposal.free_minutes,
                created_at=to_db_datetime(proposal.created_at),
                expires_at=to_db_datetime(proposal.expires_at),
            )
            session.add(orm)
            # Parent row first so the block foreign keys resolve
            await session.flush()
            block_rows = []
            for position, block in enumerate(proposal.blocks):
                row = block_model_to_orm(block, position)
                session.add(row)
                block_rows.append(row)
            await session.commit()
            return self._orm_to_model(orm, block_rows)

    async def get(self, proposal_id: UUID) -> Optional[Proposal]:
        """Get a proposal by ID."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(ProposalORM).where(ProposalORM.id == str(proposal_id))
            )
            orm = result.scalar_one_or_none()
            if not orm:
                return None
            blocks = await self._load_blocks(session, orm.id)
            return self._orm_to_model(orm, blocks)

    async def get_latest(self, user_id: str, plan_date: date) -> Optional[Proposal]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ProposalORM)
                .where(
                    and_(
                        ProposalORM.user_id == user_id,
                        ProposalORM.plan_date == plan_date,
                    )
                )
                .order_by(ProposalORM.sequence.desc())
                .limit(1)
            )
            orm = result.scalar_one_or_none()
            if not orm:
                return None
            blocks = await self._load_blocks(session, orm.id)
            return self._orm_to_model(orm, blocks)

    async def list_latest_by_range(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
    ) -> list[Proposal]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ProposalORM)
                .where(
                    and_(
                        ProposalORM.user_id == user_id,
                        ProposalORM.plan_date >= start_date,
                        ProposalORM.plan_date <= end_date,
                    )
                )
                .order_by(ProposalORM.plan_date, ProposalORM.sequence.desc())
            )
            latest: dict[date, ProposalORM] = {}
            for orm in result.scalars().all():
                latest.setdefault(orm.plan_date, orm)

            proposals = []
            for plan_date in sorted(latest):
                orm = latest[plan_date]
                blocks = await self._load_blocks(session, orm.id)
                proposals.append(self._orm_to_model(orm, blocks))
            return proposals

    async def update_status(self, proposal_id: UUID, status: ProposalStatus) -> Optional[Proposal]:
        """Update the status of a proposal."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(ProposalORM).where(ProposalORM.id == str(proposal_id))
            )
            orm = result.scalar_one_or_none()
            if not orm:
                return None
            orm.status = status.value
            await session.commit()
            blocks = await self._load_blocks(session, orm.id)
            return self._orm_to_model(orm, blocks)

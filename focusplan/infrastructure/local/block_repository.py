"""
SQLite implementation of the planned block repository.

State transitions go through a compare-and-set UPDATE keyed on
(id, state, version), so concurrent confirms of the same block cannot both win.
"""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, delete, select, update

from focusplan.infrastructure.local.database import (
    PlannedBlockORM,
    from_db_datetime,
    get_session_factory,
    to_db_datetime,
)
from focusplan.interfaces.block_repository import IPlannedBlockRepository
from focusplan.models.enums import BlockState
from focusplan.models.proposal import PlannedBlock
from focusplan.utils.datetime_utils import now_utc


def block_orm_to_model(orm: PlannedBlockORM) -> PlannedBlock:
    """Convert ORM object to Pydantic model."""
    return PlannedBlock(
        id=UUID(orm.id),
        proposal_id=UUID(orm.proposal_id),
        user_id=orm.user_id,
        task_id=UUID(orm.task_id),
        title=orm.title or "",
        plan_date=orm.plan_date,
        start=from_db_datetime(orm.start_ts),
        end=from_db_datetime(orm.end_ts),
        state=BlockState(orm.state),
        event_id=orm.event_id,
        reason=orm.reason,
        version=orm.version,
        updated_at=from_db_datetime(orm.updated_at),
    )


def block_model_to_orm(block: PlannedBlock, position: int) -> PlannedBlockORM:
    """Build a new ORM row from a block model."""
    return PlannedBlockORM(
        id=str(block.id),
        proposal_id=str(block.proposal_id),
        user_id=block.user_id,
        task_id=str(block.task_id),
        title=block.title,
        plan_date=block.plan_date,
        position=position,
        start_ts=to_db_datetime(block.start),
        end_ts=to_db_datetime(block.end),
        state=block.state.value,
        event_id=block.event_id,
        reason=block.reason,
        version=block.version,
    )


class SqlitePlannedBlockRepository(IPlannedBlockRepository):
    """SQLite implementation of planned block repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    async def get(self, block_id: UUID) -> Optional[PlannedBlock]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(PlannedBlockORM).where(PlannedBlockORM.id == str(block_id))
            )
            orm = result.scalar_one_or_none()
            return block_orm_to_model(orm) if orm else None

    async def list_by_date(
        self,
        user_id: str,
        plan_date: date,
        state: Optional[BlockState] = None,
    ) -> list[PlannedBlock]:
        async with self._session_factory() as session:
            query = select(PlannedBlockORM).where(
                and_(
                    PlannedBlockORM.user_id == user_id,
                    PlannedBlockORM.plan_date == plan_date,
                )
            )
            if state:
                query = query.where(PlannedBlockORM.state == state.value)
            query = query.order_by(PlannedBlockORM.start_ts, PlannedBlockORM.id)
            result = await session.execute(query)
            return [block_orm_to_model(orm) for orm in result.scalars().all()]

    async def list_for_task(self, user_id: str, task_id: UUID) -> list[PlannedBlock]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(PlannedBlockORM)
                .where(
                    and_(
                        PlannedBlockORM.user_id == user_id,
                        PlannedBlockORM.task_id == str(task_id),
                    )
                )
                .order_by(PlannedBlockORM.start_ts)
            )
            return [block_orm_to_model(orm) for orm in result.scalars().all()]

    async def compare_and_set_state(
        self,
        block_id: UUID,
        expected_state: BlockState,
        expected_version: int,
        new_state: BlockState,
    ) -> Optional[PlannedBlock]:
        async with self._session_factory() as session:
            values = {
                "state": new_state.value,
                "version": expected_version + 1,
                "updated_at": to_db_datetime(now_utc()),
            }
            if new_state != BlockState.CONFIRMED:
                values["event_id"] = None
            result = await session.execute(
                update(PlannedBlockORM)
                .where(
                    and_(
                        PlannedBlockORM.id == str(block_id),
                        PlannedBlockORM.state == expected_state.value,
                        PlannedBlockORM.version == expected_version,
                    )
                )
                .values(**values)
            )
            await session.commit()
            if result.rowcount != 1:
                return None

        return await self.get(block_id)

    async def set_event_id(
        self,
        block_id: UUID,
        expected_version: int,
        event_id: str,
    ) -> Optional[PlannedBlock]:
        async with self._session_factory() as session:
            result = await session.execute(
                update(PlannedBlockORM)
                .where(
                    and_(
                        PlannedBlockORM.id == str(block_id),
                        PlannedBlockORM.version == expected_version,
                    )
                )
                .values(event_id=event_id, updated_at=to_db_datetime(now_utc()))
            )
            await session.commit()
            if result.rowcount != 1:
                return None

        return await self.get(block_id)

    async def delete_for_task(self, user_id: str, task_id: UUID) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                delete(PlannedBlockORM).where(
                    and_(
                        PlannedBlockORM.user_id == user_id,
                        PlannedBlockORM.task_id == str(task_id),
                    )
                )
            )
            await session.commit()
            return result.rowcount or 0

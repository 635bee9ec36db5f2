"""
Greedy placement of scored tasks into free intervals.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from focusplan.core.logger import setup_logger
from focusplan.models.calendar import FreeInterval
from focusplan.models.enums import TaskStatus, UnplaceableReason
from focusplan.models.proposal import PlannedBlock, UnplaceableTask
from focusplan.models.schedule import PlacementResult, ScoredTask

logger = setup_logger(__name__)


@dataclass
class _Slot:
    start: datetime
    end: datetime

    @property
    def remaining_minutes(self) -> float:
        return max(0.0, (self.end - self.start).total_seconds() / 60)


class PlacementService:
    """
    Assigns each task one contiguous block.

    Tasks are taken in the given order (highest score first). Each goes into
    the earliest free interval that still has room for its full duration,
    at that interval's current start; the interval then shrinks. Tasks are
    never split.
    """

    def place(
        self,
        scored_tasks: list[ScoredTask],
        free_intervals: list[FreeInterval],
        default_minutes: int,
        gap_minutes: int = 0,
    ) -> PlacementResult:
        """
        Place tasks into free intervals.

        Only ``todo`` tasks take part; anything else is left out of both
        the placed and unplaceable lists.

        Args:
            scored_tasks: Tasks in descending score order
            free_intervals: Free intervals sorted by start
            default_minutes: Duration for tasks without an estimate
            gap_minutes: Gap left after each placed block

        Returns:
            PlacementResult with blocks sorted by start
        """
        slots = [
            _Slot(interval.start, interval.end)
            for interval in sorted(free_intervals, key=lambda interval: interval.start)
        ]
        gap = timedelta(minutes=gap_minutes)

        blocks: list[PlannedBlock] = []
        unplaceable: list[UnplaceableTask] = []

        for item in scored_tasks:
            task = item.task
            if task.status != TaskStatus.TODO:
                continue

            duration = task.effective_minutes(default_minutes)
            slot = next((s for s in slots if s.remaining_minutes >= duration), None)
            if slot is None:
                total_remaining = sum(s.remaining_minutes for s in slots)
                reason = (
                    UnplaceableReason.NO_CAPACITY
                    if total_remaining < duration
                    else UnplaceableReason.TOO_LONG_FOR_ANY_SLOT
                )
                unplaceable.append(UnplaceableTask(task_id=task.id, reason=reason.value))
                continue

            start = slot.start
            end = start + timedelta(minutes=duration)
            blocks.append(
                PlannedBlock(
                    task_id=task.id,
                    title=task.title,
                    start=start,
                    end=end,
                    reason=item.reason or None,
                )
            )
            slot.start = min(end + gap, slot.end)

        blocks.sort(key=lambda block: (block.start, str(block.task_id)))
        logger.debug(
            f"Placed {len(blocks)} block(s), {len(unplaceable)} unplaceable, "
            f"{sum(s.remaining_minutes for s in slots):.0f} free minutes left"
        )
        return PlacementResult(blocks=blocks, unplaceable=unplaceable)

"""Interface for external calendar providers."""

from abc import ABC, abstractmethod
from datetime import date

from focusplan.models.calendar import BusyInterval, CalendarEventCreate


class ICalendarProvider(ABC):
    """Abstract interface for the user's external calendar.

    All calls are network I/O in production adapters and may fail
    transiently; failures surface as ExternalServiceError.
    """

    @abstractmethod
    async def list_busy_intervals(
        self,
        user_id: str,
        day: date,
        timezone: str,
    ) -> list[BusyInterval]:
        """List busy spans overlapping ``day`` (in ``timezone``), sorted by start.

        Args:
            user_id: The user ID
            day: Calendar day
            timezone: IANA timezone the day is interpreted in

        Returns:
            Busy intervals, clipped to the day
        """
        pass

    @abstractmethod
    async def create_event(self, user_id: str, event: CalendarEventCreate) -> str:
        """Create an event.

        Args:
            user_id: The user ID
            event: Event payload

        Returns:
            The provider's event ID
        """
        pass

    @abstractmethod
    async def delete_event(self, user_id: str, event_id: str) -> bool:
        """Delete an event. A missing event counts as deleted.

        Returns:
            True once the event no longer exists
        """
        pass

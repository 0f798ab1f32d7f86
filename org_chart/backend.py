"""Backend interface for loading and persisting employees."""

from abc import ABC, abstractmethod
from typing import Any

from org_chart.models import Employee


class Backend(ABC):
    """Abstract base class for employee backends.

    A backend is both the source of the full employee collection and the
    sink for attribute updates. Attribute dicts use the wire keys
    (``name``, ``designation``, ``team``, ``managerId``).
    """

    @abstractmethod
    async def fetch_employees(self) -> list[Employee]:
        """Fetch every employee."""
        pass

    @abstractmethod
    async def update_employee(self, employee_id: str, attributes: dict[str, Any]) -> Employee:
        """Update some or all attributes of an employee and return the stored record."""
        pass

    async def aclose(self) -> None:
        """Release any open connections."""
        return None

"""Authoritative in-memory store of employees and their manager links."""

from collections.abc import Callable, Iterable
from dataclasses import replace

import structlog

from org_chart.filters import VisibilityFilter
from org_chart.models import Employee

logger = structlog.get_logger()

Listener = Callable[[str], None]


class HierarchyStore:
    """Single source of truth for the organization forest.

    Readers get copies of the stored employees; ``set_manager`` is the only
    way to change a manager link and ``replace_all`` the only way to swap the
    whole collection. Every change bumps ``version`` and notifies listeners.
    """

    def __init__(self, employees: Iterable[Employee] | None = None) -> None:
        self._employees: dict[str, Employee] = {}
        self._listeners: list[Listener] = []
        self.version = 0
        if employees is not None:
            self._load(employees)

    def __len__(self) -> int:
        return len(self._employees)

    def __contains__(self, employee_id: object) -> bool:
        return employee_id in self._employees

    def subscribe(self, listener: Listener) -> None:
        """Register a callback invoked with a change reason after each mutation."""
        self._listeners.append(listener)

    # -- Reads -------------------------------------------------------------

    def all(self) -> list[Employee]:
        """Return every employee, in load order."""
        return [replace(employee) for employee in self._employees.values()]

    def get(self, employee_id: str) -> Employee | None:
        employee = self._employees.get(employee_id)
        return replace(employee) if employee is not None else None

    def manager_of(self, employee_id: str) -> str | None:
        """Return the manager id of an employee, or None for roots and unknown ids."""
        employee = self._employees.get(employee_id)
        if employee is None:
            return None
        return employee.manager_id or None

    def filtered(self, visibility: VisibilityFilter) -> list[Employee]:
        return visibility.apply(self.all())

    def teams(self) -> list[str]:
        """Return the distinct non-empty teams, in order of first appearance."""
        seen: dict[str, None] = {}
        for employee in self._employees.values():
            if employee.team:
                seen.setdefault(employee.team, None)
        return list(seen)

    # -- Writes ------------------------------------------------------------

    def replace_all(self, employees: Iterable[Employee]) -> None:
        """Replace the whole collection, e.g. after fetching from a backend."""
        self._load(employees)
        logger.info("Employee collection replaced", count=len(self._employees))
        self._notify("replace")

    def set_manager(self, employee_id: str, manager_id: str | None) -> str | None:
        """Point an employee at a new manager and return the previous manager id.

        Raises:
            KeyError: if the employee does not exist
        """
        if employee_id not in self._employees:
            raise KeyError(f"Unknown employee: {employee_id}")

        employee = self._employees[employee_id]
        previous = employee.manager_id or None
        manager_id = manager_id or None
        if previous == manager_id:
            logger.debug("Manager unchanged", employee_id=employee_id, manager_id=manager_id)
            return previous

        employee.manager_id = manager_id
        logger.info("Manager changed", employee_id=employee_id, previous=previous, manager_id=manager_id)
        self._notify("set_manager")
        return previous

    def _load(self, employees: Iterable[Employee]) -> None:
        self._employees = {}
        for employee in employees:
            if employee.id in self._employees:
                logger.warning("Duplicate employee id, keeping last record", employee_id=employee.id)
            self._employees[employee.id] = replace(employee, manager_id=employee.manager_id or None)

    def _notify(self, reason: str) -> None:
        self.version += 1
        for listener in self._listeners:
            listener(reason)

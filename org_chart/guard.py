"""Ancestor queries over the manager forest."""

from collections.abc import Callable, Iterable, Iterator

import structlog

from org_chart.models import Employee

logger = structlog.get_logger()

ManagerLookup = Callable[[str], str | None]


def lookup_from(employees: Iterable[Employee]) -> ManagerLookup:
    """Build a manager lookup over a plain employee list."""
    managers = {employee.id: employee.manager_id or None for employee in employees}
    return managers.get


def manager_chain(employee_id: str, lookup: ManagerLookup) -> Iterator[str]:
    """Yield the manager ids above an employee, nearest first.

    The chain ends at a root, after a manager id that cannot be resolved, or
    when an id repeats in malformed (cyclic) data.
    """
    visited = {employee_id}
    current = employee_id
    while True:
        manager_id = lookup(current)
        if not manager_id:
            return
        if manager_id in visited:
            logger.warning("Manager cycle detected", employee_id=employee_id, repeated_id=manager_id)
            return
        yield manager_id
        visited.add(manager_id)
        current = manager_id


class CycleGuard:
    """Answers "is A an ancestor of B" against the current manager links."""

    def __init__(self, lookup: ManagerLookup) -> None:
        self.lookup = lookup

    def is_ancestor(self, candidate_id: str, of_id: str) -> bool:
        """Return True if ``candidate_id`` appears in ``of_id``'s manager chain."""
        for manager_id in manager_chain(of_id, self.lookup):
            if manager_id == candidate_id:
                return True
        return False

    def is_invalid_drop(self, dragged_id: str | None, target_id: str | None) -> bool:
        """Return True if dropping ``dragged_id`` onto ``target_id`` would create a cycle."""
        if not dragged_id or not target_id or dragged_id == target_id:
            return False
        return self.is_ancestor(dragged_id, target_id)

    def ancestors(self, of_id: str) -> list[str]:
        return list(manager_chain(of_id, self.lookup))


def may_be_ancestor(
    candidate_id: str,
    of_id: str,
    managers: Callable[[str], Iterable[str | None]],
) -> bool:
    """Return True if ``candidate_id`` is above ``of_id`` for any choice of manager links.

    ``managers`` gives every manager an employee may end up with, for example
    the optimistic value and the values a pending write can fall back to.
    """
    visited = {of_id}
    stack = [of_id]
    while stack:
        current = stack.pop()
        for manager_id in managers(current):
            if not manager_id:
                continue
            if manager_id == candidate_id:
                return True
            if manager_id not in visited:
                visited.add(manager_id)
                stack.append(manager_id)
    return False


def find_cycles(employees: Iterable[Employee]) -> list[list[str]]:
    """Find manager cycles in the employee data.

    Each employee has at most one manager, so every cycle is found by
    following manager links from each unvisited employee. Each cycle is
    reported once, in manager-chain order.
    """
    employees = list(employees)
    lookup = lookup_from(employees)
    known = {employee.id for employee in employees}
    done: set[str] = set()
    cycles: list[list[str]] = []

    for employee in employees:
        position: dict[str, int] = {}
        path: list[str] = []
        current: str | None = employee.id
        while current is not None and current in known and current not in done and current not in position:
            position[current] = len(path)
            path.append(current)
            current = lookup(current)

        if current is not None and current in position:
            cycles.append(path[position[current] :])
        done.update(path)

    logger.debug("Cycle search finished", employee_count=len(employees), cycle_count=len(cycles))
    return cycles

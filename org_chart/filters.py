"""Search and team filtering of the employee list."""

from collections.abc import Iterable
from dataclasses import dataclass

from org_chart.models import Employee


@dataclass(frozen=True)
class VisibilityFilter:
    """Selects the employees that should be visible on the chart.

    ``search`` is matched case-insensitively against name, designation and
    team. ``team`` must match exactly. Empty criteria match everyone.
    """

    search: str = ""
    team: str = ""

    def matches(self, employee: Employee) -> bool:
        if self.search:
            needle = self.search.lower()
            haystacks = (employee.name, employee.designation, employee.team)
            if not any(needle in value.lower() for value in haystacks):
                return False
        if self.team and employee.team != self.team:
            return False
        return True

    def apply(self, employees: Iterable[Employee]) -> list[Employee]:
        return [employee for employee in employees if self.matches(employee)]

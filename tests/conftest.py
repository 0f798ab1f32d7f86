"""Shared fixtures for org chart tests."""

import asyncio
from typing import Any

import pytest

from org_chart.backend import Backend
from org_chart.backends.yaml_file import seed_employees
from org_chart.models import Employee
from org_chart.notices import Notifier
from org_chart.store import HierarchyStore


class MockBackend(Backend):
    """In-memory backend recording every update."""

    def __init__(self, employees: list[Employee] | None = None) -> None:
        self.records: dict[str, dict[str, Any]] = {e.id: e.to_record() for e in employees or []}
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self.fail_fetch = False
        self.fail_updates = False
        self.fail_managers: set[str] = set()
        self.gate: asyncio.Event | None = None

    async def fetch_employees(self) -> list[Employee]:
        if self.fail_fetch:
            raise ConnectionError("employee service unavailable")
        return [Employee.from_record(record) for record in self.records.values()]

    async def update_employee(self, employee_id: str, attributes: dict[str, Any]) -> Employee:
        self.updates.append((employee_id, dict(attributes)))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_updates or attributes.get("managerId") in self.fail_managers:
            raise ConnectionError("remote store unavailable")
        self.records[employee_id].update(attributes)
        return Employee.from_record(self.records[employee_id])


def chain_employees() -> list[Employee]:
    """1 (root) <- 2 <- 3, plus an unrelated root 4."""
    return [
        Employee(id="1", name="Ada", designation="CEO", team="Executive"),
        Employee(id="2", name="Bob", designation="CTO", team="Technology", manager_id="1"),
        Employee(id="3", name="Cy", designation="Engineer", team="Technology", manager_id="2"),
        Employee(id="4", name="Di", designation="Advisor", team="Board"),
    ]


@pytest.fixture
def employees() -> list[Employee]:
    return chain_employees()


@pytest.fixture
def seed() -> list[Employee]:
    return seed_employees()


@pytest.fixture
def store(employees: list[Employee]) -> HierarchyStore:
    return HierarchyStore(employees)


@pytest.fixture
def backend(employees: list[Employee]) -> MockBackend:
    return MockBackend(employees)


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def seed_backend(seed: list[Employee]) -> MockBackend:
    return MockBackend(seed)

"""REST backend talking to an employees API with httpx."""

from typing import Any

import httpx
import structlog

from org_chart.backend import Backend
from org_chart.models import Employee

logger = structlog.get_logger()


class HttpBackend(Backend):
    """Backend for a REST service exposing ``/api/employees``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize HTTP backend.

        Args:
            base_url: Root URL of the service (e.g. ``http://localhost:3000``)
            timeout: Request timeout in seconds
            transport: Optional custom transport, mainly for tests
        """
        if not base_url:
            raise ValueError("HTTP base_url required")

        self.base_url = base_url.rstrip("/")
        logger.debug("Initializing HTTP backend", base_url=self.base_url, timeout=timeout)
        self.client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def fetch_employees(self) -> list[Employee]:
        """Fetch the employee list."""
        logger.info("Fetching employees", base_url=self.base_url)
        response = await self.client.get("/api/employees")
        response.raise_for_status()

        payload = response.json() or {}
        records = payload.get("employees", []) if isinstance(payload, dict) else payload
        employees = [Employee.from_record(record) for record in records or []]
        logger.info("Fetched employees", count=len(employees))
        return employees

    async def update_employee(self, employee_id: str, attributes: dict[str, Any]) -> Employee:
        """PATCH an employee and return the updated record."""
        logger.info("Updating employee", employee_id=employee_id, keys=sorted(attributes))
        response = await self.client.patch(f"/api/employees/{employee_id}", json=attributes)
        response.raise_for_status()

        payload = response.json()
        if not payload:
            raise ValueError(f"Employee {employee_id} not found")
        record = payload.get("employee", payload)
        employee = Employee.from_record(record)
        logger.info("Employee updated", employee_id=employee.id, manager_id=employee.manager_id)
        return employee

    async def aclose(self) -> None:
        await self.client.aclose()

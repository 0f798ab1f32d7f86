"""Notion backend implementation using notion-client."""

from typing import Any

import structlog
from notion_client import AsyncClient

from org_chart.backend import Backend
from org_chart.models import Employee

logger = structlog.get_logger()


class NotionBackend(Backend):
    """Notion-based backend using database pages as employees.

    The database is expected to have these properties:
    ``Name`` (title), ``Designation`` (rich text), ``Team`` (select) and
    ``Manager`` (relation to the same database, at most one entry).
    """

    def __init__(self, token: str, database_id: str) -> None:
        """Initialize Notion backend.

        Args:
            token: Notion integration token
            database_id: Notion database ID holding the employees
        """
        self.token = token
        self.database_id = database_id

        if not self.token:
            raise ValueError("Notion token required")
        if not self.database_id:
            raise ValueError("Notion database_id required")

        logger.debug("Initializing Notion backend", database_id=database_id)
        self.client = AsyncClient(auth=self.token)
        logger.info("Notion backend initialized", database_id=database_id)

    def _parse_properties(self, properties: dict[str, Any]) -> dict[str, Any]:
        """Parse Notion properties into simple values."""
        parsed = {}
        for key, value in properties.items():
            prop_type = value.get("type")

            if prop_type == "title":
                title_array = value.get("title", [])
                parsed[key] = "".join([t.get("plain_text", "") for t in title_array])
            elif prop_type == "rich_text":
                text_array = value.get("rich_text", [])
                parsed[key] = "".join([t.get("plain_text", "") for t in text_array])
            elif prop_type == "select":
                select = value.get("select")
                parsed[key] = select.get("name") if select else None
            elif prop_type == "relation":
                relations = value.get("relation", [])
                parsed[key] = [rel.get("id") for rel in relations]
            else:
                parsed[key] = value

        return parsed

    def _page_to_employee(self, page: dict[str, Any]) -> Employee:
        """Convert Notion page to Employee."""
        logger.debug("Converting Notion page to employee", page_id=page["id"])

        properties = self._parse_properties(page.get("properties", {}))

        managers = properties.get("Manager") or []
        if isinstance(managers, list) and len(managers) > 1:
            logger.warning("Page has more than one manager, using the first", page_id=page["id"])
        manager_id = managers[0] if isinstance(managers, list) and managers else None

        employee = Employee(
            id=page["id"],
            name=properties.get("Name") or "",
            designation=properties.get("Designation") or "",
            team=properties.get("Team") or "",
            manager_id=manager_id,
        )
        logger.debug("Converted Notion page to employee", employee_id=employee.id, name=employee.name)
        return employee

    def _build_properties(self, attributes: dict[str, Any]) -> dict[str, Any]:
        """Build Notion properties object from wire attributes."""
        properties: dict[str, Any] = {}

        if "name" in attributes:
            properties["Name"] = {"title": [{"text": {"content": attributes["name"] or ""}}]}

        if "designation" in attributes:
            properties["Designation"] = {"rich_text": [{"text": {"content": attributes["designation"] or ""}}]}

        if "team" in attributes:
            team = attributes["team"]
            properties["Team"] = {"select": {"name": team} if team else None}

        if "managerId" in attributes:
            manager_id = attributes["managerId"]
            properties["Manager"] = {"relation": [{"id": manager_id}] if manager_id else []}

        return properties

    async def fetch_employees(self) -> list[Employee]:
        """Query every page of the employee database."""
        logger.info("Listing Notion employees", database_id=self.database_id)

        query_params: dict[str, Any] = {"database_id": self.database_id, "page_size": 100}
        employees = []
        while True:
            response = await self.client.databases.query(**query_params)
            for page in response.get("results", []):
                employees.append(self._page_to_employee(page))
            if not response.get("has_more"):
                break
            query_params["start_cursor"] = response.get("next_cursor")

        logger.info("Listed Notion employees", count=len(employees))
        return employees

    async def update_employee(self, employee_id: str, attributes: dict[str, Any]) -> Employee:
        """Update a Notion page."""
        logger.info("Updating Notion page", employee_id=employee_id, keys=sorted(attributes))

        properties = self._build_properties(attributes)
        await self.client.pages.update(page_id=employee_id, properties=properties)

        # Retrieve updated page
        page = await self.client.pages.retrieve(page_id=employee_id)
        employee = self._page_to_employee(page)
        logger.info("Notion page updated successfully", employee_id=employee_id)
        return employee

    async def aclose(self) -> None:
        await self.client.aclose()

"""Local backend storing employees in a YAML file."""

from pathlib import Path
from typing import Any

import structlog
import yaml

from org_chart.backend import Backend
from org_chart.models import Employee

logger = structlog.get_logger()

SEED_RECORDS: list[dict[str, Any]] = [
    {"id": "1", "name": "Mark Hill", "designation": "Chief Executive Officer", "team": "Executive", "managerId": None},
    {"id": "2", "name": "Joe Linux", "designation": "Chief Technology Officer", "team": "Technology", "managerId": "1"},
    {"id": "3", "name": "Linda May", "designation": "Chief Business Officer", "team": "Business", "managerId": "1"},
    {"id": "4", "name": "John Green", "designation": "Chief Financial Officer", "team": "Finance", "managerId": "1"},
    {"id": "5", "name": "Ron Blomquist", "designation": "VP of Engineering", "team": "Technology", "managerId": "2"},
    {"id": "6", "name": "Michael Rubin", "designation": "VP of Product", "team": "Technology", "managerId": "2"},
    {"id": "7", "name": "Alice Lopez", "designation": "VP of Marketing", "team": "Business", "managerId": "3"},
    {"id": "8", "name": "Mary Johnson", "designation": "VP of Sales", "team": "Business", "managerId": "3"},
    {"id": "9", "name": "Kirk Douglas", "designation": "VP of Accounting", "team": "Finance", "managerId": "4"},
    {"id": "10", "name": "Erica Reel", "designation": "VP of Operations", "team": "Finance", "managerId": "4"},
]


def seed_employees() -> list[Employee]:
    """Return the sample organization used by ``oc init``."""
    return [Employee.from_record(record) for record in SEED_RECORDS]


class YamlBackend(Backend):
    """Backend keeping the employee list in a YAML file.

    The file holds a single ``employees`` list of wire records.
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize YAML backend.

        Args:
            path: Path to the employees file
        """
        self.path = Path(path)
        logger.debug("Initializing YAML backend", path=str(self.path))

    def _load(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            raise ValueError(f"Employees file {self.path} does not exist. Create it with 'oc init'")

        try:
            with open(self.path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error("Failed to parse employees file", path=str(self.path), error=str(e))
            raise ValueError(f"Failed to load employees from {self.path}: {e}") from e

        records = data.get("employees", []) if isinstance(data, dict) else []
        return [dict(record) for record in records or []]

    def _save(self, records: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            yaml.safe_dump({"employees": records}, f, default_flow_style=False, sort_keys=False)
        logger.debug("Employees file saved", path=str(self.path), count=len(records))

    def write_employees(self, employees: list[Employee]) -> None:
        """Overwrite the file with the given employees."""
        logger.info("Writing employees file", path=str(self.path), count=len(employees))
        self._save([employee.to_record() for employee in employees])

    async def fetch_employees(self) -> list[Employee]:
        logger.info("Reading employees file", path=str(self.path))
        employees = [Employee.from_record(record) for record in self._load()]
        logger.info("Read employees file", count=len(employees))
        return employees

    async def update_employee(self, employee_id: str, attributes: dict[str, Any]) -> Employee:
        logger.info("Updating employee in file", employee_id=employee_id, keys=sorted(attributes))
        records = self._load()
        for record in records:
            if str(record.get("id")) == employee_id:
                record.update({key: value for key, value in attributes.items() if key != "id"})
                self._save(records)
                return Employee.from_record(record)

        raise ValueError(f"Employee {employee_id} not found in {self.path}")

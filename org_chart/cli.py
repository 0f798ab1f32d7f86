"""CLI for the org chart."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Annotated, Literal, TypeVar

import structlog
from cyclopts import App, Parameter

from org_chart.backend import Backend
from org_chart.backends import HttpBackend, NotionBackend, YamlBackend
from org_chart.backends.yaml_file import seed_employees
from org_chart.chart import OrgChart
from org_chart.config import Config, get_config
from org_chart.config_commands import config_app
from org_chart.guard import CycleGuard, find_cycles
from org_chart.layout import LayeredLayoutEngine, LayoutAdapter
from org_chart.models import Notice

logger = structlog.get_logger()

T = TypeVar("T")

app = App(
    help="Org Chart - explore and rearrange an organization chart",
)

app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


def get_backend(config: Config | None = None) -> Backend:
    """Get the configured backend."""
    config = config or get_config()
    backend_type = config.get("backend")

    if backend_type == "http":
        base_url = config.get("http.base_url")
        if not base_url:
            raise ValueError("HTTP base URL not configured. Set it using:\n  oc config set http.base_url <url>")
        return HttpBackend(base_url=base_url, timeout=config.get_float("http.timeout"))
    elif backend_type == "notion":
        token = config.get("notion.token")
        database_id = config.get("notion.database_id")
        if not token or not database_id:
            raise ValueError(
                "Notion token and database not configured. Set them using:\n"
                "  oc config set notion.token <token>\n"
                "  oc config set notion.database_id <database_id>"
            )
        return NotionBackend(token=token, database_id=database_id)
    elif backend_type == "yaml":
        return YamlBackend(path=config.get("yaml.path"))
    else:
        raise ValueError(f"Unknown backend: {backend_type}")


def print_notice(notice: Notice) -> None:
    marker = "!" if notice.level == "error" else "i"
    description = f": {notice.description}" if notice.description else ""
    print(f"[{marker}] {notice.title}{description}")


def run_with_chart(work: Callable[[OrgChart], Awaitable[T]], search: str = "", team: str = "") -> T | None:
    """Load a chart from the configured backend and run ``work`` against it."""
    config = get_config()
    backend = get_backend(config)
    adapter = LayoutAdapter(LayeredLayoutEngine(), config.layout_options())

    async def session() -> T | None:
        chart = OrgChart(backend, layout_adapter=adapter)
        chart.notifier.subscribe(print_notice)
        try:
            if not await chart.load():
                return None
            chart.set_filter(search=search, team=team)
            await chart.settle()
            return await work(chart)
        finally:
            await backend.aclose()

    return asyncio.run(session())


@app.command
def init(force: bool = False) -> None:
    """Write the sample organization to the YAML employees file."""
    config = get_config()
    backend = YamlBackend(path=config.get("yaml.path"))
    if backend.path.exists() and not force:
        print(f"{backend.path} already exists, use --force to overwrite")
        return

    employees = seed_employees()
    backend.write_employees(employees)
    print(f"Wrote {len(employees)} employee(s) to {backend.path}")


@app.command(name="list")
def list_employees(search: str = "", team: str = "") -> None:
    """List employees matching the search text and team."""

    async def work(chart: OrgChart) -> None:
        employees = chart.visible()
        print(f"Found {len(employees)} employee(s):\n")
        for employee in employees:
            team_str = f" [{employee.team}]" if employee.team else ""
            manager_str = f" -> {employee.manager_id}" if employee.manager_id else ""
            print(f"{employee.id}: {employee.name}, {employee.designation}{team_str}{manager_str}")

    run_with_chart(work, search=search, team=team)


@app.command
def teams() -> None:
    """List the teams."""

    async def work(chart: OrgChart) -> None:
        names = chart.teams()
        if not names:
            print("No teams found")
            return
        for name in names:
            print(name)

    run_with_chart(work)


@app.command
def chart(search: str = "", team: str = "") -> None:
    """Lay out the chart for the matching employees and print positions."""

    async def work(chart: OrgChart) -> None:
        layout = chart.layout
        if layout is None:
            print("Nothing to show")
            return

        width, height = layout.dimensions()
        print(f"Chart: {len(layout.nodes)} node(s), {len(layout.edges)} edge(s), canvas {width:g}x{height:g}\n")
        for node in layout.nodes:
            employee = chart.store.get(node.id)
            label = f"{employee.name} ({employee.designation})" if employee else node.id
            print(f"  {node.id}: {label} at ({node.x:g}, {node.y:g})")
        if layout.edges:
            print()
            for edge in layout.edges:
                print(f"  {edge.sources[0]} -> {edge.targets[0]}")

    run_with_chart(work, search=search, team=team)


@app.command
def move(employee_id: str, manager_id: str) -> None:
    """Move an employee under a new manager."""

    async def work(chart: OrgChart) -> None:
        result = chart.move(employee_id, manager_id)
        if not result.accepted:
            reason = result.reason.value.replace("_", " ") if result.reason else "unknown"
            print(f"Move rejected: {reason}")
            return

        await chart.settle()
        current = chart.store.manager_of(employee_id)
        if current == manager_id:
            print(f"Moved {employee_id} under {manager_id}")
        else:
            print(f"Move of {employee_id} failed, manager is {current or 'none'}")

    run_with_chart(work)


@app.command
def ancestors(employee_id: str) -> None:
    """Show the manager chain above an employee."""

    async def work(chart: OrgChart) -> None:
        if employee_id not in chart.store:
            print(f"Unknown employee {employee_id}")
            return
        chain = CycleGuard(chart.store.manager_of).ancestors(employee_id)
        if not chain:
            print(f"{employee_id} has no manager")
            return
        print(" -> ".join([employee_id, *chain]))

    run_with_chart(work)


@app.command
def cycles() -> None:
    """Find and display manager cycles in the data."""

    async def work(chart: OrgChart) -> None:
        found = find_cycles(chart.store.all())
        if not found:
            print("No cycles found")
            return

        print(f"Found {len(found)} cycle(s):\n")
        for i, cycle in enumerate(found, 1):
            cycle_str = " -> ".join(cycle)
            print(f"{i}. {cycle_str} -> {cycle[0]}")

    run_with_chart(work)


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    app(tokens)


if __name__ == "__main__":
    app.meta()

"""Org chart session: loading, filtering, layout and reparenting wired together."""

import asyncio

import structlog

from org_chart.backend import Backend
from org_chart.coordinator import ReparentCoordinator
from org_chart.extractor import extract_subgraph
from org_chart.filters import VisibilityFilter
from org_chart.layout import ChartLayout, LayeredLayoutEngine, LayoutAdapter
from org_chart.models import Employee, ProposalResult, Subgraph
from org_chart.notices import Notifier
from org_chart.store import HierarchyStore

logger = structlog.get_logger()


class OrgChart:
    """Holds the state behind one interactive chart.

    Any change to the employees or the filter schedules a new layout on the
    running event loop. Each layout run takes the next sequence number, and
    only the run holding the latest number may replace ``layout``, so a slow
    older run can never overwrite a newer chart.
    """

    def __init__(
        self,
        backend: Backend,
        layout_adapter: LayoutAdapter | None = None,
        notifier: Notifier | None = None,
        store: HierarchyStore | None = None,
    ) -> None:
        self.backend = backend
        self.store = store if store is not None else HierarchyStore()
        self.notifier = notifier or Notifier()
        self.layout_adapter = layout_adapter or LayoutAdapter(LayeredLayoutEngine())
        self.coordinator = ReparentCoordinator(self.store, backend, self.notifier)
        self.visibility = VisibilityFilter()
        self.layout: ChartLayout | None = None
        self.is_loading = False
        self._sequence = 0
        self._layout_tasks: set[asyncio.Task] = set()
        self.store.subscribe(self._on_store_change)

    async def load(self) -> bool:
        """Fetch every employee from the backend into the store.

        Returns:
            True if the employees were loaded, False if the fetch failed
        """
        self.is_loading = True
        try:
            employees = await self.backend.fetch_employees()
        except Exception as e:
            logger.error("Error fetching employees", error=str(e))
            self.notifier.error("Error fetching employees", "Please try again later")
            return False
        finally:
            self.is_loading = False

        self.store.replace_all(employees)
        return True

    def visible(self) -> list[Employee]:
        return self.store.filtered(self.visibility)

    def subgraph(self) -> Subgraph | None:
        return extract_subgraph(self.store.all(), self.visible())

    def teams(self) -> list[str]:
        return self.store.teams()

    def set_filter(self, search: str | None = None, team: str | None = None) -> None:
        """Update the search text and/or team filter and schedule a new layout."""
        self.visibility = VisibilityFilter(
            search=self.visibility.search if search is None else search,
            team=self.visibility.team if team is None else team,
        )
        logger.debug("Filter changed", search=self.visibility.search, team=self.visibility.team)
        self.request_layout()

    def move(self, dragged_id: str, target_id: str | None) -> ProposalResult:
        """Drop an employee onto a new manager."""
        return self.coordinator.propose(dragged_id, target_id)

    def is_invalid_drop(self, dragged_id: str | None, target_id: str | None) -> bool:
        return self.coordinator.is_invalid_drop(dragged_id, target_id)

    def request_layout(self) -> asyncio.Task | None:
        """Schedule a layout run on the running loop, if there is one."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, layout not scheduled")
            return None

        task = loop.create_task(self.refresh_layout())
        self._layout_tasks.add(task)
        task.add_done_callback(self._layout_tasks.discard)
        return task

    async def refresh_layout(self) -> ChartLayout | None:
        """Compute a layout for the current state and apply it unless superseded."""
        self._sequence += 1
        sequence = self._sequence

        full = self.store.all()
        visible = self.visibility.apply(full)
        if not visible:
            logger.debug("Nothing visible, clearing layout", sequence=sequence)
            self.layout = None
            return None

        result = await self.layout_adapter.compute(full, visible)
        if sequence != self._sequence:
            logger.debug("Discarding stale layout", sequence=sequence, latest=self._sequence)
            return None
        if result is None:
            logger.warning("Layout unavailable, keeping previous chart", sequence=sequence)
            return None

        self.layout = result
        logger.debug("Layout applied", sequence=sequence, node_count=len(result.nodes))
        return result

    async def settle(self) -> None:
        """Wait for pending writes and layout runs to finish."""
        await self.coordinator.drain()
        while self._layout_tasks:
            await asyncio.gather(*list(self._layout_tasks), return_exceptions=True)

    def _on_store_change(self, reason: str) -> None:
        logger.debug("Store changed", reason=reason, version=self.store.version)
        self.request_layout()

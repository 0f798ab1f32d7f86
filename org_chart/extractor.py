"""Extraction of the minimal connected subgraph for the visible employees."""

from collections.abc import Sequence

import structlog

from org_chart.guard import ManagerLookup, lookup_from, manager_chain
from org_chart.models import Edge, Employee, Subgraph

logger = structlog.get_logger()


def extract_subgraph(
    full_employees: Sequence[Employee],
    visible_employees: Sequence[Employee],
) -> Subgraph | None:
    """Compute the nodes and edges needed to draw the visible employees.

    Nodes are the visible employees plus every manager above them, so each
    visible employee stays connected to its root. Edges are derived from node
    membership alone: one ``manager -> report`` edge for every employee whose
    id and manager id are both nodes.

    Returns:
        The subgraph, or None when nothing is visible
    """
    if not visible_employees:
        logger.debug("Nothing visible, skipping extraction")
        return None

    lookup = lookup_from(full_employees)
    nodes = {employee.id for employee in visible_employees}
    for employee in visible_employees:
        nodes.update(manager_chain(employee.id, _visible_lookup(employee, lookup)))

    edges = {
        Edge.between(employee.manager_id, employee.id)
        for employee in full_employees
        if employee.manager_id and employee.id in nodes and employee.manager_id in nodes
    }

    logger.debug(
        "Extracted subgraph",
        visible_count=len(visible_employees),
        node_count=len(nodes),
        edge_count=len(edges),
    )
    return Subgraph(nodes=frozenset(nodes), edges=frozenset(edges))


def _visible_lookup(employee: Employee, lookup: ManagerLookup) -> ManagerLookup:
    # The visible record wins for its own manager link, the rest comes from the full set.
    def resolve(employee_id: str) -> str | None:
        if employee_id == employee.id:
            return employee.manager_id or None
        return lookup(employee_id)

    return resolve


def display_employees(full_employees: Sequence[Employee], subgraph: Subgraph) -> list[Employee]:
    """Return the employee records behind the subgraph's nodes, in collection order."""
    return [employee for employee in full_employees if employee.id in subgraph.nodes]

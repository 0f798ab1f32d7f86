"""Data models for the org chart."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass
class Employee:
    """Represents an employee node in the organization forest."""

    id: str
    name: str
    designation: str = ""
    team: str = ""
    manager_id: str | None = None

    @property
    def is_root(self) -> bool:
        return not self.manager_id

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Employee":
        """Build an employee from a wire record (``managerId`` key, empty string for roots)."""
        manager_id = record.get("managerId")
        return cls(
            id=str(record["id"]),
            name=record.get("name") or "",
            designation=record.get("designation") or "",
            team=record.get("team") or "",
            manager_id=str(manager_id) if manager_id else None,
        )

    def to_record(self) -> dict[str, Any]:
        """Convert to a wire record."""
        return {
            "id": self.id,
            "name": self.name,
            "designation": self.designation,
            "team": self.team,
            "managerId": self.manager_id or None,
        }


@dataclass(frozen=True)
class Edge:
    """A manager -> report edge in the visible subgraph."""

    id: str
    source: str
    target: str

    @classmethod
    def between(cls, manager_id: str, employee_id: str) -> "Edge":
        return cls(id=f"{manager_id}-{employee_id}", source=manager_id, target=employee_id)


@dataclass(frozen=True)
class Subgraph:
    """Node and edge sets needed to draw the visible part of the chart."""

    nodes: frozenset[str] = frozenset()
    edges: frozenset[Edge] = frozenset()


@dataclass(frozen=True)
class DragProposal:
    """A completed drag gesture: drop ``dragged_id`` onto ``target_id``."""

    dragged_id: str
    target_id: str | None = None


class RejectionReason(str, Enum):
    """Why a reparent proposal was rejected."""

    NO_TARGET = "no_target"
    SELF_ASSIGNMENT = "self_assignment"
    UNKNOWN_EMPLOYEE = "unknown_employee"
    WOULD_CREATE_CYCLE = "would_create_cycle"


@dataclass
class PersistenceRequest:
    """A manager change for one employee on its way to the remote store."""

    employee_id: str
    manager_id: str | None
    previous_manager_id: str | None
    sequence: int = 0


@dataclass
class ProposalResult:
    """Outcome of validating a reparent proposal.

    Only produced for moves that were validated. An accepted move needs a
    running event loop to schedule its write; ``ReparentCoordinator.propose``
    raises RuntimeError instead of returning a result when there is none.
    """

    proposal: DragProposal
    accepted: bool
    reason: RejectionReason | None = None
    request: PersistenceRequest | None = None

    @classmethod
    def accept(cls, proposal: DragProposal, request: PersistenceRequest) -> "ProposalResult":
        return cls(proposal=proposal, accepted=True, request=request)

    @classmethod
    def reject(cls, proposal: DragProposal, reason: RejectionReason) -> "ProposalResult":
        return cls(proposal=proposal, accepted=False, reason=reason)


@dataclass
class Notice:
    """A transient message shown to the user."""

    level: str
    title: str
    description: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

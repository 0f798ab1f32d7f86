"""Tests for data models."""

from org_chart.models import DragProposal, Edge, Employee, PersistenceRequest, ProposalResult, RejectionReason


def test_employee_creation() -> None:
    """Test employee creation with defaults."""
    employee = Employee(id="1", name="Mark Hill")
    assert employee.id == "1"
    assert employee.designation == ""
    assert employee.team == ""
    assert employee.manager_id is None
    assert employee.is_root


def test_employee_from_record_normalizes_roots() -> None:
    """Test that empty and missing managerId both mean root."""
    empty = Employee.from_record({"id": "1", "name": "A", "designation": "CEO", "team": "", "managerId": ""})
    missing = Employee.from_record({"id": "2", "name": "B"})
    null = Employee.from_record({"id": "3", "name": "C", "managerId": None})
    assert empty.manager_id is None
    assert missing.manager_id is None
    assert null.manager_id is None


def test_employee_from_record_stringifies_ids() -> None:
    """Test numeric ids from the wire are turned into strings."""
    employee = Employee.from_record({"id": 5, "name": "Ron", "managerId": 2})
    assert employee.id == "5"
    assert employee.manager_id == "2"


def test_employee_to_record() -> None:
    """Test conversion to a wire record."""
    employee = Employee(id="2", name="Joe", designation="CTO", team="Technology", manager_id="1")
    assert employee.to_record() == {
        "id": "2",
        "name": "Joe",
        "designation": "CTO",
        "team": "Technology",
        "managerId": "1",
    }
    assert Employee(id="1", name="Mark").to_record()["managerId"] is None


def test_edge_id_is_derived_from_endpoints() -> None:
    """Test edge ids combine manager and report ids."""
    edge = Edge.between("1", "2")
    assert edge.id == "1-2"
    assert edge.source == "1"
    assert edge.target == "2"
    assert edge == Edge.between("1", "2")


def test_proposal_results() -> None:
    """Test accepted and rejected proposal results."""
    proposal = DragProposal(dragged_id="3", target_id="1")
    request = PersistenceRequest(employee_id="3", manager_id="1", previous_manager_id="2", sequence=1)

    accepted = ProposalResult.accept(proposal, request)
    assert accepted.accepted
    assert accepted.reason is None
    assert accepted.request is request

    rejected = ProposalResult.reject(proposal, RejectionReason.WOULD_CREATE_CYCLE)
    assert not rejected.accepted
    assert rejected.reason is RejectionReason.WOULD_CREATE_CYCLE
    assert rejected.request is None

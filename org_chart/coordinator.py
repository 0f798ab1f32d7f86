"""Validation, optimistic application and persistence of manager reassignments."""

import asyncio

import structlog

from org_chart.backend import Backend
from org_chart.guard import CycleGuard, may_be_ancestor
from org_chart.models import DragProposal, PersistenceRequest, ProposalResult, RejectionReason
from org_chart.notices import Notifier
from org_chart.store import HierarchyStore

logger = structlog.get_logger()


class ReparentCoordinator:
    """Moves employees under new managers.

    A reparent runs in two phases. ``propose`` validates the move and, when
    accepted, applies it to the store right away. The write to the backend is
    then scheduled on the running event loop. Writes for the same employee are
    sent one after another; writes for different employees run concurrently.

    When a write fails the user gets an error notice and, unless a newer move
    of the same employee is still pending, the employee goes back to the last
    manager the backend confirmed.
    """

    def __init__(self, store: HierarchyStore, backend: Backend, notifier: Notifier | None = None) -> None:
        self.store = store
        self.backend = backend
        self.notifier = notifier or Notifier()
        self.guard = CycleGuard(store.manager_of)
        self._sequence = 0
        self._tails: dict[str, asyncio.Task] = {}
        self._latest: dict[str, int] = {}
        self._confirmed: dict[str, str | None] = {}
        self._outcomes: dict[str, set[str | None]] = {}
        self._tasks: set[asyncio.Task] = set()

    def pending(self, employee_id: str) -> bool:
        """Return True while a write for the employee is in flight."""
        return employee_id in self._tails

    def propose(self, dragged_id: str, target_id: str | None) -> ProposalResult:
        """Validate a drop of ``dragged_id`` onto ``target_id`` and apply it if valid.

        Must be called from a running event loop, which the backend write is
        scheduled on. Rejected proposals leave the store untouched and send
        nothing to the backend, with or without a loop.

        Raises:
            RuntimeError: if the move is valid but no event loop is running;
                the store is left untouched
        """
        proposal = DragProposal(dragged_id=dragged_id, target_id=target_id or None)
        reason = self._validate(proposal)
        if reason is not None:
            logger.info("Reparent rejected", employee_id=dragged_id, target_id=target_id, reason=reason.value)
            if reason is RejectionReason.WOULD_CREATE_CYCLE:
                self.notifier.info("Cannot assign a subordinate as manager!", employee_id=dragged_id)
            return ProposalResult.reject(proposal, reason)

        loop = asyncio.get_running_loop()
        request = self._apply(proposal)
        self._schedule(loop, request)
        logger.info("Reparent accepted", employee_id=dragged_id, manager_id=target_id, sequence=request.sequence)
        return ProposalResult.accept(proposal, request)

    async def drain(self) -> None:
        """Wait until every scheduled write has resolved."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _validate(self, proposal: DragProposal) -> RejectionReason | None:
        if not proposal.target_id:
            return RejectionReason.NO_TARGET
        if proposal.dragged_id == proposal.target_id:
            return RejectionReason.SELF_ASSIGNMENT
        if proposal.dragged_id not in self.store:
            return RejectionReason.UNKNOWN_EMPLOYEE
        if self.would_create_cycle(proposal.dragged_id, proposal.target_id):
            return RejectionReason.WOULD_CREATE_CYCLE
        return None

    def would_create_cycle(self, dragged_id: str, target_id: str) -> bool:
        """Return True if ``dragged_id`` is above ``target_id`` now or after any pending write resolves.

        A pending write may still fail and fall back to an earlier manager, so
        every manager an employee can end up with is considered.
        """
        if self.guard.is_ancestor(dragged_id, target_id):
            return True
        if not self._outcomes:
            return False
        return may_be_ancestor(dragged_id, target_id, self._possible_managers)

    def is_invalid_drop(self, dragged_id: str | None, target_id: str | None) -> bool:
        if not dragged_id or not target_id or dragged_id == target_id:
            return False
        return self.would_create_cycle(dragged_id, target_id)

    def _possible_managers(self, employee_id: str) -> set[str | None]:
        return {self.store.manager_of(employee_id), *self._outcomes.get(employee_id, ())}

    def _apply(self, proposal: DragProposal) -> PersistenceRequest:
        employee_id = proposal.dragged_id
        was_pending = self.pending(employee_id)
        previous = self.store.set_manager(employee_id, proposal.target_id)
        if not was_pending:
            self._confirmed[employee_id] = previous
            self._outcomes[employee_id] = {previous}
        self._outcomes[employee_id].add(proposal.target_id)

        self._sequence += 1
        self._latest[employee_id] = self._sequence
        return PersistenceRequest(
            employee_id=employee_id,
            manager_id=proposal.target_id,
            previous_manager_id=previous,
            sequence=self._sequence,
        )

    def _schedule(self, loop: asyncio.AbstractEventLoop, request: PersistenceRequest) -> None:
        before = self._tails.get(request.employee_id)
        task = loop.create_task(self._commit(request, before))
        self._tails[request.employee_id] = task
        self._tasks.add(task)
        task.add_done_callback(lambda done: self._finished(request, done))

    async def _commit(self, request: PersistenceRequest, before: asyncio.Task | None) -> bool:
        if before is not None:
            logger.debug("Waiting for earlier write", employee_id=request.employee_id, sequence=request.sequence)
            await asyncio.wait([before])

        employee = self.store.get(request.employee_id)
        attributes = employee.to_record() if employee is not None else {"id": request.employee_id}
        attributes["managerId"] = request.manager_id

        try:
            await self.backend.update_employee(request.employee_id, attributes)
        except Exception as e:
            logger.error(
                "Failed to persist manager change",
                employee_id=request.employee_id,
                manager_id=request.manager_id,
                sequence=request.sequence,
                error=str(e),
            )
            self.notifier.error(
                "Error updating employee manager",
                "Please try again later",
                employee_id=request.employee_id,
            )
            self._revert(request)
            return False

        self._confirmed[request.employee_id] = request.manager_id
        logger.info("Manager change persisted", employee_id=request.employee_id, sequence=request.sequence)
        return True

    def _revert(self, request: PersistenceRequest) -> None:
        employee_id = request.employee_id
        if self._latest.get(employee_id) != request.sequence:
            logger.info("Newer move pending, not reverting", employee_id=employee_id, sequence=request.sequence)
            return
        if employee_id not in self.store or self.store.manager_of(employee_id) != request.manager_id:
            logger.info("Employee changed elsewhere, not reverting", employee_id=employee_id)
            return

        restored = self._confirmed.get(employee_id, request.previous_manager_id)
        if restored and self.guard.is_ancestor(employee_id, restored):
            logger.warning("Reverted manager link forms a cycle", employee_id=employee_id, manager_id=restored)
        self.store.set_manager(employee_id, restored)
        logger.info("Manager change reverted", employee_id=employee_id, manager_id=restored)

    def _finished(self, request: PersistenceRequest, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if self._tails.get(request.employee_id) is task:
            del self._tails[request.employee_id]
            self._latest.pop(request.employee_id, None)
            self._confirmed.pop(request.employee_id, None)
            self._outcomes.pop(request.employee_id, None)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Write task crashed", employee_id=request.employee_id, error=str(task.exception()))

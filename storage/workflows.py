"""In-memory registry of open booking workflows."""

import threading
from functools import lru_cache
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from workflow.wizard import BookingWorkflow


class WorkflowRegistry:
    """Workflow instances keyed by ID, for the HTTP layer."""

    def __init__(self):
        self._workflows: dict[str, "BookingWorkflow"] = {}
        self._lock = threading.Lock()

    def add(self, workflow: "BookingWorkflow") -> None:
        with self._lock:
            self._workflows[workflow.workflow_id] = workflow

    def get(self, workflow_id: str) -> Optional["BookingWorkflow"]:
        return self._workflows.get(workflow_id)

    def remove(self, workflow_id: str) -> Optional["BookingWorkflow"]:
        with self._lock:
            return self._workflows.pop(workflow_id, None)

    def drain(self) -> list["BookingWorkflow"]:
        """Remove and return every registered workflow."""
        with self._lock:
            workflows = list(self._workflows.values())
            self._workflows.clear()
        return workflows

    def list_for_user(self, user_id: str) -> list["BookingWorkflow"]:
        return [w for w in self._workflows.values() if w.session.user_id == user_id]

    def __len__(self) -> int:
        return len(self._workflows)


@lru_cache
def get_registry() -> WorkflowRegistry:
    """Get the singleton workflow registry."""
    return WorkflowRegistry()

# sitesmith/core/lifecycle.py
"""
Project lifecycle: planning -> planning_complete -> built.

Transitions are triggered from outside (competitors recorded, files
generated) and only ever move forward. Only the owner may trigger them;
anyone may read a record at any state.
"""
import time
import uuid
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel, Field


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    PLANNING_COMPLETE = "planning_complete"
    BUILT = "built"


_STATUS_ORDER = [ProjectStatus.PLANNING, ProjectStatus.PLANNING_COMPLETE, ProjectStatus.BUILT]


class LifecycleError(Exception):
    pass


class InvalidTransitionError(LifecycleError):
    pass


class NotOwnerError(LifecycleError):
    pass


class ProjectNotFoundError(LifecycleError):
    pass


class ProjectRecord(BaseModel):
    id: str
    owner_id: str
    status: ProjectStatus = ProjectStatus.PLANNING
    plan: Dict[str, Any] = Field(default_factory=dict)
    competitors: Optional[List[Dict[str, Any]]] = None
    files: Optional[Dict[str, Dict[str, Any]]] = None
    created_at: float = Field(default_factory=time.time)
    updated_at: float = Field(default_factory=time.time)


def _rank(status: ProjectStatus) -> int:
    return _STATUS_ORDER.index(status)


def _require_owner(record: ProjectRecord, actor_id: str) -> None:
    if actor_id != record.owner_id:
        raise NotOwnerError(f"Only the owner of project {record.id} can change it")


def advance_status(record: ProjectRecord, target: ProjectStatus, actor_id: str) -> ProjectRecord:
    """Explicit transition; moving backward is an error, staying put is a no-op."""
    _require_owner(record, actor_id)
    if _rank(target) < _rank(record.status):
        raise InvalidTransitionError(f"Cannot move project {record.id} from {record.status.value} back to {target.value}")
    if target == record.status:
        return record
    return record.model_copy(update={"status": target, "updated_at": time.time()})


def _forward_to(record: ProjectRecord, target: ProjectStatus) -> ProjectStatus:
    # later calls keep the later status
    return target if _rank(target) > _rank(record.status) else record.status


def record_competitors(record: ProjectRecord, competitors: List[Dict[str, Any]], actor_id: str) -> ProjectRecord:
    _require_owner(record, actor_id)
    return record.model_copy(update={
        "competitors": list(competitors),
        "status": _forward_to(record, ProjectStatus.PLANNING_COMPLETE),
        "updated_at": time.time(),
    })


def record_files(record: ProjectRecord, files: Dict[str, Dict[str, Any]], actor_id: str) -> ProjectRecord:
    """Store a generated (or template) file map and mark the project built."""
    _require_owner(record, actor_id)
    if not files:
        raise InvalidTransitionError(f"Project {record.id} cannot be built from an empty file map")
    return record.model_copy(update={
        "files": dict(files),
        "status": ProjectStatus.BUILT,
        "updated_at": time.time(),
    })


def update_files(record: ProjectRecord, files: Dict[str, Dict[str, Any]], actor_id: str) -> ProjectRecord:
    """Persist an edited file map without touching the status."""
    _require_owner(record, actor_id)
    return record.model_copy(update={"files": dict(files), "updated_at": time.time()})


def files_complete(record: ProjectRecord) -> bool:
    return record.status == ProjectStatus.BUILT and record.files is not None


# ----------------------------
# Document store adapter
# ----------------------------
class ProjectStore(Protocol):
    async def get(self, project_id: str) -> Optional[ProjectRecord]:
        ...

    async def save(self, record: ProjectRecord) -> None:
        ...


class InMemoryProjectStore:
    def __init__(self):
        self._records: Dict[str, ProjectRecord] = {}

    async def get(self, project_id: str) -> Optional[ProjectRecord]:
        return self._records.get(project_id)

    async def save(self, record: ProjectRecord) -> None:
        self._records[record.id] = record


async def create_project(store: ProjectStore, owner_id: str, plan: Optional[Dict[str, Any]] = None) -> ProjectRecord:
    record = ProjectRecord(id=str(uuid.uuid4()), owner_id=owner_id, plan=plan or {})
    await store.save(record)
    return record


async def load_project(store: ProjectStore, project_id: str) -> ProjectRecord:
    record = await store.get(project_id)
    if record is None:
        raise ProjectNotFoundError(f"Project {project_id} not found")
    return record

"""
Best-effort persistence of the assignment map.

The whole map is written as one JSON document under a fixed storage key:
a list of `[project_id, [assignment, ...]]` pairs with camelCase fields.
There is no schema version; a payload that no longer validates is reported
as a failed load.
"""
import json
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from app.core import config
from app.core.storage import StorageBackend
from app.features.assignments.schemas import ProjectAssignment
from app.utils import get_logger


log = get_logger(__name__)

AssignmentMap = Dict[str, List[ProjectAssignment]]


@dataclass(frozen=True)
class PersistenceResult:
    """Result of a save or load. `error` is set only when `ok` is false."""
    ok: bool
    error: Optional[str] = None

    @classmethod
    def success(cls) -> "PersistenceResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, exc: BaseException) -> "PersistenceResult":
        return cls(ok=False, error=f"{type(exc).__name__}: {exc}")


def serialize_assignments(assignments: AssignmentMap) -> str:
    data = [
        [project_id, [a.model_dump(mode="json", by_alias=True) for a in items]]
        for project_id, items in assignments.items()
    ]
    return json.dumps(data)


def deserialize_assignments(raw: str) -> AssignmentMap:
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("Stored assignments must be a list of [projectId, assignments] pairs")
    assignments: AssignmentMap = {}
    for project_id, items in data:
        assignments[str(project_id)] = [ProjectAssignment.model_validate(item) for item in items]
    return assignments


class AssignmentPersistence:
    """
    Reads and writes the assignment map through a storage backend.
    
    Neither method raises: failures are logged and returned as a
    PersistenceResult so callers decide whether to surface them.
    """

    def __init__(self, storage: StorageBackend, key: str = config.ASSIGNMENTS_STORAGE_KEY):
        self.storage = storage
        self.key = key

    def save(self, assignments: AssignmentMap) -> PersistenceResult:
        try:
            self.storage.set_item(self.key, serialize_assignments(assignments))
        except Exception as exc:
            log.error("Failed to persist project assignments under %r: %s", self.key, exc, exc_info=True)
            return PersistenceResult.failure(exc)
        return PersistenceResult.success()

    def load(self) -> Tuple[Optional[AssignmentMap], PersistenceResult]:
        try:
            raw = self.storage.get_item(self.key)
            if raw is None:
                log.debug("No stored assignments under %r", self.key)
                return None, PersistenceResult.success()
            assignments = deserialize_assignments(raw)
        except Exception as exc:
            log.error("Failed to load project assignments from %r: %s", self.key, exc, exc_info=True)
            return None, PersistenceResult.failure(exc)
        return assignments, PersistenceResult.success()

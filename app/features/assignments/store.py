"""
In-memory project assignment store.

Holds `project_id -> [ProjectAssignment]` for the lifetime of the process.
Every mutation is followed by a best-effort save; the in-memory map stays
the source of truth and is never rolled back when that save fails.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from app.features.assignments.persistence import AssignmentPersistence, PersistenceResult
from app.features.assignments.schemas import AssignmentPermissions, ProjectAssignment, utc_now
from app.utils import get_logger


log = get_logger(__name__)


@dataclass(frozen=True)
class AssignmentOutcome:
    """Result of a mutation. `success` is always true; persistence may not be."""
    success: bool
    persistence: PersistenceResult
    assignment: Optional[ProjectAssignment] = None

    @property
    def persisted(self) -> bool:
        return self.persistence.ok


class AssignmentStore:
    """
    Project-to-staff assignment map.
    
    At most one assignment exists per (project_id, staff_email): assigning
    the same pair again replaces the earlier record in place.
    """

    def __init__(self, persistence: Optional[AssignmentPersistence] = None):
        self.persistence = persistence
        self._assignments: Dict[str, List[ProjectAssignment]] = {}

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def assign(
        self,
        project_id: str,
        project_title: str,
        staff_email: str,
        staff_name: str,
        assigned_by: str,
        permissions: AssignmentPermissions,
        role: str = "Staff",
    ) -> AssignmentOutcome:
        """Insert or replace the assignment for (project_id, staff_email)."""
        assignment = ProjectAssignment(
            project_id=project_id,
            project_title=project_title,
            staff_email=staff_email,
            staff_name=staff_name,
            role=role,
            assigned_by=assigned_by,
            assigned_date=utc_now(),
            permissions=permissions.model_copy(),
        )

        existing = self._assignments.get(project_id, [])
        if any(a.staff_email == staff_email for a in existing):
            self._assignments[project_id] = [
                assignment if a.staff_email == staff_email else a for a in existing
            ]
            log.info("Updated assignment of %s on project %s", staff_email, project_id)
        else:
            self._assignments[project_id] = [*existing, assignment]
            log.info("Assigned %s to project %s", staff_email, project_id)

        return AssignmentOutcome(success=True, persistence=self.save(), assignment=assignment)

    def remove(self, project_id: str, staff_email: str) -> AssignmentOutcome:
        """Drop the assignment for the pair; succeeds whether or not it existed."""
        existing = self._assignments.get(project_id)
        if existing is not None:
            remaining = [a for a in existing if a.staff_email != staff_email]
            if len(remaining) != len(existing):
                log.info("Removed %s from project %s", staff_email, project_id)
            if remaining:
                self._assignments[project_id] = remaining
            else:
                del self._assignments[project_id]
        return AssignmentOutcome(success=True, persistence=self.save())

    def clear(self) -> None:
        """Forget every assignment in memory. Persisted state is untouched."""
        self._assignments = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_by_project(self, project_id: str) -> List[ProjectAssignment]:
        return list(self._assignments.get(project_id, []))

    def list_by_staff(self, staff_email: str) -> List[ProjectAssignment]:
        # Linear in the total number of assignments
        return [
            a
            for items in self._assignments.values()
            for a in items
            if a.staff_email == staff_email
        ]

    def get(self, project_id: str, staff_email: str) -> Optional[ProjectAssignment]:
        for a in self._assignments.get(project_id, []):
            if a.staff_email == staff_email:
                return a
        return None

    def project_ids(self) -> List[str]:
        return list(self._assignments)

    def snapshot(self) -> Dict[str, List[ProjectAssignment]]:
        """Shallow copy of the whole map."""
        return {pid: list(items) for pid, items in self._assignments.items()}

    def __len__(self) -> int:
        return sum(len(items) for items in self._assignments.values())

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self) -> PersistenceResult:
        if self.persistence is None:
            return PersistenceResult.success()
        return self.persistence.save(self._assignments)

    def load(self) -> PersistenceResult:
        """
        Replace the in-memory map with the persisted one.
        
        Nothing stored, or a failed load, leaves the current map as it is.
        """
        if self.persistence is None:
            return PersistenceResult.success()
        assignments, result = self.persistence.load()
        if assignments is not None:
            self._assignments = assignments
            log.info("Loaded %d project assignments across %d projects", len(self), len(assignments))
        return result

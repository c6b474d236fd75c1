"""
Permission resolution for the repairs category.

Two granularities, kept as separate checks:
- page/category level: role, department allow-list and "holds any assignment"
- project level: the caller's assignment on that exact project

A staff member assigned to one project passes the page gate for a listing
that also shows other projects, but is refused on those projects' details.
"""
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from app.features.assignments.schemas import ProjectAssignment
from app.features.assignments.store import AssignmentStore
from app.features.permissions.schemas import UserPermissions
from app.utils import get_logger


log = get_logger(__name__)


class UserRole(str, Enum):
    ADMIN = "Admin"
    STAFF = "Staff"
    EDITOR = "Editor"
    CLIENT = "Client"
    GUEST = "Guest"


ASSIGNMENT_SCOPED_ROLES = (UserRole.STAFF, UserRole.EDITOR)

REPAIRS_PAGES = [
    "repairs",
    "repairs-category",
    "classrooms",
    "administrative-offices",
    "main-campus-repairs",
    "cabadbaran-campus-repairs",
]

# Department -> pages/categories its staff may open.
# An empty list means no restriction.
DEPARTMENT_CATEGORY_MAP: Dict[str, List[str]] = {
    "Facilities Management": list(REPAIRS_PAGES),
    "Property Management": list(REPAIRS_PAGES),
    "Maintenance": list(REPAIRS_PAGES),
    "Engineering and Construction Office (ECO)": [
        "repairs",
        "classrooms",
        "administrative-offices",
        "construction-of-infrastructure",
    ],
    "General": [],
}

PERMISSION_LABELS = {
    UserRole.ADMIN: "Full Access - Can manage all repair projects and assignments",
    UserRole.STAFF: "Department-Based Access - Can create repair projects and assign personnel",
    UserRole.EDITOR: "Department-Based Access - Can create repair projects and assign personnel",
}
READ_ONLY_LABEL = "View Only - Can view all data but cannot modify"


def read_only_permissions() -> UserPermissions:
    """View and export only."""
    return UserPermissions()


def full_permissions() -> UserPermissions:
    return UserPermissions(
        can_view=True,
        can_add=True,
        can_edit=True,
        can_delete=True,
        can_approve=True,
        can_assign_staff=True,
        can_manage_documents=True,
        can_export_data=True,
        can_manage_insights=True,
        assigned_projects=[],
    )


class PermissionResolver:
    """Answers access questions against an AssignmentStore."""

    def __init__(
        self,
        store: AssignmentStore,
        department_pages: Optional[Mapping[str, List[str]]] = None,
    ):
        self.store = store
        self.department_pages = dict(
            DEPARTMENT_CATEGORY_MAP if department_pages is None else department_pages
        )

    # ------------------------------------------------------------------
    # Departments
    # ------------------------------------------------------------------

    def get_allowed_pages_by_department(self, department: str) -> List[str]:
        return list(self.department_pages.get(department, []))

    def get_available_departments(self) -> List[str]:
        return list(self.department_pages)

    # ------------------------------------------------------------------
    # Page / category level
    # ------------------------------------------------------------------

    def can_access_page(self, user_email: str, user_role: str, department: str, page_id: str) -> bool:
        """
        Page gate.
        
        Admin and Client always pass. Staff/Editor pass when their department
        is unrestricted, lists the page, or when they hold any assignment at
        all. Every other role passes (fail-open).
        """
        if user_role in (UserRole.ADMIN, UserRole.CLIENT):
            return True
        
        if user_role in ASSIGNMENT_SCOPED_ROLES:
            allowed_pages = self.get_allowed_pages_by_department(department)
            if department == "General" or not allowed_pages:
                return True
            if page_id in allowed_pages:
                return True
            has_assignments = len(self.store.list_by_staff(user_email)) > 0
            if not has_assignments:
                log.debug("Page %s denied for %s (%s)", page_id, user_email, department)
            return has_assignments
        
        return True

    def get_user_permissions(
        self,
        user_email: str,
        user_role: str,
        department: str = "General",
        category: str = "repairs",
    ) -> UserPermissions:
        """Capability record for `category`."""
        if user_role == UserRole.ADMIN:
            return full_permissions()
        
        if not self.can_access_page(user_email, user_role, department, category):
            return read_only_permissions()
        
        if user_role in ASSIGNMENT_SCOPED_ROLES:
            assigned = self.store.list_by_staff(user_email)
            has_assignments = len(assigned) > 0
            return UserPermissions(
                can_view=True,
                can_add=True,
                can_edit=has_assignments,
                can_delete=False,
                can_approve=False,
                can_assign_staff=True,
                can_manage_documents=has_assignments,
                can_export_data=True,
                can_manage_insights=user_role == UserRole.EDITOR,
                assigned_projects=[a.project_id for a in assigned],
            )
        
        return read_only_permissions()

    # ------------------------------------------------------------------
    # Project level
    # ------------------------------------------------------------------

    def _assignment(self, user_email: str, project_id: str) -> Optional[ProjectAssignment]:
        return self.store.get(project_id, user_email)

    def can_view_project(
        self,
        user_email: str,
        user_role: str,
        project_id: str,
        department: Optional[str] = None,
    ) -> bool:
        # department is accepted for call-site symmetry; it does not widen access
        if user_role in (UserRole.ADMIN, UserRole.CLIENT):
            return True
        return self._assignment(user_email, project_id) is not None

    def can_edit_project(self, user_email: str, user_role: str, project_id: str) -> bool:
        if user_role == UserRole.ADMIN:
            return True
        assignment = self._assignment(user_email, project_id)
        return assignment.permissions.can_edit if assignment else False

    def can_delete_project(self, user_email: str, user_role: str, project_id: str) -> bool:
        if user_role == UserRole.ADMIN:
            return True
        assignment = self._assignment(user_email, project_id)
        return assignment.permissions.can_delete if assignment else False

    def can_view_project_documents(self, user_email: str, user_role: str, project_id: str) -> bool:
        if user_role == UserRole.ADMIN:
            return True
        assignment = self._assignment(user_email, project_id)
        return assignment.permissions.can_view_documents if assignment else False

    def can_upload_project_documents(self, user_email: str, user_role: str, project_id: str) -> bool:
        if user_role == UserRole.ADMIN:
            return True
        assignment = self._assignment(user_email, project_id)
        return assignment.permissions.can_upload_documents if assignment else False

    def filter_visible_projects(
        self,
        user_email: str,
        user_role: str,
        projects: Iterable[Mapping[str, Any]],
    ) -> List[Mapping[str, Any]]:
        """Keep the project records (mappings with an `id`) the user may view."""
        return [
            project
            for project in projects
            if self.can_view_project(user_email, user_role, str(project["id"]))
        ]

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    @staticmethod
    def get_permission_label(user_role: str) -> str:
        for role, label in PERMISSION_LABELS.items():
            if user_role == role:
                return label
        return READ_ONLY_LABEL

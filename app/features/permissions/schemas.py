"""
Pydantic schemas for access resolution.

Capability records and the small response bodies of the permission routes.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from app.features.assignments.schemas import CamelModel


# ============================================================================
# Caller
# ============================================================================

class CurrentUser(BaseModel):
    """Identity claims of the caller, taken from the bearer token."""
    email: str = Field(..., min_length=1)
    name: str = ""
    role: str = "Guest"
    department: str = "General"


# ============================================================================
# Capabilities
# ============================================================================

class UserPermissions(CamelModel):
    """
    Category-level capabilities of a user.
    
    An empty `assigned_projects` list for an Admin means access is global,
    not assignment-scoped.
    """
    can_view: bool = True
    can_add: bool = False
    can_edit: bool = False
    can_delete: bool = False
    can_approve: bool = False
    can_assign_staff: bool = False
    can_manage_documents: bool = False
    can_export_data: bool = True
    can_manage_insights: bool = False
    assigned_projects: List[str] = Field(default_factory=list)


class PageAccessResponse(BaseModel):
    page_id: str
    has_permission: bool
    reason: Optional[str] = None


class ProjectAccessResponse(BaseModel):
    project_id: str
    can_view: bool
    can_edit: bool
    can_delete: bool
    can_view_documents: bool
    can_upload_documents: bool


class DepartmentPagesResponse(BaseModel):
    department: str
    allowed_pages: List[str]


class PermissionLabelResponse(BaseModel):
    role: str
    label: str


class ProjectFilterRequest(BaseModel):
    """Project records from the listing data source; each needs an `id`."""
    projects: List[Dict[str, Any]]

    @field_validator("projects")
    @classmethod
    def projects_have_ids(cls, v: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if any("id" not in project for project in v):
            raise ValueError("Every project record needs an 'id'")
        return v

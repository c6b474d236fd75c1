"""
Pydantic schemas for project assignments.

Attributes are snake_case in Python and camelCase on the wire and in
persisted JSON, matching the layout the SPA already reads.
"""
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Assignment Records
# ============================================================================

class AssignmentPermissions(CamelModel):
    """Per-project grant flags stored on each assignment."""
    can_edit: bool = False
    can_delete: bool = False
    can_view_documents: bool = False
    can_upload_documents: bool = False


class ProjectAssignment(CamelModel):
    """
    One staff member's grant on one project.
    
    `project_title` and `staff_name` are display labels copied at assignment
    time; nothing ties `project_id` to an existing project.
    """
    project_id: str
    project_title: str
    staff_email: str
    staff_name: str
    role: str = "Staff"
    assigned_by: str
    assigned_date: datetime = Field(default_factory=utc_now)
    permissions: AssignmentPermissions = Field(default_factory=AssignmentPermissions)


# ============================================================================
# Request / Response Schemas
# ============================================================================

class AssignStaffRequest(CamelModel):
    """Schema for assigning (or re-assigning) a staff member to a project."""
    project_title: str = Field(..., max_length=255, description="Display title of the project")
    staff_email: str = Field(..., max_length=255, description="Email of the staff member")
    staff_name: str = Field(..., min_length=1, max_length=255)
    role: str = Field("Staff", max_length=50)
    permissions: AssignmentPermissions = Field(default_factory=AssignmentPermissions)

    @field_validator("staff_email")
    @classmethod
    def staff_email_selected(cls, v: str) -> str:
        """Reject a blank staff selection."""
        v = v.strip()
        if not v:
            raise ValueError("Please select a staff member")
        return v


class AssignmentResult(CamelModel):
    """Outcome of an assign call."""
    success: bool
    persisted: bool
    persistence_error: Optional[str] = None
    assignment: Optional[ProjectAssignment] = None


class RemovalResult(CamelModel):
    """Outcome of a remove call."""
    success: bool
    persisted: bool
    persistence_error: Optional[str] = None


class AssignmentListResponse(CamelModel):
    items: List[ProjectAssignment]
    total: int

"""
Project assignment API routes.

Lets the SPA list, grant and revoke per-project staff assignments.
"""
from typing import Annotated, List
from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.core.rate_limit import limiter, mutation_rate_limit
from app.features.assignments.dependencies import get_assignment_store
from app.features.assignments.schemas import (
    AssignStaffRequest,
    AssignmentListResponse,
    AssignmentResult,
    ProjectAssignment,
    RemovalResult,
)
from app.features.assignments.store import AssignmentStore
from app.features.permissions.dependencies import require_personnel_manager, require_project_view
from app.features.permissions.schemas import CurrentUser
from app.features.users.dependencies import get_current_admin_user, get_current_user
from app.utils import get_logger


log = get_logger(__name__)
router = APIRouter()

StoreDep = Annotated[AssignmentStore, Depends(get_assignment_store)]


@router.get("", response_model=AssignmentListResponse)
async def list_all_assignments(
    store: StoreDep,
    current_user: CurrentUser = Depends(get_current_admin_user),
):
    """Every assignment in the store (admin only)."""
    items = [a for project_id in store.project_ids() for a in store.list_by_project(project_id)]
    return AssignmentListResponse(items=items, total=len(items))


@router.get("/me", response_model=List[ProjectAssignment])
async def list_my_assignments(
    store: StoreDep,
    current_user: CurrentUser = Depends(get_current_user),
):
    """Assignments held by the caller."""
    return store.list_by_staff(current_user.email)


@router.get("/staff/{staff_email}", response_model=List[ProjectAssignment])
async def list_staff_assignments(
    staff_email: str,
    store: StoreDep,
    current_user: CurrentUser = Depends(get_current_user),
):
    """Assignments held by one staff member (self or admin)."""
    if current_user.role != "Admin" and current_user.email != staff_email:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to view this staff member's assignments",
        )
    return store.list_by_staff(staff_email)


@router.get("/projects/{project_id}", response_model=List[ProjectAssignment])
async def list_project_staff(
    project_id: str,
    store: StoreDep,
    current_user: CurrentUser = Depends(require_project_view),
):
    """Staff assigned to a project. Unknown projects list as empty."""
    return store.list_by_project(project_id)


@router.put("/projects/{project_id}/staff", response_model=AssignmentResult)
@limiter.limit(mutation_rate_limit)
async def assign_staff(
    request: Request,
    project_id: str,
    body: AssignStaffRequest,
    store: StoreDep,
    current_user: CurrentUser = Depends(require_personnel_manager),
):
    """
    Assign a staff member to a project, replacing any earlier grant for the pair.
    
    A failed save does not fail the request; it is reported as `persisted: false`.
    """
    outcome = store.assign(
        project_id=project_id,
        project_title=body.project_title,
        staff_email=body.staff_email,
        staff_name=body.staff_name,
        assigned_by=current_user.email,
        permissions=body.permissions,
        role=body.role,
    )
    if not outcome.persisted:
        log.warning("Assignment of %s to %s kept in memory only", body.staff_email, project_id)
    return AssignmentResult(
        success=outcome.success,
        persisted=outcome.persisted,
        persistence_error=outcome.persistence.error,
        assignment=outcome.assignment,
    )


@router.delete("/projects/{project_id}/staff/{staff_email}", response_model=RemovalResult)
@limiter.limit(mutation_rate_limit)
async def remove_staff(
    request: Request,
    project_id: str,
    staff_email: str,
    store: StoreDep,
    current_user: CurrentUser = Depends(require_personnel_manager),
):
    """Remove a staff member from a project. Absent assignments still succeed."""
    outcome = store.remove(project_id, staff_email)
    return RemovalResult(
        success=outcome.success,
        persisted=outcome.persisted,
        persistence_error=outcome.persistence.error,
    )

"""
Permission resolution API routes.

Read-only endpoints the SPA calls to decide what to render or enable.
"""
from typing import Any, Dict, List
from fastapi import APIRouter, Depends

from app.features.permissions.dependencies import get_permission_resolver
from app.features.permissions.resolver import PermissionResolver
from app.features.permissions.schemas import (
    CurrentUser,
    DepartmentPagesResponse,
    PageAccessResponse,
    PermissionLabelResponse,
    ProjectFilterRequest,
    ProjectAccessResponse,
    UserPermissions,
)
from app.features.users.dependencies import get_current_user


router = APIRouter()


@router.get("/me", response_model=UserPermissions)
async def get_my_permissions(
    category: str = "repairs",
    resolver: PermissionResolver = Depends(get_permission_resolver),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Capabilities of the caller in a category."""
    return resolver.get_user_permissions(
        current_user.email, current_user.role, current_user.department, category
    )


@router.get("/pages/{page_id}", response_model=PageAccessResponse)
async def check_page_access(
    page_id: str,
    resolver: PermissionResolver = Depends(get_permission_resolver),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Whether the caller may open a page."""
    allowed = resolver.can_access_page(
        current_user.email, current_user.role, current_user.department, page_id
    )
    return PageAccessResponse(
        page_id=page_id,
        has_permission=allowed,
        reason=None if allowed else f"Department '{current_user.department}' has no access to '{page_id}'",
    )


@router.get("/projects/{project_id}", response_model=ProjectAccessResponse)
async def check_project_access(
    project_id: str,
    resolver: PermissionResolver = Depends(get_permission_resolver),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Project-level capabilities of the caller."""
    email, role = current_user.email, current_user.role
    return ProjectAccessResponse(
        project_id=project_id,
        can_view=resolver.can_view_project(email, role, project_id, current_user.department),
        can_edit=resolver.can_edit_project(email, role, project_id),
        can_delete=resolver.can_delete_project(email, role, project_id),
        can_view_documents=resolver.can_view_project_documents(email, role, project_id),
        can_upload_documents=resolver.can_upload_project_documents(email, role, project_id),
    )


@router.get("/departments", response_model=List[DepartmentPagesResponse])
async def list_departments(
    resolver: PermissionResolver = Depends(get_permission_resolver),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Departments and their page allow-lists. Empty means unrestricted."""
    return [
        DepartmentPagesResponse(
            department=department,
            allowed_pages=resolver.get_allowed_pages_by_department(department),
        )
        for department in resolver.get_available_departments()
    ]


@router.get("/label", response_model=PermissionLabelResponse)
async def get_permission_label(
    current_user: CurrentUser = Depends(get_current_user),
):
    """Human-readable access summary for the caller's role."""
    return PermissionLabelResponse(
        role=current_user.role,
        label=PermissionResolver.get_permission_label(current_user.role),
    )


@router.post("/projects/visible", response_model=List[Dict[str, Any]])
async def filter_visible_projects(
    body: ProjectFilterRequest,
    resolver: PermissionResolver = Depends(get_permission_resolver),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Drop the project records the caller may not view."""
    return resolver.filter_visible_projects(current_user.email, current_user.role, body.projects)

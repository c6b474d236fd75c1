"""
Permission dependencies for route protection.

Wraps PermissionResolver checks as FastAPI dependencies so routes can
declare the access they need.
"""
from typing import Annotated
from fastapi import Depends, HTTPException, Request, status

from app.features.assignments.dependencies import get_assignment_store
from app.features.assignments.store import AssignmentStore
from app.features.permissions.resolver import PermissionResolver
from app.features.permissions.schemas import CurrentUser
from app.features.users.dependencies import get_current_user
from app.utils import get_logger


log = get_logger(__name__)


def get_permission_resolver(
    request: Request,
    store: Annotated[AssignmentStore, Depends(get_assignment_store)],
) -> PermissionResolver:
    """Resolver from `app.state`, or one built over the current store."""
    resolver = getattr(request.app.state, "permission_resolver", None)
    if resolver is None or resolver.store is not store:
        resolver = PermissionResolver(store)
    return resolver


def require_project_view(
    project_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    resolver: Annotated[PermissionResolver, Depends(get_permission_resolver)],
) -> CurrentUser:
    """
    Require that the caller can view `project_id`.
    
    Usage:
        @router.get("/projects/{project_id}")
        async def detail(user: CurrentUser = Depends(require_project_view)):
            ...
    """
    if not resolver.can_view_project(current_user.email, current_user.role, project_id, current_user.department):
        log.debug("Project %s hidden from %s", project_id, current_user.email)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not assigned to this project",
        )
    return current_user


def require_personnel_manager(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """
    Require the right to grant or revoke project assignments.
    
    Only administrators manage project personnel. The `can_assign_staff`
    capability is a UI hint and does not open these routes.
    """
    if current_user.role != "Admin":
        log.debug("Personnel change refused for %s (%s)", current_user.email, current_user.role)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can manage project personnel",
        )
    return current_user

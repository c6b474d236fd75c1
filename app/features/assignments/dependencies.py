"""
FastAPI dependencies giving routes the application's assignment store.
"""
from fastapi import HTTPException, Request, status

from app.features.assignments.store import AssignmentStore


def get_assignment_store(request: Request) -> AssignmentStore:
    """
    Return the store built at startup and held on `app.state`.
    
    Raises:
        HTTPException: 503 if startup has not built a store yet
    """
    store = getattr(request.app.state, "assignment_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Assignment store is not initialized",
        )
    return store

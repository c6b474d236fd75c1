"""
Demo project assignments for the repairs category.

Applied at startup according to the SEED_DEMO_ASSIGNMENTS policy:
- "always":   re-apply every record on every start (overwrites edits to these pairs)
- "if_empty": apply only when nothing was loaded from storage
- "never":    leave the store alone
"""
from app.features.assignments.schemas import AssignmentPermissions
from app.features.assignments.store import AssignmentStore
from app.utils import get_logger


log = get_logger(__name__)

SEED_POLICIES = ("always", "if_empty", "never")

STAFF_GRANT = AssignmentPermissions(
    can_edit=True, can_delete=False, can_view_documents=True, can_upload_documents=True
)
FULL_GRANT = AssignmentPermissions(
    can_edit=True, can_delete=True, can_view_documents=True, can_upload_documents=True
)

# (project_id, project_title, staff_email, staff_name, assigned_by, permissions)
DEMO_ASSIGNMENTS = [
    # rafael.santos: two classroom projects and one administrative office
    ("class-main-001", "Engineering Building Room 301 AC Repair",
     "rafael.santos@carsu.edu.ph", "Rafael Santos", "admin@carsu.edu.ph", STAFF_GRANT),
    ("class-main-002", "Science Laboratory Ceiling Repair",
     "rafael.santos@carsu.edu.ph", "Rafael Santos", "admin@carsu.edu.ph", STAFF_GRANT),
    ("admin-main-001", "Registrar Office Air Conditioning System Overhaul",
     "rafael.santos@carsu.edu.ph", "Rafael Santos", "admin@carsu.edu.ph", STAFF_GRANT),
    
    # john.doe: one classroom, one administrative office
    ("class-main-003", "Mathematics Department Whiteboard Installation",
     "john.doe@carsu.edu.ph", "John Doe", "admin@carsu.edu.ph", STAFF_GRANT),
    ("admin-main-002", "President Office Ceiling Water Damage Repair",
     "john.doe@carsu.edu.ph", "John Doe", "admin@carsu.edu.ph", STAFF_GRANT),
    
    # jane.smith: classroom projects
    ("class-cc-001", "Computer Laboratory Aircon Repair",
     "jane.smith@carsu.edu.ph", "Jane Smith", "admin@carsu.edu.ph", STAFF_GRANT),
    ("class-cc-002", "Classroom Building Roof Leak Fix",
     "jane.smith@carsu.edu.ph", "Jane Smith", "admin@carsu.edu.ph", STAFF_GRANT),
    
    # alexander.estrobo: shares main-001/main-002 with meo.alcantara
    ("main-001", "Main Campus - Engineering Building Electrical Repair",
     "alexander.estrobo@carsu.edu.ph", "Mr. Alexander Brayn Q. Estrobo",
     "marjorie.escartin@carsu.edu.ph", STAFF_GRANT),
    ("main-002", "Main Campus - Administration Building HVAC Upgrade",
     "alexander.estrobo@carsu.edu.ph", "Mr. Alexander Brayn Q. Estrobo",
     "marjorie.escartin@carsu.edu.ph", STAFF_GRANT),
    ("bxu-001", "BXU Campus - Library Roof Waterproofing",
     "alexander.estrobo@carsu.edu.ph", "Mr. Alexander Brayn Q. Estrobo",
     "marjorie.escartin@carsu.edu.ph", STAFF_GRANT),
    
    # meo.alcantara: same shared projects, with delete rights
    ("main-001", "Main Campus - Engineering Building Electrical Repair",
     "meo.alcantara@carsu.edu.ph", "Meo Angelo Alcantara",
     "marjorie.escartin@carsu.edu.ph", FULL_GRANT),
    ("main-002", "Main Campus - Administration Building HVAC Upgrade",
     "meo.alcantara@carsu.edu.ph", "Meo Angelo Alcantara",
     "marjorie.escartin@carsu.edu.ph", FULL_GRANT),
    ("main-003", "Main Campus - Science Laboratory Plumbing Overhaul",
     "meo.alcantara@carsu.edu.ph", "Meo Angelo Alcantara",
     "marjorie.escartin@carsu.edu.ph", FULL_GRANT),
    ("bxu-002", "BXU Campus - Gymnasium Floor Restoration",
     "meo.alcantara@carsu.edu.ph", "Meo Angelo Alcantara",
     "marjorie.escartin@carsu.edu.ph", FULL_GRANT),
    
    # pedro.reyes has no assignments: pages open, project list filtered to empty
]


def seed_demo_assignments(store: AssignmentStore, policy: str = "always") -> int:
    """
    Apply DEMO_ASSIGNMENTS to the store according to `policy`.
    
    Returns:
        Number of demo records applied
    
    Raises:
        ValueError: If the policy is not one of SEED_POLICIES
    """
    if policy not in SEED_POLICIES:
        raise ValueError(f"Unknown seeding policy {policy!r}, expected one of {SEED_POLICIES}")
    
    if policy == "never":
        log.info("Demo assignment seeding disabled")
        return 0
    if policy == "if_empty" and len(store) > 0:
        log.info("Store already holds %d assignments, skipping demo seeding", len(store))
        return 0
    
    for project_id, title, email, name, assigned_by, permissions in DEMO_ASSIGNMENTS:
        outcome = store.assign(project_id, title, email, name, assigned_by, permissions)
        if not outcome.persisted:
            log.warning("Demo assignment %s -> %s not persisted", email, project_id)
    
    log.info("Applied %d demo assignments", len(DEMO_ASSIGNMENTS))
    return len(DEMO_ASSIGNMENTS)

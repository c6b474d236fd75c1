"""
Seed script to write the demo project assignments into storage.

Loads whatever is already stored under ASSIGNMENTS_STORAGE_KEY, applies the
demo assignments with the given policy, and saves the result. Useful for
preparing a database before starting the server with seeding disabled.

Usage:
    uv run python -m scripts.seed_assignments [always|if_empty|never]
"""
import sys

from app.core import config
from app.core.database.engine import SessionLocal, init_db
from app.core.storage import SQLStorage
from app.features.assignments.persistence import AssignmentPersistence
from app.features.assignments.seed import SEED_POLICIES, seed_demo_assignments
from app.features.assignments.store import AssignmentStore
from app.utils import get_logger


log = get_logger(__name__)


def main(argv: list[str]) -> int:
    """Seed demo assignments. Returns a process exit code."""
    policy = argv[0] if argv else config.SEED_DEMO_ASSIGNMENTS
    if policy not in SEED_POLICIES:
        log.error("Unknown policy %r, expected one of %s", policy, ", ".join(SEED_POLICIES))
        return 2
    
    log.info("Initializing database tables...")
    init_db()
    
    store = AssignmentStore(AssignmentPersistence(SQLStorage(SessionLocal), key=config.ASSIGNMENTS_STORAGE_KEY))
    loaded = store.load()
    if not loaded.ok:
        log.error("Could not read stored assignments: %s", loaded.error)
        return 1
    
    applied = seed_demo_assignments(store, policy)
    saved = store.save()
    if not saved.ok:
        log.error("Could not save assignments: %s", saved.error)
        return 1
    
    log.info("Applied %d demo assignments; store now holds %d across %d projects",
             applied, len(store), len(store.project_ids()))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
